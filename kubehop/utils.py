from __future__ import annotations

import os
import secrets
import time
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML

from kubehop.constants import (
    CONFIG_FILE_NAME,
    HISTORY_FILE_NAME,
    HOME_ENV_VAR,
    PROJECT_NAME,
)

# Crockford's base32, as used by ULIDs
_ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def get_project_data_dir() -> str:
    """
    Get the project data directory.

    If the environment variable HOME_ENV_VAR is set, its value is returned.
    Otherwise, the home directory appended with the dotted project name.

    Returns:
        str: The absolute path of the project data directory.
    """
    return os.environ.get(HOME_ENV_VAR, str(Path.home() / f".{PROJECT_NAME}"))


def get_config_path() -> str:
    return os.path.join(get_project_data_dir(), CONFIG_FILE_NAME)


def get_history_path() -> str:
    return os.path.join(get_project_data_dir(), HISTORY_FILE_NAME)


def to_yaml(obj: Any) -> str:
    """
    Converts an object made of dicts, lists and scalars to a YAML string.

    Args:
        obj (Any): The object to be converted.

    Returns:
        str: The YAML string.
    """
    yaml = YAML()
    yaml.indent(mapping=2, sequence=4, offset=2)
    buf = StringIO()
    yaml.dump(obj, buf)
    return buf.getvalue()


def from_yaml(text: str) -> Any:
    yaml = YAML(typ="safe")
    return yaml.load(text)


def read_yaml_file(path: str) -> Dict[str, Any]:
    """
    Reads a YAML file and returns its contents as a dictionary.

    If the file does not exist or is empty, an empty dictionary is returned.

    Args:
        path (str): The path to the YAML file.

    Returns:
        Dict[str, Any]: The contents of the YAML file.
    """
    yaml = YAML()
    try:
        with open(path, "r") as file:
            data = yaml.load(file)
    except FileNotFoundError:
        data = {}
    return data or {}


def ensure_file(path: str) -> str:
    """
    Make sure a regular file exists at the given path.

    Missing parent directories and the file itself are created. A path that
    points to a directory is rejected.

    Args:
        path (str): The file path. `~` is expanded.

    Returns:
        str: The absolute path of the file.

    Raises:
        IsADirectoryError: If the path is a directory.
    """
    abs_path = os.path.abspath(os.path.expanduser(path))
    if os.path.isdir(abs_path):
        raise IsADirectoryError(f"Supplied path is a directory: {abs_path}")

    if not os.path.exists(abs_path):
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        Path(abs_path).touch()

    return abs_path


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id(timestamp: Optional[float] = None) -> str:
    """
    Generate a lexicographically sortable, time-ordered identifier.

    The layout follows the ULID format: 48 bits of milliseconds since the
    epoch followed by 80 random bits, encoded with Crockford's base32. The
    result is lower-cased.

    Args:
        timestamp (Optional[float]): Seconds since the epoch. Defaults to now.

    Returns:
        str: A 26 character identifier.
    """
    millis = int((time.time() if timestamp is None else timestamp) * 1000)
    value = (millis << 80) | secrets.randbits(80)

    chars = []
    for _ in range(26):
        chars.append(_ENCODING[value & 0x1F])
        value >>= 5

    return "".join(reversed(chars)).lower()
