from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, field_validator

from kubehop.config.item import ItemType, format_value
from kubehop.constants import API_VERSION
from kubehop.utils import ensure_file, from_yaml, get_config_path, to_yaml


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return format_value(ItemType.BOOL, value)
    return "" if value is None else str(value)


class ListOption(BaseModel):
    """
    One selectable option of a named list in the application configuration.
    """

    name: str = Field(..., description="The name displayed to the user.")
    value: str = Field(..., description="The value set on the config item.")

    @field_validator("value", mode="before")
    def validate_value(cls, v: Any) -> str:
        return _stringify(v)


class AppConfiguration(BaseModel):
    """
    Application wide defaults for configuration items.

    Values in `global` apply to every command. Values under `providers` only
    apply when the named discovery provider is in use and take precedence over
    the global ones.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(API_VERSION, alias="apiVersion")
    kind: str = Field("Configuration")
    global_: Dict[str, str] = Field(
        default_factory=dict,
        alias="global",
        description="Default values for config items, by item name.",
    )
    providers: Dict[str, Dict[str, str]] = Field(
        default_factory=dict,
        description="Default values for config items per discovery provider.",
    )
    lists: Dict[str, List[ListOption]] = Field(
        default_factory=dict,
        description="Named lists of options that config items can reference.",
    )
    imported_from: Optional[str] = Field(
        None,
        alias="importedFrom",
        description="Where this configuration was imported from.",
    )

    @field_validator("global_", mode="before")
    def validate_global(cls, v: Optional[Dict[str, Any]]) -> Dict[str, str]:
        return {str(k): _stringify(val) for k, val in (v or {}).items()}

    @field_validator("providers", mode="before")
    def validate_providers(
        cls, v: Optional[Dict[str, Dict[str, Any]]]
    ) -> Dict[str, Dict[str, str]]:
        return {
            str(provider): {
                str(k): _stringify(val) for k, val in (values or {}).items()
            }
            for provider, values in (v or {}).items()
        }

    @field_validator("lists", mode="before")
    def validate_lists(cls, v: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return v or {}

    def to_table(self) -> List[List[str]]:
        rows = []
        if self.global_:
            rows.append(["GLOBAL", _args_to_string(self.global_)])
        for provider, values in self.providers.items():
            rows.append([provider, _args_to_string(values)])
        return rows


def _args_to_string(args: Dict[str, str]) -> str:
    return "\n".join(f'{key}="{value}"' for key, value in args.items())


def parse_app_configuration(text: str) -> AppConfiguration:
    """
    Parse a YAML (or JSON) document into an AppConfiguration.

    Args:
        text (str): The document.

    Returns:
        AppConfiguration: The parsed configuration. An empty document yields an
        empty configuration.

    Raises:
        ValueError: If the document is not a mapping or fails validation.
    """
    data = from_yaml(text) if text.strip() else {}
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Invalid configuration: expected a mapping at the top level.")

    return AppConfiguration.model_validate(data)


def read_source(location: str, username: str = "", password: str = "") -> str:
    """
    Read a configuration document from stdin ("-"), a http(s) URL or a file.

    A username and password, when given, are sent as basic auth to URLs.
    """
    if location == "-":
        return sys.stdin.read()

    if location.startswith("http://") or location.startswith("https://"):
        auth = (username, password) if username else None
        response = requests.get(location, auth=auth, timeout=30)
        response.raise_for_status()
        return response.text

    with open(location, "r") as file:
        return file.read()


class AppConfigurationFile:
    """
    The persisted application configuration, stored as a YAML file.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = ensure_file(path or get_config_path())

    def get(self) -> AppConfiguration:
        with open(self.path, "r") as file:
            return parse_app_configuration(file.read())

    def save(self, configuration: AppConfiguration) -> None:
        data = configuration.model_dump(by_alias=True, exclude_none=True)
        with open(self.path, "w") as file:
            file.write(to_yaml(data))

    def parse(self, text: str) -> AppConfiguration:
        return parse_app_configuration(text)
