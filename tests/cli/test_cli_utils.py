import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import patch

import click
import pytest
import requests
import typer

from kubehop.cli.use import (
    env_var,
    explicit_values,
    option_for_item,
    options_for_config_set,
)
from kubehop.cli.utils import create_app, handle_errors, is_interactive, print_output
from kubehop.config.configset import ConfigurationSet
from kubehop.config.item import ConfigItem, ItemType
from kubehop.errors import EntryNotFoundError
from kubehop.providers.registry import ProviderRegistry


def test_handle_errors(caplog: pytest.LogCaptureFixture) -> None:
    @handle_errors
    def failing(error: Exception) -> None:
        raise error

    for error in (
        EntryNotFoundError("abc"),
        ValueError("bad value"),
        FileNotFoundError("no file"),
        requests.ConnectionError("offline"),
    ):
        with pytest.raises(typer.Exit) as e:
            failing(error)
        assert e.value.exit_code == 1

    assert "History entry 'abc' not found" in caplog.text

    with pytest.raises(KeyError):
        failing(KeyError("other"))

    @handle_errors
    def working() -> str:
        return "ok"

    assert working() == "ok"
    assert working.__name__ == "working"


def test_is_interactive() -> None:
    assert not is_interactive(no_input=True)

    with patch("kubehop.cli.utils.sys") as mock_sys:
        mock_sys.stdin.isatty.return_value = True
        assert is_interactive()
        assert not is_interactive(no_input=True)

        mock_sys.stdin.isatty.return_value = False
        assert not is_interactive()


def test_create_app(fake_registry: ProviderRegistry, tmp_path: Path) -> None:
    history = f"{tmp_path}/history.yaml"
    app = create_app(
        fake_registry, history_location=history, max_history=5, no_input=True
    )

    assert app.registry is fake_registry
    assert app.store.max_history == 5
    assert app.store.loader.path == history
    assert not app.interactive


def test_create_app_from_configuration(
    fake_registry: ProviderRegistry, tmp_path: Path
) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        f"global:\n  history-location: {tmp_path}/configured.yaml\n"
        "  max-history: 3\n"
    )

    app = create_app(fake_registry, config_file=str(config))
    assert app.store.loader.path == f"{tmp_path}/configured.yaml"
    assert app.store.max_history == 3

    explicit = f"{tmp_path}/explicit.yaml"
    app = create_app(
        fake_registry, config_file=str(config), history_location=explicit, max_history=7
    )
    assert app.store.loader.path == explicit
    assert app.store.max_history == 7


def test_print_output(
    capsys: pytest.CaptureFixture, caplog: pytest.LogCaptureFixture
) -> None:
    data = {"items": [{"id": "abc"}]}

    print_output(data, "json")
    assert json.loads(capsys.readouterr().out) == data

    print_output(data, "yaml")
    assert capsys.readouterr().out == "items:\n  - id: abc\n"

    print_output(data, "table", table=[["abc", "dev"]], headers=["ID", "Alias"])
    assert "abc" in caplog.text
    assert "Alias" in caplog.text

    with pytest.raises(typer.Exit):
        print_output(data, "xml")


def test_env_var() -> None:
    assert env_var("max-history") == "KUBEHOP_MAX_HISTORY"
    assert env_var("region") == "KUBEHOP_REGION"


def test_option_for_item() -> None:
    item = ConfigItem(name="kubeconfig", type=ItemType.STRING, default_value="")
    item.shorthand = "k"
    option = option_for_item(item)
    assert option.name == "kubeconfig"
    assert option.opts == ["--kubeconfig", "-k"]
    assert option.envvar == "KUBEHOP_KUBECONFIG"
    assert option.default is None

    option = option_for_item(
        ConfigItem(name="set-current", type=ItemType.BOOL, default_value=True)
    )
    assert option.name == "set_current"
    assert option.secondary_opts == ["--no-set-current"]
    assert option.default is True

    option = option_for_item(
        ConfigItem(name="no-input", type=ItemType.BOOL, default_value=False)
    )
    assert option.is_flag
    assert option.secondary_opts == []

    item = ConfigItem(name="max-history", type=ItemType.INT, default_value=100)
    item.hidden = True
    item.deprecated = True
    item.deprecated_message = "it is ignored"
    option = option_for_item(item)
    assert option.type == click.INT
    assert option.hidden
    assert option.help is not None and "it is ignored" in option.help


def test_explicit_values(monkeypatch: pytest.MonkeyPatch) -> None:
    cs = ConfigurationSet()
    cs.add_string("region", "", "Region")
    cs.add_string("cluster-id", "", "Cluster id")
    cs.add_int("port", 443, "Port")
    cs.add_bool("set-current", True, "Set current")
    monkeypatch.setenv("KUBEHOP_CLUSTER_ID", "abc")

    seen: Dict[str, Any] = {}

    @click.command(params=options_for_config_set(cs))
    @click.pass_context
    def command(ctx: click.Context, **kwargs: object) -> None:
        seen.update(explicit_values(ctx, cs))

    result = command.main(
        ["--region", "eu", "--no-set-current"], standalone_mode=False
    )
    assert result is None
    assert seen == {"region": "eu", "cluster-id": "abc", "set-current": False}
