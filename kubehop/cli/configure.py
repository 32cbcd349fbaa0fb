from __future__ import annotations

from typing import Optional

import typer

from kubehop.app.app import App, build_store
from kubehop.cli.utils import get_registry, handle_errors, print_output
from kubehop.config.app_config import AppConfigurationFile


@handle_errors
def configure(
    ctx: typer.Context,
    file: str = typer.Option(
        "",
        "--file",
        "-f",
        help="Import the configuration from a file, a http(s) URL or '-' for stdin. "
        "Without it the current configuration is shown.",
    ),
    username: str = typer.Option(
        "", "--username", help="Username for basic auth when importing from a URL."
    ),
    password: str = typer.Option(
        "", "--password", help="Password for basic auth when importing from a URL."
    ),
    output: str = typer.Option(
        "table", "--output", "-o", help="Output format: table, yaml or json."
    ),
    config: Optional[str] = typer.Option(
        None, "--config", help="Configuration file for application wide defaults."
    ),
) -> None:
    """
    Shows or imports the application wide defaults for config items.
    """
    # the configuration is not applied here so a broken file can be replaced
    app = App(
        get_registry(ctx),
        build_store(),
        AppConfigurationFile(config or None),
        interactive=False,
    )
    if file:
        app.import_configuration(file, username, password)
        return

    configuration = app.show_configuration()
    print_output(
        configuration.model_dump(mode="json", by_alias=True, exclude_none=True),
        output,
        table=configuration.to_table(),
        headers=["Provider", "Args"],
    )
