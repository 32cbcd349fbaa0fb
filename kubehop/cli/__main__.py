from typing import Optional, cast

import click
import typer

from kubehop import __version__
from kubehop.cli.alias import alias_app
from kubehop.cli.configure import configure
from kubehop.cli.history import history_app, ls
from kubehop.cli.to import renew, to
from kubehop.cli.use import build_use_command
from kubehop.logger import setup_logger
from kubehop.providers.registry import ProviderRegistry, build_registry


def version_callback(version: bool) -> None:
    if version:
        typer.echo(f"Kubehop CLI Version: {__version__}")
        raise typer.Exit()


cli = typer.Typer(context_settings={"help_option_names": ["-h", "--help"]})


@cli.callback()
def global_options(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show version and exit", callback=version_callback
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
) -> None:
    setup_logger(verbose)


cli.command(name="to", help="Connect to a cluster from the history.")(to)

cli.command(name="renew", help="Renew the connection of the current context.")(
    renew
)

cli.command(name="ls", help="List the connection history.")(ls)

cli.command(name="configure", help="Manage application wide defaults.")(configure)

cli.add_typer(alias_app, name="alias", help="Manage history entry aliases.")

cli.add_typer(history_app, name="history", help="Manage the connection history.")


def get_command(registry: Optional[ProviderRegistry] = None) -> click.Group:
    """
    Builds the kubehop command, including the use command generated from the
    registered providers.
    """
    command = cast(click.Group, typer.main.get_command(cli))
    command.add_command(build_use_command(registry or build_registry()), "use")
    return command


def main() -> None:
    registry = build_registry()
    get_command(registry)(obj=registry)


if __name__ == "__main__":
    main()
