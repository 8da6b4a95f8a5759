"""
ipam-engine command line: pool inspection and dry-run allocation.
"""

import sys
from typing import List, Optional

import click
import typer

from ipam_engine import __version__
from ipam_engine.cli.commands import pool
from ipam_engine.exceptions import IpamException

app = typer.Typer(
    name="ipam-engine",
    help="IP address pool inspection tool",
    add_completion=False,
)

app.add_typer(pool.app, name="pool", help="Address pool commands")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"ipam-engine {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show the version and exit"
    ),
):
    """
    IP address pool inspection tool.
    """


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return its exit status instead of exiting."""
    try:
        rv = app(args=argv, prog_name="ipam-engine", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.exceptions.Abort:
        typer.echo("Operation cancelled by user", err=True)
        return 130
    except IpamException as e:
        typer.echo(f"Error: {e}", err=True)
        return 1
    return rv if isinstance(rv, int) else 0


if __name__ == "__main__":
    sys.exit(main())
