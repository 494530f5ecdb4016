from __future__ import annotations

import typer

from pivnet_resource import __version__
from pivnet_resource.cli.commands import check, in_, out

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Concourse resource for releases on Pivotal Network.",
)


# Commands
app.command()(check)
app.command("in")(in_)
app.command()(out)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()


# Concourse runs /opt/resource/{check,in,out} directly.


def check_main() -> None:
    typer.run(check)


def in_main() -> None:
    typer.run(in_)


def out_main() -> None:
    typer.run(out)
