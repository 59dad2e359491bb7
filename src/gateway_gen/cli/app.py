import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from gateway_gen.cli.generate import generate, inspect

app = typer.Typer(
    name="gateway-gen",
    help="gateway-gen: generate gRPC-gateway reverse proxies from descriptor sets.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("generate")(generate)
app.command("inspect")(inspect)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every processed file.")] = False,
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def main() -> None:
    app()
