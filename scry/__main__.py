"""Command-line interface entrypoint for scry."""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

import click

from . import __version__
from .core.session import ScrySession
from .errors import ScryError
from .utils.persistence import (
    delete_api_key,
    key_file,
    set_api_key,
    setup_logging,
)

logger = logging.getLogger(__name__)

USAGE = """scry - pipe logs in, browse them, let a model pick the layout

Usage:
  <command> | scry          view piped log lines
  scry --start              open the viewer without piped input
  scry --key YOUR_API_KEY   store the OpenAI API key
  scry --delete             remove the stored API key

Examples:
  tail -f /var/log/syslog | scry
  kubectl logs -f deploy/api | scry
  journalctl -f -o json | scry

Keys: q quit, a analyze, f select line, c/Esc clear, arrows move,
PgUp/PgDn page, Home/End jump."""


def _is_terminal(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--start", is_flag=True, help="Open the viewer even when nothing is piped in.")
@click.option("--key", "-k", "api_key", metavar="KEY", help="Store the OpenAI API key and exit.")
@click.option("--delete", "-d", is_flag=True, help="Delete the stored API key and exit.")
@click.version_option(__version__, prog_name="scry")
def cli(start: bool, api_key: Optional[str], delete: bool) -> None:
    """Browse piped logs in the terminal."""
    if api_key is not None:
        if not api_key.strip():
            raise click.BadParameter("API key must not be empty", param_hint="--key")
        set_api_key(api_key)
        click.echo(f"API key saved to {key_file()}")
        return

    if delete:
        delete_api_key()
        click.echo("API key deleted")
        return

    stdin_is_tty = _is_terminal(sys.stdin)
    if stdin_is_tty and not start:
        click.echo(USAGE)
        return

    if not _is_terminal(sys.stdout):
        raise click.ClickException("scry needs an interactive terminal on stdout")

    log_path = setup_logging()
    logger.info(f"scry {__version__} starting, logging to {log_path}")

    stream = None if stdin_is_tty else sys.stdin.buffer
    try:
        ScrySession(stdin_is_tty=stdin_is_tty, stream=stream).run()
    except ScryError as exc:
        logger.error(f"Session failed: {exc}")
        raise click.ClickException(str(exc)) from exc


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
