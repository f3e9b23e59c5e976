"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from pathlib import Path

import typer

from lowpanctl.core.config import Config, load_config
from lowpanctl.core.dispatcher import CommandDispatcher
from lowpanctl.core.errors import ConfigError
from lowpanctl.transports.base import LowpanManager
from lowpanctl.transports.unix_socket import SocketLowpanManager

USAGE = """\
usage: lowpanctl [options] [subcommand] [subcommand-options]

\b
  lowpanctl status
  lowpanctl form [NAME] [-p PANID] [-c CHANNEL] [-x XPANID] [-k KEY]
  lowpanctl join [NAME] [-p PANID] [-c CHANNEL] [-x XPANID] -k KEY
  lowpanctl leave
  lowpanctl up
  lowpanctl down
  lowpanctl get [property-name]
  lowpanctl set [property-name]
  lowpanctl scan [-c CHANNEL]...
  lowpanctl energyscan [-c CHANNEL]...
  lowpanctl reset
  lowpanctl list

Global option -I/--interface NAME selects the interface and must come
before the subcommand.
"""

app = typer.Typer(help="Control LoWPAN mesh network interfaces", add_completion=False)


def _connector(config: Config) -> Callable[[], LowpanManager]:
    def connect() -> LowpanManager:
        return SocketLowpanManager.connect(config.socket_path, timeout_s=config.request_timeout_s)

    return connect


@app.command(
    help=USAGE,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def main(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(None, "--config", help="Configuration file (YAML)"),
    debug: bool = typer.Option(False, "--debug", help="Log debug output to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    dispatcher = CommandDispatcher(
        _connector(config),
        echo=typer.echo,
        echo_err=partial(typer.echo, err=True),
        interface_name=config.interface,
    )
    raise typer.Exit(code=int(dispatcher.run(ctx.args)))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
