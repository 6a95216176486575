"""CLI: tipjar status, tipjar connect"""

import json
from typing import Optional

import click
from rich.console import Console

from tipjar.cli.render import render_view, view_to_dict
from tipjar.controller import CONNECT_FAILED

console = Console()


def _get_config():
    from tipjar.cli.main import _get_config
    return _get_config()


def _open_view(cfg):
    from tipjar.cli.main import _open_view
    return _open_view(cfg)


def _run(coro):
    from tipjar.cli.main import _run
    return _run(coro)


def _fail(message: str) -> None:
    from tipjar.cli.main import _fail
    _fail(message)


@click.command("status")
@click.option("--json-output", "--json", is_flag=True)
def status_cmd(json_output: bool):
    """Show account, network, balance and owner."""
    cfg = _get_config()

    async def _status() -> None:
        async with _open_view(cfg) as (view, _provider):
            if json_output:
                click.echo(json.dumps(view_to_dict(view), indent=2))
            else:
                console.print(render_view(view))

    _run(_status())


@click.command("connect")
def connect_cmd():
    """Ask the wallet for account access."""
    cfg = _get_config()

    async def _connect() -> Optional[str]:
        async with _open_view(cfg) as (view, _provider):
            with console.status("Connecting wallet..."):
                account = await view.connect()
            if account is None:
                return view.state.error or CONNECT_FAILED
            console.print(f"[green]Connected as {account}[/green]")
            console.print(render_view(view))
            return None

    error = _run(_connect())
    if error:
        _fail(error)
