"""CLI: tipjar tip, tipjar withdraw"""

from typing import Optional

import click
from rich.console import Console

from tipjar.cli.render import render_view

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


@click.command("tip")
@click.argument("amount")
def tip_cmd(amount: str):
    """Send AMOUNT ETH to the tip jar."""
    cfg = _get_config()

    async def _tip() -> Optional[str]:
        async with _open_view(cfg) as (view, _provider):
            with console.status(f"Sending {amount} ETH..."):
                tx_hash = await view.send_tip(amount)
            if tx_hash is None:
                return view.state.error
            console.print(f"[green]Tip sent! Transaction: {tx_hash}[/green]")
            console.print(render_view(view))
            return None

    error = _run(_tip())
    if error:
        _fail(error)


@click.command("withdraw")
def withdraw_cmd():
    """Withdraw all tips (contract owner only)."""
    cfg = _get_config()

    async def _withdraw() -> Optional[str]:
        async with _open_view(cfg) as (view, _provider):
            with console.status("Withdrawing tips..."):
                tx_hash = await view.withdraw()
            if tx_hash is None:
                return view.state.error
            console.print(f"[green]Withdrawn! Transaction: {tx_hash}[/green]")
            console.print(render_view(view))
            return None

    error = _run(_withdraw())
    if error:
        _fail(error)
