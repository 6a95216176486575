"""CLI: tipjar console"""

import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from tipjar.cli.render import render_view
from tipjar.errors import ProviderRpcError
from tipjar.models.view import ViewState

console = Console()

HELP = (
    "Commands: tip <amount> | withdraw | refresh | connect | "
    "use <address> (switch wallet account) | help | quit"
)


def _get_config():
    from tipjar.cli.main import _get_config
    return _get_config()


def _open_view(cfg):
    from tipjar.cli.main import _open_view
    return _open_view(cfg)


def _run(coro):
    from tipjar.cli.main import _run
    return _run(coro)


def _report(tx_hash: Optional[str], label: str) -> None:
    if tx_hash:
        console.print(f"[green]{label}! Transaction: {tx_hash}[/green]")


@click.command("console")
def console_cmd():
    """Interactive session that follows wallet account and network switches."""
    cfg = _get_config()

    async def _console() -> None:
        async with _open_view(cfg) as (view, provider):
            last_status = view.status

            def on_change(_state: ViewState) -> None:
                nonlocal last_status
                if view.status != last_status and not view.state.pending.pending:
                    console.print(escape(f"[wallet: {view.status.value}]"), style="dim")
                last_status = view.status

            remove_listener = view.add_listener(on_change)
            watcher = asyncio.create_task(provider.watch(cfg.poll_interval))
            console.print(render_view(view))
            console.print(f"[cyan]{HELP}[/cyan]\n")
            try:
                while True:
                    line = await asyncio.to_thread(
                        click.prompt, "tipjar", default="", show_default=False, prompt_suffix="> ",
                    )
                    command, _, arg = line.strip().partition(" ")
                    arg = arg.strip()
                    if not command:
                        continue
                    if command in ("quit", "exit", "/quit"):
                        break
                    if command == "help":
                        console.print(HELP)
                        continue
                    if command == "tip":
                        with console.status(f"Sending {arg} ETH..."):
                            _report(await view.send_tip(arg), "Tip sent")
                    elif command == "withdraw":
                        with console.status("Withdrawing tips..."):
                            _report(await view.withdraw(), "Withdrawn")
                    elif command == "connect":
                        await view.connect()
                    elif command == "refresh":
                        await view.refresh()
                    elif command == "use":
                        provider.select_account(arg or None)
                        try:
                            await provider.poll_changes()
                        except ProviderRpcError as e:
                            console.print(f"[red]{escape(str(e))}[/red]")
                    else:
                        console.print(f"[yellow]Unknown command: {command}[/yellow]")
                        continue
                    await view.wait_idle()
                    console.print(render_view(view))
            except (KeyboardInterrupt, EOFError, click.Abort):
                pass
            finally:
                watcher.cancel()
                await asyncio.gather(watcher, return_exceptions=True)
                remove_listener()

    _run(_console())
