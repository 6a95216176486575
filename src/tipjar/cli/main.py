"""
Tip jar CLI — `tipjar` command.

Commands:
  tipjar status             Account, network, balance, owner
  tipjar connect            Request wallet accounts
  tipjar tip <amount>       Send a tip in ETH
  tipjar withdraw           Withdraw all tips (owner only)
  tipjar console            Interactive session that follows wallet changes
  tipjar config <cmd>       Show / edit ~/.tipjar/config.json
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.markup import escape
except ImportError:
    raise SystemExit("CLI requires extras: pip install tipjar[cli]")

from tipjar.config import TipJarConfig, load_config
from tipjar.controller import ViewController
from tipjar.errors import TipJarError
from tipjar.gateway import ChainGateway
from tipjar.transport.provider import JsonRpcProvider

console = Console()


def _make_provider(cfg: TipJarConfig) -> JsonRpcProvider:
    return JsonRpcProvider(cfg.rpc_url, account=cfg.account)


def _get_config() -> TipJarConfig:
    ctx = click.get_current_context()
    return ctx.find_object(dict)["config"]


@asynccontextmanager
async def _open_view(cfg: TipJarConfig) -> AsyncIterator[tuple[ViewController, JsonRpcProvider]]:
    provider = _make_provider(cfg)
    try:
        gateway = ChainGateway.from_config(cfg, provider)
        async with ViewController(gateway) as view:
            yield view, provider
    finally:
        await provider.close()


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise SystemExit(1)


def _run(coro):
    try:
        return asyncio.run(coro)
    except TipJarError as e:
        _fail(str(e))


@click.group()
@click.version_option("0.1.0")
@click.option("--rpc-url", default=None, help="Wallet JSON-RPC endpoint")
@click.option("--contract", "contract_address", default=None, help="Tip jar contract address")
@click.option("--chain-id", default=None, type=int, help="Expected chain id")
@click.option("--account", default=None, help="Wallet account to use")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx, rpc_url: Optional[str], contract_address: Optional[str], chain_id: Optional[int],
         account: Optional[str], verbose: bool):
    """Tip jar CLI — tip an on-chain jar and withdraw what it holds."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s", datefmt="[%X]",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    try:
        cfg = load_config().merged(
            rpc_url=rpc_url, contract_address=contract_address, chain_id=chain_id, account=account,
        )
    except TipJarError as e:
        _fail(str(e))
    ctx.obj = {"config": cfg}


# Register subcommands from separate modules
from tipjar.cli.wallet import connect_cmd, status_cmd
from tipjar.cli.tips import tip_cmd, withdraw_cmd
from tipjar.cli.interactive import console_cmd
from tipjar.cli.configure import config

main.add_command(status_cmd)
main.add_command(connect_cmd)
main.add_command(tip_cmd)
main.add_command(withdraw_cmd)
main.add_command(console_cmd)
main.add_command(config)


if __name__ == "__main__":
    main()
