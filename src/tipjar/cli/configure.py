"""CLI: tipjar config show|set|reset"""

import json
from typing import Optional

import click
from rich.console import Console

from tipjar.config import TipJarConfig, load_config, save_config
from tipjar.errors import ConfigError

console = Console()


def _fail(message: str) -> None:
    from tipjar.cli.main import _fail
    _fail(message)


@click.group()
def config():
    """Configuration commands."""


@config.command("show")
def config_show():
    """Show the effective configuration."""
    from tipjar.cli.main import _get_config
    click.echo(json.dumps(_get_config().model_dump(), indent=2))


@config.command("set")
@click.option("--rpc-url", default=None)
@click.option("--contract", "contract_address", default=None)
@click.option("--chain-id", default=None, type=int)
@click.option("--account", default=None)
@click.option("--receipt-timeout", default=None, type=float)
@click.option("--poll-interval", default=None, type=float)
def config_set(rpc_url: Optional[str], contract_address: Optional[str], chain_id: Optional[int],
               account: Optional[str], receipt_timeout: Optional[float], poll_interval: Optional[float]):
    """Save settings to ~/.tipjar/config.json."""
    try:
        cfg = load_config(env={}).merged(
            rpc_url=rpc_url, contract_address=contract_address, chain_id=chain_id, account=account,
            receipt_timeout=receipt_timeout, poll_interval=poll_interval,
        )
    except ConfigError as e:
        _fail(str(e))
    path = save_config(cfg)
    console.print(f"[green]Saved to {path}[/green]")


@config.command("reset")
def config_reset():
    """Restore the default configuration."""
    save_config(TipJarConfig())
    console.print("[green]Configuration reset.[/green]")
