"""Rendering of the view state for the terminal and --json output."""

from typing import Any

from rich.markup import escape
from rich.table import Table

from tipjar.config import chain_name
from tipjar.controller import ViewController
from tipjar.models.view import ConnectionStatus
from tipjar.units import shorten_address


def _network_cell(view: ViewController) -> str:
    session = view.state.session
    if session.chain_id is None:
        return "-"
    label = f"{session.chain_name or chain_name(session.chain_id)} ({session.chain_id})"
    if session.chain_id == view.expected_chain_id:
        return f"[green]{label}[/green]"
    return f"[red]wrong network: {label}, expected {chain_name(view.expected_chain_id)}[/red]"


def render_view(view: ViewController) -> Table:
    snapshot = view.snapshot
    table = Table(title="Tip Jar", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Status", view.status.value)
    table.add_row("Account", shorten_address(view.state.session.account))
    table.add_row("Network", _network_cell(view))
    table.add_row("Balance", f"{snapshot.balance} ETH" if snapshot else "-")
    table.add_row("Owner", shorten_address(snapshot.owner if snapshot else None))
    if view.state.is_owner:
        table.add_row("Withdraw", "[green]available[/green]" if view.can_withdraw else "nothing to withdraw")
    if view.state.last_tx_hash:
        table.add_row("Last tx", view.state.last_tx_hash)
    if view.state.error:
        table.add_row("Error", f"[red]{escape(view.state.error)}[/red]")
    if view.status == ConnectionStatus.WRONG_NETWORK:
        table.caption = f"Switch the wallet to chain {view.expected_chain_id}."
    return table


def view_to_dict(view: ViewController) -> dict[str, Any]:
    snapshot = view.snapshot
    return {
        "status": view.status.value,
        "account": view.state.session.account,
        "chain_id": view.state.session.chain_id,
        "chain_name": view.state.session.chain_name,
        "expected_chain_id": view.expected_chain_id,
        "contract": view.gateway.contract_address,
        "balance": snapshot.balance if snapshot else None,
        "owner": snapshot.owner if snapshot else None,
        "is_owner": view.state.is_owner,
        "can_withdraw": view.can_withdraw,
        "last_tx_hash": view.state.last_tx_hash,
        "error": view.state.error or None,
    }
