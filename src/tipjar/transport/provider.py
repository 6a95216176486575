"""
Injected wallet provider — the EIP-1193 surface the gateway talks to.

JsonRpcProvider plays the browser wallet for a node that manages unlocked
accounts (anvil, hardhat, geth --dev). Account and network switches are
detected by polling and delivered as accountsChanged / chainChanged events.
"""

import asyncio
import itertools
import logging
from typing import Any, Callable, Optional, Protocol

import httpx

from tipjar.errors import ProviderRpcError

logger = logging.getLogger(__name__)

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"


class Eip1193Provider(Protocol):
    async def request(self, args: dict[str, Any]) -> Any: ...

    def on(self, event: str, handler: Callable[..., None]) -> None: ...

    def remove_listener(self, event: str, handler: Callable[..., None]) -> None: ...


class EventEmitter:
    """Listener registry shared by provider implementations."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., None]]] = {}

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[..., None]) -> None:
        try:
            self._listeners.get(event, []).remove(handler)
        except ValueError:
            pass

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self._listeners.get(event, [])):
            try:
                handler(payload)
            except Exception as e:
                logger.error(f"{event} listener failed: {e}")


class JsonRpcProvider(EventEmitter):
    def __init__(
        self,
        url: str,
        account: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self._url = url
        self._account = account
        self._ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "tipjar/0.1.0", "Content-Type": "application/json"},
        )
        self._seen_accounts: Optional[list[str]] = None
        self._seen_chain_id: Optional[str] = None

    @property
    def url(self) -> str:
        return self._url

    async def request(self, args: dict[str, Any]) -> Any:
        method = args["method"]
        params = list(args.get("params") or [])
        if method in ("eth_requestAccounts", "eth_accounts"):
            return await self._accounts()
        return await self._call(method, params)

    async def _accounts(self) -> list[str]:
        # A pinned account is the only one the wallet authorizes.
        if self._account:
            return [self._account]
        return list(await self._call("eth_accounts", []) or [])

    async def _call(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._client.post(self._url, json=body)
        except httpx.HTTPError as e:
            raise ProviderRpcError(ProviderRpcError.DISCONNECTED, f"RPC endpoint unreachable: {e}")
        if resp.status_code >= 400:
            raise ProviderRpcError(ProviderRpcError.DISCONNECTED, f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError:
            raise ProviderRpcError(-32700, f"Invalid JSON-RPC response: {resp.text[:200]}")
        error = data.get("error") if isinstance(data, dict) else None
        if error:
            raise ProviderRpcError(error.get("code", -32603), error.get("message", "RPC error"), error.get("data"))
        logger.debug(f"{method} -> {str(data.get('result'))[:80]}")
        return data.get("result")

    async def poll_changes(self) -> None:
        """Emit accountsChanged / chainChanged when the node state moved since the last poll."""
        accounts = await self._accounts()
        chain_id = await self._call("eth_chainId", [])

        first_poll = self._seen_chain_id is None and self._seen_accounts is None
        accounts_moved = [a.lower() for a in accounts] != [a.lower() for a in self._seen_accounts or []]
        chain_moved = chain_id != self._seen_chain_id
        self._seen_accounts = accounts
        self._seen_chain_id = chain_id
        if first_poll:
            return
        if accounts_moved:
            self.emit(ACCOUNTS_CHANGED, accounts)
        if chain_moved:
            self.emit(CHAIN_CHANGED, chain_id)

    async def watch(self, interval: float = 2.0) -> None:
        """Poll for account/network changes until cancelled."""
        while True:
            try:
                await self.poll_changes()
            except ProviderRpcError as e:
                logger.warning(f"Wallet poll failed: {e}")
            await asyncio.sleep(interval)

    def select_account(self, account: Optional[str]) -> None:
        self._account = account

    async def close(self) -> None:
        await self._client.aclose()
