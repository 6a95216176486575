"""
View controller: owns the UI state and sequences gateway calls.

States:
- disconnected: no authorized account
- connecting: a connect action is in flight
- wrong_network: connected, wallet on another chain
- ready: connected on the expected chain; the snapshot is meaningful

Wallet notifications:
- accountsChanged([])   -> disconnected, snapshot dropped
- accountsChanged([a])  -> adopt a, refresh
- chainChanged(id)      -> full reload (fresh state, fresh web3 binding)
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

from tipjar.config import chain_name
from tipjar.errors import InvalidAmountError
from tipjar.gateway import ChainGateway
from tipjar.models.contract import ContractSnapshot
from tipjar.models.session import WalletSession
from tipjar.models.view import ConnectionStatus, PendingAction, ViewState
from tipjar.transport.provider import ACCOUNTS_CHANGED, CHAIN_CHANGED
from tipjar.units import parse_tip_amount

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONNECT_FAILED = "Wallet connection failed."
TIP_FAILED = "Sending the tip failed."
WITHDRAW_FAILED = "Withdrawal failed."
LOAD_FAILED = "Could not load contract data. Check the network and contract address."
OWNER_ONLY = "Only the contract owner can withdraw tips."


def _parse_chain_id(value: Any) -> Optional[int]:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.startswith("0x") else int(value)
        except ValueError:
            return None
    return None


class ViewController:
    def __init__(self, gateway: ChainGateway):
        self._gateway = gateway
        self.state = ViewState()
        self._epoch = 0
        # survives reload(); state.pending is only its rendering
        self._action: Optional[str] = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._listeners: list[Callable[[ViewState], None]] = []
        self._subscribed = False

    async def __aenter__(self) -> "ViewController":
        self.subscribe()
        await self.mount()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def gateway(self) -> ChainGateway:
        return self._gateway

    @property
    def expected_chain_id(self) -> int:
        return self._gateway.expected_chain_id

    @property
    def status(self) -> ConnectionStatus:
        if self.state.pending.pending and self.state.pending.action == "connect":
            return ConnectionStatus.CONNECTING
        if not self.state.session.connected:
            return ConnectionStatus.DISCONNECTED
        if self.state.session.chain_id != self.expected_chain_id:
            return ConnectionStatus.WRONG_NETWORK
        return ConnectionStatus.READY

    @property
    def snapshot(self) -> Optional[ContractSnapshot]:
        """The snapshot, or None while it would be stale (wrong network, no account)."""
        if not self.state.session.on_chain(self.expected_chain_id):
            return None
        return self.state.snapshot

    @property
    def can_withdraw(self) -> bool:
        snapshot = self.snapshot
        return (
            self.state.is_owner
            and not self.state.pending.pending
            and snapshot is not None
            and snapshot.has_funds
        )

    # -- subscriptions -----------------------------------------------------

    def add_listener(self, listener: Callable[[ViewState], None]) -> Callable[[], None]:
        """Call `listener` after every state change. Returns a cleanup function."""
        self._listeners.append(listener)

        def remove() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
        return remove

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    def subscribe(self) -> None:
        provider = self._gateway.provider
        if provider is None or self._subscribed:
            return
        provider.on(ACCOUNTS_CHANGED, self._on_accounts_changed)
        provider.on(CHAIN_CHANGED, self._on_chain_changed)
        self._subscribed = True

    def unsubscribe(self) -> None:
        provider = self._gateway.provider
        if provider is None or not self._subscribed:
            return
        provider.remove_listener(ACCOUNTS_CHANGED, self._on_accounts_changed)
        provider.remove_listener(CHAIN_CHANGED, self._on_chain_changed)
        self._subscribed = False

    async def close(self) -> None:
        self.unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait for work started by wallet notifications to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_accounts_changed(self, accounts: list[str]) -> None:
        self._epoch += 1
        if not accounts:
            logger.info("Wallet reported no accounts; disconnected")
            self.state.session = WalletSession(
                chain_id=self.state.session.chain_id,
                chain_name=self.state.session.chain_name,
            )
            self.state.snapshot = None
            self._changed()
            return
        logger.info(f"Wallet account changed: {accounts[0]}")
        self.state.session.account = accounts[0]
        self.state.snapshot = None
        self._changed()
        self._spawn(self.refresh())

    def _on_chain_changed(self, chain_id: Any) -> None:
        logger.info(f"Wallet network changed to {_parse_chain_id(chain_id)}; reloading")
        self._spawn(self.reload())

    # -- lifecycle ---------------------------------------------------------

    async def mount(self) -> None:
        """Discover an existing wallet session and load contract data if it is usable."""
        epoch = self._epoch
        info = await self._gateway.get_session_info()
        if epoch != self._epoch:
            return
        if info is not None:
            self.state.session = WalletSession(
                account=info.account, chain_id=info.chain_id, chain_name=info.chain_name,
            )
            self._changed()
        await self.refresh()

    async def reload(self) -> None:
        """Discard all in-memory state and web3 bindings, then mount again."""
        self._epoch += 1
        self._gateway.reset()
        in_flight = self.state.pending if self._action is not None else None
        self.state = ViewState()
        if in_flight is not None:
            self.state.pending = in_flight
        self._changed()
        await self.mount()

    async def refresh(self) -> Optional[ContractSnapshot]:
        """Re-read balance and owner. No-op unless connected on the expected chain."""
        if not self.state.session.on_chain(self.expected_chain_id):
            return None
        epoch = self._epoch
        try:
            balance = await self._gateway.read_balance()
            owner = await self._gateway.read_owner()
        except Exception as e:
            if epoch != self._epoch:
                return None
            logger.warning(f"Contract data load failed: {e}")
            self.state.snapshot = None
            self.state.pending.error = str(e) or LOAD_FAILED
            self._changed()
            return None
        if epoch != self._epoch:
            logger.debug("Discarding snapshot read for a previous session")
            return None
        self.state.snapshot = ContractSnapshot(balance=balance, owner=owner)
        self.state.pending.error = ""
        self._changed()
        return self.state.snapshot

    # -- user actions ------------------------------------------------------

    async def _run_action(self, action: str, fallback: str, call: Callable[[], Awaitable[T]]) -> Optional[T]:
        if self._action is not None:
            logger.warning(f"{action} ignored: {self._action} is still pending")
            return None
        self._action = action
        pending = PendingAction(pending=True, action=action)
        self.state.pending = pending
        self._changed()
        try:
            return await call()
        except Exception as e:
            logger.debug(f"{action} failed: {e!r}")
            pending.error = str(e) or fallback
            return None
        finally:
            self._action = None
            pending.pending = False
            pending.action = None
            self._changed()

    async def connect(self) -> Optional[str]:
        async def _connect() -> Optional[str]:
            account = await self._gateway.connect()
            self._epoch += 1
            epoch = self._epoch
            info = await self._gateway.get_session_info()
            if epoch != self._epoch:
                logger.info("Wallet session changed while connecting; keeping the newer state")
                return None
            chain_id = info.chain_id if info else None
            self.state.session = WalletSession(
                account=account, chain_id=chain_id, chain_name=chain_name(chain_id),
            )
            self.state.snapshot = None
            if chain_id != self.expected_chain_id:
                self.state.pending.error = (
                    f"Switch the wallet to chain {self.expected_chain_id} "
                    f"(current: {self.state.session.chain_name or 'unknown'})."
                )
            else:
                await self.refresh()
            return account

        return await self._run_action("connect", CONNECT_FAILED, _connect)

    async def send_tip(self, amount: str) -> Optional[str]:
        if self._action is not None:
            logger.warning(f"tip ignored: {self._action} is still pending")
            return None
        try:
            parse_tip_amount(amount)
        except InvalidAmountError as e:
            self.state.pending.error = str(e)
            self._changed()
            return None

        async def _tip() -> str:
            tx_hash = await self._gateway.send_tip(amount)
            self.state.last_tx_hash = tx_hash
            await self.refresh()
            return tx_hash

        return await self._run_action("tip", TIP_FAILED, _tip)

    async def withdraw(self) -> Optional[str]:
        if not self.state.is_owner:
            self.state.pending.error = OWNER_ONLY
            self._changed()
            return None

        async def _withdraw() -> str:
            tx_hash = await self._gateway.withdraw()
            self.state.last_tx_hash = tx_hash
            await self.refresh()
            return tx_hash

        return await self._run_action("withdraw", WITHDRAW_FAILED, _withdraw)
