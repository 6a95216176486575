"""
Chain gateway — typed operations against the tip jar contract.

Every read and write re-checks the wallet network first: the user can switch
networks in the wallet at any time, so no "known good" network is cached.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from importlib import resources
from typing import Any, Optional, Union

from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.exceptions import TimeExhausted

from tipjar.config import TipJarConfig, chain_name
from tipjar.errors import (
    ContractNotFoundError,
    InvalidAmountError,
    NoAccountsError,
    NoProviderError,
    ProviderRpcError,
    TipJarError,
    TransactionError,
    WrongNetworkError,
)
from tipjar.models.session import SessionInfo
from tipjar.transport.bridge import Eip1193Bridge
from tipjar.transport.provider import Eip1193Provider
from tipjar.units import format_ether, to_wei

logger = logging.getLogger(__name__)

ABI_FILE = "contract_abi.json"
DEFAULT_RECEIPT_TIMEOUT_S = 120.0
DEFAULT_POLL_LATENCY_S = 0.5


def load_abi() -> list[dict[str, Any]]:
    return json.loads(resources.files("tipjar").joinpath(ABI_FILE).read_text())


class ChainGateway:
    def __init__(
        self,
        provider: Optional[Eip1193Provider],
        contract_address: str,
        expected_chain_id: int,
        abi: Optional[list[dict[str, Any]]] = None,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT_S,
        poll_latency: float = DEFAULT_POLL_LATENCY_S,
    ):
        self._provider = provider
        self._address = Web3.to_checksum_address(contract_address)
        self._expected_chain_id = expected_chain_id
        self._abi = abi if abi is not None else load_abi()
        self._receipt_timeout = receipt_timeout
        self._poll_latency = poll_latency
        self._w3: Optional[AsyncWeb3] = None

    @classmethod
    def from_config(cls, config: TipJarConfig, provider: Optional[Eip1193Provider]) -> "ChainGateway":
        return cls(
            provider,
            config.require_contract_address(),
            config.chain_id,
            receipt_timeout=config.receipt_timeout,
        )

    @property
    def provider(self) -> Optional[Eip1193Provider]:
        return self._provider

    @property
    def contract_address(self) -> str:
        return self._address

    @property
    def expected_chain_id(self) -> int:
        return self._expected_chain_id

    def reset(self) -> None:
        """Drop the web3 binding; the next call builds a fresh one for the current network."""
        self._w3 = None

    def _injected(self) -> Eip1193Provider:
        if self._provider is None:
            raise NoProviderError()
        return self._provider

    def _web3(self) -> AsyncWeb3:
        if self._w3 is None:
            self._w3 = AsyncWeb3(Eip1193Bridge(self._injected()))
        return self._w3

    def _contract(self) -> AsyncContract:
        return self._web3().eth.contract(address=self._address, abi=self._abi)

    async def connect(self) -> str:
        """Request account access; returns the first authorized address."""
        injected = self._injected()
        try:
            accounts = await injected.request({"method": "eth_requestAccounts"})
        except ProviderRpcError as e:
            raise TipJarError("connect_error", f"Wallet connection failed: {e}", {"code": e.code})
        if not accounts:
            raise NoAccountsError()
        logger.info(f"Wallet connected: {accounts[0]}")
        return accounts[0]

    async def get_session_info(self) -> Optional[SessionInfo]:
        """Best-effort read of the current account and network. None when not connected."""
        if self._provider is None:
            return None
        try:
            accounts = await self._provider.request({"method": "eth_accounts"})
            chain_id = int(await self._web3().eth.chain_id)
        except Exception as e:
            logger.debug(f"Session discovery failed: {e}")
            return None
        return SessionInfo(
            account=accounts[0] if accounts else None,
            chain_id=chain_id,
            chain_name=chain_name(chain_id),
        )

    async def ensure_expected_network(self) -> None:
        try:
            chain_id = int(await self._web3().eth.chain_id)
        except TipJarError:
            raise
        except Exception as e:
            raise TipJarError("network_error", f"Could not read the wallet network: {e}")
        if chain_id != self._expected_chain_id:
            raise WrongNetworkError(self._expected_chain_id, chain_id)

    async def contract_exists(self) -> bool:
        try:
            code = await self._web3().eth.get_code(self._address)
        except Exception as e:
            logger.debug(f"get_code failed for {self._address}: {e}")
            return False
        return code is not None and len(code) > 0

    async def _guard_read(self) -> None:
        await self.ensure_expected_network()
        if not await self.contract_exists():
            raise ContractNotFoundError(self._address)

    async def read_balance(self) -> str:
        await self._guard_read()
        try:
            raw = await self._contract().functions.getBalance().call()
        except Exception as e:
            raise TipJarError("contract_read_error", f"Failed to read contract balance: {e}")
        return format_ether(raw)

    async def read_owner(self) -> str:
        await self._guard_read()
        try:
            owner = await self._contract().functions.owner().call()
        except Exception as e:
            raise TipJarError("contract_read_error", f"Failed to read contract owner: {e}")
        return str(owner)

    async def send_tip(self, amount_eth: Union[str, Decimal]) -> str:
        """Send `amount_eth` to tip(); returns the transaction hash once mined.
        The amount is validated by the caller (see units.parse_tip_amount).
        """
        await self.ensure_expected_network()
        try:
            value = to_wei(amount_eth)
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidAmountError(amount_eth)
        return await self._transact("tip", value)

    async def withdraw(self) -> str:
        """Call withdrawTips(). The contract enforces the owner-only rule."""
        await self.ensure_expected_network()
        return await self._transact("withdrawTips")

    async def _sender(self, injected: Eip1193Provider) -> str:
        try:
            accounts = await injected.request({"method": "eth_requestAccounts"})
        except ProviderRpcError as e:
            raise TransactionError(f"Wallet did not provide a signer: {e}", {"code": e.code})
        if not accounts:
            raise NoAccountsError()
        return accounts[0]

    async def _transact(self, fn_name: str, value: int = 0) -> str:
        injected = self._injected()
        sender = await self._sender(injected)
        tx: dict[str, Any] = {
            "from": sender,
            "to": self._address,
            "data": self._contract().encode_abi(fn_name),
        }
        if value:
            tx["value"] = Web3.to_hex(value)

        try:
            tx_hash = await injected.request({"method": "eth_sendTransaction", "params": [tx]})
        except ProviderRpcError as e:
            if e.user_rejected:
                raise TransactionError("Transaction rejected in the wallet.", {"code": e.code})
            raise TransactionError(f"Transaction submission failed: {e}", {"code": e.code})
        logger.info(f"{fn_name} submitted: {tx_hash}")

        try:
            receipt = await self._web3().eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout, poll_latency=self._poll_latency,
            )
        except TimeExhausted:
            raise TransactionError(
                f"Transaction {tx_hash} was not mined within {self._receipt_timeout:g}s",
                {"tx_hash": tx_hash},
            )
        except Exception as e:
            raise TransactionError(f"Failed waiting for transaction {tx_hash}: {e}", {"tx_hash": tx_hash})

        mined_hash = Web3.to_hex(receipt["transactionHash"]) if receipt.get("transactionHash") else tx_hash
        if receipt.get("status") == 0:
            raise TransactionError(f"Transaction {mined_hash} reverted.", {"tx_hash": mined_hash})
        logger.info(f"{fn_name} confirmed in block {receipt.get('blockNumber')}: {mined_hash}")
        return mined_hash
