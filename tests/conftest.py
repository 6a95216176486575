"""Shared fixtures: an in-memory EIP-1193 wallet serving a tip jar contract."""

import asyncio
from typing import Any, Optional

import pytest
from eth_abi import encode
from web3 import Web3

from tipjar.config import SEPOLIA_CHAIN_ID
from tipjar.errors import ProviderRpcError
from tipjar.gateway import ChainGateway
from tipjar.transport.provider import EventEmitter

OWNER = Web3.to_checksum_address("0x" + "ab" * 20)
VISITOR = Web3.to_checksum_address("0x" + "cd" * 20)
CONTRACT = Web3.to_checksum_address("0x" + "12" * 20)
DEPLOYED_CODE = "0x6080604052348015600f57600080fd5b50"


def selector(signature: str) -> str:
    return Web3.to_hex(Web3.keccak(text=signature)[:4])


GET_BALANCE = selector("getBalance()")
GET_OWNER = selector("owner()")
TIP = selector("tip()")
WITHDRAW_TIPS = selector("withdrawTips()")


class FakeWallet(EventEmitter):
    """Wallet + node in one: answers the JSON-RPC calls the gateway makes."""

    def __init__(
        self,
        accounts: Optional[list[str]] = None,
        chain_id: int = SEPOLIA_CHAIN_ID,
        balance_wei: int = 1_230_000_000_000_000_000,
        owner: str = OWNER,
        code: str = DEPLOYED_CODE,
    ):
        super().__init__()
        self.accounts = [VISITOR] if accounts is None else accounts
        self._reported = list(self.accounts)
        self.chain_id = chain_id
        self.balance_wei = balance_wei
        self.owner = owner
        self.code = code
        self.calls: list[str] = []
        self.sent: list[dict[str, Any]] = []
        self.receipts: dict[str, Optional[dict[str, Any]]] = {}
        self.receipt_status = 1
        self.mine = True
        self.errors: dict[str, Exception] = {}
        self.closed = False
        self._gates: dict[str, asyncio.Event] = {}
        self._arrived: dict[str, asyncio.Event] = {}

    def hold(self, method: str) -> asyncio.Event:
        """Block `method` until the returned event is set."""
        self._gates[method] = asyncio.Event()
        self._arrived[method] = asyncio.Event()
        return self._gates[method]

    def arrived(self, method: str) -> asyncio.Event:
        return self._arrived[method]

    def count(self, method: str) -> int:
        return self.calls.count(method)

    async def request(self, args: dict[str, Any]) -> Any:
        method = args["method"]
        params = list(args.get("params") or [])
        self.calls.append(method)
        if method in self._gates:
            self._arrived[method].set()
            await self._gates[method].wait()
        if method in self.errors:
            raise self.errors[method]

        if method in ("eth_requestAccounts", "eth_accounts"):
            return list(self.accounts)
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_getCode":
            return self.code
        if method == "eth_call":
            return self._call(params[0])
        if method == "eth_sendTransaction":
            return self._send(params[0])
        if method == "eth_getTransactionReceipt":
            tx_hash = params[0] if isinstance(params[0], str) else Web3.to_hex(params[0])
            return self.receipts.get(tx_hash.lower()) if self.mine else None
        raise ProviderRpcError(-32601, f"the method {method} does not exist")

    def _call(self, tx: dict[str, Any]) -> str:
        data = tx.get("data") or tx.get("input")
        data = data if isinstance(data, str) else Web3.to_hex(data)
        if data.startswith(GET_BALANCE):
            return Web3.to_hex(encode(["uint256"], [self.balance_wei]))
        if data.startswith(GET_OWNER):
            return Web3.to_hex(encode(["address"], [self.owner]))
        raise ProviderRpcError(3, "execution reverted")

    def _send(self, tx: dict[str, Any]) -> str:
        self.sent.append(tx)
        tx_hash = "0x" + f"{len(self.sent):064x}"
        if self.receipt_status == 1:
            if tx["data"].startswith(TIP):
                self.balance_wei += int(tx.get("value", "0x0"), 16)
            elif tx["data"].startswith(WITHDRAW_TIPS):
                self.balance_wei = 0
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockHash": "0x" + "11" * 32,
            "blockNumber": "0x10",
            "transactionIndex": "0x0",
            "from": tx["from"],
            "to": tx["to"],
            "gasUsed": "0x5208",
            "cumulativeGasUsed": "0x5208",
            "contractAddress": None,
            "logs": [],
            "status": hex(self.receipt_status),
        }
        return tx_hash

    def select_account(self, account: Optional[str]) -> None:
        self.accounts = [account] if account else []

    async def poll_changes(self) -> None:
        if self.accounts != self._reported:
            self._reported = list(self.accounts)
            self.emit("accountsChanged", list(self.accounts))

    async def watch(self, interval: float = 2.0) -> None:
        while True:
            await self.poll_changes()
            await asyncio.sleep(interval)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def owner_wallet() -> FakeWallet:
    return FakeWallet(accounts=[OWNER.lower()])


def make_gateway(wallet: Optional[FakeWallet], **kwargs: Any) -> ChainGateway:
    kwargs.setdefault("receipt_timeout", 2.0)
    kwargs.setdefault("poll_latency", 0.01)
    return ChainGateway(wallet, CONTRACT, SEPOLIA_CHAIN_ID, **kwargs)


@pytest.fixture
def gateway(wallet: FakeWallet) -> ChainGateway:
    return make_gateway(wallet)
