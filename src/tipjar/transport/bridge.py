"""
web3.py provider that sends every request through an injected EIP-1193 provider.
"""

import itertools
from typing import Any

from web3.providers import AsyncBaseProvider
from web3.types import RPCEndpoint, RPCResponse

from tipjar.errors import ProviderRpcError
from tipjar.transport.provider import Eip1193Provider


class Eip1193Bridge(AsyncBaseProvider):
    def __init__(self, injected: Eip1193Provider):
        super().__init__()
        self._injected = injected
        self._ids = itertools.count(1)

    @property
    def injected(self) -> Eip1193Provider:
        return self._injected

    async def make_request(self, method: RPCEndpoint, params: Any) -> RPCResponse:
        result = await self._injected.request({"method": method, "params": list(params or [])})
        return {"jsonrpc": "2.0", "id": next(self._ids), "result": result}

    async def is_connected(self, show_traceback: bool = False) -> bool:
        try:
            await self._injected.request({"method": "eth_chainId", "params": []})
        except ProviderRpcError:
            if show_traceback:
                raise
            return False
        return True
