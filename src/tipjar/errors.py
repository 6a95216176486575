"""
Tip jar error types.

Every failure a caller can act on is a TipJarError; the gateway converts
provider, web3 and transport exceptions into these at its boundary.
"""

from typing import Any, Optional


class TipJarError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class NoProviderError(TipJarError):
    def __init__(self, message: str = "No wallet provider found. Configure an RPC endpoint for the wallet."):
        super().__init__("no_provider", message)


class NoAccountsError(TipJarError):
    def __init__(self, message: str = "The wallet did not authorize any accounts."):
        super().__init__("no_accounts", message)


class WrongNetworkError(TipJarError):
    def __init__(self, expected: int, actual: Optional[int]):
        super().__init__(
            "wrong_network",
            f"Wrong network. Required chain id: {expected} (current: {actual})",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class ContractNotFoundError(TipJarError):
    def __init__(self, address: str):
        super().__init__(
            "contract_not_found",
            f"No contract deployed at {address} on the current network.",
            {"address": address},
        )
        self.address = address


class InvalidAmountError(TipJarError):
    def __init__(self, amount: Any, message: str = "Enter a valid tip amount greater than zero."):
        super().__init__("invalid_amount", message, {"amount": str(amount)})
        self.amount = amount


class TransactionError(TipJarError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("transaction_error", message, details)


class ConfigError(TipJarError):
    def __init__(self, message: str):
        super().__init__("config_error", message)


class ProviderRpcError(Exception):
    """EIP-1193 provider error (4001 user rejected, 4900 disconnected, JSON-RPC codes)."""

    USER_REJECTED = 4001
    UNAUTHORIZED = 4100
    DISCONNECTED = 4900

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data

    @property
    def user_rejected(self) -> bool:
        return self.code == self.USER_REJECTED
