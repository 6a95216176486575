"""
tipjar — client for a single on-chain tip jar contract.

Connect a wallet, read the jar's balance and owner, send tips, and let the
owner withdraw them. Talks to the wallet through an EIP-1193 provider and to
the contract through web3.py.
"""

from tipjar.gateway import ChainGateway
from tipjar.controller import ViewController
from tipjar.config import TipJarConfig, load_config, save_config
from tipjar.errors import (
    TipJarError,
    NoProviderError,
    NoAccountsError,
    WrongNetworkError,
    ContractNotFoundError,
    InvalidAmountError,
    TransactionError,
    ConfigError,
    ProviderRpcError,
)
from tipjar.models.view import ConnectionStatus, ViewState, is_owner
from tipjar.transport.provider import JsonRpcProvider

__version__ = "0.1.0"
__all__ = [
    "ChainGateway",
    "ViewController",
    "TipJarConfig",
    "load_config",
    "save_config",
    "TipJarError",
    "NoProviderError",
    "NoAccountsError",
    "WrongNetworkError",
    "ContractNotFoundError",
    "InvalidAmountError",
    "TransactionError",
    "ConfigError",
    "ProviderRpcError",
    "ConnectionStatus",
    "ViewState",
    "is_owner",
    "JsonRpcProvider",
]
