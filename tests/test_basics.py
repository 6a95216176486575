"""Basic unit tests for the tipjar package."""

from tipjar import (
    ChainGateway,
    ViewController,
    TipJarError,
    NoProviderError,
    NoAccountsError,
    WrongNetworkError,
    ContractNotFoundError,
    InvalidAmountError,
    TransactionError,
    ConfigError,
    ProviderRpcError,
    __version__,
)
from tipjar.gateway import load_abi


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert ChainGateway is not None
    assert ViewController is not None


def test_error_hierarchy():
    for cls in (NoProviderError, NoAccountsError, WrongNetworkError, ContractNotFoundError,
                InvalidAmountError, TransactionError, ConfigError):
        assert issubclass(cls, TipJarError)
    assert not issubclass(ProviderRpcError, TipJarError)


def test_error_attributes():
    err = TipJarError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    wrong = WrongNetworkError(11155111, 1)
    assert wrong.code == "wrong_network"
    assert wrong.expected == 11155111
    assert wrong.actual == 1
    assert wrong.details == {"expected": 11155111, "actual": 1}
    assert "11155111" in str(wrong)

    missing = ContractNotFoundError("0xabc")
    assert missing.code == "contract_not_found"
    assert missing.address == "0xabc"

    assert NoProviderError().code == "no_provider"
    assert NoAccountsError().code == "no_accounts"
    assert InvalidAmountError("-1").details == {"amount": "-1"}
    assert TransactionError("boom", details={"tx_hash": "0x1"}).details == {"tx_hash": "0x1"}


def test_provider_rpc_error():
    rejected = ProviderRpcError(4001, "User rejected the request.")
    assert rejected.user_rejected
    assert str(rejected) == "User rejected the request."
    assert not ProviderRpcError(-32000, "execution reverted").user_rejected


def test_packaged_abi_surface():
    names = {entry.get("name") for entry in load_abi() if entry["type"] == "function"}
    assert names == {"getBalance", "owner", "tip", "withdrawTips"}
    tip = next(e for e in load_abi() if e.get("name") == "tip")
    assert tip["stateMutability"] == "payable"
