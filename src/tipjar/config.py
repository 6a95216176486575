"""
Configuration: ~/.tipjar/config.json, overridden by TIPJAR_* environment
variables, overridden again by CLI options.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError, field_validator
from web3 import Web3

from tipjar.errors import ConfigError

CONFIG_FILE = Path.home() / ".tipjar" / "config.json"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
SEPOLIA_CHAIN_ID = 11155111

CHAIN_NAMES = {
    1: "mainnet",
    17000: "holesky",
    11155111: "sepolia",
    31337: "anvil",
    1337: "dev",
}

ENV_OVERRIDES = {
    "TIPJAR_RPC_URL": "rpc_url",
    "TIPJAR_CONTRACT_ADDRESS": "contract_address",
    "TIPJAR_CHAIN_ID": "chain_id",
    "TIPJAR_ACCOUNT": "account",
}


def chain_name(chain_id: Optional[int]) -> Optional[str]:
    if chain_id is None:
        return None
    return CHAIN_NAMES.get(chain_id, f"chain-{chain_id}")


class TipJarConfig(BaseModel):
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: Optional[str] = None
    chain_id: int = SEPOLIA_CHAIN_ID
    account: Optional[str] = None
    receipt_timeout: float = 120.0
    poll_interval: float = 2.0

    @field_validator("contract_address", "account")
    @classmethod
    def _checksum(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not Web3.is_address(value):
            raise ValueError(f"not an address: {value}")
        return Web3.to_checksum_address(value)

    @field_validator("chain_id")
    @classmethod
    def _positive_chain_id(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("chain id must be positive")
        return value

    def require_contract_address(self) -> str:
        if not self.contract_address:
            raise ConfigError(
                "No contract address configured. Run `tipjar config set --contract <address>`."
            )
        return self.contract_address

    def merged(self, **overrides: Any) -> "TipJarConfig":
        """Return a validated copy with the non-None overrides applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return validate_config(data)


def validate_config(data: dict[str, Any]) -> TipJarConfig:
    try:
        return TipJarConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")


def _read_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[Path] = None, env: Optional[dict[str, str]] = None) -> TipJarConfig:
    data = _read_file(path or CONFIG_FILE)
    environ = os.environ if env is None else env
    for var, field in ENV_OVERRIDES.items():
        if environ.get(var):
            data[field] = environ[var]
    return validate_config(data)


def save_config(cfg: TipJarConfig, path: Optional[Path] = None) -> Path:
    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(cfg.model_dump(exclude_defaults=True), indent=2))
    return target
