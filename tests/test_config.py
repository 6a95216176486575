"""Configuration loading: file, environment, overrides."""

import json

import pytest

from tipjar.config import SEPOLIA_CHAIN_ID, TipJarConfig, chain_name, load_config, save_config
from tipjar.errors import ConfigError

ADDRESS = "0x" + "12" * 20


def test_defaults_without_file(tmp_path):
    cfg = load_config(tmp_path / "missing.json", env={})
    assert cfg.chain_id == SEPOLIA_CHAIN_ID
    assert cfg.rpc_url == "http://127.0.0.1:8545"
    assert cfg.contract_address is None


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert load_config(path, env={}) == TipJarConfig()


def test_file_then_env_precedence(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"chain_id": 31337, "contract_address": ADDRESS, "rpc_url": "http://file"}))
    cfg = load_config(path, env={"TIPJAR_RPC_URL": "http://env"})
    assert cfg.chain_id == 31337
    assert cfg.rpc_url == "http://env"
    assert cfg.contract_address == "0x1212121212121212121212121212121212121212"


def test_merged_ignores_none_overrides():
    cfg = TipJarConfig(chain_id=31337).merged(chain_id=None, rpc_url="http://cli")
    assert cfg.chain_id == 31337
    assert cfg.rpc_url == "http://cli"


def test_invalid_values_raise_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "none.json", env={"TIPJAR_CONTRACT_ADDRESS": "not-an-address"})
    with pytest.raises(ConfigError):
        TipJarConfig().merged(chain_id=0)


def test_require_contract_address():
    with pytest.raises(ConfigError):
        TipJarConfig().require_contract_address()
    assert TipJarConfig(contract_address=ADDRESS).require_contract_address().startswith("0x")


def test_save_writes_only_non_defaults(tmp_path):
    path = save_config(TipJarConfig(chain_id=31337), tmp_path / "nested" / "config.json")
    assert json.loads(path.read_text()) == {"chain_id": 31337}
    assert load_config(path, env={}).chain_id == 31337


def test_chain_name():
    assert chain_name(11155111) == "sepolia"
    assert chain_name(424242) == "chain-424242"
    assert chain_name(None) is None
