import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "send_tip.py"
DEVNET = "https://api.devnet.solana.com"
MAINNET = "https://api.mainnet-beta.solana.com"


@pytest.fixture(scope="module")
def send_tip():
    spec = importlib.util.spec_from_file_location("send_tip", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_explicit_cluster_overrides_environment(send_tip, monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", DEVNET)

    config = send_tip.resolve_settings("mainnet")

    assert config.solana_rpc_url == MAINNET
    assert config.network_label == "mainnet"


def test_environment_used_without_cluster(send_tip, monkeypatch):
    monkeypatch.setenv("SOLANA_RPC_URL", "http://localhost:8899")

    config = send_tip.resolve_settings(None)

    assert config.solana_rpc_url == "http://localhost:8899"
    assert config.network_label == "localnet"


def test_defaults_to_devnet(send_tip, monkeypatch):
    monkeypatch.delenv("SOLANA_RPC_URL", raising=False)
    assert send_tip.resolve_settings(None).solana_rpc_url == DEVNET


def test_explorer_link_follows_network(send_tip):
    assert send_tip.explorer_url("sig", "mainnet") == "https://explorer.solana.com/tx/sig"
    assert send_tip.explorer_url("sig", "devnet") == "https://explorer.solana.com/tx/sig?cluster=devnet"
