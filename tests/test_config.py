import pytest

from grug_sdk import Client
from grug_sdk.config import SDKConfig
from grug_sdk.connect import ConnectionManager, FileStorage
from grug_sdk.rpc import HttpTransport, WsTransport


def test_defaults(monkeypatch):
    for name in ("GRUG_RPC_URL", "GRUG_CHAIN_ID", "GRUG_TIMEOUT", "GRUG_MAX_RETRIES", "GRUG_SESSION_PATH"):
        monkeypatch.delenv(name, raising=False)
    cfg = SDKConfig.from_env()
    assert cfg.rpc_url == "http://127.0.0.1:26657"
    assert cfg.chain_id is None
    assert cfg.max_retries == 3
    assert cfg.user_agent.startswith("grug-sdk-py/")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("GRUG_RPC_URL", "wss://node.example/websocket")
    monkeypatch.setenv("GRUG_CHAIN_ID", "local-1")
    monkeypatch.setenv("GRUG_TIMEOUT", "2.5")
    monkeypatch.setenv("GRUG_MAX_RETRIES", "0")
    monkeypatch.setenv("GRUG_SESSION_PATH", "/tmp/session.json")
    cfg = SDKConfig.from_env()
    assert cfg.rpc_url == "wss://node.example/websocket"
    assert cfg.chain_id == "local-1"
    assert cfg.request_timeout == 2.5
    assert cfg.max_retries == 0
    assert cfg.session_path == "/tmp/session.json"


def test_bad_scheme_rejected(monkeypatch):
    monkeypatch.setenv("GRUG_RPC_URL", "tcp://127.0.0.1:26657")
    with pytest.raises(ValueError):
        SDKConfig.from_env()
    with pytest.raises(ValueError):
        SDKConfig.with_overrides(SDKConfig(), rpc_url="ftp://x")


def test_with_overrides_ignores_unknown_keys():
    cfg = SDKConfig.with_overrides(SDKConfig(), chain_id="dev-9", colour="blue")
    assert cfg.chain_id == "dev-9"
    assert cfg.to_dict()["chain_id"] == "dev-9"


@pytest.mark.asyncio
async def test_client_from_config_picks_transport():
    http = Client.from_config(SDKConfig(rpc_url="http://127.0.0.1:26657", chain_id="local-1", max_retries=1))
    assert isinstance(http.transport, HttpTransport)
    assert http.transport.max_retries == 1
    assert http.chain_id == "local-1"
    await http.close()

    ws = Client.from_config(SDKConfig(rpc_url="ws://127.0.0.1:26657/websocket", request_timeout=3.0))
    assert isinstance(ws.transport, WsTransport)
    assert ws.transport.request_timeout == 3.0
    await ws.close()


def test_manager_from_config_uses_session_path(tmp_path):
    path = tmp_path / "session.json"
    manager = ConnectionManager.from_config([], SDKConfig(session_path=str(path)))
    assert isinstance(manager.storage, FileStorage)
    assert manager.storage.path == path
    assert ConnectionManager.from_config([], SDKConfig()).storage is None
