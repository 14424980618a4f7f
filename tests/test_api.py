from __future__ import annotations

import os

import pytest

import payra_sdk
from payra_sdk import (
    ErrorKind,
    OrderClient,
    create_order_client,
    generate_signature,
    get_order_details,
    get_order_status,
    is_order_paid,
)
from rpc_mocks import FakeSession, TEST_PRIVATE_KEY, forwarded_result, healthy


def _write_env(tmp_path, **extra):
    lines = {
        "PAYRA_POLYGON_MERCHANT_ID": "42",
        "PAYRA_POLYGON_SIGNATURE_KEY": TEST_PRIVATE_KEY,
        "PAYRA_POLYGON_CORE_FORWARD_CONTRACT_ADDRESS": "0x" + "ab" * 20,
        "PAYRA_POLYGON_RPC_URL_1": "https://rpc.example",
    }
    lines.update(extra)
    env_file = tmp_path / ".env"
    env_file.write_text("".join(f"{key}={value}\n" for key, value in lines.items()), "utf-8")
    return str(env_file)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PAYRA_"):
            monkeypatch.delenv(key)


def test_public_exports():
    for name in payra_sdk.__all__:
        assert hasattr(payra_sdk, name), name


def test_generate_signature_from_env_file(tmp_path, settings):
    env_file = _write_env(tmp_path)
    from_file = generate_signature(
        "polygon",
        "0x" + "11" * 20,
        "ORDER-1",
        1,
        2,
        "0x" + "22" * 20,
        env_file=env_file,
    )
    from_settings = generate_signature(
        "polygon", "0x" + "11" * 20, "ORDER-1", 1, 2, "0x" + "22" * 20, settings=settings
    )
    assert from_file == from_settings


def test_settings_and_overrides_are_exclusive(settings):
    with pytest.raises(ValueError):
        create_order_client(settings=settings, overrides={"PAYRA_RPC_SELECTION": "random"})


def test_create_order_client_from_env(tmp_path):
    client = create_order_client(env_file=_write_env(tmp_path))
    assert isinstance(client, OrderClient)
    assert client.settings.network("polygon").merchant_id == 42


def test_is_order_paid_with_injected_session(settings):
    session = FakeSession(eth_blockNumber=healthy(), eth_call=forwarded_result(["bool"], [True]))

    result = is_order_paid("polygon", "ORDER-1", settings=settings, session=session)

    assert result.success is True
    assert result.paid is True


def test_invalid_settings_become_envelopes(tmp_path):
    env_file = _write_env(tmp_path, PAYRA_RPC_SELECTION="fastest")

    paid = is_order_paid("polygon", "ORDER-1", env_file=env_file)
    status = get_order_status("polygon", "ORDER-1", env_file=env_file)
    details = get_order_details("polygon", "ORDER-1", env_file=env_file)

    for result in (paid, status, details):
        assert result.success is False
        assert result.error_kind is ErrorKind.CONFIG
        assert "PAYRA_RPC_SELECTION" in result.error


def test_missing_network_config_from_env(tmp_path):
    env_file = _write_env(tmp_path)

    result = get_order_status("ethereum", "ORDER-1", env_file=env_file)

    assert result.as_dict() == {
        "success": False,
        "paid": None,
        "token": None,
        "amount": None,
        "fee": None,
        "timestamp": None,
        "error": result.error,
    }
    assert "PAYRA_ETHEREUM_MERCHANT_ID" in result.error


def test_unreadable_env_file_becomes_envelope(tmp_path):
    paid = is_order_paid("polygon", "ORDER-1", env_file=str(tmp_path))
    status = get_order_status("polygon", "ORDER-1", env_file=str(tmp_path))

    for result in (paid, status):
        assert result.success is False
        assert result.error_kind is ErrorKind.CONFIG
        assert "Cannot read env file" in result.error


def test_helper_leaves_injected_session_open(settings):
    session = FakeSession(eth_blockNumber=healthy(), eth_call=forwarded_result(["bool"], [False]))

    is_order_paid("polygon", "ORDER-1", settings=settings, session=session)

    assert session.closed is False
