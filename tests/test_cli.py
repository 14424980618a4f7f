from __future__ import annotations

import json
import os

import pytest

from payra_sdk import OrderClient, cli
from payra_sdk.core.rpc import PrioritySelector
from rpc_mocks import (
    ORDER_STATUS_TYPE,
    TEST_PRIVATE_KEY,
    TOKEN_ADDRESS,
    FakeResponse,
    FakeSession,
    base_environment,
    forwarded_result,
    healthy,
)

PAYER = "0x" + "22" * 20


@pytest.fixture
def env_file(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("PAYRA_"):
            monkeypatch.delenv(key)
    path = tmp_path / ".env"
    path.write_text(
        "".join(f"{key}={value}\n" for key, value in base_environment().items()),
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def fake_session(monkeypatch):
    session = FakeSession()

    def _create_order_client(*, settings):
        return OrderClient(settings, session=session, selector=PrioritySelector())

    monkeypatch.setattr(cli, "create_order_client", _create_order_client)
    return session


def test_sign_prints_signature(env_file, capsys):
    code = cli.run_cli(
        ["--env-file", env_file, "sign", "polygon", TOKEN_ADDRESS, "ORDER-1", "12340000", "1700000000", PAYER]
    )

    assert code == 0
    signature = json.loads(capsys.readouterr().out)["signature"]
    assert signature.startswith("0x") and len(signature) == 132


def test_sign_with_bad_key_fails(env_file, capsys):
    code = cli.run_cli(
        [
            "--env-file",
            env_file,
            "--set",
            "PAYRA_POLYGON_SIGNATURE_KEY=0x1234",
            "sign",
            "polygon",
            TOKEN_ADDRESS,
            "ORDER-1",
            "1",
            "2",
            PAYER,
        ]
    )

    assert code == 1
    assert capsys.readouterr().out == ""


def test_sign_rejects_negative_amount(env_file):
    with pytest.raises(SystemExit):
        cli.run_cli(["--env-file", env_file, "sign", "polygon", TOKEN_ADDRESS, "O", "-5", "1", PAYER])


def test_invalid_settings_exit_code(env_file):
    code = cli.run_cli(["--env-file", env_file, "--set", "PAYRA_RPC_SELECTION=best", "status", "polygon", "O"])
    assert code == 1


def test_is_paid(env_file, fake_session, capsys):
    fake_session.handlers.update(
        eth_blockNumber=healthy(), eth_call=forwarded_result(["bool"], [False])
    )

    code = cli.run_cli(["--env-file", env_file, "is-paid", "polygon", "unknown-order"])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"success": True, "paid": False, "error": None}


def test_status_failure_exit_code(env_file, fake_session, capsys):
    fake_session.handlers.update(eth_blockNumber=FakeResponse(500, {}))

    code = cli.run_cli(["--env-file", env_file, "status", "polygon", "ORDER-1"])

    assert code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["success"] is False
    assert output["error"].endswith("is not responding")


def test_status_success(env_file, fake_session, capsys):
    fake_session.handlers.update(
        eth_blockNumber=healthy(),
        eth_call=forwarded_result([ORDER_STATUS_TYPE], [(True, TOKEN_ADDRESS, 5, 1, 1700000000)]),
    )

    code = cli.run_cli(["--env-file", env_file, "status", "polygon", "ORDER-1"])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["amount"] == 5
    assert output["token"] == TOKEN_ADDRESS


def test_key_is_never_printed(env_file, capsys):
    cli.run_cli(["--env-file", env_file, "sign", "polygon", TOKEN_ADDRESS, "ORDER-1", "1", "2", PAYER])
    captured = capsys.readouterr()
    assert TEST_PRIVATE_KEY[2:] not in captured.out + captured.err


def test_sign_with_out_of_range_key_fails(env_file, capsys):
    code = cli.run_cli(
        [
            "--env-file",
            env_file,
            "--set",
            "PAYRA_POLYGON_SIGNATURE_KEY=0x" + "00" * 32,
            "sign",
            "polygon",
            TOKEN_ADDRESS,
            "ORDER-1",
            "1",
            "2",
            PAYER,
        ]
    )

    assert code == 1
    assert capsys.readouterr().out == ""


def test_unreadable_env_file_exit_code(tmp_path):
    assert cli.run_cli(["--env-file", str(tmp_path), "status", "polygon", "O"]) == 1
