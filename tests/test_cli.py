"""
CLI tests.
"""

import json

import pytest
from click.testing import CliRunner

import vaultgate
from vaultgate.cli import cli
from vaultgate.crypto.abi import encode_function_call

from conftest import CUSTODY, EXCHANGE, TOKEN, WHITELISTED


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    for name in ("VAULTGATE_EXCHANGE", "VAULTGATE_CUSTODY_WALLET", "VAULTGATE_LOG_LEVEL", "VAULTGATE_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "vaultgate.toml"
    path.write_text(
        f'[gateway]\ncustody_wallet = "{CUSTODY}"\nexchange = "{EXCHANGE}"\n\n'
        '[logging]\nlevel = "ERROR"\n'
    )
    return str(path)


class TestEncode:

    def test_deposit_uses_configured_exchange(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "encode", "deposit", TOKEN, "100"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["to"] == EXCHANGE
        assert payload["action"] == "deposit"
        assert payload["value"] == 0
        assert payload["data"] == "0x" + encode_function_call("deposit(address,uint256)", TOKEN, 100).hex()

    def test_approve_targets_token(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "encode", "approve", TOKEN, "5"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["to"] == TOKEN

    def test_transfer(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "encode", "transfer", TOKEN, "50", WHITELISTED])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["data"].startswith("0xa9059cbb")

    def test_exchange_override(self, runner, config_path):
        other = "0x" + "99" * 20
        result = runner.invoke(cli, ["-c", config_path, "encode", "withdraw", TOKEN, "1", "-e", other])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["to"] == other

    def test_invalid_amount(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "encode", "deposit", TOKEN, "--", "-1"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_token(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "encode", "deposit", "0x1234", "1"])
        assert result.exit_code == 1


class TestDecodeRevert:

    def test_error_string(self, runner, config_path):
        data = "0x" + encode_function_call("Error(string)", "ERC20: insufficient allowance").hex()
        result = runner.invoke(cli, ["-c", config_path, "decode-revert", data])
        assert result.exit_code == 0
        assert result.output.strip() == "ERC20: insufficient allowance"

    def test_unrecognised(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "decode-revert", "0xdeadbeef"])
        assert result.exit_code == 0
        assert result.output.strip() == "Unrecognised revert data (4 bytes): 0xdeadbeef"

    def test_not_hex(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "decode-revert", "0xzz"])
        assert result.exit_code == 1


class TestVersion:

    def test_version_matches_package(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert vaultgate.__version__ in result.output


class TestShowConfig:

    def test_show_config(self, runner, config_path):
        result = runner.invoke(cli, ["-c", config_path, "show-config"])
        assert result.exit_code == 0
        assert json.loads(result.output)["gateway"]["exchange"] == EXCHANGE

    def test_bad_log_level(self, runner, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')
        result = runner.invoke(cli, ["-c", str(path), "show-config"])
        assert result.exit_code == 1
