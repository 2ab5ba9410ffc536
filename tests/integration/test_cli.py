"""
CLI integration tests using Click's test runner.

The transport factory is patched to hand out a FakeWallet, so every
command runs end-to-end without a Frame instance listening on 1248.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import CONTRACT, TX_HASH, FakeWallet, Fault
from frame_client import __version__
from frame_client.cli import cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def fake_wallet(monkeypatch) -> FakeWallet:
    wallet = FakeWallet(chain_id=1)
    monkeypatch.setattr("frame_client.client.open_transport", lambda config: wallet)
    return wallet


class TestVersionAndHelp:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        for command in ("info", "switch", "send", "call"):
            assert command in result.output


class TestSession:
    def test_info(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["info"])
        assert result.exit_code == 0, result.output
        assert "http://127.0.0.1:1248" in result.output
        assert fake_wallet.accounts[0] in result.output
        assert fake_wallet.closed

    def test_chain(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        fake_wallet.chain_id = 8453
        result = runner.invoke(cli, ["chain"])
        assert result.exit_code == 0
        assert result.output.strip() == "8453"

    def test_wallet_not_running(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        from frame_client.errors import ConnectionRefused

        fake_wallet.script("eth_accounts", ConnectionRefused("nothing listening"))
        result = runner.invoke(cli, ["accounts"])
        assert result.exit_code == 20
        assert "ERROR" in result.output

    def test_invalid_timeout_override(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["--timeout", "0", "chain"])
        assert result.exit_code == 2
        assert fake_wallet.calls == []


class TestSwitch:
    def test_switch(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["switch", "42161"])
        assert result.exit_code == 0, result.output
        assert "Switched to chain 42161" in result.output
        assert fake_wallet.chain_id == 42161

    def test_switch_adds_chain_from_file(self, runner: CliRunner, fake_wallet: FakeWallet, tmp_path: Path) -> None:
        chains = tmp_path / "chains.json"
        chains.write_text(
            json.dumps(
                [
                    {
                        "chainId": "0x1e61",
                        "chainName": "Devnet",
                        "nativeCurrency": {"name": "Dev Ether", "symbol": "DEV", "decimals": 18},
                        "rpcUrls": ["http://127.0.0.1:8545"],
                    }
                ]
            ),
            encoding="utf-8",
        )
        fake_wallet.script("wallet_switchEthereumChain", Fault(4902, "Unrecognized chain ID"))

        result = runner.invoke(cli, ["switch", "7777", "--chains", str(chains)])

        assert result.exit_code == 0, result.output
        assert "Added and switched" in result.output
        assert fake_wallet.methods[-3:] == [
            "wallet_switchEthereumChain",
            "wallet_addEthereumChain",
            "wallet_switchEthereumChain",
        ]

    def test_switch_with_malformed_chains_file(
        self, runner: CliRunner, fake_wallet: FakeWallet, tmp_path: Path
    ) -> None:
        chains = tmp_path / "chains.json"
        chains.write_text(
            json.dumps([{"chainId": "0x1e61", "chainName": "Devnet", "nativeCurrency": "DEV"}]),
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["switch", "7777", "--chains", str(chains)])

        assert result.exit_code == 2
        assert "Invalid chains file" in result.output
        assert fake_wallet.calls == []

    def test_switch_rejected(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        fake_wallet.script("wallet_switchEthereumChain", Fault(4001, "User rejected the request"))
        result = runner.invoke(cli, ["switch", "10"])
        assert result.exit_code == 21
        assert "rejected" in result.output


class TestTransactions:
    def test_send(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["send", "--to", CONTRACT, "--value", "1000"])
        assert result.exit_code == 0, result.output
        assert TX_HASH in result.output
        assert fake_wallet.calls[-1][1][0]["value"] == "0x3e8"

    def test_send_without_recipient(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["send", "--value", "1000"])
        assert result.exit_code == 22
        assert "eth_sendTransaction" not in fake_wallet.methods

    def test_call(self, runner: CliRunner, fake_wallet: FakeWallet) -> None:
        result = runner.invoke(cli, ["call", CONTRACT, "0x06fdde03"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "0x" + "00" * 31 + "2a"
