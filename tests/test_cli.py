"""Tests for the command line interface."""

import asyncio
import os

import pytest
from rich.console import Console
from typer.testing import CliRunner

from peka import __version__, messages, ui
from peka.backend import LocalBackend
from peka.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(ui, "console", Console(width=200, color_system=None))


@pytest.fixture
def answers(monkeypatch):
    """Feed password prompts from a list."""
    queue = []

    def fake_prompt(message):
        return queue.pop(0)

    monkeypatch.setattr(ui, "prompt_password", fake_prompt)
    return queue


@pytest.fixture
def device_vault(vault_dir, master_password):
    return asyncio.run(LocalBackend(vault_dir).create_vault("Personal", master_password))


def invoke(*args):
    return runner.invoke(app, list(args))


def test_version():
    result = invoke("--version")
    assert result.exit_code == 0
    assert f"peka {__version__}" in result.output


def test_vaults_empty():
    result = invoke("vaults")
    assert result.exit_code == 0
    assert messages.INFO_NO_VAULTS in result.output


def test_vaults_lists_device_vault(device_vault):
    result = invoke("vaults")
    assert result.exit_code == 0
    assert "Personal" in result.output


def test_ls_alias(device_vault):
    result = invoke("ls")
    assert result.exit_code == 0
    assert "Personal" in result.output


def test_vault_dir_option(tmp_path, master_password):
    other = str(tmp_path / "other")
    asyncio.run(LocalBackend(other).create_vault("Elsewhere", master_password))

    result = invoke("--vault-dir", other, "vaults")
    assert result.exit_code == 0
    assert "Elsewhere" in result.output


class TestExport:
    def test_export_adds_extension(self, device_vault, tmp_path):
        destination = tmp_path / "backup"
        result = invoke("export", str(destination))

        assert result.exit_code == 0
        assert "exported to" in result.output
        assert (tmp_path / "backup.peka").exists()

    def test_export_refuses_existing_file(self, device_vault, tmp_path):
        destination = tmp_path / "backup.peka"
        destination.write_text("old")

        result = invoke("export", str(destination))
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert destination.read_text() == "old"

    def test_export_force_overwrites(self, device_vault, tmp_path):
        destination = tmp_path / "backup.peka"
        destination.write_text("old")

        result = invoke("export", str(destination), "--force")
        assert result.exit_code == 0
        assert destination.read_text() != "old"

    def test_export_without_vault(self, tmp_path):
        result = invoke("export", str(tmp_path / "backup"))
        assert result.exit_code == 1
        assert messages.INFO_NO_VAULTS in result.output


class TestImport:
    @pytest.fixture
    def backup(self, tmp_path, master_password):
        return asyncio.run(
            LocalBackend(str(tmp_path / "elsewhere")).create_vault("Old", master_password)
        )

    def test_import(self, backup, answers, master_password, vault_dir):
        answers.append(master_password)

        result = invoke("import", backup, "--name", "Restored")
        assert result.exit_code == 0
        assert "Vault imported from" in result.output
        assert os.listdir(vault_dir) == ["Restored.peka"]

    def test_import_wrong_password(self, backup, answers, vault_dir):
        answers.append("Wrong-password-1!")

        result = invoke("import", backup, "--name", "Restored")
        assert result.exit_code == 1
        assert "Import failed" in result.output
        assert os.listdir(vault_dir) == []

    def test_import_cancelled(self, backup, answers):
        answers.append(None)

        result = invoke("import", backup, "--name", "Restored")
        assert result.exit_code == 1
        assert "Import cancelled" in result.output

    def test_import_blank_name(self, backup, answers, master_password):
        answers.append(master_password)

        result = invoke("import", backup, "--name", "  ")
        assert result.exit_code == 1
        assert messages.ERROR_VAULT_NAME_REQUIRED in result.output


class TestDelete:
    def test_delete_with_force(self, device_vault):
        result = invoke("delete", "--force")
        assert result.exit_code == 0
        assert "Deleted vault 'Personal'" in result.output
        assert not os.path.exists(device_vault)

    def test_delete_declined(self, device_vault, monkeypatch):
        monkeypatch.setattr(ui, "confirm", lambda message, default=False: False)

        result = invoke("delete")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert os.path.exists(device_vault)

    def test_delete_confirmed(self, device_vault, monkeypatch):
        monkeypatch.setattr(ui, "confirm", lambda message, default=False: True)

        result = invoke("delete")
        assert result.exit_code == 0
        assert not os.path.exists(device_vault)

    def test_delete_without_vault(self):
        result = invoke("delete", "--force")
        assert result.exit_code == 1


class TestCheckPassword:
    def test_strong_password(self, answers, master_password):
        answers.extend([master_password, master_password])

        result = invoke("check-password")
        assert result.exit_code == 0
        assert "meets the master password policy" in result.output

    def test_weak_password_lists_failures(self, answers):
        answers.extend(["abc", "abd"])

        result = invoke("check-password")
        assert result.exit_code == 1
        assert messages.POLICY_MIXED_CASE in result.output
        assert messages.POLICY_MISMATCH in result.output


def test_main_handles_keyboard_interrupt(monkeypatch):
    from peka import cli

    def interrupted():
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "app", interrupted)
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1
