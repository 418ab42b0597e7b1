"""Pilot tests for the Textual application."""

from __future__ import annotations

import asyncio

import pytest

textual = pytest.importorskip("textual")

from textual.widgets import Button, Input, Static

from peka.screens import Screen
from peka.tui.app import PekaApp
from peka.tui.modals import CreateFolderModal, PinModal
from peka.tui.views import (
    FolderView,
    LoadingView,
    SetupView,
    VaultView,
    WelcomeBackView,
    WelcomeView,
)


async def settle(app: PekaApp, pilot) -> None:
    await app.workers.wait_for_complete()
    await pilot.pause()


async def unlock(app: PekaApp, pilot, master_password: str) -> None:
    app.screen.query_one("#unlock-password", Input).value = master_password
    app.screen.query_one("#unlock", Button).press()
    await settle(app, pilot)


@pytest.mark.asyncio
async def test_no_vault_shows_welcome(fake_backend) -> None:
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        assert isinstance(app.screen, WelcomeView)
        assert not app.screen.query_one("#banner", Static).display


@pytest.mark.asyncio
async def test_existing_vault_shows_welcome_back(fake_backend, master_password) -> None:
    fake_backend.seed_vault("Personal", master_password)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        assert isinstance(app.screen, WelcomeBackView)
        assert app.controller.screen == Screen.WELCOME_BACK


@pytest.mark.asyncio
async def test_loading_view_while_discovering(fake_backend) -> None:
    fake_backend.hold("list_vaults")
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await pilot.pause(0.1)
        assert isinstance(app.screen, LoadingView)

        fake_backend.release("list_vaults")
        await settle(app, pilot)
        assert isinstance(app.screen, WelcomeView)


@pytest.mark.asyncio
async def test_discovery_failure_shows_banner(fake_backend) -> None:
    fake_backend.fail("list_vaults", "disk error")
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        assert isinstance(app.screen, WelcomeView)
        assert app.screen.query_one("#banner", Static).display


@pytest.mark.asyncio
async def test_get_started_opens_setup(fake_backend) -> None:
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        app.screen.query_one("#get-started", Button).press()
        await settle(app, pilot)

        assert isinstance(app.screen, SetupView)
        assert app.screen.query_one("#create", Button).disabled


@pytest.mark.asyncio
async def test_setup_creates_vault(fake_backend, master_password) -> None:
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        app.screen.query_one("#get-started", Button).press()
        await settle(app, pilot)

        setup = app.screen
        setup.query_one("#vault-name", Input).value = "Personal"
        setup.query_one("#password", Input).value = master_password
        setup.query_one("#confirm-password", Input).value = master_password
        await pilot.pause()
        assert not setup.query_one("#create", Button).disabled

        setup.query_one("#create", Button).press()
        await settle(app, pilot)

        assert isinstance(app.screen, VaultView)
        assert app.controller.snapshot.name == "Personal"


@pytest.mark.asyncio
async def test_unlock_and_lock(fake_backend, master_password, sample_folders) -> None:
    fake_backend.seed_vault("Personal", master_password, sample_folders)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, master_password)
        assert isinstance(app.screen, VaultView)

        await pilot.press("l")
        await settle(app, pilot)

        assert isinstance(app.screen, WelcomeBackView)
        assert app.controller.session is None


@pytest.mark.asyncio
async def test_wrong_password_shows_error(fake_backend, master_password) -> None:
    fake_backend.seed_vault("Personal", master_password)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, "Wrong-password-1!")

        assert isinstance(app.screen, WelcomeBackView)
        assert app.screen.query_one("#unlock-error", Static).display


@pytest.mark.asyncio
async def test_open_regular_folder(fake_backend, master_password, sample_folders) -> None:
    fake_backend.seed_vault("Personal", master_password, sample_folders)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, master_password)

        app.perform(lambda: app.controller.open_folder("work"))
        await settle(app, pilot)

        assert isinstance(app.screen, FolderView)

        await pilot.press("escape")
        await settle(app, pilot)
        assert isinstance(app.screen, VaultView)


@pytest.mark.asyncio
async def test_secure_folder_pin_modal(fake_backend, master_password, sample_folders, pin) -> None:
    path = fake_backend.seed_vault("Personal", master_password, sample_folders)
    fake_backend.set_pin(path, "bank", pin)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, master_password)

        app.perform(lambda: app.controller.open_folder("bank"))
        await settle(app, pilot)
        assert isinstance(app.screen, PinModal)

        app.screen.query_one("#pin", Input).value = "0000"
        await pilot.pause()
        app.screen.query_one("#unlock-folder", Button).press()
        await settle(app, pilot)
        assert isinstance(app.screen, PinModal)
        assert app.screen.query_one("#pin-error", Static).display

        app.screen.query_one("#pin", Input).value = pin
        await pilot.pause()
        app.screen.query_one("#unlock-folder", Button).press()
        await settle(app, pilot)

        assert isinstance(app.screen, FolderView)
        assert app.controller.active_folder_id == "bank"


@pytest.mark.asyncio
async def test_create_folder_modal(fake_backend, master_password) -> None:
    fake_backend.seed_vault("Personal", master_password)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, master_password)

        await pilot.press("n")
        await pilot.pause()
        assert isinstance(app.screen, CreateFolderModal)

        app.screen.query_one("#folder-name", Input).value = "Work"
        await pilot.pause()
        app.screen.query_one("#create-folder", Button).press()
        await settle(app, pilot)

        assert isinstance(app.screen, VaultView)
        assert [f.name for f in app.controller.snapshot.folders] == ["Work"]


@pytest.mark.asyncio
async def test_quit_ends_session(fake_backend, master_password) -> None:
    fake_backend.seed_vault("Personal", master_password)
    app = PekaApp(fake_backend)
    async with app.run_test() as pilot:  # type: ignore[call-arg]
        await settle(app, pilot)
        await unlock(app, pilot, master_password)
        assert app.controller.session is not None

        app.action_quit()
        assert app.controller.session is None


def test_app_built_before_event_loop_runs(fake_backend) -> None:
    app = PekaApp(fake_backend)

    async def drive() -> type:
        async with app.run_test() as pilot:  # type: ignore[call-arg]
            await settle(app, pilot)
            return type(app.screen)

    assert asyncio.run(drive()) is WelcomeView
