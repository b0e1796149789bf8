"""Unit tests for daemon lifecycle wiring."""

import asyncio
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from alttab_headless.constants import FULL_APP, FULL_APP_BUNDLE_IDENTIFIER, HEADLESS_APP
from alttab_headless.daemon import HeadlessDaemon
from alttab_headless.models.window import RunningAppSnapshot
from alttab_headless.services.static_window_source import StaticWindowSource


@pytest.fixture
def short_dir():
    # AF_UNIX paths are limited to ~108 bytes
    with tempfile.TemporaryDirectory(prefix="ath") as path:
        yield Path(path)


def _daemon(short_dir, variant=HEADLESS_APP, **kwargs):
    return HeadlessDaemon(
        variant,
        window_source=kwargs.pop("window_source", StaticWindowSource()),
        config_file=short_dir / "preferences.json",
        socket_path=short_dir / "d.sock",
        **kwargs,
    )


class TestConflictGuardWiring:
    def test_conflict_fails_fast(self, short_dir):
        apps = [RunningAppSnapshot(pid=4242, bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER)]
        daemon = _daemon(short_dir, running_apps_provider=lambda: apps)
        with patch("alttab_headless.daemon.present_conflict_alert") as alert, \
                patch("alttab_headless.daemon.subprocess.run"):
            with pytest.raises(SystemExit) as exc_info:
                daemon.ensure_full_app_not_running()
        assert exc_info.value.code == 1
        alert.assert_called_once_with([4242])

    def test_no_conflict(self, short_dir):
        daemon = _daemon(short_dir, running_apps_provider=lambda: [])
        assert daemon.ensure_full_app_not_running() is False

    def test_full_app_skips_guard(self, short_dir):
        apps = [RunningAppSnapshot(pid=4242, bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER)]
        daemon = _daemon(short_dir, variant=FULL_APP, running_apps_provider=lambda: apps)
        assert daemon.ensure_full_app_not_running() is False


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_initialize_and_discovery_open_gate(self, short_dir):
        daemon = _daemon(short_dir)
        await daemon.initialize()
        try:
            assert (short_dir / "d.sock").exists()
            assert not daemon.readiness_gate.is_ready
            await asyncio.wrap_future(daemon.start_initial_discovery())
            assert daemon.readiness_gate.is_ready
            assert daemon.window_source.refresh_count == 1
        finally:
            await daemon.shutdown()
        assert not (short_dir / "d.sock").exists()

    @pytest.mark.asyncio
    async def test_failed_discovery_still_opens_gate(self, short_dir):
        source = StaticWindowSource()

        def broken_refresh():
            raise RuntimeError("no display")

        source.refresh = broken_refresh
        daemon = _daemon(short_dir, window_source=source)
        await daemon.initialize()
        try:
            await asyncio.wrap_future(daemon.start_initial_discovery())
            assert daemon.readiness_gate.is_ready
        finally:
            await daemon.shutdown()

    @pytest.mark.asyncio
    async def test_run_fails_when_endpoint_owned(self, short_dir, capsys):
        first = _daemon(short_dir)
        await first.initialize()
        try:
            second = _daemon(short_dir)
            with patch("alttab_headless.daemon.install_signal_handlers"):
                assert await second.run() == 1
            assert "Can't listen on message port" in capsys.readouterr().err
            assert (short_dir / "d.sock").exists()
        finally:
            await first.shutdown()

    @pytest.mark.asyncio
    async def test_run_until_shutdown_requested(self, short_dir):
        daemon = _daemon(short_dir)
        with patch("alttab_headless.daemon.install_signal_handlers"):
            task = asyncio.create_task(daemon.run())
            for _ in range(100):
                if daemon.readiness_gate.is_ready:
                    break
                await asyncio.sleep(0.01)
            daemon.request_shutdown()
            assert await asyncio.wait_for(task, timeout=5.0) == 0
