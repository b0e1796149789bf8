"""Pytest configuration for alttab-headless tests."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path BEFORE test collection
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from alttab_headless.models.window import WindowSnapshot  # noqa: E402
from alttab_headless.readiness import ReadinessGate  # noqa: E402
from alttab_headless.services.static_window_source import StaticWindowSource  # noqa: E402


def make_window(**overrides) -> WindowSnapshot:
    """Window snapshot with sensible defaults; override any field."""
    fields = {
        "window_id": 1,
        "title": "Window",
        "app_name": "App",
        "app_bundle_id": "com.example.app",
        "app_pid": 100,
        "space_ids": (1,),
        "space_indexes": (1,),
        "last_focus_order": 0,
        "creation_order": 0,
    }
    fields.update(overrides)
    return WindowSnapshot(**fields)


@pytest.fixture
def window_factory():
    return make_window


@pytest.fixture
def ready_gate():
    gate = ReadinessGate()
    gate.mark_ready()
    return gate


@pytest.fixture
def window_source():
    return StaticWindowSource(
        windows=[
            make_window(window_id=10, title="Editor", app_pid=100, last_focus_order=0, creation_order=1),
            make_window(window_id=11, title="Terminal", app_name="Term", app_pid=200, last_focus_order=1, creation_order=0),
            make_window(window_id=None, title="Idle", app_name="Idle", app_pid=300, last_focus_order=2,
                        creation_order=2, is_windowless_app=True, space_ids=(), space_indexes=()),
        ],
        frontmost_pid=100,
        visible_space_ids=[1],
    )
