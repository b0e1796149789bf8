"""Unit tests for the startup conflict guard."""

from unittest.mock import Mock

from alttab_headless.conflict_guard import conflict_failure_message, conflicting_pids, enforce_no_conflict
from alttab_headless.constants import FULL_APP_BUNDLE_IDENTIFIER, HEADLESS_BUNDLE_IDENTIFIER
from alttab_headless.models.window import RunningAppSnapshot


def _apps():
    return [
        RunningAppSnapshot(pid=300, bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER),
        RunningAppSnapshot(pid=200, bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER),
        RunningAppSnapshot(pid=400, bundle_identifier=FULL_APP_BUNDLE_IDENTIFIER, is_terminated=True),
        RunningAppSnapshot(pid=500, bundle_identifier=HEADLESS_BUNDLE_IDENTIFIER),
        RunningAppSnapshot(pid=600, bundle_identifier=None),
    ]


class TestConflictingPids:
    def test_sorted_live_full_app_instances(self):
        assert conflicting_pids(_apps(), current_pid=1) == [200, 300]

    def test_excludes_current_process(self):
        assert conflicting_pids(_apps(), current_pid=200) == [300]

    def test_headless_bundle_is_not_a_conflict(self):
        apps = [RunningAppSnapshot(pid=9, bundle_identifier=HEADLESS_BUNDLE_IDENTIFIER)]
        assert conflicting_pids(apps, current_pid=1) == []


class TestEnforceNoConflict:
    def test_no_conflict_invokes_nothing(self):
        alert, fail = Mock(), Mock()
        assert enforce_no_conflict(lambda: [], lambda: 1, alert, fail) is False
        alert.assert_not_called()
        fail.assert_not_called()

    def test_conflict_alerts_then_fails_fast(self):
        calls = []
        alert = Mock(side_effect=lambda pids: calls.append(("alert", pids)))
        fail = Mock(side_effect=lambda message: calls.append(("fail", message)))

        assert enforce_no_conflict(_apps, lambda: 1, alert, fail) is True
        assert calls == [
            ("alert", [200, 300]),
            (
                "fail",
                "AltTab GUI app is already running (bundle: com.lwouis.alt-tab-macos, pids: 200,300). "
                "Quit AltTab before launching AltTabHeadless.",
            ),
        ]

    def test_message_format(self):
        assert "pids: 7)" in conflict_failure_message([7])
