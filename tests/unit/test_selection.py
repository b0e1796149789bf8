"""Unit tests for the --show selection engine."""

import pytest

from alttab_headless.models.preferences import (
    AppsToShow,
    BlacklistEntry,
    BlacklistHide,
    ScreensToShow,
    ShowHow,
    ShowSelectionPreferences,
    SpacesToShow,
    WindowOrder,
)
from alttab_headless.selection import collation_key, collapse_to_applications, select_window_index


@pytest.fixture
def prefs():
    return ShowSelectionPreferences()


class TestBasicSelection:
    def test_selects_next_window(self, window_factory, prefs):
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1),
        ]
        assert select_window_index(windows, prefs, None, []) == 1

    def test_falls_back_to_only_window(self, window_factory, prefs):
        windows = [window_factory(window_id=1, last_focus_order=0)]
        assert select_window_index(windows, prefs, None, []) == 0

    def test_empty_input(self, prefs):
        assert select_window_index([], prefs, None, []) is None

    def test_index_refers_to_input_order(self, window_factory, prefs):
        windows = [
            window_factory(window_id=1, last_focus_order=2),
            window_factory(window_id=2, last_focus_order=0),
            window_factory(window_id=3, last_focus_order=1),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_inputs_not_mutated(self, window_factory, prefs):
        windows = [
            window_factory(window_id=1, last_focus_order=1),
            window_factory(window_id=2, last_focus_order=0),
        ]
        before = list(windows)
        select_window_index(windows, prefs, None, [])
        assert windows == before


class TestEligibility:
    def test_hidden_only_window_hidden_policy_yields_none(self, window_factory):
        prefs = ShowSelectionPreferences(show_hidden_windows=ShowHow.HIDE)
        windows = [window_factory(is_hidden=True)]
        assert select_window_index(windows, prefs, None, []) is None

    def test_active_apps_only(self, window_factory):
        prefs = ShowSelectionPreferences(apps_to_show=AppsToShow.ACTIVE)
        windows = [
            window_factory(window_id=1, app_pid=100, last_focus_order=0),
            window_factory(window_id=2, app_pid=200, last_focus_order=1),
            window_factory(window_id=3, app_pid=100, last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, 100, []) == 2

    def test_non_active_apps_only(self, window_factory):
        prefs = ShowSelectionPreferences(apps_to_show=AppsToShow.NON_ACTIVE)
        windows = [
            window_factory(window_id=1, app_pid=100, last_focus_order=0),
            window_factory(window_id=2, app_pid=200, last_focus_order=1),
        ]
        assert select_window_index(windows, prefs, 100, []) == 1

    def test_visible_spaces_only(self, window_factory):
        prefs = ShowSelectionPreferences(spaces_to_show=SpacesToShow.VISIBLE)
        windows = [
            window_factory(window_id=1, space_ids=(1,), last_focus_order=0),
            window_factory(window_id=2, space_ids=(2,), last_focus_order=1),
            window_factory(window_id=3, space_ids=(1,), last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, [1]) == 2

    def test_screen_filter(self, window_factory):
        prefs = ShowSelectionPreferences(screens_to_show=ScreensToShow.SHOWING_ALT_TAB)
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, is_on_preferred_screen=False),
        ]
        assert select_window_index(windows, prefs, None, []) == 0

    def test_tabs_hidden_unless_shown_as_windows(self, window_factory):
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, is_tabbed=True),
        ]
        assert select_window_index(windows, ShowSelectionPreferences(), None, []) == 0
        assert select_window_index(windows, ShowSelectionPreferences(show_tabs_as_windows=True), None, []) == 1

    def test_fullscreen_and_minimized_hide(self, window_factory):
        prefs = ShowSelectionPreferences(
            show_fullscreen_windows=ShowHow.HIDE, show_minimized_windows=ShowHow.HIDE
        )
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, is_fullscreen=True),
            window_factory(window_id=3, last_focus_order=2, is_minimized=True),
        ]
        assert select_window_index(windows, prefs, None, []) == 0

    def test_windowless_skips_window_only_filters(self, window_factory):
        prefs = ShowSelectionPreferences(spaces_to_show=SpacesToShow.VISIBLE)
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=None, last_focus_order=1, is_windowless_app=True, space_ids=()),
        ]
        assert select_window_index(windows, prefs, None, [1]) == 1

    def test_windowless_hidden_by_policy(self, window_factory):
        prefs = ShowSelectionPreferences(show_windowless_apps=ShowHow.HIDE)
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=None, last_focus_order=1, is_windowless_app=True),
        ]
        assert select_window_index(windows, prefs, None, []) == 0


class TestBlacklist:
    def test_always_hides_by_prefix(self, window_factory):
        prefs = ShowSelectionPreferences(blacklist=(BlacklistEntry(bundle_identifier="org.mozilla"),))
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, app_bundle_id="org.mozilla.firefox"),
        ]
        assert select_window_index(windows, prefs, None, []) == 0

    def test_when_no_open_window_hides_only_placeholders(self, window_factory):
        entry = BlacklistEntry(bundle_identifier="com.example.app", hide=BlacklistHide.WHEN_NO_OPEN_WINDOW)
        prefs = ShowSelectionPreferences(blacklist=(entry,))
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=None, last_focus_order=1, is_windowless_app=True),
            window_factory(window_id=3, last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_none_policy_keeps_everything(self, window_factory):
        entry = BlacklistEntry(bundle_identifier="com.example", hide=BlacklistHide.NONE)
        prefs = ShowSelectionPreferences(blacklist=(entry,))
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1),
        ]
        assert select_window_index(windows, prefs, None, []) == 1


class TestCollapse:
    def test_filter_applies_before_collapse(self, window_factory):
        # The app's most recent window is hidden; its other window must represent it
        prefs = ShowSelectionPreferences(only_show_applications=True, show_hidden_windows=ShowHow.HIDE)
        windows = [
            window_factory(window_id=1, app_pid=100, last_focus_order=0),
            window_factory(window_id=2, app_pid=200, last_focus_order=1, is_hidden=True),
            window_factory(window_id=3, app_pid=200, last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_representative_ties_go_to_newest(self, window_factory):
        older = window_factory(window_id=1, app_pid=100, last_focus_order=3, creation_order=1)
        newer = window_factory(window_id=2, app_pid=100, last_focus_order=3, creation_order=5)
        collapsed = collapse_to_applications([(0, older), (1, newer)])
        assert collapsed == [(1, newer)]

    def test_keeps_first_seen_application_order(self, window_factory):
        a = window_factory(window_id=1, app_pid=1, last_focus_order=2)
        b = window_factory(window_id=2, app_pid=2, last_focus_order=1)
        a2 = window_factory(window_id=3, app_pid=1, last_focus_order=0)
        collapsed = collapse_to_applications([(0, a), (1, b), (2, a2)])
        assert [index for index, _ in collapsed] == [2, 1]


class TestOrdering:
    def test_recently_created(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.RECENTLY_CREATED)
        windows = [
            window_factory(window_id=1, last_focus_order=0, creation_order=9),
            window_factory(window_id=2, last_focus_order=1, creation_order=1),
            window_factory(window_id=3, last_focus_order=2, creation_order=5),
        ]
        # Sorted: 1 (focused), 3, 2 -> first non-focused is index 2
        assert select_window_index(windows, prefs, None, []) == 2

    def test_alphabetical_is_case_and_accent_insensitive(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.ALPHABETICAL)
        windows = [
            window_factory(window_id=1, app_name="Zed", last_focus_order=1),
            window_factory(window_id=2, app_name="élan", last_focus_order=2),
            window_factory(window_id=3, app_name="Files", last_focus_order=3),
        ]
        assert select_window_index(windows, prefs, None, []) == 1

    def test_space_order(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.SPACE)
        windows = [
            window_factory(window_id=1, space_indexes=(3,), last_focus_order=1),
            window_factory(window_id=2, space_indexes=(), last_focus_order=2),
            window_factory(window_id=3, space_indexes=(2,), last_focus_order=3),
            window_factory(window_id=4, space_indexes=(5,), last_focus_order=4, is_on_all_spaces=True),
        ]
        assert select_window_index(windows, prefs, None, []) == 3

    def test_space_tie_broken_alphabetically(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.SPACE)
        windows = [
            window_factory(window_id=1, app_name="Files", space_indexes=(1,), last_focus_order=0),
            window_factory(window_id=2, app_name="Zed", space_indexes=(2,), last_focus_order=1),
            window_factory(window_id=3, app_name="beta", space_indexes=(2,), last_focus_order=2),
        ]
        # Sorted: Files (space 1), beta, Zed -> "beta" follows the focused window
        assert select_window_index(windows, prefs, None, []) == 2

    def test_alphabetical_tie_broken_by_title(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.ALPHABETICAL)
        windows = [
            window_factory(window_id=1, app_name="Code", title="a.py", last_focus_order=0),
            window_factory(window_id=2, app_name="Term", title="shell", last_focus_order=1),
            window_factory(window_id=3, app_name="Term", title="htop", last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_order_tie_broken_by_focus_order(self, window_factory):
        prefs = ShowSelectionPreferences(window_order=WindowOrder.RECENTLY_CREATED)
        windows = [
            window_factory(window_id=1, last_focus_order=0, creation_order=9),
            window_factory(window_id=2, last_focus_order=3, creation_order=5),
            window_factory(window_id=3, last_focus_order=2, creation_order=5),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_minimized_at_the_end(self, window_factory):
        prefs = ShowSelectionPreferences(show_minimized_windows=ShowHow.SHOW_AT_THE_END)
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, is_minimized=True),
            window_factory(window_id=3, last_focus_order=5),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_hidden_at_the_end(self, window_factory):
        prefs = ShowSelectionPreferences(show_hidden_windows=ShowHow.SHOW_AT_THE_END)
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=2, last_focus_order=1, is_hidden=True),
            window_factory(window_id=3, last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_windowless_at_the_end_by_default(self, window_factory, prefs):
        windows = [
            window_factory(window_id=1, last_focus_order=0),
            window_factory(window_id=None, last_focus_order=1, is_windowless_app=True),
            window_factory(window_id=3, last_focus_order=2),
        ]
        assert select_window_index(windows, prefs, None, []) == 2

    def test_collation_key(self):
        assert collation_key("Élan") == collation_key("elan")
        assert collation_key("ABC") == "abc"
