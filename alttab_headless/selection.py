"""Window selection engine for --show=<shortcut_index>.

Picks the single window the switcher would activate for a shortcut:

1. Eligibility filter (blacklist, apps/spaces/screens, per-category policies)
2. Optional collapse to one window per application
3. Total ordering (show-at-the-end groups, ordering mode, focus tiebreak)
4. First window that is not already focused, else the first window

Pure: inputs are frozen snapshots and preferences, nothing is mutated.
The returned index refers to the caller's original sequence.
"""

import logging
import sys
import unicodedata
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .models.preferences import (
    AppsToShow,
    BlacklistEntry,
    BlacklistHide,
    ScreensToShow,
    ShowHow,
    ShowSelectionPreferences,
    SpacesToShow,
    WindowOrder,
)
from .models.window import WindowSnapshot

logger = logging.getLogger(__name__)

Candidate = Tuple[int, WindowSnapshot]


def select_window_index(
    windows: Sequence[WindowSnapshot],
    preferences: ShowSelectionPreferences,
    frontmost_pid: Optional[int],
    visible_spaces: Iterable[int],
) -> Optional[int]:
    """Select the window to activate.

    Args:
        windows: All window snapshots, in window-list order
        preferences: Preference bundle for the shortcut
        frontmost_pid: Pid of the frontmost application, if any
        visible_spaces: Identifiers of the currently visible spaces

    Returns:
        Index into `windows` of the selected window, or None if nothing qualifies
    """
    visible_space_set = set(visible_spaces)
    candidates: List[Candidate] = [
        (index, window)
        for index, window in enumerate(windows)
        if is_eligible(window, preferences, frontmost_pid, visible_space_set)
    ]

    if preferences.only_show_applications:
        candidates = collapse_to_applications(candidates)

    if not candidates:
        logger.debug(f"No eligible window among {len(windows)} candidates")
        return None

    ordered = sort_candidates(candidates, preferences)
    for index, window in ordered:
        if window.last_focus_order > 0:
            return index
    return ordered[0][0]


def is_eligible(
    window: WindowSnapshot,
    preferences: ShowSelectionPreferences,
    frontmost_pid: Optional[int],
    visible_spaces: Set[int],
) -> bool:
    """Apply the eligibility filter to a single window."""
    if _hidden_by_blacklist(window, preferences.blacklist):
        return False
    if preferences.apps_to_show == AppsToShow.ACTIVE and window.app_pid != frontmost_pid:
        return False
    if preferences.apps_to_show == AppsToShow.NON_ACTIVE and window.app_pid == frontmost_pid:
        return False
    if preferences.show_hidden_windows == ShowHow.HIDE and window.is_hidden:
        return False

    if window.is_windowless_app:
        return preferences.show_windowless_apps != ShowHow.HIDE

    if preferences.show_fullscreen_windows == ShowHow.HIDE and window.is_fullscreen:
        return False
    if preferences.show_minimized_windows == ShowHow.HIDE and window.is_minimized:
        return False
    if preferences.spaces_to_show == SpacesToShow.VISIBLE and visible_spaces.isdisjoint(window.space_ids):
        return False
    if preferences.screens_to_show == ScreensToShow.SHOWING_ALT_TAB and not window.is_on_preferred_screen:
        return False
    if not preferences.show_tabs_as_windows and window.is_tabbed:
        return False
    return True


def collapse_to_applications(candidates: Sequence[Candidate]) -> List[Candidate]:
    """Keep one window per application pid.

    The representative is the most recently focused window; ties go to the
    most recently created one. Output keeps first-seen application order.
    """
    best: Dict[int, Candidate] = {}
    for candidate in candidates:
        _, window = candidate
        current = best.get(window.app_pid)
        if current is None or _is_better_representative(window, current[1]):
            best[window.app_pid] = candidate
    return list(best.values())


def sort_candidates(candidates: Sequence[Candidate], preferences: ShowSelectionPreferences) -> List[Candidate]:
    """Order candidates by the comparison chain. Stable for full ties."""

    def compare(left: Candidate, right: Candidate) -> int:
        return compare_windows(left[1], right[1], preferences)

    return sorted(candidates, key=cmp_to_key(compare))


def compare_windows(left: WindowSnapshot, right: WindowSnapshot, preferences: ShowSelectionPreferences) -> int:
    """Three-way comparison; the first discriminating rule decides.

    Returns:
        Negative if `left` sorts first, positive if `right` does, 0 on a full tie
    """
    at_the_end_rules = (
        (preferences.show_windowless_apps, left.is_windowless_app, right.is_windowless_app),
        (preferences.show_hidden_windows, left.is_hidden, right.is_hidden),
        (preferences.show_minimized_windows, left.is_minimized, right.is_minimized),
    )
    for policy, left_flag, right_flag in at_the_end_rules:
        if policy == ShowHow.SHOW_AT_THE_END and left_flag != right_flag:
            return 1 if left_flag else -1

    result = _compare_by_order(left, right, preferences.window_order)
    if result != 0:
        return result

    return _cmp(left.last_focus_order, right.last_focus_order)


def _compare_by_order(left: WindowSnapshot, right: WindowSnapshot, order: WindowOrder) -> int:
    match order:
        case WindowOrder.RECENTLY_FOCUSED:
            return _cmp(left.last_focus_order, right.last_focus_order)
        case WindowOrder.RECENTLY_CREATED:
            return _cmp(right.creation_order, left.creation_order)
        case WindowOrder.ALPHABETICAL:
            return _compare_alphabetically(left, right)
        case WindowOrder.SPACE:
            return _compare_by_space(left, right)
    return 0


def _compare_by_space(left: WindowSnapshot, right: WindowSnapshot) -> int:
    if left.is_on_all_spaces and right.is_on_all_spaces:
        return 0
    if left.is_on_all_spaces:
        return -1
    if right.is_on_all_spaces:
        return 1

    result = _cmp(_first_space_index(left), _first_space_index(right))
    if result != 0:
        return result
    return _compare_alphabetically(left, right)


def _compare_alphabetically(left: WindowSnapshot, right: WindowSnapshot) -> int:
    result = _cmp(collation_key(left.app_name or ""), collation_key(right.app_name or ""))
    if result != 0:
        return result
    return _cmp(collation_key(left.title), collation_key(right.title))


def collation_key(text: str) -> str:
    """Case- and diacritic-insensitive comparison key ("Élan" == "elan")."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _first_space_index(window: WindowSnapshot) -> int:
    # Windows without a space sort after every indexed space
    return window.space_indexes[0] if window.space_indexes else sys.maxsize


def _is_better_representative(window: WindowSnapshot, current: WindowSnapshot) -> bool:
    if window.last_focus_order != current.last_focus_order:
        return window.last_focus_order < current.last_focus_order
    return window.creation_order > current.creation_order


def _hidden_by_blacklist(window: WindowSnapshot, blacklist: Iterable[BlacklistEntry]) -> bool:
    bundle_id = window.app_bundle_id
    if bundle_id is None:
        return False
    for entry in blacklist:
        if not bundle_id.startswith(entry.bundle_identifier):
            continue
        if entry.hide == BlacklistHide.ALWAYS:
            return True
        if entry.hide != BlacklistHide.NONE and window.is_windowless_app:
            return True
    return False


def _cmp(left, right) -> int:
    return (left > right) - (left < right)
