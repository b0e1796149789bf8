"""Preference models for the --show selection engine.

The preferences document mirrors the switcher's settings: a few global
options plus per-shortcut arrays, one entry per shortcut index (0-3).
ShowSelectionPreferences is the flattened bundle for one shortcut.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AppsToShow(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    NON_ACTIVE = "nonActive"


class SpacesToShow(str, Enum):
    ALL = "all"
    VISIBLE = "visible"


class ScreensToShow(str, Enum):
    ALL = "all"
    SHOWING_ALT_TAB = "showingAltTab"


class ShowHow(str, Enum):
    """Per-category visibility policy."""

    HIDE = "hide"
    SHOW = "show"
    SHOW_AT_THE_END = "showAtTheEnd"


class WindowOrder(str, Enum):
    RECENTLY_FOCUSED = "recentlyFocused"
    RECENTLY_CREATED = "recentlyCreated"
    ALPHABETICAL = "alphabetical"
    SPACE = "space"


class BlacklistHide(str, Enum):
    ALWAYS = "always"
    WHEN_NO_OPEN_WINDOW = "whenNoOpenWindow"
    NONE = "none"


class BlacklistEntry(BaseModel):
    """Bundle-id prefix paired with a hide policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    bundle_identifier: str = Field(..., alias="bundleIdentifier")
    hide: BlacklistHide = BlacklistHide.ALWAYS


class ShowSelectionPreferences(BaseModel):
    """Everything the selection engine needs for one shortcut."""

    model_config = ConfigDict(frozen=True)

    apps_to_show: AppsToShow = AppsToShow.ALL
    spaces_to_show: SpacesToShow = SpacesToShow.ALL
    screens_to_show: ScreensToShow = ScreensToShow.ALL
    show_minimized_windows: ShowHow = ShowHow.SHOW
    show_hidden_windows: ShowHow = ShowHow.SHOW
    show_fullscreen_windows: ShowHow = ShowHow.SHOW
    show_windowless_apps: ShowHow = ShowHow.SHOW_AT_THE_END
    window_order: WindowOrder = WindowOrder.RECENTLY_FOCUSED
    show_tabs_as_windows: bool = False
    only_show_applications: bool = False
    blacklist: Tuple[BlacklistEntry, ...] = ()


SHORTCUT_COUNT = 4


def _per_shortcut(value) -> list:
    return [value] * SHORTCUT_COUNT


class Preferences(BaseModel):
    """Preferences document as stored in preferences.json.

    Example:
        {
            "showTabsAsWindows": false,
            "onlyShowApplications": false,
            "blacklist": [{"bundleIdentifier": "com.apple.finder", "hide": "whenNoOpenWindow"}],
            "appsToShow": ["all", "active", "nonActive", "all"],
            "windowOrder": ["recentlyFocused", "space", "recentlyFocused", "alphabetical"]
        }
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    show_tabs_as_windows: bool = Field(False, alias="showTabsAsWindows")
    only_show_applications: bool = Field(False, alias="onlyShowApplications")
    blacklist: List[BlacklistEntry] = Field(default_factory=list)
    apps_to_show: List[AppsToShow] = Field(
        default_factory=lambda: [AppsToShow.ALL, AppsToShow.ACTIVE, AppsToShow.NON_ACTIVE, AppsToShow.ALL],
        alias="appsToShow",
    )
    spaces_to_show: List[SpacesToShow] = Field(
        default_factory=lambda: _per_shortcut(SpacesToShow.ALL), alias="spacesToShow"
    )
    screens_to_show: List[ScreensToShow] = Field(
        default_factory=lambda: _per_shortcut(ScreensToShow.ALL), alias="screensToShow"
    )
    show_minimized_windows: List[ShowHow] = Field(
        default_factory=lambda: _per_shortcut(ShowHow.SHOW), alias="showMinimizedWindows"
    )
    show_hidden_windows: List[ShowHow] = Field(
        default_factory=lambda: _per_shortcut(ShowHow.SHOW), alias="showHiddenWindows"
    )
    show_fullscreen_windows: List[ShowHow] = Field(
        default_factory=lambda: _per_shortcut(ShowHow.SHOW), alias="showFullscreenWindows"
    )
    show_windowless_apps: List[ShowHow] = Field(
        default_factory=lambda: _per_shortcut(ShowHow.SHOW_AT_THE_END), alias="showWindowlessApps"
    )
    window_order: List[WindowOrder] = Field(
        default_factory=lambda: _per_shortcut(WindowOrder.RECENTLY_FOCUSED), alias="windowOrder"
    )

    def show_selection_preferences(self, shortcut_index: int) -> Optional[ShowSelectionPreferences]:
        """Flatten the document for one shortcut.

        Args:
            shortcut_index: Shortcut index (0-3)

        Returns:
            ShowSelectionPreferences, or None if any per-shortcut list has no
            entry for this index
        """
        per_shortcut = (
            self.apps_to_show,
            self.spaces_to_show,
            self.screens_to_show,
            self.show_minimized_windows,
            self.show_hidden_windows,
            self.show_fullscreen_windows,
            self.show_windowless_apps,
            self.window_order,
        )
        if shortcut_index < 0 or any(shortcut_index >= len(values) for values in per_shortcut):
            return None

        return ShowSelectionPreferences(
            apps_to_show=self.apps_to_show[shortcut_index],
            spaces_to_show=self.spaces_to_show[shortcut_index],
            screens_to_show=self.screens_to_show[shortcut_index],
            show_minimized_windows=self.show_minimized_windows[shortcut_index],
            show_hidden_windows=self.show_hidden_windows[shortcut_index],
            show_fullscreen_windows=self.show_fullscreen_windows[shortcut_index],
            show_windowless_apps=self.show_windowless_apps[shortcut_index],
            window_order=self.window_order[shortcut_index],
            show_tabs_as_windows=self.show_tabs_as_windows,
            only_show_applications=self.only_show_applications,
            blacklist=tuple(self.blacklist),
        )
