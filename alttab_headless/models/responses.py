"""Wire response models for the IPC channel.

A response is either a bare ServerCode string or a {"windows": [...]}
object. Field names are camelCase on the wire; absent optionals are omitted.
"""

import json
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .command import ServerCode
from .window import WindowSnapshot


class JsonWindow(BaseModel):
    """Entry of the --list response."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    title: str

    @classmethod
    def from_snapshot(cls, window: WindowSnapshot) -> "JsonWindow":
        return cls(id=window.window_id, title=window.title)


class JsonWindowFull(BaseModel):
    """Entry of the --detailed-list response."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    title: str
    app_name: Optional[str] = Field(None, alias="appName")
    app_bundle_id: Optional[str] = Field(None, alias="appBundleId")
    space_indexes: List[int] = Field(default_factory=list, alias="spaceIndexes")
    last_focus_order: int = Field(..., alias="lastFocusOrder")
    creation_order: int = Field(..., alias="creationOrder")
    is_tabbed: bool = Field(..., alias="isTabbed")
    is_hidden: bool = Field(..., alias="isHidden")
    is_fullscreen: bool = Field(..., alias="isFullscreen")
    is_minimized: bool = Field(..., alias="isMinimized")
    is_on_all_spaces: bool = Field(..., alias="isOnAllSpaces")
    position: Optional[Tuple[float, float]] = None
    size: Optional[Tuple[float, float]] = None

    @classmethod
    def from_snapshot(cls, window: WindowSnapshot) -> "JsonWindowFull":
        return cls(
            id=window.window_id,
            title=window.title,
            app_name=window.app_name,
            app_bundle_id=window.app_bundle_id,
            space_indexes=list(window.space_indexes),
            last_focus_order=window.last_focus_order,
            creation_order=window.creation_order,
            is_tabbed=window.is_tabbed,
            is_hidden=window.is_hidden,
            is_fullscreen=window.is_fullscreen,
            is_minimized=window.is_minimized,
            is_on_all_spaces=window.is_on_all_spaces,
            position=window.position,
            size=window.size,
        )


class JsonWindowList(BaseModel):
    windows: List[JsonWindow]


class JsonWindowFullList(BaseModel):
    windows: List[JsonWindowFull]


Response = Union[ServerCode, JsonWindowList, JsonWindowFullList]


def encode_response(response: Response) -> bytes:
    """Serialize a response to compact UTF-8 JSON.

    Args:
        response: ServerCode or window list model

    Returns:
        JSON bytes (no trailing newline)
    """
    if isinstance(response, ServerCode):
        payload = response.value
    else:
        payload = response.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
