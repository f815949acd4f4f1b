"""Window geometry persistence for the desktop shell."""

import re
from dataclasses import dataclass
from pathlib import Path

from chatdesk_core.infrastructure.storage.json_store import JsonStateFile

WINDOW_STATE_FILE = "window_state.json"
DEFAULT_GEOMETRY = "960x640"

# tk 的 geometry 字符串：WxH 或 WxH+X+Y（坐标可为负）
_GEOMETRY_RE = re.compile(r"^\d+x\d+(?:[+-]-?\d+[+-]-?\d+)?$")


@dataclass
class WindowState:
    geometry: str = DEFAULT_GEOMETRY


def is_valid_geometry(value: object) -> bool:
    return isinstance(value, str) and bool(_GEOMETRY_RE.match(value))


class WindowStateStore:
    def __init__(self, storage_root: str | Path):
        self._file = JsonStateFile(Path(storage_root) / WINDOW_STATE_FILE)

    def load(self) -> WindowState:
        data = self._file.load()
        geometry = data.get("geometry")
        if not is_valid_geometry(geometry):
            return WindowState()
        return WindowState(geometry=geometry)

    def save(self, state: WindowState) -> None:
        if not is_valid_geometry(state.geometry):
            return
        self._file.save({"geometry": state.geometry})
