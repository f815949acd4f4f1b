"""Small JSON file store used for GUI window state.

Writes go through a temp file + os.replace so a crash never leaves a
half-written file behind. Conversations are NOT persisted here.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict
from uuid import uuid4

from chatdesk_core.domain.exceptions import BusinessError
from chatdesk_core.infrastructure.logging.logger import logger


class JsonStateFile:
    def __init__(self, path: str | Path):
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, Any]:
        """读取 JSON 对象；文件缺失、损坏或不是对象时返回空字典。"""

        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self._path}: not a JSON object")
            return {}
        return data

    def save(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.stem}.{uuid4().hex}.json.tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e))
