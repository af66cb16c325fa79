"""
Opaque key-value store backed by a single JSON file.

Keys and values are strings; callers serialize structured values themselves.
"""

from __future__ import annotations

import json
import os

from sentence_translator.errors import StorageError
from sentence_translator.utils.logger import log_progress


class JsonFileStore:
    def __init__(self, path: str = "data/store.json"):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError) as exc:
            log_progress("STORAGE", f"cannot read {self.path}, treating as empty ({exc})", status="WARN")
            return {}
        if not isinstance(data, dict):
            log_progress("STORAGE", f"{self.path} is not a key-value object, treating as empty", status="WARN")
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as file:
                json.dump(data, file, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"cannot write {self.path}: {exc}") from exc

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._read_all().get(key, default)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
