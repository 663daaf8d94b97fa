"""
NutriPlan AI — Local Store
==========================
- Single JSON file of string values under string keys
- Size quota counted in characters, like a browser's localStorage
- Rejected writes leave the file untouched
"""

import json
import os
import tempfile
from typing import Dict, Optional

from dotenv import load_dotenv

# =============================================================================
# CONFIGURATION
# =============================================================================
load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.getenv("NUTRIPLAN_DATA_DIR", os.path.join(BASE_DIR, "data"))
STORE_FILE = os.path.join(DATA_DIR, "local_storage.json")
DEFAULT_QUOTA_CHARS = int(os.getenv("NUTRIPLAN_STORAGE_QUOTA", "5000000"))


class StorageQuotaError(Exception):
    """Raised when a write would push the store past its quota."""


class LocalStore:
    """Reads and writes string values to a JSON file."""

    def __init__(self, filepath: str = STORE_FILE, quota_chars: int = DEFAULT_QUOTA_CHARS):
        self.filepath = filepath
        self.quota_chars = quota_chars
        self._cache = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.filepath):
            return {}
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"⚠️ Local store unreadable, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            print("⚠️ Local store has unexpected shape, starting empty")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    @staticmethod
    def _measure(data: Dict[str, str]) -> int:
        return sum(len(k) + len(v) for k, v in data.items())

    def size(self) -> int:
        """Characters currently stored (keys + values)."""
        return self._measure(self._cache)

    def get_item(self, key: str) -> Optional[str]:
        return self._cache.get(key)

    def set_item(self, key: str, value: str) -> None:
        candidate = dict(self._cache)
        candidate[key] = value
        needed = self._measure(candidate)
        if needed > self.quota_chars:
            raise StorageQuotaError(
                f"Storage quota exceeded: {needed} > {self.quota_chars} characters"
            )
        self._write(candidate)
        self._cache = candidate

    def remove_item(self, key: str) -> None:
        if key not in self._cache:
            return
        candidate = dict(self._cache)
        del candidate[key]
        self._write(candidate)
        self._cache = candidate

    def _write(self, data: Dict[str, str]) -> None:
        """Write to a temp file in the same dir, then swap it in."""
        directory = os.path.dirname(self.filepath) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.filepath)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        print(f"💾 Local store saved: {self.filepath}")
