"""File-based JSON storage for the resource library"""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _default_base_dir() -> Path:
    env_dir = os.environ.get("SCRIBE_DATA_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".local" / "share" / "scribe"


class Storage:
    BASE_DIR = _default_base_dir()

    @classmethod
    def _key_to_path(cls, key: list[str]) -> Path:
        return cls.BASE_DIR / f"{'/'.join(key)}.json"

    @classmethod
    def write(cls, key: list[str], data: Any):
        """Write data to storage"""
        path = cls._key_to_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    @classmethod
    def read(cls, key: list[str]) -> Any | None:
        """Read data from storage"""
        path = cls._key_to_path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError:
            logger.warning(f"Corrupt storage file ignored: {path}")
            return None
