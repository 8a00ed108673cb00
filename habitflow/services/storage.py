#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitFlow - Storage backends
String-keyed blob storage for the session snapshots

Version: 1.0.0
"""

import json
import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from habitflow.config import config

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Base storage error"""
    pass


class StorageCorruptionError(StorageError):
    """Stored blob cannot be decoded"""
    pass

# ===== BACKENDS =====

class KeyValueStorage(ABC):
    """Opaque string blobs under string keys"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored text for key, or None when absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the whole blob under key"""

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptionError(f"Blob '{key}' is not valid JSON: {e}")

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value, ensure_ascii=False, indent=2))


class MemoryStorage(KeyValueStorage):
    """In-process storage, used in tests and as a scratch backend"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.write_count += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """One <key>.json file per blob in the data directory"""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else config.storage.data_dir
        self.suffix = config.storage.file_suffix

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}{self.suffix}"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def set(self, key: str, value: str) -> None:
        """Atomic save through a temporary file"""
        path = self._path(key)
        temp_file = path.with_suffix('.tmp')

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())

            shutil.move(str(temp_file), str(path))
            logger.debug(f"Saved blob '{key}' ({len(value)} chars)")
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise StorageError(f"Failed to write {path}: {e}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


__all__ = [
    'StorageError',
    'StorageCorruptionError',
    'KeyValueStorage',
    'MemoryStorage',
    'JsonFileStorage'
]
