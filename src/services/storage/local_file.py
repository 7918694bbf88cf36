"""
Local File Storage

One JSON file per key inside a data directory. Writes go to a temporary
file in the same directory which then replaces the target with
os.replace, so the file on disk is always either the old value or the
new one.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from src.services.storage.interface import (
    CorruptedStorageError,
    KeyValueStorageInterface,
    StorageError,
)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalFileStorage(KeyValueStorageInterface):
    """Key-value storage backed by files in a directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key) or key in (".", ".."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            # The file exists but its content is not text we wrote
            raise CorruptedStorageError(f"{path} is not valid UTF-8: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def remove(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}")
