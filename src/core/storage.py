#!/usr/bin/env python3
"""
File: storage.py
Description:
    Key-value persistence backends. A storage only knows how to read and
    write serialized values under a key, the meaning of these values is
    left to its users.

    - `MemoryStorage` keeps the values in a dictionary, for tests and
        volatile sessions.
    - `JsonFileStorage` saves each key in its own `<key>.json` file
        under a directory. A value is written to a temporary file first
        and then moved over the previous one, so a crash never leaves a
        half-written file behind.

DTR Tracker - A personal daily time record application
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

# Internal libraries
from core.time_record import StorageError

logger = logging.getLogger(__name__)

# Keys are used as file names
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage(ABC):
    """
    Base interface of a key-value storage.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under the key.

        Returns:
            Optional[str]: The value or `None` if nothing is stored.

        Raises:
            StorageError: The storage failed to read.
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store the value under the key, replacing any previous one. The
        value is durably stored when the method returns.

        Raises:
            StorageError: The storage failed to write. The previous value
                is still in place.
        """
        pass


class MemoryStorage(KeyValueStorage):
    """
    Volatile storage, values live as long as the object.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileStorage(KeyValueStorage):
    """
    Stores each key in a `<key>.json` file under a directory.
    """

    def __init__(self, directory: str | Path):
        """
        Args:
            directory (str | Path): Folder of the files, created on first
                write if missing.
        """
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key '{key}'.")
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No stored value for '{key}' under '{path}'.")
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Unable to read '{path}'.") from e

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._directory,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as file:
                tmp_name = file.name
                file.write(value)
                file.flush()
                os.fsync(file.fileno())

            os.replace(tmp_name, path)
            tmp_name = None

        except OSError as e:
            raise StorageError(f"Unable to write '{path}'.") from e
        finally:
            # Remove the temporary file if it could not be moved
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug(f"Saved '{key}' under '{path}'.")
