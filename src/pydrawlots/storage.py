"""Whole-document JSON persistence with atomic replacement."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .exceptions import MalformedLocalDataError, StorageError

_LOGGER = logging.getLogger(__name__)


class JsonDocument:
    """A single JSON document on disk, always read and written whole."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read(self) -> Any:
        """Return the parsed document.

        Raises ``MalformedLocalDataError`` when the file is missing, unreadable
        or not valid JSON.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise MalformedLocalDataError(
                f"{self._path.name} does not exist.",
                error_code="local_data_missing",
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise MalformedLocalDataError(f"{self._path.name} could not be read.") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedLocalDataError(f"{self._path.name} is not valid JSON.") from exc

    def write(self, data: Any) -> None:
        """Replace the document atomically; readers see the old or the new file."""
        try:
            payload = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"{self._path.name} could not be serialized.") from exc
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"{self._path.name} could not be written.") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    _LOGGER.debug("Could not remove temporary file %s", tmp_name)
        _LOGGER.debug("Wrote %s", self._path)

    async def aread(self) -> Any:
        return await asyncio.to_thread(self.read)

    async def awrite(self, data: Any) -> None:
        await asyncio.to_thread(self.write, data)
