"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document on disk maps every key to its
text value. This is the desktop equivalent of browser local storage:
1. No database setup required
2. The user can open and inspect the file
3. Foreign keys written by other tools can live in the same document

Writes replace the whole document atomically (temp file + os.replace),
so a crash mid-write leaves the previous document intact. Transient
OS errors are retried; after that the failure is raised to the caller.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.services.storage.interface import (
    KeyValueStoreInterface,
    StateDecodeError,
    StorageError,
    StorageWriteError,
)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed key-value store.

    The file is created on first write. A missing file reads as an
    empty store.
    """

    def __init__(
        self,
        path: Union[str, Path],
        retry_attempts: int = 3,
    ):
        self._path = Path(path)
        self._retry_attempts = retry_attempts
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        """Read the whole document. Missing file means empty store."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StateDecodeError(str(self._path), raw, f"document is not JSON ({e})")
        if not isinstance(document, dict) or not all(
            isinstance(v, str) for v in document.values()
        ):
            raise StateDecodeError(
                str(self._path), raw, "document is not an object of text values"
            )
        return document

    def _load_for_update(self) -> dict[str, str]:
        try:
            return self._load()
        except StateDecodeError as e:
            # The store already chose to carry on past a corrupt document
            self._logger.warning(
                "storage_document_overwritten",
                path=str(self._path),
                reason=e.reason,
            )
            return {}

    def _save(self, document: dict[str, str]) -> None:
        """Atomically replace the document, retrying transient OS errors."""
        retrying = Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=False,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write_atomically(document)
        except RetryError as e:
            cause = e.last_attempt.exception()
            self._logger.error(
                "storage_write_failed",
                path=str(self._path),
                attempts=self._retry_attempts,
                error=str(cause),
            )
            raise StorageWriteError(f"Failed to write {self._path}: {cause}") from cause

    def _write_atomically(self, document: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    def read(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        document = self._load_for_update()
        document[key] = value
        self._save(document)

    def delete(self, key: str) -> None:
        document = self._load_for_update()
        if key in document:
            del document[key]
            self._save(document)

    def clear_all(self) -> None:
        self._save({})

    def keys(self) -> list[str]:
        return list(self._load())
