from __future__ import annotations

import copy
import json
import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from datastore.base import Document, ReadingStoreError
from models.records import parse_window_end_time

logger = logging.getLogger(__name__)

_STATUS_FIELDS = ("DeviceId", "SafetyStatus", "WindowEndTime")


def _window_end(document: Document) -> datetime:
    try:
        return parse_window_end_time(document["WindowEndTime"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ReadingStoreError(
            f"Stored reading has an unusable WindowEndTime: {document!r}"
        ) from exc


class InMemoryReadingStore:
    """Process-local reading store, optionally seeded from a JSON fixture."""

    backend = "memory"

    def __init__(
        self,
        documents: Iterable[Document] = (),
        fixture_path: Optional[Path] = None,
    ) -> None:
        self._documents: List[Document] = [copy.deepcopy(doc) for doc in documents]
        self.fixture_path = fixture_path
        self._lock = Lock()
        if fixture_path:
            self._load_from_disk()

    def add(self, document: Document) -> None:
        """Seed a reading; the HTTP surface never writes."""
        with self._lock:
            self._documents.append(copy.deepcopy(document))

    def latest(self, device_id: str) -> Optional[Document]:
        newest = self.recent(device_id, 1)
        return newest[0] if newest else None

    def recent(self, device_id: str, limit: int) -> List[Document]:
        return self._ordered(device_id)[:limit]

    def latest_status(self, device_id: str) -> Optional[Document]:
        document = self.latest(device_id)
        if document is None:
            return None
        return {key: document[key] for key in _STATUS_FIELDS if key in document}

    def all(self) -> List[Document]:
        """Return every stored document unvalidated, newest first by raw ``WindowEndTime``."""
        with self._lock:
            documents = [copy.deepcopy(doc) for doc in self._documents]
        return sorted(documents, key=lambda doc: str(doc.get("WindowEndTime", "")), reverse=True)

    def _ordered(self, device_id: str) -> List[Document]:
        with self._lock:
            matching = [
                copy.deepcopy(doc)
                for doc in self._documents
                if doc.get("DeviceId") == device_id
            ]
        return sorted(matching, key=_window_end, reverse=True)

    def _load_from_disk(self) -> None:
        if not self.fixture_path or not self.fixture_path.exists():
            logger.warning("Reading fixture %s not found; starting empty", self.fixture_path)
            return

        try:
            raw = self.fixture_path.read_text() or "[]"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.exception("Could not read reading fixture %s", self.fixture_path)
            data = []

        if not isinstance(data, list):
            logger.warning("Reading fixture %s is not a JSON list; ignoring", self.fixture_path)
            return

        self._documents.extend(doc for doc in data if isinstance(doc, dict))
