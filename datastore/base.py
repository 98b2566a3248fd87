"""Backend-neutral contract for the time-ordered reading store."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

Document = Dict[str, Any]


class ReadingStoreError(RuntimeError):
    """Raised when the reading store cannot be reached or a query fails."""


class ReadingStore(Protocol):
    """Read-only queries over per-device readings ordered by ``WindowEndTime``.

    Backends return raw stored documents; validation happens in the service
    layer. Every method raises :class:`ReadingStoreError` on failure.
    """

    backend: str

    def latest(self, device_id: str) -> Optional[Document]:
        ...

    def recent(self, device_id: str, limit: int) -> List[Document]:
        """Return up to ``limit`` documents for the device, newest first."""
        ...

    def latest_status(self, device_id: str) -> Optional[Document]:
        """Return ``DeviceId``, ``SafetyStatus`` and ``WindowEndTime`` of the newest document."""
        ...

    def all(self) -> List[Document]:
        ...
