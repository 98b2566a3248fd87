"""Reduction of per-device safety statuses to one canal-wide status."""

from __future__ import annotations

from typing import Iterable, Optional

from models.records import SafetyStatus


class StatusAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self, statuses: Iterable[Optional[SafetyStatus]]
    ) -> Optional[SafetyStatus]:
        """Return the overall status, or ``None`` when no device is reporting.

        ``Safe`` only when every device is ``Safe``; otherwise any ``Unsafe``
        wins and everything else collapses to ``Caution``. A missing status
        is neither safe nor unsafe.
        """
        collected = list(statuses)
        if not collected:
            return None
        if all(status == SafetyStatus.safe for status in collected):
            return SafetyStatus.safe
        if any(status == SafetyStatus.unsafe for status in collected):
            return SafetyStatus.unsafe
        return SafetyStatus.caution
