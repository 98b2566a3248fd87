"""Azure Cosmos DB backed reading store."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from azure.core.exceptions import AzureError
from azure.cosmos import ContainerProxy, CosmosClient

from datastore.base import Document, ReadingStoreError

logger = logging.getLogger(__name__)

_LATEST_QUERY = (
    "SELECT * FROM c WHERE c.DeviceId = @deviceId "
    "ORDER BY c.WindowEndTime DESC OFFSET 0 LIMIT 1"
)
_RECENT_QUERY = (
    "SELECT * FROM c WHERE c.DeviceId = @deviceId "
    "ORDER BY c.WindowEndTime DESC OFFSET 0 LIMIT @limit"
)
_STATUS_QUERY = (
    "SELECT c.DeviceId, c.SafetyStatus, c.WindowEndTime FROM c "
    "WHERE c.DeviceId = @deviceId ORDER BY c.WindowEndTime DESC OFFSET 0 LIMIT 1"
)
_ALL_QUERY = "SELECT * FROM c ORDER BY c.WindowEndTime DESC"


class CosmosReadingStore:
    """Issues parameterised SQL queries against one Cosmos container.

    The client is created on first use so that a missing endpoint or key only
    fails the queries, leaving ``/health`` and the dashboard page available.
    """

    backend = "cosmos"

    def __init__(
        self,
        endpoint: Optional[str],
        key: Optional[str],
        database: Optional[str],
        container: Optional[str],
        client_factory: Callable[..., CosmosClient] = CosmosClient,
    ) -> None:
        self.endpoint = endpoint
        self.database_name = database
        self.container_name = container
        self._key = key
        self._client_factory = client_factory
        self._container: Optional[ContainerProxy] = None
        self._lock = Lock()

    def latest(self, device_id: str) -> Optional[Document]:
        documents = self._query(_LATEST_QUERY, {"@deviceId": device_id})
        return documents[0] if documents else None

    def recent(self, device_id: str, limit: int) -> List[Document]:
        return self._query(_RECENT_QUERY, {"@deviceId": device_id, "@limit": limit})

    def latest_status(self, device_id: str) -> Optional[Document]:
        documents = self._query(_STATUS_QUERY, {"@deviceId": device_id})
        return documents[0] if documents else None

    def all(self) -> List[Document]:
        documents = self._query(_ALL_QUERY)
        logger.info("Fetched all readings", extra={"reading_count": len(documents)})
        return documents

    def _get_container(self) -> ContainerProxy:
        with self._lock:
            if self._container is not None:
                return self._container

            if not self.endpoint or not self._key:
                raise ReadingStoreError("Cosmos DB endpoint or key is not configured.")
            if not self.database_name or not self.container_name:
                raise ReadingStoreError("Cosmos DB database or container is not configured.")

            try:
                client = self._client_factory(self.endpoint, credential=self._key)
                database = client.get_database_client(self.database_name)
                self._container = database.get_container_client(self.container_name)
            except (AzureError, ValueError) as exc:
                raise ReadingStoreError(f"Could not connect to Cosmos DB: {exc}") from exc

            logger.info(
                "Connected to Cosmos DB container %s/%s",
                self.database_name,
                self.container_name,
                extra={"backend": self.backend},
            )
            return self._container

    def _query(
        self, query: str, parameters: Optional[Dict[str, Any]] = None
    ) -> List[Document]:
        container = self._get_container()
        query_parameters = [
            {"name": name, "value": value} for name, value in (parameters or {}).items()
        ]
        try:
            return list(
                container.query_items(
                    query=query,
                    parameters=query_parameters,
                    enable_cross_partition_query=True,
                )
            )
        except AzureError as exc:
            raise ReadingStoreError(f"Cosmos DB query failed: {exc}") from exc
