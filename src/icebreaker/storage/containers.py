"""Document containers partitioned by document ID.

Each container is used as a key-value store: point reads, upserts and deletes
keyed by the document ``id`` (which is also the partition key), plus a
sequential, page-by-page scan of the whole container with an optional field
projection. No cross-partition transactions are used.
"""

import copy
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any, Final, Protocol

from azure.core.exceptions import AzureError
from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from icebreaker.constants import SELECT_ALL_QUERY
from icebreaker.storage.exceptions import RecordNotFoundError, StoreError

logger: Final = logging.getLogger(__name__)

Document = dict[str, Any]


def build_query(fields: Sequence[str] | None = None) -> str:
    """Build the scan query for a container.

    Args:
        fields: Document fields to project. None selects whole documents.

    Returns:
        SQL query text.

    Example:
        >>> build_query(("id", "optedIn"))
        'SELECT c.id, c.optedIn FROM c'
    """
    if not fields:
        return SELECT_ALL_QUERY
    return "SELECT " + ", ".join(f"c.{field}" for field in fields) + " FROM c"


class DocumentContainer(Protocol):
    """Protocol for containers partitioned by document ID."""

    @property
    def name(self) -> str:
        """Container name."""
        ...

    async def read_item(self, item_id: str) -> Document:
        """Read a document by ID.

        Raises:
            RecordNotFoundError: If no document has this ID.
            StoreError: For other store failures.
        """
        ...

    async def upsert_item(self, document: Document) -> Document:
        """Insert or fully replace the document keyed by ``document["id"]``."""
        ...

    async def delete_item(self, item_id: str) -> None:
        """Delete a document by ID.

        Raises:
            RecordNotFoundError: If no document has this ID.
            StoreError: For other store failures.
        """
        ...

    def query_pages(
        self,
        fields: Sequence[str] | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[list[Document]]:
        """Scan the whole container one page at a time.

        Args:
            fields: Fields to project. None returns whole documents.
            page_size: Maximum documents per page. None uses the store default.

        Yields:
            Lists of documents, in store order.
        """
        ...


class CosmosDocumentContainer:
    """Document container backed by an Azure Cosmos DB container.

    This class wraps an ``azure.cosmos.aio`` container proxy, passing the
    document ID as partition key and converting SDK errors into the store
    exception hierarchy.

    Example:
        >>> container = CosmosDocumentContainer(container_proxy)
        >>> await container.upsert_item({"id": "19:abc", "tenantId": "t"})
    """

    def __init__(self, container: ContainerProxy) -> None:
        """Initialize the container wrapper.

        Args:
            container: Cosmos DB container proxy.
        """
        self._container = container

    @property
    def name(self) -> str:
        return str(self._container.id)

    async def read_item(self, item_id: str) -> Document:
        try:
            result: Document = await self._container.read_item(
                item=item_id, partition_key=item_id
            )
            return result
        except Exception as e:
            raise self._convert_error(e, "read_item", item_id) from e

    async def upsert_item(self, document: Document) -> Document:
        try:
            result: Document = await self._container.upsert_item(body=document)
            return result
        except Exception as e:
            raise self._convert_error(e, "upsert_item", document.get("id")) from e

    async def delete_item(self, item_id: str) -> None:
        try:
            await self._container.delete_item(item=item_id, partition_key=item_id)
        except Exception as e:
            raise self._convert_error(e, "delete_item", item_id) from e

    async def query_pages(
        self,
        fields: Sequence[str] | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[list[Document]]:
        query = build_query(fields)
        logger.debug(f"Querying {self.name}: {query}")

        try:
            pager = self._container.query_items(query=query, max_item_count=page_size)
            async for page in pager.by_page():
                yield [item async for item in page]
        except Exception as e:
            raise self._convert_error(e, "query_items", None) from e

    def _convert_error(self, error: Exception, operation: str, item_id: str | None) -> StoreError:
        """Convert an SDK exception into a store exception.

        Args:
            error: Exception raised by the Cosmos DB SDK.
            operation: Store operation that failed.
            item_id: Document ID involved, if any.

        Returns:
            Matching StoreError subclass instance.
        """
        details = {"item_id": item_id} if item_id else {}

        if isinstance(error, CosmosResourceNotFoundError):
            return RecordNotFoundError(
                f"Document {item_id} not found",
                container=self.name,
                operation=operation,
                status_code=404,
                details=details,
            )

        if isinstance(error, CosmosHttpResponseError):
            logger.warning(
                f"{self.name}:{operation} failed with status {error.status_code}: {error.message}"
            )
            return StoreError(
                f"Store operation failed: {error.message}",
                container=self.name,
                operation=operation,
                status_code=error.status_code,
                details=details,
            )

        if isinstance(error, AzureError):
            logger.error(f"{self.name}:{operation} failed with AzureError: {error}")
            return StoreError(
                f"Store operation failed: {error}",
                container=self.name,
                operation=operation,
                details=details,
            )

        logger.error(f"{self.name}:{operation} failed with unexpected error: {error}")
        return StoreError(
            f"Unexpected store error: {error}",
            container=self.name,
            operation=operation,
            details=details,
        )


class InMemoryDocumentContainer:
    """In-memory document container for development and testing.

    Documents are deep-copied on the way in and out, so callers never share
    state with the store. Data is lost when the application restarts.

    Example:
        >>> container = InMemoryDocumentContainer("TeamsInfo")
        >>> await container.upsert_item({"id": "19:abc"})
        >>> await container.read_item("19:abc")
        {'id': '19:abc'}
    """

    def __init__(self, name: str, page_size: int = 100) -> None:
        """Initialize an empty container.

        Args:
            name: Container name.
            page_size: Default number of documents per query page.
        """
        self._name = name
        self._page_size = page_size
        self._documents: dict[str, Document] = {}

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._documents)

    async def read_item(self, item_id: str) -> Document:
        document = self._documents.get(item_id)
        if document is None:
            raise RecordNotFoundError(
                f"Document {item_id} not found",
                container=self._name,
                operation="read_item",
                status_code=404,
            )
        return copy.deepcopy(document)

    async def upsert_item(self, document: Document) -> Document:
        item_id = document.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise StoreError(
                "Document must have a non-empty string id",
                container=self._name,
                operation="upsert_item",
                status_code=400,
            )

        self._documents[item_id] = copy.deepcopy(document)
        logger.debug(f"Upserted document {item_id} in {self._name}")
        return copy.deepcopy(document)

    async def delete_item(self, item_id: str) -> None:
        if self._documents.pop(item_id, None) is None:
            raise RecordNotFoundError(
                f"Document {item_id} not found",
                container=self._name,
                operation="delete_item",
                status_code=404,
            )
        logger.debug(f"Deleted document {item_id} from {self._name}")

    async def query_pages(
        self,
        fields: Sequence[str] | None = None,
        page_size: int | None = None,
    ) -> AsyncIterator[list[Document]]:
        size = page_size or self._page_size
        documents = list(self._documents.values())

        for start in range(0, len(documents), size):
            page = documents[start : start + size]
            if fields:
                yield [{f: doc[f] for f in fields if f in doc} for doc in page]
            else:
                yield [copy.deepcopy(doc) for doc in page]
