"""Tests for document containers."""

from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from azure.core.exceptions import ServiceRequestError
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from icebreaker.storage import (
    CosmosDocumentContainer,
    InMemoryDocumentContainer,
    RecordNotFoundError,
    StoreError,
)
from icebreaker.storage.containers import build_query


async def _aiter(items: list[Any]) -> AsyncIterator[Any]:
    for item in items:
        yield item


def _pager(pages: list[list[dict[str, Any]]]) -> Mock:
    pager = Mock()
    pager.by_page.return_value = _aiter([_aiter(page) for page in pages])
    return pager


async def _collect(container: Any, **kwargs: Any) -> list[list[dict[str, Any]]]:
    return [page async for page in container.query_pages(**kwargs)]


class TestBuildQuery:
    """Tests for scan query construction."""

    def test_select_all(self) -> None:
        assert build_query() == "SELECT * FROM c"

    def test_projection(self) -> None:
        assert build_query(("id", "optedIn")) == "SELECT c.id, c.optedIn FROM c"


class TestInMemoryDocumentContainer:
    """Test suite for InMemoryDocumentContainer."""

    @pytest.fixture
    def container(self) -> InMemoryDocumentContainer:
        return InMemoryDocumentContainer("UsersInfo", page_size=2)

    async def test_upsert_then_read(self, container: InMemoryDocumentContainer) -> None:
        """Test that a stored document can be read back."""
        await container.upsert_item({"id": "29:a", "optedIn": True})

        assert await container.read_item("29:a") == {"id": "29:a", "optedIn": True}

    async def test_upsert_replaces_whole_document(
        self, container: InMemoryDocumentContainer
    ) -> None:
        """Test that upsert is a full replace, not a merge."""
        await container.upsert_item({"id": "29:a", "optedIn": True, "recentPairups": []})
        await container.upsert_item({"id": "29:a", "optedIn": False})

        assert await container.read_item("29:a") == {"id": "29:a", "optedIn": False}
        assert len(container) == 1

    async def test_documents_are_copied(self, container: InMemoryDocumentContainer) -> None:
        """Test that callers cannot mutate stored documents."""
        document = {"id": "29:a", "optedIn": True}
        await container.upsert_item(document)
        document["optedIn"] = False

        read = await container.read_item("29:a")
        read["optedIn"] = False

        assert (await container.read_item("29:a"))["optedIn"] is True

    async def test_read_missing_raises_not_found(
        self, container: InMemoryDocumentContainer
    ) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            await container.read_item("29:missing")
        assert exc_info.value.status_code == 404

    async def test_delete_missing_raises_not_found(
        self, container: InMemoryDocumentContainer
    ) -> None:
        with pytest.raises(RecordNotFoundError):
            await container.delete_item("29:missing")

    async def test_delete(self, container: InMemoryDocumentContainer) -> None:
        await container.upsert_item({"id": "29:a"})
        await container.delete_item("29:a")

        assert len(container) == 0

    async def test_upsert_without_id_rejected(self, container: InMemoryDocumentContainer) -> None:
        with pytest.raises(StoreError) as exc_info:
            await container.upsert_item({"optedIn": True})
        assert exc_info.value.status_code == 400

    async def test_query_pages(self, container: InMemoryDocumentContainer) -> None:
        """Test that the scan is split into pages of the default size."""
        for i in range(5):
            await container.upsert_item({"id": f"29:{i}", "optedIn": True, "tenantId": "t"})

        pages = await _collect(container)

        assert [len(page) for page in pages] == [2, 2, 1]

    async def test_query_pages_projection_and_size(
        self, container: InMemoryDocumentContainer
    ) -> None:
        """Test field projection and explicit page size."""
        for i in range(3):
            await container.upsert_item({"id": f"29:{i}", "optedIn": i % 2 == 0, "tenantId": "t"})

        pages = await _collect(container, fields=("id", "optedIn"), page_size=10)

        assert len(pages) == 1
        assert pages[0][0] == {"id": "29:0", "optedIn": True}

    async def test_query_empty(self, container: InMemoryDocumentContainer) -> None:
        assert await _collect(container) == []


class TestCosmosDocumentContainer:
    """Test suite for CosmosDocumentContainer."""

    @pytest.fixture
    def proxy(self) -> Mock:
        proxy = Mock()
        proxy.id = "TeamsInfo"
        proxy.read_item = AsyncMock()
        proxy.upsert_item = AsyncMock()
        proxy.delete_item = AsyncMock()
        return proxy

    async def test_read_uses_id_as_partition_key(self, proxy: Mock) -> None:
        proxy.read_item.return_value = {"id": "19:abc"}
        container = CosmosDocumentContainer(proxy)

        result = await container.read_item("19:abc")

        assert result == {"id": "19:abc"}
        proxy.read_item.assert_awaited_once_with(item="19:abc", partition_key="19:abc")

    async def test_upsert(self, proxy: Mock) -> None:
        proxy.upsert_item.return_value = {"id": "19:abc"}
        container = CosmosDocumentContainer(proxy)

        await container.upsert_item({"id": "19:abc"})

        proxy.upsert_item.assert_awaited_once_with(body={"id": "19:abc"})

    async def test_delete_uses_id_as_partition_key(self, proxy: Mock) -> None:
        container = CosmosDocumentContainer(proxy)

        await container.delete_item("19:abc")

        proxy.delete_item.assert_awaited_once_with(item="19:abc", partition_key="19:abc")

    async def test_not_found_converted(self, proxy: Mock) -> None:
        """Test that a missing document raises RecordNotFoundError."""
        proxy.delete_item.side_effect = CosmosResourceNotFoundError(
            status_code=404, message="Entity with the specified id does not exist"
        )
        container = CosmosDocumentContainer(proxy)

        with pytest.raises(RecordNotFoundError) as exc_info:
            await container.delete_item("19:abc")

        assert exc_info.value.status_code == 404
        assert exc_info.value.container == "TeamsInfo"
        assert exc_info.value.operation == "delete_item"

    async def test_http_error_converted(self, proxy: Mock) -> None:
        """Test that other HTTP errors keep their status code."""
        proxy.upsert_item.side_effect = CosmosHttpResponseError(
            status_code=429, message="Request rate is large"
        )
        container = CosmosDocumentContainer(proxy)

        with pytest.raises(StoreError) as exc_info:
            await container.upsert_item({"id": "19:abc"})

        assert not isinstance(exc_info.value, RecordNotFoundError)
        assert exc_info.value.status_code == 429

    async def test_azure_error_converted(self, proxy: Mock) -> None:
        proxy.read_item.side_effect = ServiceRequestError("connection refused")
        container = CosmosDocumentContainer(proxy)

        with pytest.raises(StoreError) as exc_info:
            await container.read_item("19:abc")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, ServiceRequestError)

    async def test_query_pages(self, proxy: Mock) -> None:
        """Test that pages are yielded in store order with the projection query."""
        proxy.query_items.return_value = _pager([[{"id": "1"}, {"id": "2"}], [{"id": "3"}]])
        container = CosmosDocumentContainer(proxy)

        pages = await _collect(container, fields=("id", "optedIn"), page_size=2)

        assert pages == [[{"id": "1"}, {"id": "2"}], [{"id": "3"}]]
        proxy.query_items.assert_called_once_with(
            query="SELECT c.id, c.optedIn FROM c", max_item_count=2
        )

    async def test_query_error_converted(self, proxy: Mock) -> None:
        proxy.query_items.side_effect = CosmosHttpResponseError(status_code=503, message="down")
        container = CosmosDocumentContainer(proxy)

        with pytest.raises(StoreError) as exc_info:
            await _collect(container)

        assert exc_info.value.operation == "query_items"
