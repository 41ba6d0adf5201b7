"""Tests for the documents listing, sources and head metadata endpoints."""

import base64
import json
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

from pagegen.api.pagination import PageCursor
from pagegen.common.models import GENERATED_FLAG_KEY, META_TITLE_KEY, SOURCE_FILENAME_KEY


def _mock_doc(title="Acme", created_at=None):
    now = created_at or datetime.now(UTC)
    doc = Mock()
    doc.id = uuid.uuid4()
    doc.title = title
    doc.status = "publish"
    doc.parent_id = None
    doc.created_at = now
    doc.updated_at = now
    return doc


def _results(total, rows):
    count_result = Mock()
    count_result.scalar.return_value = total
    doc_result = Mock()
    doc_result.all.return_value = rows
    return [count_result, doc_result]


class TestListDocuments:
    async def test_returns_paginated_envelope(self, client, mock_api_db_session):
        doc = _mock_doc()
        mock_api_db_session.execute = AsyncMock(side_effect=_results(1, [(doc, "products.csv")]))

        response = await client.get("/api/documents")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["cursor"] == ""
        assert data["items"][0]["title"] == "Acme"
        assert data["items"][0]["source_filename"] == "products.csv"

    async def test_next_cursor_when_more_rows(self, client, mock_api_db_session):
        now = datetime.now(UTC)
        docs = [_mock_doc(f"Doc {i}", now - timedelta(seconds=i)) for i in range(3)]
        mock_api_db_session.execute = AsyncMock(side_effect=_results(3, [(d, "a.csv") for d in docs]))

        response = await client.get("/api/documents", params={"limit": 2})

        data = response.json()
        assert len(data["items"]) == 2
        assert PageCursor.decode(data["cursor"]) == PageCursor(created_at=docs[1].created_at, id=docs[1].id)

    async def test_source_filter_applied(self, client, mock_api_db_session):
        mock_api_db_session.execute = AsyncMock(side_effect=_results(0, []))

        response = await client.get("/api/documents", params={"source": "a.csv"})

        assert response.status_code == 200
        count_sql = str(mock_api_db_session.execute.call_args_list[0][0][0])
        assert "document_meta.meta_value" in count_sql

    async def test_invalid_cursor_returns_400(self, client, mock_api_db_session):
        mock_api_db_session.execute = AsyncMock(side_effect=_results(0, []))

        response = await client.get("/api/documents", params={"cursor": "not-a-cursor"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid cursor"

    async def test_cursor_with_non_string_sort_value_returns_400(self, client, mock_api_db_session):
        mock_api_db_session.execute = AsyncMock(side_effect=_results(0, []))
        payload = json.dumps({"id": str(uuid.uuid4()), "sv": 1}).encode()
        cursor = base64.urlsafe_b64encode(payload).decode()

        response = await client.get("/api/documents", params={"cursor": cursor})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid cursor"

    async def test_valid_cursor_accepted(self, client, mock_api_db_session):
        mock_api_db_session.execute = AsyncMock(side_effect=_results(0, []))
        cursor = PageCursor(created_at=datetime.now(UTC), id=uuid.uuid4()).encode()

        response = await client.get("/api/documents", params={"cursor": cursor})
        assert response.status_code == 200


class TestListSources:
    async def test_distinct_sources(self, client, memory_store):
        memory_store.insert("A1", **{GENERATED_FLAG_KEY: "1", SOURCE_FILENAME_KEY: "b.csv"})
        memory_store.insert("A2", **{GENERATED_FLAG_KEY: "1", SOURCE_FILENAME_KEY: "a.csv"})
        memory_store.insert("A3", **{GENERATED_FLAG_KEY: "1", SOURCE_FILENAME_KEY: "a.csv"})

        response = await client.get("/api/documents/sources")

        assert response.status_code == 200
        assert response.json() == {"sources": ["a.csv", "b.csv"]}


class TestHeadMeta:
    async def test_returns_tags(self, client, memory_store):
        doc = memory_store.insert("Acme", **{META_TITLE_KEY: "Buy Acme"})

        response = await client.get(f"/api/documents/{doc.id}/head")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Buy Acme"
        assert data["description"] is None
        assert data["html"] == "<title>Buy Acme</title>\n"

    async def test_unknown_document_returns_404(self, client):
        response = await client.get(f"/api/documents/{uuid.uuid4()}/head")
        assert response.status_code == 404
