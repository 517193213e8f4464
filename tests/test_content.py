"""
Unit Tests for Content Fetch

Every failure must surface as ContentFetchError so callers can fall back
to placeholder content.
"""

import httpx
import pytest

from medreport_rag.core.errors import ContentFetchError
from medreport_rag.storage.content import (
    HttpContentStore,
    InMemoryContentStore,
    LocalContentStore,
    LocatorContentStore,
    placeholder_content,
)


class TestLocalContentStore:

    @pytest.mark.asyncio
    async def test_reads_relative_to_root(self, tmp_path):
        (tmp_path / "r.txt").write_text("Impression: normal study.", encoding="utf-8")

        text = await LocalContentStore(tmp_path).fetch_text("r.txt")

        assert text == "Impression: normal study."

    @pytest.mark.asyncio
    async def test_file_uri(self, tmp_path):
        path = tmp_path / "r.txt"
        path.write_text("abc", encoding="utf-8")

        assert await LocalContentStore().fetch_text(path.as_uri()) == "abc"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(ContentFetchError):
            await LocalContentStore(tmp_path).fetch_text("missing.txt")


class TestHttpContentStore:

    @pytest.mark.asyncio
    async def test_downloads(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, text="report body"))

        text = await HttpContentStore(transport=transport).fetch_text("https://bucket/r.txt")

        assert text == "report body"

    @pytest.mark.asyncio
    async def test_error_status(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(404))

        with pytest.raises(ContentFetchError):
            await HttpContentStore(transport=transport).fetch_text("https://bucket/r.txt")


class TestLocatorContentStore:

    @pytest.mark.asyncio
    async def test_dispatches_on_scheme(self, tmp_path):
        (tmp_path / "local.txt").write_text("from disk", encoding="utf-8")
        transport = httpx.MockTransport(lambda r: httpx.Response(200, text="from http"))
        store = LocatorContentStore(
            local=LocalContentStore(tmp_path), http=HttpContentStore(transport=transport)
        )

        assert await store.fetch_text("local.txt") == "from disk"
        assert await store.fetch_text("https://bucket/r.txt") == "from http"

    @pytest.mark.asyncio
    async def test_empty_locator(self):
        with pytest.raises(ContentFetchError):
            await LocatorContentStore().fetch_text("")


class TestInMemoryContentStore:

    @pytest.mark.asyncio
    async def test_unknown_locator(self):
        with pytest.raises(ContentFetchError):
            await InMemoryContentStore().fetch_text("nowhere")


class TestPlaceholderContent:

    def test_built_from_metadata(self, sample_document):
        text = placeholder_content(sample_document)

        assert "ct_scan" in text
        assert "Jane Doe" in text
        assert "P-001" in text
        assert "report-1.txt" in text
