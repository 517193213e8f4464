"""
Content fetch - resolves a report's content locator to raw text.

Locators are plain paths (relative to a content root), file:// URIs or
http(s) URLs such as public storage-bucket links. Every failure surfaces as
ContentFetchError; callers substitute placeholder_content() and continue.
Text extraction from PDFs is out of scope: bytes are decoded as UTF-8.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from medreport_rag.core.errors import ContentFetchError
from medreport_rag.core.protocols import Document

logger = logging.getLogger(__name__)


def placeholder_content(document: Document) -> str:
    """
    Stand-in text built from what is known about a report.

    Used when the real content cannot be fetched, so generation can still
    produce a (lower quality) summary rather than failing the request.
    """
    category = document.category.value
    return f"""Medical Report - {category}

Patient: {document.patient_name}
Patient ID: {document.patient_id or 'N/A'}
File: {document.file_name}

Clinical Findings:
The original content of this report could not be retrieved. The analysis is
based only on the report metadata above.

The report would include detailed diagnostic findings, measurements,
observations, and clinical interpretations relevant to the {category}
examination."""


class LocalContentStore:
    """Reads content from the local filesystem."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) if root else None

    def _resolve(self, locator: str) -> Path:
        parsed = urlparse(locator)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        path = Path(locator)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path

    async def fetch_text(self, locator: str) -> str:
        path = self._resolve(locator)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise ContentFetchError(f"Cannot read {path}: {e}") from e
        logger.info(f"Read {len(data)} bytes from {path}")
        return data.decode("utf-8", errors="replace")


class HttpContentStore:
    """Downloads content over HTTP(S)."""

    def __init__(
        self,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._headers = headers or {}
        self._transport = transport

    async def fetch_text(self, locator: str) -> str:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(locator)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ContentFetchError(
                    f"Download of {locator} failed with status {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                raise ContentFetchError(f"Download of {locator} failed: {e}") from e

        logger.info(f"Downloaded {len(response.content)} bytes from {locator}")
        return response.content.decode("utf-8", errors="replace")


class LocatorContentStore:
    """Dispatches on the locator scheme: http(s) to HTTP, anything else to disk."""

    def __init__(
        self,
        local: LocalContentStore | None = None,
        http: HttpContentStore | None = None,
    ):
        self._local = local or LocalContentStore()
        self._http = http or HttpContentStore()

    async def fetch_text(self, locator: str) -> str:
        if not locator:
            raise ContentFetchError("Report has no content locator")
        scheme = urlparse(locator).scheme
        if scheme in ("http", "https"):
            return await self._http.fetch_text(locator)
        return await self._local.fetch_text(locator)


class InMemoryContentStore:
    """Locator → text mapping for tests."""

    def __init__(self, contents: dict[str, str] | None = None):
        self._contents = dict(contents or {})

    async def fetch_text(self, locator: str) -> str:
        try:
            return self._contents[locator]
        except KeyError:
            raise ContentFetchError(f"No content at {locator}") from None


def get_content_store(content_root: str | None = None) -> LocatorContentStore:
    """Factory for the default scheme-dispatching content store."""
    return LocatorContentStore(local=LocalContentStore(content_root))
