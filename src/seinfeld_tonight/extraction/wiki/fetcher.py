# ABOUTME: Source fetcher that walks an ordered list of candidate endpoints
# ABOUTME: A failing candidate means "try the next one"; running out of candidates is fatal for that document

import json
from collections.abc import Sequence
from typing import Any

import httpx

from seinfeld_tonight.config import get_config
from seinfeld_tonight.extraction.base import FetchError, RawDocument, SourcesExhaustedError
from seinfeld_tonight.extraction.wiki.sources import SourceCandidate
from seinfeld_tonight.utils.logging import get_logger, log_api_call


class SourceFetcher:
    """Fetch documents over HTTP with candidate fallback.

    There are no retries within a candidate: the differently shaped endpoints
    (raw page, rendered page, REST API, parse API) are the retry mechanism.
    """

    def __init__(self, client: httpx.AsyncClient | None = None):
        config = get_config()
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(  # Allow for dependency injection
            headers={"User-Agent": config.user_agent},
            timeout=config.request_timeout,
            follow_redirects=True,
        )
        self.logger = get_logger(__name__)

    async def __aenter__(self) -> "SourceFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    @log_api_call("wiki")
    async def get(self, url: str) -> httpx.Response:
        """GET a URL, raising FetchError on transport errors and non-success statuses."""
        try:
            response = await self.http_client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed: {type(e).__name__}: {e}", url=url) from e

        if not response.is_success:
            raise FetchError(f"Request failed: {response.status_code} {response.reason_phrase}", url=url)
        return response

    async def fetch_json(self, url: str) -> Any:
        response = await self.get(url)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(f"Response is not JSON: {e}", url=url) from e

    async def fetch(self, candidate: SourceCandidate) -> RawDocument:
        """Fetch one candidate's document (possibly empty)."""
        if candidate.json_path:
            payload = await self.fetch_json(candidate.url)
            content = candidate.extract(payload)
        else:
            response = await self.get(candidate.url)
            content = response.text
        return RawDocument(content=content, source=candidate.url)

    async def try_fetch(self, candidate: SourceCandidate) -> RawDocument | None:
        """Fetch a candidate, reporting a failure or empty document as None."""
        try:
            document = await self.fetch(candidate)
        except FetchError as e:
            self.logger.warning("Source candidate failed", url=candidate.url, error=str(e))
            return None
        if document.is_empty:
            self.logger.warning("Source candidate returned no content", url=candidate.url)
            return None
        return document

    async def fetch_first(self, candidates: Sequence[SourceCandidate]) -> RawDocument:
        """Return the first candidate that yields non-empty content.

        Raises:
            SourcesExhaustedError: If every candidate failed or was empty
        """
        attempted: list[str] = []
        for candidate in candidates:
            attempted.append(candidate.url)
            document = await self.try_fetch(candidate)
            if document is not None:
                self.logger.info(
                    "Fetched document", source=document.source, length=len(document.content), attempts=len(attempted)
                )
                return document

        raise SourcesExhaustedError(f"All {len(attempted)} source candidates failed", attempted=attempted)
