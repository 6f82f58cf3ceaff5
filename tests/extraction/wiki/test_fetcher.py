# ABOUTME: Tests for the candidate-fallback source fetcher
# ABOUTME: Verifies fallback on failed or empty candidates and the fatal error when all are exhausted

import httpx
import pytest

from seinfeld_tonight.extraction.base import FetchError, SourcesExhaustedError
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.sources import (
    PARSE_TEXT_PATH,
    SourceCandidate,
    episode_list_candidates,
    extract_url,
    season_html_candidate,
    season_wikitext_candidate,
)

RAW = SourceCandidate("https://wiki.test/raw")
RENDERED = SourceCandidate("https://wiki.test/rendered")
API = SourceCandidate("https://wiki.test/api", json_path=PARSE_TEXT_PATH)


class TestFetchFirst:
    """Candidates are tried in order; failures and empty bodies mean "try the next one"."""

    @pytest.mark.asyncio
    async def test_first_success_wins(self, httpx_mock):
        httpx_mock.add_response(url=RAW.url, text="<table>episodes</table>")

        async with httpx.AsyncClient() as client:
            document = await SourceFetcher(client=client).fetch_first([RAW, RENDERED])

        assert document.content == "<table>episodes</table>"
        assert document.source == RAW.url

    @pytest.mark.asyncio
    async def test_failed_and_empty_candidates_are_skipped(self, httpx_mock):
        httpx_mock.add_response(url=RAW.url, status_code=503)
        httpx_mock.add_response(url=RENDERED.url, text="   ")
        httpx_mock.add_response(url=API.url, json={"parse": {"text": {"*": "<p>from api</p>"}}})

        async with httpx.AsyncClient() as client:
            document = await SourceFetcher(client=client).fetch_first([RAW, RENDERED, API])

        assert document.content == "<p>from api</p>"
        assert document.source == API.url

    @pytest.mark.asyncio
    async def test_transport_error_is_skipped(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("refused"), url=RAW.url)
        httpx_mock.add_response(url=RENDERED.url, text="ok")

        async with httpx.AsyncClient() as client:
            document = await SourceFetcher(client=client).fetch_first([RAW, RENDERED])

        assert document.content == "ok"

    @pytest.mark.asyncio
    async def test_exhausted_candidates_raise(self, httpx_mock):
        httpx_mock.add_response(url=RAW.url, status_code=404)
        httpx_mock.add_response(url=API.url, json={"error": {"code": "missingtitle"}})

        async with httpx.AsyncClient() as client:
            with pytest.raises(SourcesExhaustedError) as exc_info:
                await SourceFetcher(client=client).fetch_first([RAW, API])

        assert exc_info.value.attempted == [RAW.url, API.url]

    @pytest.mark.asyncio
    async def test_no_candidates_raise(self):
        async with httpx.AsyncClient() as client:
            with pytest.raises(SourcesExhaustedError):
                await SourceFetcher(client=client).fetch_first([])


class TestFetch:
    @pytest.mark.asyncio
    async def test_non_json_body_is_a_fetch_error(self, httpx_mock):
        httpx_mock.add_response(url=API.url, text="<html>not json</html>")

        async with httpx.AsyncClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await SourceFetcher(client=client).fetch(API)

        assert exc_info.value.url == API.url

    @pytest.mark.asyncio
    async def test_client_user_agent_from_config(self):
        fetcher = SourceFetcher()
        try:
            assert fetcher.http_client.headers["User-Agent"].startswith("seinfeld-tonight/")
        finally:
            await fetcher.close()


class TestSourceCandidates:
    def test_candidate_extract_walks_json_path(self):
        assert API.extract({"parse": {"text": {"*": "x"}}}) == "x"
        assert API.extract({"parse": {"text": "not a dict"}}) == ""
        assert API.extract([]) == ""

    def test_episode_list_order(self):
        urls = [c.url for c in episode_list_candidates()]

        assert "printable=yes" in urls[0]
        assert urls[1].endswith("?action=render")
        assert "/api/rest_v1/page/html/" in urls[2]
        assert "action=parse" in urls[3] and "format=json" in urls[3]

    def test_season_candidates(self):
        assert "prop=wikitext" in season_wikitext_candidate(4).url
        assert "Seinfeld_%28season_4%29" in season_wikitext_candidate(4).url
        assert season_html_candidate(4).url.startswith("https://en.wikiquote.org/wiki/Seinfeld_")

    def test_extract_url(self):
        url = extract_url("The Contest")
        assert "prop=extracts" in url and "exintro=1" in url and "titles=The+Contest" in url
