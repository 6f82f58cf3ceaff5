# ABOUTME: Tests for the quote extractor
# ABOUTME: Line classification, speaker splitting, wikitext heading tracking, HTML sections and season harvesting

import httpx
import pytest

from seinfeld_tonight.extraction.base import SourcesExhaustedError
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.quotes import (
    harvest_base_page,
    harvest_season,
    is_episode_heading,
    looks_like_cast_line,
    looks_like_navigation,
    parse_quotes_from_html,
    parse_quotes_from_wikitext,
    split_speaker,
)


class TestSpeakerSplit:
    @pytest.mark.parametrize(
        "line,expected",
        [
            ("Jerry — Hello Newman.", ("Jerry", "Hello Newman.")),
            ("What's the deal with airline food?", ("", "What's the deal with airline food?")),
            ("Kramer – Giddyup!", ("Kramer", "Giddyup!")),
            ("George: I'm back, baby!", ("George", "I'm back, baby!")),
            ("Elaine: Time: it's relative.", ("Elaine", "Time: it's relative.")),
            ("Jerry — one — two", ("Jerry", "one — two")),
            ("Jerry\xa0— Hello Newman, nice to see you.", ("Jerry", "Hello Newman, nice to see you.")),
            ("Elaine\xa0―\xa0Get out!", ("Elaine", "Get out!")),
        ],
    )
    def test_split_speaker(self, line, expected):
        assert split_speaker(line) == expected

    def test_long_prefix_is_not_a_speaker(self):
        line = "This is a very long introduction that goes on and on: and then the text"
        assert split_speaker(line) == ("", line)


class TestLineClassification:
    @pytest.mark.parametrize(
        "text",
        ["Michael Richards – Cosmo Kramer", "Jason Alexander – George Costanza", "", "   ", "42"],
    )
    def test_cast_lines(self, text):
        assert looks_like_cast_line(text)

    @pytest.mark.parametrize(
        "text",
        ["Jerry: Hello Newman.", "George – I'm out!", "Jerry — Hello Newman.", "x" * 221],
    )
    def test_not_cast_lines(self, text):
        assert not looks_like_cast_line(text)

    @pytest.mark.parametrize(
        "text",
        [
            "Seasons: 1 2 3 4 5 6 7 8 9 | Main page",
            "Seinfeld quotes at the Internet Movie Database",
            "Transcripts at seinfeldscripts.com",
            "Season 3 episodes",
            "Episode 12 recap",
            "External links and references",
        ],
    )
    def test_navigation(self, text):
        assert looks_like_navigation(text)

    def test_quote_is_not_navigation(self):
        assert not looks_like_navigation("Kramer: I'm out there, Jerry, and I'm loving every minute of it!")

    @pytest.mark.parametrize(
        "heading,expected",
        [
            ("The Contest [4.11]", True),
            ("The Pony Remark (January 30, 1991)", True),
            ("Cast", False),
            ("External links", False),
        ],
    )
    def test_episode_heading(self, heading, expected):
        assert is_episode_heading(heading) is expected


WIKITEXT = """{{Infobox}}
== Episodes ==
=== [[The Contest]] ===
* '''George''': I'm out of the contest! [[Image:x.png]]
:'''Jerry''': Are you still master of your domain?
* Jason Alexander – George Costanza
* short
Just a paragraph that is not a list item at all.
=== The Marine Biologist ===
* '''George''': The sea was angry that day, my friends.
[[Category:Seinfeld]]
"""


class TestWikitextMode:
    def test_quotes_attributed_to_current_heading(self):
        quotes = parse_quotes_from_wikitext(WIKITEXT, season=4)

        assert [(q.speaker, q.text, q.episode_title) for q in quotes] == [
            ("George", "I'm out of the contest! Image:x.png", "The Contest"),
            ("Jerry", "Are you still master of your domain?", "The Contest"),
            ("George", "The sea was angry that day, my friends.", "The Marine Biologist"),
        ]
        assert all(q.season == 4 for q in quotes)
        assert all(q.source == "Wikiquote" and q.episode is None and q.id == "" for q in quotes)

    def test_cast_line_excluded(self):
        quotes = parse_quotes_from_wikitext("* Michael Richards – Cosmo Kramer\n* Jerry: Hello, Newman. Hello, Jerry.")
        assert [q.text for q in quotes] == ["Hello, Newman. Hello, Jerry."]

    def test_short_text_after_split_rejected(self):
        assert parse_quotes_from_wikitext("* Kramer: Giddyup") == []

    def test_lines_before_any_heading_are_unattributed(self):
        quotes = parse_quotes_from_wikitext("# Newman: Hello, Jerry. Hello, Newman.")
        assert quotes[0].episode_title == ""
        assert quotes[0].season is None


SEASON_HTML = """
<html><body>
<div id="mw-content-text">
  <div class="toc"><ul><li>1 The Pony Remark (January 30, 1991) contents entry</li></ul></div>
  <h2>Episodes</h2>
  <h3>The Pony Remark (January 30, 1991)<span class="mw-editsection">[edit]</span></h3>
  <dl><dd>Jerry: Who doesn't like ponies?</dd><dd>Manya: I had a pony!</dd></dl>
  <ul><li>Michael Richards – Cosmo Kramer</li></ul>
  <div class="mw-heading mw-heading3"><h3>The Jacket [2.3]</h3></div>
  <ul><li>Elaine: Get out!  Jerry: That's a nice jacket.</li></ul>
  <dl><dd>Jerry: Who doesn't like ponies?</dd></dl>
  <h2>Cast</h2>
  <ul><li>Jerry Seinfeld as himself, the comedian</li></ul>
  <div class="navbox"><ul><li>Seasons 1 2 3 Main</li></ul></div>
</div>
</body></html>
"""


class TestHtmlMode:
    def test_lines_grouped_under_episode_headings(self):
        quotes = parse_quotes_from_html(SEASON_HTML, season=2)

        assert [(q.speaker, q.text, q.episode_title) for q in quotes] == [
            ("Jerry", "Who doesn't like ponies?", "The Pony Remark (January 30, 1991)"),
            ("Manya", "I had a pony!", "The Pony Remark (January 30, 1991)"),
            ("Elaine", "Get out!", "The Jacket [2.3]"),
            ("Jerry", "That's a nice jacket.", "The Jacket [2.3]"),
        ]
        assert all(q.season == 2 for q in quotes)

    def test_page_without_episode_headings_is_one_block(self):
        html = (
            "<html><body><h2>Quotes</h2><ul>"
            "<li>Kramer: These pretzels are making me thirsty!</li>"
            "<li>Jerry Seinfeld – Jerry</li>"
            "<li>Kramer: These pretzels are making me thirsty!</li>"
            "</ul></body></html>"
        )
        quotes = parse_quotes_from_html(html)

        assert len(quotes) == 1
        assert quotes[0].speaker == "Kramer"
        assert quotes[0].episode_title == ""
        assert quotes[0].season is None

    def test_short_text_dropped(self):
        html = "<html><body><ul><li>Jerry: Hi.</li></ul></body></html>"
        assert parse_quotes_from_html(html) == []


def _wikitext_response(wikitext: str) -> httpx.Response:
    return httpx.Response(200, json={"parse": {"wikitext": {"*": wikitext}}})


class TestHarvesting:
    @pytest.mark.asyncio
    async def test_season_prefers_wikitext(self):
        requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(str(request.url))
            return _wikitext_response("=== The Pen ===\n* Elaine: I'm going to lose it, Jerry.")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            quotes = await harvest_season(SourceFetcher(client=client), 3)

        assert len(requests) == 1
        assert "prop=wikitext" in requests[0]
        assert [(q.episode_title, q.season) for q in quotes] == [("The Pen", 3)]

    @pytest.mark.asyncio
    async def test_season_falls_back_to_html_when_wikitext_yields_nothing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("api.php"):
                return _wikitext_response("No list items here")
            assert request.url.path.startswith("/wiki/Seinfeld_")
            return httpx.Response(200, text=SEASON_HTML)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            quotes = await harvest_season(SourceFetcher(client=client), 2)

        assert len(quotes) == 4
        assert all(q.season == 2 for q in quotes)

    @pytest.mark.asyncio
    async def test_unavailable_season_is_empty(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404))) as client:
            assert await harvest_season(SourceFetcher(client=client), 9) == []

    @pytest.mark.asyncio
    async def test_base_page_uses_parse_api(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"parse": {"text": {"*": SEASON_HTML}}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            quotes = await harvest_base_page(SourceFetcher(client=client))

        assert len(quotes) == 4
        assert all(q.season is None for q in quotes)

    @pytest.mark.asyncio
    async def test_base_page_unavailable_is_fatal(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503))) as client:
            with pytest.raises(SourcesExhaustedError) as exc_info:
                await harvest_base_page(SourceFetcher(client=client))

        assert len(exc_info.value.attempted) == 2
