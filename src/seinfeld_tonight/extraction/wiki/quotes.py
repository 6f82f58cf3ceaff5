# ABOUTME: Quote extractor for Wikiquote season pages (wikitext and rendered HTML)
# ABOUTME: Tracks episode headings, rejects cast and navigation lines, and splits speaker from text

import re
from dataclasses import dataclass, replace

from bs4 import BeautifulSoup, Tag

from seinfeld_tonight.core.models import QuoteRecord
from seinfeld_tonight.core.strategy import Strategy, StrategyChain
from seinfeld_tonight.extraction.markup import clean_text, strip_wiki_markup
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.sources import (
    base_page_candidates,
    season_html_candidate,
    season_wikitext_candidate,
)
from seinfeld_tonight.utils.logging import get_logger

logger = get_logger(__name__)

SPEAKER_MAX_LENGTH = 40
CAST_LINE_MAX_LENGTH = 220
MIN_WIKITEXT_LINE = 10
MIN_QUOTE_TEXT = 8
MIN_HTML_CANDIDATE = 4
MIN_HTML_TEXT = 6
CANONICAL_DASH = " — "

HEADING_TAGS = ("h2", "h3", "h4")
CHROME_SELECTOR = ".navbox, .toc, .mw-editsection, .mw-references-wrap"

_WIKITEXT_HEADING = re.compile(r"^===+\s*(.*?)\s*===+$")
_LIST_MARKER = re.compile(r"^[*#:;]")
_LIST_MARKERS = re.compile(r"^[*#:;]+\s*")
_CAST_LINE = re.compile(r"^[A-Za-zÀ-ÿ .,'’\-()]+–[A-Za-zÀ-ÿ .,'’\-()]+$")
_DIGITS = re.compile(r"^\d+$")
_DASH = re.compile(r"\s+[–—―]\s+")
_LINE_BREAKS = re.compile(r"\s*\n+\s*| {2,}")
_EPISODE_NUMBERING = re.compile(r"\[\d+\.\d+\]")
_EPISODE_TITLE = re.compile(r"the .*?\(.*?\)", re.IGNORECASE)
_ORDINAL_PREFIX = re.compile(r"^(season|episode)\s+\d+")
_NAVIGATION_PHRASES = ("quotes at the internet movie database", "seinfeldscripts.com")


def looks_like_cast_line(text: str) -> bool:
    """Cast listings look like ``Actor – Character`` with no sentence punctuation."""
    trimmed = text.strip()
    if not trimmed:
        return True
    if len(trimmed) > CAST_LINE_MAX_LENGTH:
        return False
    if _DIGITS.match(trimmed):
        return True
    return bool(_CAST_LINE.match(trimmed))


def looks_like_navigation(text: str) -> bool:
    trimmed = text.strip().lower()
    if not trimmed:
        return True
    if "seasons" in trimmed and "main" in trimmed:
        return True
    if any(phrase in trimmed for phrase in _NAVIGATION_PHRASES):
        return True
    return bool(_ORDINAL_PREFIX.match(trimmed)) or trimmed.startswith("external links")


def is_rejected(text: str) -> bool:
    return looks_like_cast_line(text) or looks_like_navigation(text)


def is_episode_heading(text: str) -> bool:
    """Episode headings carry ``[N.N]`` numbering or read like ``The Title (date)``."""
    return bool(_EPISODE_NUMBERING.search(text) or _EPISODE_TITLE.search(text))


def normalize_dash(text: str) -> str:
    return _DASH.sub(CANONICAL_DASH, text)


def split_speaker(raw: str) -> tuple[str, str]:
    """Split a quote line into ``(speaker, text)``.

    ``"Jerry — Hello Newman."`` gives ``("Jerry", "Hello Newman.")``; a line with no
    short prefix before a dash or colon gives an empty speaker.
    """
    normalized = normalize_dash(raw)
    if CANONICAL_DASH in normalized:
        speaker, *rest = normalized.split(CANONICAL_DASH)
        if len(speaker) < SPEAKER_MAX_LENGTH:
            return speaker.strip(), CANONICAL_DASH.join(rest).strip()

    parts = raw.split(":")
    if len(parts) > 1 and len(parts[0]) < SPEAKER_MAX_LENGTH:
        return parts[0].strip(), ":".join(parts[1:]).strip()
    return "", raw.strip()


def _quote(text: str, speaker: str, episode_title: str, season: int | None) -> QuoteRecord:
    return QuoteRecord(text=text, speaker=speaker, episode_title=episode_title, season=season)


@dataclass(frozen=True)
class LineScan:
    """Fold state threaded through the lines of one wikitext page."""

    heading: str = ""
    quotes: tuple[QuoteRecord, ...] = ()


def scan_line(state: LineScan, raw_line: str, season: int | None) -> LineScan:
    """Fold one wikitext line into the scan state."""
    line = raw_line.strip()
    if not line:
        return state

    heading = _WIKITEXT_HEADING.match(line)
    if heading:
        return replace(state, heading=strip_wiki_markup(heading.group(1)).replace("[edit]", "").strip())

    if line.startswith(("==", "{{", "[[")) or not _LIST_MARKER.match(line):
        return state

    cleaned = strip_wiki_markup(_LIST_MARKERS.sub("", line))
    if len(cleaned) < MIN_WIKITEXT_LINE or is_rejected(cleaned):
        return state

    speaker, text = split_speaker(cleaned)
    if len(text) < MIN_QUOTE_TEXT:
        return state
    return replace(state, quotes=state.quotes + (_quote(text, speaker, state.heading, season),))


def parse_quotes_from_wikitext(wikitext: str, season: int | None = None) -> list[QuoteRecord]:
    """Extract quotes from a page's raw wikitext, attributing each to the last ``===`` heading."""
    state = LineScan()
    for raw_line in wikitext.split("\n"):
        state = scan_line(state, raw_line, season)
    return list(state.quotes)


def _content_root(soup: BeautifulSoup) -> Tag:
    root = soup.select_one("#mw-content-text") or soup.body or soup
    for chrome in root.select(CHROME_SELECTOR):
        chrome.decompose()
    return root


def _heading_title(heading: Tag) -> str:
    return clean_text(heading.get_text()).replace("[edit]", "").strip()


def _is_section_boundary(node: Tag) -> bool:
    if node.name in HEADING_TAGS:
        return True
    return node.name == "div" and "mw-heading" in (node.get("class") or [])


def _section_items(heading: Tag) -> list[Tag]:
    """List items and definition descriptions between a heading and the next heading."""
    anchor = heading
    parent = heading.parent
    if isinstance(parent, Tag) and parent.name == "div" and "mw-heading" in (parent.get("class") or []):
        anchor = parent

    items: list[Tag] = []
    for node in anchor.next_siblings:
        if not isinstance(node, Tag):
            continue
        if _is_section_boundary(node):
            break
        if node.name in ("li", "dd"):
            items.append(node)
        items.extend(node.find_all(["li", "dd"]))
    return items


def _episode_lines(heading: Tag) -> list[str]:
    lines: list[str] = []
    for item in _section_items(heading):
        raw = item.get_text()
        if not clean_text(raw) or is_rejected(clean_text(raw)):
            continue
        for piece in _LINE_BREAKS.split(raw):
            line = clean_text(piece)
            if line and len(line) >= MIN_QUOTE_TEXT and not is_rejected(line):
                lines.append(line)
    return lines


def parse_quotes_from_html(html: str, season: int | None = None, debug: bool = False) -> list[QuoteRecord]:
    """Extract quotes from a rendered Wikiquote page.

    Lines are grouped under episode headings; a page without recognizable episode
    headings is read as one unattributed block. Repeated lines within the page are
    dropped before speaker splitting.
    """
    root = _content_root(BeautifulSoup(html, "html.parser"))
    headings = root.find_all(HEADING_TAGS)
    episode_headings = [h for h in headings if is_episode_heading(_heading_title(h))]
    _debug_log(debug, "Page headings", season=season, headings=len(headings), episode_headings=len(episode_headings))

    candidates: list[tuple[str, str]] = []
    if not episode_headings:
        for item in root.find_all(["li", "dd"]):
            raw = clean_text(item.get_text())
            if raw and not is_rejected(raw):
                candidates.append((raw, ""))
    else:
        for heading in episode_headings:
            title = _heading_title(heading)
            candidates.extend((line, title) for line in _episode_lines(heading))

    seen: set[str] = set()
    quotes: list[QuoteRecord] = []
    for raw, episode_title in candidates:
        cleaned = clean_text(raw)
        if len(cleaned) < MIN_HTML_CANDIDATE or cleaned in seen:
            continue
        seen.add(cleaned)
        speaker, text = split_speaker(cleaned)
        if len(text) < MIN_HTML_TEXT:
            continue
        quotes.append(_quote(text, speaker, episode_title, season))

    if debug and not quotes:
        samples = [clean_text(li.get_text()) for li in root.find_all("li", limit=8)]
        logger.info("No quotes extracted", season=season, samples=[s for s in samples if s])
    _debug_log(debug, "Extracted quotes", season=season, quotes=len(quotes))
    return quotes


async def harvest_season(fetcher: SourceFetcher, season: int, debug: bool = False) -> list[QuoteRecord]:
    """Quotes from one season page: wikitext first, rendered HTML when wikitext yields nothing.

    Unavailable sources count as empty; a season with no quotes is not an error.
    """

    async def from_wikitext() -> list[QuoteRecord]:
        document = await fetcher.try_fetch(season_wikitext_candidate(season))
        return parse_quotes_from_wikitext(document.content, season) if document else []

    async def from_html() -> list[QuoteRecord]:
        document = await fetcher.try_fetch(season_html_candidate(season))
        return parse_quotes_from_html(document.content, season, debug) if document else []

    chain: StrategyChain[QuoteRecord] = StrategyChain(
        f"season-{season}", [Strategy("wikitext", from_wikitext), Strategy("html", from_html)]
    )
    outcome = await chain.run()
    _debug_log(debug, "Season harvested", season=season, strategy=outcome.strategy, quotes=len(outcome.records))
    return outcome.records


async def harvest_base_page(fetcher: SourceFetcher, debug: bool = False) -> list[QuoteRecord]:
    """Parse the series' main quote page with no season attribution.

    Raises:
        SourcesExhaustedError: If the page cannot be retrieved at all
    """
    document = await fetcher.fetch_first(base_page_candidates())
    return parse_quotes_from_html(document.content, None, debug)


def _debug_log(debug: bool, event: str, **kwargs) -> None:
    if debug:
        logger.info(event, **kwargs)
    else:
        logger.debug(event, **kwargs)
