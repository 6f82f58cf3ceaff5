# ABOUTME: Episode table parser for the Wikipedia episode list
# ABOUTME: Header detection and season inference over a selector cascade, with a per-section fallback

from dataclasses import dataclass, replace
from functools import partial

from bs4 import BeautifulSoup, Tag

from seinfeld_tonight.core.models import EpisodeRecord
from seinfeld_tonight.core.strategy import Strategy, StrategyChain
from seinfeld_tonight.extraction.base import FetchError
from seinfeld_tonight.extraction.markup import (
    clean_text,
    clean_title,
    leading_int,
    normalize_header,
    parse_season,
    strip_citations,
    strip_edit_marker,
)
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.sources import section_candidate, sections_url
from seinfeld_tonight.utils.logging import get_logger

logger = get_logger(__name__)

EPISODE_TABLE_SELECTOR = "table.wikiepisodetable"
GENERIC_TABLE_SELECTOR = "table.wikitable"
HEADING_TAGS = ("h2", "h3", "h4")


@dataclass(frozen=True)
class ColumnMap:
    """Column positions resolved from one header row; -1 when absent."""

    title: int = -1
    summary: int = -1
    overall: int = -1
    in_season: int = -1

    @classmethod
    def from_headers(cls, headers: list[str]) -> "ColumnMap":
        def find(marker: str) -> int:
            return next((i for i, text in enumerate(headers) if marker in text), -1)

        return cls(title=find("title"), summary=find("summary"), overall=find("nooverall"), in_season=find("noinseason"))

    @property
    def usable(self) -> bool:
        return self.title >= 0 and (self.overall >= 0 or self.in_season >= 0)


@dataclass(frozen=True)
class TableScan:
    """Fold state threaded through the rows of one table."""

    season: int | None
    columns: ColumnMap | None = None
    episodes: tuple[EpisodeRecord, ...] = ()


def is_episode_header_row(headers: list[str]) -> bool:
    """A header row has >1 header cell, a title column and an overall/in-season number column."""
    return (
        len(headers) > 1
        and any("title" in text for text in headers)
        and any("nooverall" in text or "noinseason" in text for text in headers)
    )


def _heading_text(element: Tag) -> str | None:
    if element.name in HEADING_TAGS:
        return element.get_text()
    # Newer skins wrap headings: <div class="mw-heading"><h3>...</h3></div>
    if element.name == "div" and "mw-heading" in (element.get("class") or []):
        heading = element.find(HEADING_TAGS)
        if heading is not None:
            return heading.get_text()
    return None


def preceding_heading(table: Tag) -> str:
    """Text of the nearest heading before the table at the same level, edit marker removed."""
    for sibling in table.find_previous_siblings():
        text = _heading_text(sibling)
        if text is not None:
            return strip_edit_marker(text)
    return ""


def season_for_table(table: Tag) -> int | None:
    """Caption, then first colspan header cell, then preceding heading."""
    caption = table.find("caption")
    season = parse_season(caption.get_text()) if caption is not None else None
    if season:
        return season

    colspan_header = table.select_one("th[colspan]")
    season = parse_season(colspan_header.get_text()) if colspan_header is not None else None
    if season:
        return season

    return parse_season(preceding_heading(table))


def _title_from_cell(cell: Tag) -> str:
    link = cell.find("a")
    raw = link.get("title") if link is not None else None
    return clean_title(raw or cell.get_text())


def _cell_int(cells: list[Tag], index: int) -> int | None:
    if index < 0 or index >= len(cells):
        return None
    return leading_int(cells[index].get_text())


def _is_description_row(row: Tag, cells: list[Tag]) -> bool:
    if "expand-child" in (row.get("class") or []):
        return True
    return len(cells) == 1 and "description" in (cells[0].get("class") or [])


def _attach_description(state: TableScan, cells: list[Tag]) -> TableScan:
    """Use a description row as the previous episode's summary when the table has no summary column."""
    if not state.episodes or (state.columns and state.columns.summary >= 0):
        return state
    last = state.episodes[-1]
    summary = clean_text(strip_citations(cells[0].get_text()))
    if last.summary or not summary:
        return state
    return replace(state, episodes=state.episodes[:-1] + (last.model_copy(update={"summary": summary}),))


def scan_row(state: TableScan, row: Tag, debug: bool = False) -> TableScan:
    """Fold one table row into the scan state."""
    headers = [normalize_header(strip_citations(th.get_text()).strip()) for th in row.find_all("th", recursive=False)]
    if is_episode_header_row(headers):
        _debug_log(debug, "Episode header row", headers=headers)
        return replace(state, columns=ColumnMap.from_headers(headers))

    cells = row.find_all(["td", "th"], recursive=False)
    if not cells:
        return state

    if _is_description_row(row, cells):
        return _attach_description(state, cells)

    columns = state.columns
    if columns is None or not columns.usable or columns.title >= len(cells):
        return state

    title = _title_from_cell(cells[columns.title])
    if not title:
        return state

    summary = ""
    if 0 <= columns.summary < len(cells):
        summary = clean_text(strip_citations(cells[columns.summary].get_text()))

    episode_number = _cell_int(cells, columns.in_season) or _cell_int(cells, columns.overall)
    record = EpisodeRecord(title=title, season=state.season, episode=episode_number, summary=summary)
    return replace(state, episodes=state.episodes + (record,))


def parse_table(table: Tag, season: int | None, debug: bool = False) -> list[EpisodeRecord]:
    state = TableScan(season=season)
    for row in table.find_all("tr"):
        state = scan_row(state, row, debug)
    return list(state.episodes)


def parse_tables(soup: BeautifulSoup, selector: str, debug: bool = False, season_override: int | None = None) -> list[EpisodeRecord]:
    """Parse every table matching one selector tier."""
    tables = soup.select(selector)
    _debug_log(debug, "Selector tier", selector=selector, tables=len(tables))

    episodes: list[EpisodeRecord] = []
    for table in tables:
        detected = season_for_table(table)
        if detected is None:
            _debug_log(debug, "Table has no season", heading=preceding_heading(table))
        season = season_override or detected
        episodes.extend(parse_table(table, season, debug))
    return episodes


def parse_episodes_from_html(html: str, debug: bool = False, season_override: int | None = None) -> list[EpisodeRecord]:
    """Extract candidate episodes from an episode list document.

    Args:
        html: Rendered page or section HTML
        debug: Log parser diagnostics at info level
        season_override: Season to assign to every table (section-by-section traversal)

    Returns:
        Candidate episodes in document order, not yet deduplicated
    """
    soup = BeautifulSoup(html, "html.parser")
    chain: StrategyChain[EpisodeRecord] = StrategyChain(
        "episode-tables",
        [
            Strategy(selector, partial(parse_tables, soup, selector, debug, season_override))
            for selector in (EPISODE_TABLE_SELECTOR, GENERIC_TABLE_SELECTOR)
        ],
    )
    return chain.run_sync().records


async def parse_episodes_from_sections(fetcher: SourceFetcher, debug: bool = False) -> list[EpisodeRecord]:
    """Fallback: fetch each "season" section of the list page and parse it with its season as override.

    A section that cannot be fetched is skipped; failure to list sections propagates.
    """
    payload = await fetcher.fetch_json(sections_url())
    sections = (payload.get("parse") or {}).get("sections") or [] if isinstance(payload, dict) else []
    season_sections = [s for s in sections if isinstance(s, dict) and "season" in str(s.get("line", "")).lower()]
    _debug_log(debug, "Season sections", sections=[s.get("line") for s in season_sections])

    episodes: list[EpisodeRecord] = []
    for section in season_sections:
        season = parse_season(str(section.get("line", "")))
        try:
            document = await fetcher.fetch(section_candidate(section.get("index", "")))
        except FetchError as e:
            logger.warning("Skipping section", section=section.get("line"), error=str(e))
            continue
        if document.is_empty:
            continue
        episodes.extend(parse_episodes_from_html(document.content, debug, season))
    return episodes


def _debug_log(debug: bool, event: str, **kwargs) -> None:
    if debug:
        logger.info(event, **kwargs)
    else:
        logger.debug(event, **kwargs)
