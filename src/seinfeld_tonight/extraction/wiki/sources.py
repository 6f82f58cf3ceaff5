# ABOUTME: Fixed document sources for the episode list and the Wikiquote season pages
# ABOUTME: Builds ordered candidate lists (raw page, rendered page, REST API, parse API)

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

WIKIPEDIA_BASE = "https://en.wikipedia.org"
WIKIPEDIA_API = f"{WIKIPEDIA_BASE}/w/api.php"
EPISODE_LIST_PAGE = "List_of_Seinfeld_episodes"

WIKIQUOTE_BASE = "https://en.wikiquote.org"
WIKIQUOTE_API = f"{WIKIQUOTE_BASE}/w/api.php"
WIKIQUOTE_BASE_PAGE = "Seinfeld"
SEASON_COUNT = 9

PARSE_TEXT_PATH = ("parse", "text", "*")
PARSE_WIKITEXT_PATH = ("parse", "wikitext", "*")


@dataclass(frozen=True)
class SourceCandidate:
    """One way of retrieving a document.

    ``json_path`` is empty for endpoints that return the document as the response
    body; otherwise the body is JSON and the document is the string found at that path.
    """

    url: str
    json_path: tuple[str, ...] = ()

    def extract(self, payload: Any) -> str:
        node = payload
        for key in self.json_path:
            if not isinstance(node, dict):
                return ""
            node = node.get(key)
        return node if isinstance(node, str) else ""


def api_url(api: str, **params: Any) -> str:
    """MediaWiki API URL with the JSON/CORS parameters every call uses."""
    query = {**params, "format": "json", "origin": "*"}
    return f"{api}?{urlencode(query)}"


def parse_url(api: str, page: str, prop: str, section: int | str | None = None) -> str:
    params: dict[str, Any] = {"action": "parse", "page": page, "prop": prop}
    if section is not None:
        params["section"] = section
    return api_url(api, **params)


def episode_list_candidates(page: str = EPISODE_LIST_PAGE) -> list[SourceCandidate]:
    """Printable page, rendered page, REST HTML, then the parse API."""
    return [
        SourceCandidate(f"{WIKIPEDIA_BASE}/w/index.php?{urlencode({'title': page, 'printable': 'yes'})}"),
        SourceCandidate(f"{WIKIPEDIA_BASE}/wiki/{quote(page)}?action=render"),
        SourceCandidate(f"{WIKIPEDIA_BASE}/api/rest_v1/page/html/{quote(page)}"),
        SourceCandidate(parse_url(WIKIPEDIA_API, page, "text"), json_path=PARSE_TEXT_PATH),
    ]


def sections_url(page: str = EPISODE_LIST_PAGE) -> str:
    return parse_url(WIKIPEDIA_API, page, "sections")


def section_candidate(index: int | str, page: str = EPISODE_LIST_PAGE) -> SourceCandidate:
    return SourceCandidate(parse_url(WIKIPEDIA_API, page, "text", section=index), json_path=PARSE_TEXT_PATH)


def extract_url(title: str) -> str:
    """Plain-text lead section of an article (used to backfill missing summaries)."""
    return api_url(WIKIPEDIA_API, action="query", prop="extracts", explaintext=1, exintro=1, titles=title)


def season_page_title(season: int) -> str:
    return f"{WIKIQUOTE_BASE_PAGE}_(season_{season})"


def season_numbers() -> list[int]:
    return list(range(1, SEASON_COUNT + 1))


def season_wikitext_candidate(season: int) -> SourceCandidate:
    return SourceCandidate(parse_url(WIKIQUOTE_API, season_page_title(season), "wikitext"), json_path=PARSE_WIKITEXT_PATH)


def season_html_candidate(season: int) -> SourceCandidate:
    return SourceCandidate(f"{WIKIQUOTE_BASE}/wiki/{quote(season_page_title(season))}")


def base_page_candidates() -> list[SourceCandidate]:
    return [
        SourceCandidate(parse_url(WIKIQUOTE_API, WIKIQUOTE_BASE_PAGE, "text"), json_path=PARSE_TEXT_PATH),
        SourceCandidate(f"{WIKIQUOTE_BASE}/wiki/{quote(WIKIQUOTE_BASE_PAGE)}"),
    ]
