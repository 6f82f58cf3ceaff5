# ABOUTME: Episode summary backfill from the lead section of each episode's Wikipedia article
# ABOUTME: A missing or failed extract leaves the summary empty; callers substitute the placeholder

from seinfeld_tonight.extraction.base import FetchError
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.sources import extract_url
from seinfeld_tonight.utils.logging import get_logger

logger = get_logger(__name__)


def first_page_extract(payload: object) -> str:
    """Pull ``query.pages.<first id>.extract`` out of a MediaWiki extracts response."""
    if not isinstance(payload, dict):
        return ""
    pages = (payload.get("query") or {}).get("pages") or {}
    if not isinstance(pages, dict) or not pages:
        return ""
    first = next(iter(pages.values()))
    extract = first.get("extract") if isinstance(first, dict) else None
    return extract.strip() if isinstance(extract, str) else ""


async def fetch_episode_summary(fetcher: SourceFetcher, title: str) -> str:
    try:
        payload = await fetcher.fetch_json(extract_url(title))
    except FetchError as e:
        logger.warning("Summary lookup failed", title=title, error=str(e))
        return ""
    return first_page_extract(payload)
