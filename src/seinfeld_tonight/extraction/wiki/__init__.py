# ABOUTME: Wikipedia and Wikiquote retrieval and parsing
# ABOUTME: Source descriptors, the fallback fetcher, and the episode, quote and summary parsers

from .episodes import parse_episodes_from_html, parse_episodes_from_sections
from .fetcher import SourceFetcher
from .quotes import harvest_base_page, harvest_season, parse_quotes_from_html, parse_quotes_from_wikitext, split_speaker
from .summaries import fetch_episode_summary

__all__ = [
    "SourceFetcher",
    "fetch_episode_summary",
    "harvest_base_page",
    "harvest_season",
    "parse_episodes_from_html",
    "parse_episodes_from_sections",
    "parse_quotes_from_html",
    "parse_quotes_from_wikitext",
    "split_speaker",
]
