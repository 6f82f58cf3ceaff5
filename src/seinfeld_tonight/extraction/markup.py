# ABOUTME: Markup normalizer shared by every parser
# ABOUTME: Strips citation markers, wiki syntax and HTML tags, and collapses whitespace into plain text

import re

_CITATION = re.compile(r"\[\w+\]")
_NUMERIC_CITATION = re.compile(r"\[\d+\]")
_EDIT_MARKER = re.compile(r"\[edit\]", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_SEASON = re.compile(r"season\s+(\d+)", re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*(\d+)")
_SURROUNDING_QUOTES = "\"“”"

# Wikitext constructs, applied in order
_WIKI_LINK = re.compile(r"\[\[(?:[^|\]]+\|)?([^\]]+)\]\]")
_TEMPLATE = re.compile(r"\{\{[^}]+\}\}")
_BOLD = re.compile(r"'''+")
_ITALIC = re.compile(r"''")
_HTML_TAG = re.compile(r"<[^>]+>")
_EXTERNAL_LINK = re.compile(r"\[https?[^\]]+\]")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def strip_citations(text: str) -> str:
    """Remove bracketed reference markers such as ``[1]`` or ``[a]``."""
    return _CITATION.sub("", text or "")


def strip_edit_marker(text: str) -> str:
    return _EDIT_MARKER.sub("", text or "").strip()


def clean_text(text: str) -> str:
    """Collapse whitespace and drop numeric citation markers."""
    return _NUMERIC_CITATION.sub("", collapse_whitespace(text)).strip()


def clean_title(raw_title: str) -> str:
    """Normalize an episode title taken from a table cell or link title."""
    title = collapse_whitespace(strip_citations(raw_title))
    return title.strip(_SURROUNDING_QUOTES).strip()


def strip_wiki_markup(line: str) -> str:
    """Reduce a wikitext line to plain text.

    Links keep their label, templates, external links and citation markers are
    dropped, bold/italic quotes and HTML tags are removed.
    """
    text = _WIKI_LINK.sub(r"\1", line or "")
    text = _TEMPLATE.sub("", text)
    text = _BOLD.sub("", text)
    text = _ITALIC.sub("", text)
    text = _HTML_TAG.sub("", text)
    text = _EXTERNAL_LINK.sub("", text)
    text = _NUMERIC_CITATION.sub("", text)
    return text.strip()


def normalize_header(text: str) -> str:
    """Lower-case a table header and keep only word characters (``No. overall`` → ``nooverall``)."""
    lowered = _WHITESPACE.sub("", (text or "").lower())
    return re.sub(r"[^\w]", "", lowered)


def parse_season(text: str) -> int | None:
    """Return N from the first ``season N`` mention, or None."""
    match = _SEASON.search(text or "")
    if not match:
        return None
    season = int(match.group(1))
    return season if season > 0 else None


def leading_int(text: str) -> int | None:
    """Parse the leading integer of a cell (``"12[a]"`` → 12); None when absent or not positive."""
    match = _LEADING_INT.match(text or "")
    if not match:
        return None
    value = int(match.group(1))
    return value if value > 0 else None
