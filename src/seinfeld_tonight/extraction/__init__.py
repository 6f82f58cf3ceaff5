# ABOUTME: Data extraction from external sources (Wikipedia, Wikiquote, enrichment service)
# ABOUTME: Pipeline Stage 1-2: Raw markup → candidate records → enriched records

"""
Extraction Layer: Get raw data from external sources

This layer handles:
- Fetching documents from ordered candidate sources
- Markup normalization shared by every parser
- Episode table and quote list parsing
- Record enrichment through the classification service

Data Flow: External Sources → Candidate records → core/ dedup and validation
"""

from .base import ExtractionError, FetchError, ParseEmptyResultError, RawDocument, SourcesExhaustedError

__all__ = [
    "ExtractionError",
    "FetchError",
    "ParseEmptyResultError",
    "RawDocument",
    "SourcesExhaustedError",
]
