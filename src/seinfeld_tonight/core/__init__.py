# ABOUTME: Domain records and pipeline orchestration layer
# ABOUTME: Pipeline Stage 2-3: Candidate records → deduplicated, validated datasets

"""
Core Layer: Domain records and workflow orchestration

This layer handles:
- Episode, quote and topic vocabulary models
- The ordered strategy chain used by every fallback cascade
- Deduplication, id assignment and validation
- The episode and quote pipelines

Data Flow: extraction/ records → Dedup, enrichment, validation → persistence/
"""

from .dedup import dedupe_episodes, dedupe_quotes
from .models import EpisodeRecord, QuoteRecord, TopicVocabulary
from .strategy import ChainOutcome, Strategy, StrategyChain
from .validation import EPISODE_SCHEMA, QUOTE_SCHEMA, ValidationReport, Violation, validate_records

# Import pipelines on-demand to avoid circular imports
# Use: from seinfeld_tonight.core.pipeline import EpisodePipeline, QuotePipeline

__all__ = [
    "ChainOutcome",
    "EPISODE_SCHEMA",
    "EpisodeRecord",
    "QUOTE_SCHEMA",
    "QuoteRecord",
    "Strategy",
    "StrategyChain",
    "TopicVocabulary",
    "ValidationReport",
    "Violation",
    "dedupe_episodes",
    "dedupe_quotes",
    "validate_records",
]
