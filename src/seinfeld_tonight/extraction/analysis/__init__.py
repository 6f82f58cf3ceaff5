# ABOUTME: Record enrichment through the external classification service
# ABOUTME: Exposes the enrichment client, its tolerant response parser and the sequential queue

from .enrichment import (
    EnrichmentClient,
    EnrichmentQueue,
    EnrichmentReport,
    EnrichmentResult,
    EnrichmentStatus,
    ParsedContent,
    ParseStatus,
    parse_enrichment_content,
)

__all__ = [
    "EnrichmentClient",
    "EnrichmentQueue",
    "EnrichmentReport",
    "EnrichmentResult",
    "EnrichmentStatus",
    "ParseStatus",
    "ParsedContent",
    "parse_enrichment_content",
]
