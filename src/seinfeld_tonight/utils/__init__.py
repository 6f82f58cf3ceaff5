# ABOUTME: Cross-cutting utilities and shared infrastructure
# ABOUTME: Supporting services: logging, retry policy, console tables

"""
Utils Layer: Shared infrastructure and cross-cutting concerns

This layer provides:
- Logging configuration and structured loggers
- Retry and rate-limit policy for the enrichment service
- Rich console tables for CLI summaries

Data Flow: Supporting services for all other layers
"""

from . import logging

__all__ = [
    "logging",
]
