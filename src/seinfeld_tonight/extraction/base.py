# ABOUTME: Shared extraction types: the raw document handed to parsers and the error taxonomy
# ABOUTME: Fetch failures are recoverable per candidate; exhausted sources and empty parses are fatal

from pydantic import BaseModel


class ExtractionError(Exception):
    """Base class for retrieval and parsing failures."""

    pass


class FetchError(ExtractionError):
    """A single source candidate failed (non-success status or transport error)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class SourcesExhaustedError(FetchError):
    """Every candidate for a required document failed or returned nothing."""

    def __init__(self, message: str, attempted: list[str] | None = None):
        super().__init__(message)
        self.attempted = attempted or []


class ParseEmptyResultError(ExtractionError):
    """Every parse strategy produced zero records."""

    def __init__(self, message: str, attempted: list[str] | None = None):
        super().__init__(message)
        self.attempted = attempted or []


class RawDocument(BaseModel):
    """Fetched document content plus the candidate it came from. Never persisted."""

    content: str
    source: str

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()
