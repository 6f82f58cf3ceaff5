# ABOUTME: Domain records produced by the parsers and consumed by the browser UI
# ABOUTME: EpisodeRecord, QuoteRecord and the closed topic vocabulary used for enrichment

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

SUMMARY_PLACEHOLDER = "Summary not available."
WIKIQUOTE_SOURCE = "Wikiquote"


class EpisodeRecord(BaseModel):
    """One episode of the series as listed in the season tables."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default="", description="Dense run-local id assigned after deduplication")
    title: str = Field(min_length=1, description="Episode title")
    season: PositiveInt | None = Field(default=None, description="Season number, None when undetectable")
    episode: PositiveInt | None = Field(default=None, description="Episode number within the season")
    summary: str = Field(default="", description="Plot summary, possibly the placeholder text")
    subtitle: str = Field(default="", description="One-sentence description produced by enrichment")
    topics: list[str] = Field(default_factory=list, description="Labels from the topic vocabulary")

    @property
    def dedup_key(self) -> tuple[Any, ...]:
        return (self.season, self.episode, self.title)


class QuoteRecord(BaseModel):
    """A single quote line harvested from Wikiquote."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(default="", description="Dense run-local id assigned after deduplication")
    text: str = Field(min_length=1, description="Quote body")
    speaker: str = Field(default="", description="Speaker name, empty when unknown")
    listener: str = Field(default="", description="Who the line is addressed to")
    situation: str = Field(default="", description="Short description of the scene")
    episode_title: str = Field(default="", alias="episodeTitle", description="Episode the quote belongs to")
    season: PositiveInt | None = None
    episode: PositiveInt | None = None
    source: str = Field(default=WIKIQUOTE_SOURCE, description="Provenance tag")

    @property
    def dedup_key(self) -> tuple[Any, ...]:
        return (self.text, self.episode_title, self.season)


class TopicVocabulary(BaseModel):
    """Ordered, closed set of topic labels the enrichment service may choose from."""

    model_config = ConfigDict(frozen=True)

    labels: tuple[str, ...] = ()

    @field_validator("labels", mode="before")
    @classmethod
    def _unique_labels(cls, value: Iterable[Any]) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for label in value or ():
            if isinstance(label, str) and label.strip():
                seen.setdefault(label.strip(), None)
        return tuple(seen)

    @classmethod
    def from_labels(cls, labels: Iterable[str]) -> "TopicVocabulary":
        return cls(labels=tuple(labels))

    def restrict(self, candidates: Iterable[Any]) -> list[str]:
        """Keep only known labels, without repeats, in vocabulary order."""
        wanted = {c.strip() for c in candidates if isinstance(c, str)}
        return [label for label in self.labels if label in wanted]

    def __contains__(self, label: object) -> bool:
        return label in self.labels

    def __len__(self) -> int:
        return len(self.labels)
