# ABOUTME: Episode and quote pipelines: fetch, parse, deduplicate, enrich, validate, write
# ABOUTME: Nothing is written until the whole record set is ready, and an empty or invalid set aborts the run

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from seinfeld_tonight.config import get_config
from seinfeld_tonight.core.dedup import dedupe_episodes, dedupe_quotes
from seinfeld_tonight.core.models import SUMMARY_PLACEHOLDER, EpisodeRecord, QuoteRecord, TopicVocabulary
from seinfeld_tonight.core.strategy import ChainOutcome, Strategy, StrategyChain
from seinfeld_tonight.core.validation import EPISODE_SCHEMA, QUOTE_SCHEMA, RecordSchema, ValidationReport, validate_records
from seinfeld_tonight.extraction.analysis.enrichment import EnrichmentClient, EnrichmentQueue, EnrichmentReport
from seinfeld_tonight.extraction.base import FetchError, ParseEmptyResultError
from seinfeld_tonight.extraction.wiki.episodes import parse_episodes_from_html, parse_episodes_from_sections
from seinfeld_tonight.extraction.wiki.fetcher import SourceFetcher
from seinfeld_tonight.extraction.wiki.quotes import harvest_base_page, harvest_season
from seinfeld_tonight.extraction.wiki.sources import episode_list_candidates, season_numbers
from seinfeld_tonight.extraction.wiki.summaries import fetch_episode_summary
from seinfeld_tonight.persistence.writer import DatasetWriter, load_topics
from seinfeld_tonight.utils.logging import get_logger, with_pipeline_context
from seinfeld_tonight.utils.retry import RateLimitPolicy


class DatasetValidationError(Exception):
    """Raised when a finished record set fails validation; nothing is written."""

    def __init__(self, report: ValidationReport):
        super().__init__(f"{len(report.violations)} validation violation(s) in {report.schema}")
        self.report = report


@dataclass
class PipelineResult:
    """Outcome of one pipeline run, rendered by the CLI."""

    dataset: str
    records: list[Any]
    strategy: str | None
    attempted: list[str]
    enrichment: EnrichmentReport
    validation: ValidationReport
    written: list[Path] = field(default_factory=list)
    source: str | None = None


class DatasetPipeline:
    """Shared wiring for the episode and quote pipelines."""

    dataset = ""
    schema: RecordSchema

    def __init__(
        self,
        fetcher: SourceFetcher | None = None,
        enrichment: EnrichmentClient | None = None,
        writer: DatasetWriter | None = None,
        debug: bool | None = None,
        enrich_all: bool | None = None,
        enrich_limit: int | None = None,
        delay: float | None = None,
    ):
        config = get_config()
        self._owns_fetcher = fetcher is None
        self._owns_enrichment = enrichment is None
        self.fetcher = fetcher or SourceFetcher()
        self.enrichment = enrichment or EnrichmentClient()
        self.writer = writer or DatasetWriter()
        self.debug = config.scrape_debug if debug is None else debug
        self.enrich_all = config.enrich_all if enrich_all is None else enrich_all
        self.enrich_limit = enrich_limit
        self.delay = delay
        self.logger = get_logger(__name__)

    async def close(self) -> None:
        if self._owns_fetcher:
            await self.fetcher.close()
        if self._owns_enrichment:
            await self.enrichment.close()

    def _require_records(self, records: Sequence[Any], outcome: ChainOutcome[Any]) -> None:
        if not records:
            raise ParseEmptyResultError(
                f"Parsed 0 {self.dataset}. Aborting to avoid overwriting data.", attempted=outcome.attempted
            )

    def _validate(self, records: Sequence[Any]) -> ValidationReport:
        report = validate_records(records, self.schema)
        if not report.ok:
            for violation in report.violations:
                self.logger.error("Validation violation", dataset=self.dataset, violation=str(violation))
            raise DatasetValidationError(report)
        return report

    def _queue(self, default_limit: int | None, default_delay: float) -> EnrichmentQueue:
        delay = default_delay if self.delay is None else self.delay
        limit = default_limit if self.enrich_limit is None else self.enrich_limit
        return EnrichmentQueue(
            self.enrichment, policy=self.enrichment.policy.with_delay(delay), limit=limit, enrich_all=self.enrich_all
        )


class EpisodePipeline(DatasetPipeline):
    """Episode list → episodes.json / episodes.js / topics.js."""

    dataset = "episodes"
    schema = EPISODE_SCHEMA

    def __init__(self, *args: Any, vocabulary: TopicVocabulary | None = None, topics_file: Path | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._vocabulary = vocabulary
        self.topics_file = topics_file or get_config().topics_file

    @property
    def vocabulary(self) -> TopicVocabulary:
        if self._vocabulary is None:
            self._vocabulary = load_topics(self.topics_file)
        return self._vocabulary

    async def _from_sections(self) -> list[EpisodeRecord]:
        try:
            return await parse_episodes_from_sections(self.fetcher, self.debug)
        except FetchError as e:
            self.logger.warning("Section listing unavailable", error=str(e))
            return []

    async def parse(self) -> tuple[list[EpisodeRecord], ChainOutcome[EpisodeRecord], str]:
        document = await self.fetcher.fetch_first(episode_list_candidates())
        chain: StrategyChain[EpisodeRecord] = StrategyChain(
            "episodes",
            [
                Strategy("document-tables", lambda: parse_episodes_from_html(document.content, self.debug)),
                Strategy("season-sections", self._from_sections),
            ],
        )
        outcome = await chain.run()
        return dedupe_episodes(outcome.records), outcome, document.source

    async def backfill_summaries(self, episodes: list[EpisodeRecord], policy: RateLimitPolicy) -> list[EpisodeRecord]:
        """Fill missing summaries from each episode article's lead section."""
        filled: list[EpisodeRecord] = []
        for episode in episodes:
            if not episode.summary:
                summary = await fetch_episode_summary(self.fetcher, episode.title)
                episode = episode.model_copy(update={"summary": summary or SUMMARY_PLACEHOLDER})
                await policy.pause()
            filled.append(episode)
        return filled

    async def run(self) -> PipelineResult:
        config = get_config()
        with with_pipeline_context("episodes") as log:
            try:
                vocabulary = self.vocabulary
                episodes, outcome, source = await self.parse()
                self._require_records(episodes, outcome)
                log.info("Parsed episodes", episodes=len(episodes), strategy=outcome.strategy, source=source)

                queue = self._queue(config.episode_enrich_limit, config.episode_delay)
                episodes = await self.backfill_summaries(episodes, queue.policy)
                episodes, report = await queue.run(
                    episodes, vocabulary, eligible=lambda episode: episode.summary != SUMMARY_PLACEHOLDER
                )

                validation = self._validate(episodes)
                written = self.writer.write(self.dataset, episodes)
                written.append(self.writer.write_topics(vocabulary))
            finally:
                await self.close()

        return PipelineResult(
            dataset=self.dataset,
            records=episodes,
            strategy=outcome.strategy,
            attempted=outcome.attempted,
            enrichment=report,
            validation=validation,
            written=written,
            source=source,
        )


class QuotePipeline(DatasetPipeline):
    """Wikiquote season pages → quotes.json / quotes.js."""

    dataset = "quotes"
    schema = QUOTE_SCHEMA

    async def _from_season_pages(self) -> list[QuoteRecord]:
        pause = RateLimitPolicy(delay_between_calls=get_config().page_delay)
        quotes: list[QuoteRecord] = []
        for season in season_numbers():
            quotes.extend(await harvest_season(self.fetcher, season, self.debug))
            await pause.pause()
        return quotes

    async def _from_base_page(self) -> list[QuoteRecord]:
        return await harvest_base_page(self.fetcher, self.debug)

    def _merge_enriched_duplicates(self, quotes: list[QuoteRecord]) -> list[QuoteRecord]:
        """Enrichment can rewrite episodeTitle and season, so keys are made unique again."""
        merged = dedupe_quotes(quotes)
        if len(merged) < len(quotes):
            self.logger.warning(
                "Enriched quotes collided on their dedup key", before=len(quotes), after=len(merged)
            )
        return merged

    async def parse(self) -> tuple[list[QuoteRecord], ChainOutcome[QuoteRecord]]:
        chain: StrategyChain[QuoteRecord] = StrategyChain(
            "quotes",
            [Strategy("season-pages", self._from_season_pages), Strategy("base-page", self._from_base_page)],
        )
        outcome = await chain.run()
        return dedupe_quotes(outcome.records), outcome

    async def run(self) -> PipelineResult:
        config = get_config()
        with with_pipeline_context("quotes") as log:
            try:
                quotes, outcome = await self.parse()
                self._require_records(quotes, outcome)
                log.info("Parsed quotes", quotes=len(quotes), strategy=outcome.strategy)

                queue = self._queue(config.quote_enrich_limit, config.quote_delay)
                quotes, report = await queue.run(quotes)
                quotes = self._merge_enriched_duplicates(quotes)

                validation = self._validate(quotes)
                written = self.writer.write(self.dataset, quotes)
            finally:
                await self.close()

        return PipelineResult(
            dataset=self.dataset,
            records=quotes,
            strategy=outcome.strategy,
            attempted=outcome.attempted,
            enrichment=report,
            validation=validation,
            written=written,
        )
