# ABOUTME: Enrichment client for the chat completion service with a strict JSON contract
# ABOUTME: Tolerant response parsing, per-field type checks, retries and a sequential rate-limited queue

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx

from seinfeld_tonight.config import get_config
from seinfeld_tonight.core.models import EpisodeRecord, QuoteRecord, TopicVocabulary
from seinfeld_tonight.utils.logging import get_logger, log_api_call
from seinfeld_tonight.utils.retry import (
    EnrichmentError,
    EnrichmentParseError,
    EnrichmentResponseError,
    RateLimitPolicy,
    enrichment_retry,
)

R = TypeVar("R", EpisodeRecord, QuoteRecord)

logger = get_logger(__name__)

EPISODE_SYSTEM_PROMPT = (
    "You label Seinfeld episode summaries with a short subtitle and trigger topics. "
    "The subtitle is a short description of the episode (1 sentence). "
    'Respond with strict JSON in the shape {"subtitle": string, "topics": string[]}. '
    "Use only topics from the provided list. Use an empty string and empty array if unknown."
)

QUOTE_SYSTEM_PROMPT = (
    "You enrich Seinfeld quotes with metadata. "
    'Respond with strict JSON: {"episodeTitle": string, "season": number|null, "episode": number|null, '
    '"listener": string, "situation": string}. Use empty strings or null if unknown.'
)

_DECODER = json.JSONDecoder()
MISSING = object()


class ParseStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"  # recovered from an embedded {...} substring
    FAILED = "failed"


@dataclass(frozen=True)
class ParsedContent:
    status: ParseStatus
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is not ParseStatus.FAILED


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def parse_enrichment_content(content: str | None) -> ParsedContent:
    """Interpret a completion as a JSON object.

    The whole text is tried first, then the first balanced ``{...}`` object embedded
    in it (models sometimes wrap JSON in prose or code fences). Anything else is FAILED.
    """
    text = (content or "").strip()
    if not text:
        return ParsedContent(ParseStatus.FAILED)

    data = _load_object(text)
    if data is not None:
        return ParsedContent(ParseStatus.OK, data)

    data = _first_embedded_object(text)
    if data is not None:
        return ParsedContent(ParseStatus.DEGRADED, data)
    return ParsedContent(ParseStatus.FAILED)


def _first_embedded_object(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    while start != -1:
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except ValueError:
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


# Field coercion: each returns (value, arrived_with_expected_type)


def coerce_text(value: Any) -> tuple[str, bool]:
    if isinstance(value, str):
        return value.strip(), True
    return "", False


def coerce_number(value: Any) -> tuple[int | None, bool]:
    """Positive whole numbers are kept; null is an explicit "unknown"."""
    if value is None:
        return None, True
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None, False
    if isinstance(value, float) and not value.is_integer():
        return None, False
    return (int(value), True) if value > 0 else (None, False)


def coerce_topics(value: Any, vocabulary: TopicVocabulary) -> tuple[list[str], bool]:
    if isinstance(value, list):
        return vocabulary.restrict(value), True
    return [], False


def episode_update(data: dict[str, Any], vocabulary: TopicVocabulary) -> tuple[dict[str, Any], int]:
    """Fields to merge into an episode plus the number that arrived well-typed."""
    subtitle, subtitle_ok = coerce_text(data.get("subtitle", MISSING))
    topics, topics_ok = coerce_topics(data.get("topics", MISSING), vocabulary)
    return {"subtitle": subtitle, "topics": topics}, subtitle_ok + topics_ok


def quote_update(data: dict[str, Any]) -> tuple[dict[str, Any], int]:
    """Fields to merge into a quote plus the number that arrived well-typed."""
    update: dict[str, Any] = {}
    recognized = 0
    for key, attribute in (("episodeTitle", "episode_title"), ("listener", "listener"), ("situation", "situation")):
        update[attribute], ok = coerce_text(data.get(key, MISSING))
        recognized += ok
    for key in ("season", "episode"):
        update[key], ok = coerce_number(data.get(key, MISSING))
        recognized += ok
    return update, recognized


class EnrichmentStatus(str, Enum):
    ENRICHED = "enriched"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class EnrichmentResult(Generic[R]):
    record: R
    status: EnrichmentStatus


class EnrichmentClient:
    """Chat completion client that adds labels and attribution to parsed records.

    Without a credential every call is a no-op. Failures of any kind are logged and
    the record comes back unchanged; ``EnrichmentError`` never escapes ``enrich``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        client: httpx.AsyncClient | None = None,
        policy: RateLimitPolicy | None = None,
    ):
        config = get_config()
        self.api_key = config.openai_api_key if api_key is None else api_key
        self.model = model or config.openai_model
        self.base_url = (base_url or config.openai_base_url).rstrip("/")
        self.temperature = config.enrichment_temperature if temperature is None else temperature
        self.policy = policy or RateLimitPolicy(
            max_attempts=config.enrichment_max_attempts, backoff_step=config.enrichment_backoff
        )
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(timeout=config.request_timeout)
        self.logger = get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/chat/completions"

    async def __aenter__(self) -> "EnrichmentClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    @log_api_call("chat_completions")
    async def _post(self, body: dict[str, Any]) -> str:
        response = await self.http_client.post(
            self.completions_url,
            json=body,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        if not response.is_success:
            raise EnrichmentResponseError(
                f"Service error: {response.status_code} {response.text[:200]}", status_code=response.status_code
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise EnrichmentParseError(f"Response body is not JSON: {e}") from e

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise EnrichmentParseError("Response has no completion content") from e
        return content if isinstance(content, str) else ""

    async def complete(self, system_prompt: str, user_content: dict[str, Any]) -> str:
        """Send one completion request, retrying network failures per the policy."""
        body = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": json.dumps(user_content)},
            ],
        }
        return await enrichment_retry(self.policy)(self._post)(body)

    async def _request_fields(self, label: str, system_prompt: str, user_content: dict[str, Any]) -> dict[str, Any] | None:
        try:
            content = await self.complete(system_prompt, user_content)
        except EnrichmentError as e:
            self.logger.warning("Enrichment request failed", record=label, error=str(e), error_type=type(e).__name__)
            return None

        parsed = parse_enrichment_content(content)
        if not parsed.ok:
            self.logger.warning("Failed to parse enrichment content", record=label)
            return None
        if parsed.status is ParseStatus.DEGRADED:
            self.logger.debug("Recovered JSON object from mixed completion", record=label)
        return parsed.data

    def _merge(self, record: R, label: str, update: dict[str, Any], recognized: int) -> EnrichmentResult[R]:
        if recognized == 0:
            self.logger.warning("Enrichment response had no usable fields", record=label)
            return EnrichmentResult(record, EnrichmentStatus.FAILED)
        return EnrichmentResult(record.model_copy(update=update), EnrichmentStatus.ENRICHED)

    async def attempt_episode(self, record: EpisodeRecord, vocabulary: TopicVocabulary) -> EnrichmentResult[EpisodeRecord]:
        if not self.enabled:
            return EnrichmentResult(record, EnrichmentStatus.SKIPPED)
        label = record.id or record.title
        data = await self._request_fields(
            label,
            EPISODE_SYSTEM_PROMPT,
            {"title": record.title, "summary": record.summary, "topics": list(vocabulary.labels)},
        )
        if data is None:
            return EnrichmentResult(record, EnrichmentStatus.FAILED)
        update, recognized = episode_update(data, vocabulary)
        return self._merge(record, label, update, recognized)

    async def attempt_quote(self, record: QuoteRecord) -> EnrichmentResult[QuoteRecord]:
        if not self.enabled:
            return EnrichmentResult(record, EnrichmentStatus.SKIPPED)
        label = record.id or record.text[:40]
        data = await self._request_fields(label, QUOTE_SYSTEM_PROMPT, {"quote": record.text, "speaker": record.speaker})
        if data is None:
            return EnrichmentResult(record, EnrichmentStatus.FAILED)
        update, recognized = quote_update(data)
        return self._merge(record, label, update, recognized)

    async def attempt(self, record: R, context: TopicVocabulary | None = None) -> EnrichmentResult[R]:
        if isinstance(record, EpisodeRecord):
            return await self.attempt_episode(record, context or TopicVocabulary())  # type: ignore[return-value]
        return await self.attempt_quote(record)  # type: ignore[return-value]

    async def enrich(self, record: R, context: TopicVocabulary | None = None) -> R:
        """Return the record with enrichment fields merged in, or unchanged on any failure."""
        return (await self.attempt(record, context)).record


@dataclass
class EnrichmentReport:
    total: int = 0
    attempted: int = 0
    enriched: int = 0
    failed: int = 0
    skipped: int = 0


class EnrichmentQueue:
    """Sequential enrichment of a record set under a rate-limit policy.

    Only the first ``limit`` records are sent unless ``enrich_all`` is set; results are
    merged back by id so the output order is the input order.
    """

    def __init__(
        self,
        client: EnrichmentClient,
        policy: RateLimitPolicy | None = None,
        limit: int | None = None,
        enrich_all: bool = False,
    ):
        self.client = client
        self.policy = policy or client.policy
        self.limit = limit
        self.enrich_all = enrich_all

    def targets(self, records: Sequence[R]) -> list[R]:
        if self.enrich_all or self.limit is None or len(records) <= self.limit:
            return list(records)
        logger.warning(
            "Enrichment capped", enriching=self.limit, total=len(records), hint="use --enrich-all to enrich every record"
        )
        return list(records[: self.limit])

    async def run(
        self,
        records: Sequence[R],
        context: TopicVocabulary | None = None,
        eligible: Callable[[R], bool] | None = None,
    ) -> tuple[list[R], EnrichmentReport]:
        report = EnrichmentReport(total=len(records))
        if not self.client.enabled:
            logger.warning("Enrichment credential is not set; records are saved without enrichment")
            report.skipped = len(records)
            return list(records), report

        targets = self.targets(records)
        report.skipped = len(records) - len(targets)

        enriched_by_id: dict[str, R] = {}
        for record in targets:
            if eligible is not None and not eligible(record):
                report.skipped += 1
                continue
            report.attempted += 1
            result = await self.client.attempt(record, context)
            if result.status is EnrichmentStatus.ENRICHED:
                report.enriched += 1
                enriched_by_id[record.id] = result.record
            else:
                report.failed += 1
            await self.policy.pause()

        logger.info(
            "Enrichment finished",
            total=report.total,
            enriched=report.enriched,
            failed=report.failed,
            skipped=report.skipped,
        )
        return [enriched_by_id.get(record.id, record) for record in records], report
