# ABOUTME: Deduplication and id assignment for parsed records
# ABOUTME: First occurrence of a dedup key wins; survivors get dense 1-based ids in final order

from collections.abc import Callable, Hashable, Sequence
from typing import TypeVar

from seinfeld_tonight.core.models import EpisodeRecord, QuoteRecord

RecordT = TypeVar("RecordT", EpisodeRecord, QuoteRecord)

EPISODE_ID_PREFIX = "ep-"
QUOTE_ID_PREFIX = "wq-"


def dedupe_and_index(
    records: Sequence[RecordT],
    id_prefix: str,
    key: Callable[[RecordT], Hashable] | None = None,
) -> list[RecordT]:
    """Drop repeated records and assign ids.

    Later occurrences of a key are dropped silently. Ids are recomputed from scratch,
    so running this over its own output changes nothing. Input records are not mutated.
    """
    key_fn = key or (lambda record: record.dedup_key)
    seen: set[Hashable] = set()
    survivors: list[RecordT] = []
    for record in records:
        record_key = key_fn(record)
        if record_key in seen:
            continue
        seen.add(record_key)
        survivors.append(record)

    return [
        record.model_copy(update={"id": f"{id_prefix}{index}"}) for index, record in enumerate(survivors, start=1)
    ]


def dedupe_episodes(episodes: Sequence[EpisodeRecord]) -> list[EpisodeRecord]:
    return dedupe_and_index(episodes, EPISODE_ID_PREFIX)


def dedupe_quotes(quotes: Sequence[QuoteRecord]) -> list[QuoteRecord]:
    return dedupe_and_index(quotes, QUOTE_ID_PREFIX)
