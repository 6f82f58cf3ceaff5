# ABOUTME: Required-field and uniqueness checks run before a record set is publishable
# ABOUTME: Collects every violation in one pass instead of stopping at the first

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel


@dataclass(frozen=True)
class RecordSchema:
    """Required keys, the field that must hold non-empty text, and the dedup key fields."""

    name: str
    required_keys: tuple[str, ...]
    text_field: str
    key_fields: tuple[str, ...]


QUOTE_SCHEMA = RecordSchema(
    name="quotes",
    required_keys=("id", "text", "speaker", "listener", "situation", "episodeTitle", "season", "episode", "source"),
    text_field="text",
    key_fields=("text", "episodeTitle", "season"),
)

EPISODE_SCHEMA = RecordSchema(
    name="episodes",
    required_keys=("id", "title", "season", "episode", "summary", "subtitle", "topics"),
    text_field="title",
    key_fields=("season", "episode", "title"),
)

SCHEMAS = {schema.name: schema for schema in (QUOTE_SCHEMA, EPISODE_SCHEMA)}


@dataclass(frozen=True)
class Violation:
    index: int
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationReport:
    schema: str
    checked: int
    violations: tuple[Violation, ...]

    @property
    def ok(self) -> bool:
        return not self.violations


def _as_mapping(record: Any) -> Mapping[str, Any] | None:
    if isinstance(record, BaseModel):
        return record.model_dump(by_alias=True)
    if isinstance(record, Mapping):
        return record
    return None


def validate_records(records: Sequence[Any], schema: RecordSchema) -> ValidationReport:
    """Check serialized records against a schema.

    Accepts pydantic records or plain mappings (e.g. a dataset read back from disk).
    The input is never modified.
    """
    violations: list[Violation] = []
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, ...]] = set()

    for index, raw in enumerate(records):
        record = _as_mapping(raw)
        if record is None:
            violations.append(Violation(index, "not_an_object", f"Record at index {index} is not an object"))
            continue

        for key in schema.required_keys:
            if key not in record:
                violations.append(Violation(index, "missing_key", f"Missing key '{key}' at index {index}"))

        record_id = record.get("id")
        if isinstance(record_id, str) and record_id.strip():
            if record_id in seen_ids:
                violations.append(Violation(index, "duplicate_id", f"Duplicate id '{record_id}' at index {index}"))
            seen_ids.add(record_id)
        elif "id" in record:
            violations.append(Violation(index, "invalid_id", f"Invalid id {record_id!r} at index {index}"))

        text = record.get(schema.text_field)
        if not isinstance(text, str) or not text.strip():
            violations.append(
                Violation(index, "invalid_text", f"Invalid {schema.text_field} at index {index}")
            )
            continue

        # repr keeps unhashable values read from disk comparable
        dedup_key = tuple(repr(record.get(field)) for field in schema.key_fields)
        if dedup_key in seen_keys:
            violations.append(
                Violation(index, "duplicate_key", f"Duplicate key ({', '.join(dedup_key)}) at index {index}")
            )
        seen_keys.add(dedup_key)

    return ValidationReport(schema=schema.name, checked=len(records), violations=tuple(violations))
