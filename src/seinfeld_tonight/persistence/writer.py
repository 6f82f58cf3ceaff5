# ABOUTME: Dataset writer for the JSON and script-embedded record files read by the browser UI
# ABOUTME: Writes atomically and refuses to replace a dataset with an empty one

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from seinfeld_tonight.config import get_config
from seinfeld_tonight.core.models import EpisodeRecord, QuoteRecord, TopicVocabulary
from seinfeld_tonight.utils.logging import get_logger


class PersistenceError(Exception):
    """Base class for dataset read/write failures."""

    pass


class EmptyDatasetError(PersistenceError):
    """Raised instead of overwriting a dataset with zero records."""

    pass


class DatasetFormatError(PersistenceError):
    """Raised when a stored dataset or topic file is not the expected JSON shape."""

    pass


@dataclass(frozen=True)
class DatasetSpec:
    name: str
    record_type: type[BaseModel]
    global_name: str

    @property
    def adapter(self) -> TypeAdapter[Any]:
        return TypeAdapter(list[self.record_type])  # type: ignore[valid-type]


DATASETS: dict[str, DatasetSpec] = {
    "episodes": DatasetSpec("episodes", EpisodeRecord, "__EPISODES__"),
    "quotes": DatasetSpec("quotes", QuoteRecord, "__QUOTES__"),
}
TOPICS_GLOBAL = "__TOPICS__"

_topics_adapter = TypeAdapter(list[str])


def script_binding(global_name: str, json_text: str) -> str:
    """``window.<NAME> = <json>;`` for pages opened without fetch access."""
    return f"window.{global_name} = {json_text};\n"


def _atomic_write_many(contents: dict[Path, str]) -> None:
    """Write every file to a temp sibling first, then move them all into place."""
    staged: list[tuple[str, Path]] = []
    try:
        for path, text in contents.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            staged.append((temp_path, path))
        for temp_path, path in staged:
            os.replace(temp_path, path)
    finally:
        for temp_path, _ in staged:
            if os.path.exists(temp_path):
                os.unlink(temp_path)


class DatasetWriter:
    """Persist finished record sets under the data directory."""

    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir) if data_dir is not None else get_config().data_dir
        self.logger = get_logger(__name__)

    def paths_for(self, name: str) -> tuple[Path, Path]:
        return self.data_dir / f"{name}.json", self.data_dir / f"{name}.js"

    def write(self, name: str, records: list[BaseModel]) -> list[Path]:
        """Write ``<name>.json`` and ``<name>.js``.

        Raises:
            EmptyDatasetError: If ``records`` is empty; existing files are left untouched
        """
        spec = DATASETS[name]
        if not records:
            raise EmptyDatasetError(f"Refusing to write an empty {name} dataset")

        json_text = spec.adapter.dump_json(records, indent=2, by_alias=True).decode("utf-8")
        json_path, js_path = self.paths_for(name)
        _atomic_write_many({json_path: json_text, js_path: script_binding(spec.global_name, json_text)})

        self.logger.info("Wrote dataset", dataset=name, records=len(records), path=str(json_path))
        return [json_path, js_path]

    def write_topics(self, vocabulary: TopicVocabulary) -> Path:
        """Mirror the topic vocabulary to ``topics.js``."""
        path = self.data_dir / "topics.js"
        json_text = _topics_adapter.dump_json(list(vocabulary.labels), indent=2).decode("utf-8")
        _atomic_write_many({path: script_binding(TOPICS_GLOBAL, json_text)})
        return path


def load_topics(path: Path) -> TopicVocabulary:
    """Read an ordered JSON array of topic labels.

    Raises:
        FileNotFoundError: If the file does not exist
        DatasetFormatError: If the file is not an array of strings
    """
    try:
        labels = _topics_adapter.validate_json(Path(path).read_bytes())
    except ValidationError as e:
        raise DatasetFormatError(f"Topic file {path} must be a JSON array of strings") from e
    return TopicVocabulary.from_labels(labels)


def load_dataset(path: Path) -> list[Any]:
    """Read a written dataset as raw JSON values, without validating individual records.

    Raises:
        FileNotFoundError: If the file does not exist
        DatasetFormatError: If the file is not valid JSON or not an array
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DatasetFormatError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise DatasetFormatError(f"{path} is not an array")
    return data
