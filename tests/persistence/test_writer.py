# ABOUTME: Tests for the dataset writer and the dataset/topic readers
# ABOUTME: JSON and script outputs, alias keys, refusal to write empty sets, and format errors on read

import json
import os

import pytest

from seinfeld_tonight.core.models import EpisodeRecord, QuoteRecord, TopicVocabulary
from seinfeld_tonight.persistence.writer import (
    DatasetFormatError,
    DatasetWriter,
    EmptyDatasetError,
    load_dataset,
    load_topics,
    script_binding,
)


class TestDatasetWriter:
    def test_writes_json_and_script(self, tmp_path):
        writer = DatasetWriter(tmp_path / "data")
        quotes = [QuoteRecord(id="wq-1", text="Serenity now!", speaker="Frank", episode_title="The Serenity Now")]

        json_path, js_path = writer.write("quotes", quotes)

        stored = json.loads(json_path.read_text(encoding="utf-8"))
        assert stored == [
            {
                "id": "wq-1",
                "text": "Serenity now!",
                "speaker": "Frank",
                "listener": "",
                "situation": "",
                "episodeTitle": "The Serenity Now",
                "season": None,
                "episode": None,
                "source": "Wikiquote",
            }
        ]
        script = js_path.read_text(encoding="utf-8")
        assert script.startswith("window.__QUOTES__ = ")
        assert script.rstrip().endswith(";")
        assert json.loads(script[len("window.__QUOTES__ = ") :].rstrip().rstrip(";")) == stored

    def test_replaces_existing_files_without_leftovers(self, tmp_path):
        writer = DatasetWriter(tmp_path)
        writer.write("episodes", [EpisodeRecord(id="ep-1", title="The Pen")])
        writer.write("episodes", [EpisodeRecord(id="ep-1", title="The Dog")])

        assert json.loads((tmp_path / "episodes.json").read_text())[0]["title"] == "The Dog"
        assert sorted(os.listdir(tmp_path)) == ["episodes.js", "episodes.json"]

    def test_empty_dataset_refused(self, tmp_path):
        existing = tmp_path / "quotes.json"
        existing.write_text("[1]")

        with pytest.raises(EmptyDatasetError):
            DatasetWriter(tmp_path).write("quotes", [])

        assert existing.read_text() == "[1]"
        assert not (tmp_path / "quotes.js").exists()

    def test_write_topics(self, tmp_path):
        path = DatasetWriter(tmp_path).write_topics(TopicVocabulary.from_labels(["Dating", "Food"]))

        assert path.name == "topics.js"
        assert path.read_text().startswith("window.__TOPICS__ = [")

    def test_script_binding(self):
        assert script_binding("__X__", "[]") == "window.__X__ = [];\n"


class TestLoadTopics:
    def test_order_preserved_and_repeats_dropped(self, tmp_path):
        path = tmp_path / "topics.json"
        path.write_text('["Food", "Dating", "Food", " "]')

        assert load_topics(path).labels == ("Food", "Dating")

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "topics.json"
        path.write_text('{"topics": ["Food"]}')

        with pytest.raises(DatasetFormatError):
            load_topics(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_topics(tmp_path / "missing.json")


class TestLoadDataset:
    def test_reads_raw_records(self, tmp_path):
        path = tmp_path / "quotes.json"
        path.write_text('[{"id": "wq-1"}, "odd"]')

        assert load_dataset(path) == [{"id": "wq-1"}, "odd"]

    @pytest.mark.parametrize("content", ["{not json", '{"id": "wq-1"}'])
    def test_format_errors(self, tmp_path, content):
        path = tmp_path / "quotes.json"
        path.write_text(content)

        with pytest.raises(DatasetFormatError):
            load_dataset(path)
