"""Basic tests for the seinfeld-tonight CLI."""

import json

import pytest
from asyncclick.testing import CliRunner

from seinfeld_tonight.core.models import QuoteRecord
from seinfeld_tonight.main import app as main


def test_main_function_exists():
    """Test that the main function exists and is callable."""
    assert callable(main)


@pytest.mark.asyncio
async def test_main_command_help(tmp_path, monkeypatch):
    """Test that main command can show help."""
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = await runner.invoke(main, ["--help"])

    assert result.exit_code == 0
    assert "Seinfeld Tonight" in result.output
    for command in ("episodes", "quotes", "validate", "logging-status"):
        assert command in result.output


@pytest.mark.asyncio
async def test_main_with_logging_status(tmp_path, monkeypatch):
    """Test that logging-status command works."""
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    result = await runner.invoke(main, ["logging-status"])

    assert result.exit_code == 0
    assert "Logging Configuration" in result.output


class TestValidateCommand:
    """The validate command exits non-zero when any violation is found."""

    def _write(self, data_dir, records) -> None:
        (data_dir / "quotes.json").write_text(json.dumps(records), encoding="utf-8")

    @pytest.mark.asyncio
    async def test_valid_dataset(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        self._write(tmp_path, [QuoteRecord(id="wq-1", text="Hello, Newman.").model_dump(by_alias=True)])

        result = await CliRunner().invoke(main, ["validate", "quotes", "--data-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert "validation passed" in result.output

    @pytest.mark.asyncio
    async def test_violations_fail(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        record = QuoteRecord(id="wq-1", text="Hello, Newman.").model_dump(by_alias=True)
        self._write(tmp_path, [record, record])

        result = await CliRunner().invoke(main, ["validate", "--data-dir", str(tmp_path)])

        assert result.exit_code == 1
        assert "duplicate_id" in result.output

    @pytest.mark.asyncio
    async def test_missing_dataset_fails(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = await CliRunner().invoke(main, ["validate", "episodes", "--data-dir", str(tmp_path)])

        assert result.exit_code == 1

    @pytest.mark.asyncio
    async def test_unknown_dataset_rejected(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = await CliRunner().invoke(main, ["validate", "characters"])

        assert result.exit_code == 2
