"""Unit tests for the CLI commands."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from newsfilter.cli.digest import cli
from newsfilter.items import TokenUsage
from newsfilter.llm import ScoreResult
from tests.helpers.items import make_item


FILTER_RULES = """\
positive_examples:
  - title: Coding agent update
    summary: A popular coding agent shipped a major update.
negative_examples:
  - title: Sponsored webinar
    summary: Register now for our marketing webinar series.
"""


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Config directory with only the required filter rules."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "filter_rules.yaml").write_text(FILTER_RULES, encoding="utf-8")
    return directory


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host environment and logging setup out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("DEEPSEEK_API_KEY", "TWITTER_BEARER_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    with patch("newsfilter.cli.digest.configure_logging"):
        yield


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_config(self, config_dir: Path) -> None:
        """A valid directory prints a summary."""
        result = CliRunner().invoke(cli, ["validate", "--config-dir", str(config_dir)])

        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "Positive examples: 1" in result.output
        assert "Recent days: 7" in result.output

    def test_invalid_config(self, config_dir: Path) -> None:
        """Schema errors are listed and the command fails."""
        (config_dir / "filter_rules.yaml").write_text(
            "positive_examples: []\nnegative_examples: []\n", encoding="utf-8"
        )

        result = CliRunner().invoke(cli, ["validate", "--config-dir", str(config_dir)])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
        assert "positive_examples" in result.output

    def test_missing_filter_rules(self, tmp_path: Path) -> None:
        """The filter rules file is required."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = CliRunner().invoke(cli, ["validate", "--config-dir", str(empty)])

        assert result.exit_code == 1
        assert "File not found" in result.output


class TestRunCommand:
    """Tests for the run command."""

    def test_missing_api_key(self, config_dir: Path) -> None:
        """The run stops before any network call without an API key."""
        with patch("newsfilter.cli.digest.TwitterCollector") as collector_cls:
            result = CliRunner().invoke(cli, ["run", "--config-dir", str(config_dir)])

        assert result.exit_code == 1
        assert "DEEPSEEK_API_KEY is not set" in result.output
        collector_cls.assert_not_called()

    def test_invalid_config(
        self, config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Configuration errors fail the run."""
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")
        (config_dir / "scoring.yaml").write_text("batch_size: 0\n", encoding="utf-8")

        result = CliRunner().invoke(cli, ["run", "--config-dir", str(config_dir)])

        assert result.exit_code == 1
        assert "batch_size" in result.output

    def test_full_run_writes_output(
        self, config_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Collected items are scored, selected and written as JSON."""
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")
        items = [make_item(f"item-{i}") for i in range(3)]
        scoring_client = MagicMock()
        scoring_client.score.side_effect = [
            ScoreResult(score=5.0 + i, reason="r", token_usage=TokenUsage())
            for i in range(3)
        ]
        output = tmp_path / "out" / "result.json"

        with (
            patch("newsfilter.cli.digest.TwitterCollector") as collector_cls,
            patch("newsfilter.cli.digest.ScoringClient", return_value=scoring_client),
        ):
            collector_cls.return_value.collect.return_value = items
            result = CliRunner().invoke(
                cli,
                ["run", "--config-dir", str(config_dir), "--output", str(output)],
            )

        assert result.exit_code == 0, result.output
        assert "Selected 1 of 3 items" in result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["scored"]) == 3
        assert len(data["filtered"]) == 1
        assert data["stats"]["total_news"] == 3
