"""CLI commands for the news filter pipeline."""

import json
import logging
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path

import click
import structlog

from newsfilter import __version__
from newsfilter.collectors import TwitterCollector
from newsfilter.config import ConfigLoader, ConfigValidationError
from newsfilter.llm import BatchScorer, ChatCompletionClient, ScoringClient
from newsfilter.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from newsfilter.orchestrator import Orchestrator, OrchestratorResult
from newsfilter.recency import CollectionWindowProvider, RecencyWindow
from newsfilter.settings import get_settings


logger = structlog.get_logger()

DEFAULT_CONFIG_DIR = Path("config")


@dataclass
class RunOptions:
    """Options for the run command."""

    config_dir: Path
    output_path: Path | None
    json_logs: bool
    verbose: bool


def _echo_config_errors(error: ConfigValidationError) -> None:
    click.echo(f"Configuration validation failed: {error.file_path}", err=True)
    for detail in error.errors:
        location = detail["loc"] or "<root>"
        click.echo(f"  - {location}: {detail['msg']}", err=True)


def _write_output(result: OrchestratorResult, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str),
        encoding="utf-8",
    )


def _execute_run(options: RunOptions) -> None:
    run_id = str(uuid.uuid4())
    configure_logging(
        level=logging.DEBUG if options.verbose else logging.INFO,
        json_format=options.json_logs,
    )
    bind_run_context(run_id, command="run")
    log = logger.bind(component="cli")
    log.info("run_started", config_dir=str(options.config_dir))

    settings = get_settings()
    if not settings.deepseek_api_key:
        log.error("missing_api_key", variable="DEEPSEEK_API_KEY")
        click.echo("Error: DEEPSEEK_API_KEY is not set", err=True)
        sys.exit(1)

    loader = ConfigLoader(options.config_dir)
    try:
        filter_config = loader.load_filter_config()
        twitter_config = loader.load_twitter_source()
        scoring_config = loader.load_scoring_config()
    except ConfigValidationError as e:
        log.warning("config_load_failed", file_path=e.file_path, errors=e.errors)
        _echo_config_errors(e)
        sys.exit(1)

    window = RecencyWindow(CollectionWindowProvider(loader.load_collection_window))
    collector = TwitterCollector(
        twitter_config,
        bearer_token=settings.twitter_bearer_token,
        window=window,
    )
    items = collector.collect()

    scorer = BatchScorer(
        ScoringClient(ChatCompletionClient.from_settings(settings)),
        batch_size=scoring_config.batch_size,
    )
    result = Orchestrator(scorer, pricing=scoring_config.pricing).run(
        items, filter_config
    )

    stats = result.stats
    log.info(
        "run_completed",
        total=stats.total_news,
        valid=stats.valid_news,
        filtered=stats.filtered_count,
        filter_rate=round(stats.filter_rate, 1),
        duration_s=round(stats.duration, 2),
        estimated_cost_usd=round(stats.estimated_cost_usd, 6),
    )

    if options.output_path is not None:
        _write_output(result, options.output_path)
        log.info("output_written", path=str(options.output_path))

    click.echo(
        f"Selected {stats.filtered_count} of {stats.total_news} items "
        f"({stats.filter_rate:.1f}%). Run ID: {run_id}"
    )


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """News filter pipeline CLI."""


@cli.command()
@click.option(
    "--config-dir",
    "config_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_DIR,
    show_default=True,
    help="Directory holding filter_rules.yaml and the optional config files.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the scored and filtered items as JSON to this file.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def run(
    config_dir: Path,
    output_path: Path | None,
    json_logs: bool,
    verbose: bool,
) -> None:
    """Collect, score and select news items.

    Configuration and the API key are checked before any network call.
    """
    try:
        _execute_run(
            RunOptions(
                config_dir=config_dir,
                output_path=output_path,
                json_logs=json_logs,
                verbose=verbose,
            )
        )
    finally:
        clear_run_context()


@cli.command()
@click.option(
    "--config-dir",
    "config_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_DIR,
    show_default=True,
    help="Directory holding the configuration files.",
)
def validate(config_dir: Path) -> None:
    """Validate configuration files without running the pipeline."""
    configure_logging(json_format=False, level=logging.WARNING)
    loader = ConfigLoader(config_dir)

    try:
        filter_config = loader.load_filter_config()
        twitter_config = loader.load_twitter_source()
        scoring_config = loader.load_scoring_config()
    except ConfigValidationError as e:
        _echo_config_errors(e)
        sys.exit(1)

    window = CollectionWindowProvider(loader.load_collection_window).get()
    click.echo("Configuration is valid!")
    click.echo(f"  Positive examples: {len(filter_config.positive_examples)}")
    click.echo(f"  Negative examples: {len(filter_config.negative_examples)}")
    click.echo(f"  Accounts: {len(twitter_config.enabled_accounts)}")
    click.echo(f"  Batch size: {scoring_config.batch_size}")
    click.echo(f"  Recent days: {window.recent_days}")


if __name__ == "__main__":
    cli()
