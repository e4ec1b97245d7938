"""CLI commands for the feed ranking engine."""

import json
import logging
import sys
import uuid
from datetime import UTC, datetime
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from src.config.constants import COMPONENT_CLI
from src.config.loader import ConfigLoader, ConfigValidationError
from src.config.schemas.feed import FeedConfig
from src.data_model import parse_timestamp
from src.feed import (
    FeedRanker,
    FeedSession,
    ItemScorer,
    NewsItem,
    RankerMetrics,
    ScoringContext,
    build_profiles,
    extract_trending,
)
from src.interactions.models import InteractionLog, ItemCounters
from src.observability.logging import (
    bind_session_context,
    clear_session_context,
    configure_logging,
)
from src.settings import get_settings


logger = structlog.get_logger()


def _setup_logging(json_logs: bool | None, verbose: bool) -> None:
    """Configure logging from flags, falling back to environment settings."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.logging_level()
    json_format = settings.json_logs if json_logs is None else json_logs
    configure_logging(level=level, output=sys.stderr, json_format=json_format)


def _parse_now(value: str | None) -> datetime:
    """Parse the --now option."""
    if value is None:
        return datetime.now(UTC)
    parsed = parse_timestamp(value)
    if parsed is None:
        msg = f"Unparseable timestamp: {value!r}"
        raise click.BadParameter(msg, param_hint="--now")
    return parsed


def _load_config(config_path: Path | None, session_id: str) -> FeedConfig:
    """Load feed.yaml, exiting with a readable report on failure."""
    path = config_path or get_settings().feed_config_path
    if path is None:
        return FeedConfig()

    loader = ConfigLoader(session_id=session_id)
    try:
        return loader.load(path)
    except ConfigValidationError:
        click.echo(f"Configuration validation failed: {path}", err=True)
        for error in loader.validation_errors:
            click.echo(f"  - {error['loc']}: {error['msg']} [{error['type']}]", err=True)
        sys.exit(1)


def _load_items(items_path: Path) -> list[NewsItem]:
    """Read a JSON array of items (or an object with an ``items`` key)."""
    log = logger.bind(component=COMPONENT_CLI, items_path=str(items_path))
    try:
        payload = json.loads(items_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(f"Error: {items_path} is not valid JSON: {e}", err=True)
        sys.exit(1)

    if isinstance(payload, dict):
        payload = payload.get("items", [])
    if not isinstance(payload, list):
        click.echo(f"Error: {items_path} must contain a JSON array of items", err=True)
        sys.exit(1)

    items: list[NewsItem] = []
    for index, raw in enumerate(payload):
        try:
            items.append(NewsItem.model_validate(raw))
        except ValidationError as e:
            log.warning("item_rejected", index=index, error_count=e.error_count())
    log.info("items_loaded", items=len(items), rejected=len(payload) - len(items))
    return items


def _load_interactions(path: Path | None) -> InteractionLog:
    """Read an interaction log; malformed logs count as empty."""
    if path is None:
        return InteractionLog()
    try:
        return InteractionLog.model_validate_json(path.read_bytes())
    except ValidationError as e:
        logger.bind(component=COMPONENT_CLI).warning(
            "interaction_log_malformed",
            interactions_path=str(path),
            error_count=e.error_count(),
        )
        return InteractionLog()


def _emit(payload: object, output_path: Path | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output_path is None:
        click.echo(text)
    else:
        output_path.write_text(text + "\n", encoding="utf-8")


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Feed ranking and personalization engine CLI."""


@cli.command()
@click.option(
    "--items",
    "items_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON array of news items.",
)
@click.option(
    "--interactions",
    "interactions_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to an interaction log JSON file.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to feed.yaml (default: FEED_CONFIG_PATH or built-in defaults).",
)
@click.option(
    "--now",
    "now_value",
    type=str,
    default=None,
    help="Reference time as ISO-8601 (default: current time).",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the score jitter (default: FEED_RANDOM_SEED).",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of entries to output.",
)
@click.option(
    "--components",
    is_flag=True,
    help="Include the score breakdown (before jitter) for each entry.",
)
@click.option(
    "--out",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write JSON to this file instead of stdout.",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: FEED_JSON_LOGS).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def rank(  # noqa: PLR0913
    items_path: Path,
    interactions_path: Path | None,
    config_path: Path | None,
    now_value: str | None,
    seed: int | None,
    limit: int | None,
    components: bool,
    output_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Rank a snapshot of items and print the ordered entries as JSON."""
    _setup_logging(json_logs, verbose)
    session_id = uuid.uuid4().hex[:12]
    bind_session_context(session_id)
    log = logger.bind(component=COMPONENT_CLI, command="rank")

    try:
        now = _parse_now(now_value)
        config = _load_config(config_path, session_id)
        items = _load_items(items_path)
        interactions = _load_interactions(interactions_path)

        if seed is None:
            seed = get_settings().random_seed
        session = FeedSession(config=config, session_id=session_id, seed=seed)
        counters = {
            record.item_id: ItemCounters.from_record(record)
            for record in interactions.records
        }
        context = ScoringContext(
            session=session,
            trending=extract_trending(
                items,
                max_phrases=config.trending.max_phrases,
                lookback_hours=config.trending.lookback_hours,
                now=now,
            ),
            profiles=build_profiles(
                interactions,
                now=now,
                retention_days=config.affinity.retention_days,
                max_tracked=config.affinity.max_tracked,
            ),
            counters=counters,
            now=now,
        )
        metrics = RankerMetrics()
        entries = FeedRanker(context, metrics=metrics, run_id=session_id).rank(items)
        if limit is not None:
            entries = entries[:limit]

        payload: list[dict[str, object]] = []
        if components:
            by_id = {item.id: item for item in items}
            scorer = ItemScorer(context)
            for entry in entries:
                row: dict[str, object] = entry.model_dump()
                row["components"] = scorer.components(by_id[entry.item_id]).to_dict()
                payload.append(row)
        else:
            payload = [entry.model_dump() for entry in entries]

        _emit(payload, output_path)
        log.info("rank_command_complete", entries=len(entries), **metrics.to_dict())
    finally:
        clear_session_context()


@cli.command()
@click.option(
    "--items",
    "items_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON array of news items.",
)
@click.option(
    "--max",
    "max_phrases",
    type=click.IntRange(min=1, max=100),
    default=None,
    help="Maximum number of trending entries (default: from config).",
)
@click.option(
    "--lookback",
    "lookback_hours",
    type=click.FloatRange(min=0.0, min_open=True),
    default=None,
    help="Only consider items published within this many hours.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to feed.yaml (default: FEED_CONFIG_PATH or built-in defaults).",
)
@click.option(
    "--now",
    "now_value",
    type=str,
    default=None,
    help="Reference time as ISO-8601 (default: current time).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: FEED_JSON_LOGS).",
)
def trending(  # noqa: PLR0913
    items_path: Path,
    max_phrases: int | None,
    lookback_hours: float | None,
    config_path: Path | None,
    now_value: str | None,
    json_logs: bool | None,
) -> None:
    """Extract trending phrases from a snapshot and print them as JSON."""
    _setup_logging(json_logs, verbose=False)
    session_id = uuid.uuid4().hex[:12]
    now = _parse_now(now_value)
    config = _load_config(config_path, session_id)
    items = _load_items(items_path)

    phrases = extract_trending(
        items,
        max_phrases=max_phrases or config.trending.max_phrases,
        lookback_hours=lookback_hours or config.trending.lookback_hours,
        now=now,
    )
    _emit([p.to_dict() for p in phrases], None)


@cli.command()
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to feed.yaml.",
)
def validate(config_path: Path) -> None:
    """Validate a feed.yaml without ranking anything."""
    configure_logging(json_format=False)
    loader = ConfigLoader()

    try:
        config = loader.load(config_path)
    except ConfigValidationError:
        click.echo("Configuration validation failed:", err=True)
        for error in loader.validation_errors:
            click.echo(f"  - {error['loc']}: {error['msg']} [{error['type']}]", err=True)
        sys.exit(1)

    click.echo("Configuration is valid!")
    click.echo(f"  Version: {config.version}")
    click.echo(f"  Page size: {config.session.page_size}")
    click.echo(f"  Checksum: {loader.checksum}")


if __name__ == "__main__":
    cli()
