"""Typer CLI definition for loopmatch."""

import asyncio
import json
import logging
from pathlib import Path

import typer

from .config import generate_config, load_config
from .core import Engine
from .errors import ConfigError, EngineError
from .store.models import ContentLine, Goal, TemplateBundle

app = typer.Typer(help="Match intents to reusable affirmations and cache rendered audio")


def _configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


def _engine(config_path: Path | None) -> Engine:
    try:
        return Engine.from_config(load_config(config_path))
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


ConfigOption = typer.Option(None, "-c", "--config", help="Path to config.toml")
DebugOption = typer.Option(False, "--debug", help="Show verbose logging")


@app.command()
def match(
    intent: str = typer.Argument(..., help="What the user wants from the session"),
    goal: Goal = typer.Option(Goal.CALM, "-g", "--goal", help="Goal category"),
    user: str | None = typer.Option(None, "-u", "--user", help="Requester id"),
    first_session: bool = typer.Option(
        False, "--first-session", help="Treat as the requester's first session"
    ),
    config: Path | None = ConfigOption,
    debug: bool = DebugOption,
) -> None:
    """Choose content for an intent and print the decision."""
    _configure_logging(debug)
    engine = _engine(config)

    async def _run():
        try:
            return await engine.match_or_generate(intent, goal, user, first_session)
        finally:
            await engine.close()

    try:
        result = asyncio.run(_run())
    except EngineError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(
        f"tier={result.tier.value} confidence={result.confidence:.2f} "
        f"cost=${result.cost:.2f} log={result.log_id}"
    )
    for text in result.content_texts:
        typer.echo(f"  {text}")


@app.command()
def render(
    texts: list[str] = typer.Argument(..., help="Text to render; several lines render one session"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice (from config if omitted)"),
    pace: str | None = typer.Option(None, "-p", "--pace", help="slow or normal"),
    spacing_ms: int | None = typer.Option(
        None, "-s", "--spacing-ms", help="Silence between session lines (from config if omitted)"
    ),
    config: Path | None = ConfigOption,
    debug: bool = DebugOption,
) -> None:
    """Render text to audio, reusing the cache when possible."""
    _configure_logging(debug)
    engine = _engine(config)
    try:
        if len(texts) == 1:
            reference = asyncio.run(engine.get_or_render_audio(texts[0], voice, pace))
        else:
            reference = asyncio.run(engine.render_session(texts, voice, pace, spacing_ms))
    except (EngineError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    status = "HIT" if reference.cache_hit else "MISS"
    typer.echo(f"[{status}] {reference.url} ({reference.duration_ms} ms)")


@app.command("cache-stats")
def cache_stats(
    stale: bool = typer.Option(False, "--stale", help="Also list eviction candidates"),
    config: Path | None = ConfigOption,
) -> None:
    """Show audio cache size and access statistics."""
    engine = _engine(config)
    stats = engine.audio_store.stats()
    typer.echo(
        f"{stats['entries']} entries, {stats['total_bytes'] / 1024 / 1024:.2f} MB, "
        f"{stats['total_accesses']} hits"
    )
    if stale:
        for entry in engine.audio_store.stale_entries():
            typer.echo(
                f"  {entry.cache_key[:12]} last used {entry.last_accessed_at:%Y-%m-%d} "
                f"({entry.access_count} hits)"
            )


@app.command()
def costs(config: Path | None = ConfigOption) -> None:
    """Show spend per tier and savings against always generating."""
    engine = _engine(config)
    summary = engine.cost_summary()
    for tier, row in summary["tiers"].items():
        typer.echo(f"{tier:>10}: {row['count']:5d} requests  ${row['cost']:.2f}")
    typer.echo(f"total ${summary['total_cost']:.2f}, saved ${summary['saved']:.2f}")


@app.command()
def seed(
    file: Path = typer.Argument(..., exists=True, help="JSON file with lines and templates"),
    config: Path | None = ConfigOption,
) -> None:
    """Load curated lines and templates from a JSON file.

    The file holds ``{"lines": [...], "templates": [...]}`` where each
    entry uses the ContentLine / TemplateBundle field names.
    """
    engine = _engine(config)
    data = json.loads(file.read_text())
    lines = [ContentLine(**line) for line in data.get("lines", [])]
    templates = [TemplateBundle(**t) for t in data.get("templates", [])]

    engine.content_store.add_lines(lines)
    for template in templates:
        engine.content_store.add_template(template)
    typer.echo(f"Seeded {len(lines)} lines and {len(templates)} templates")


@app.command("init-config")
def init_config(
    path: Path | None = typer.Option(None, "-o", "--output", help="Where to write it"),
) -> None:
    """Write a commented default config file."""
    written = generate_config(path)
    typer.echo(f"Wrote {written}")
