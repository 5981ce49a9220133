"""Command-line interface for mixpoint transition analysis."""

import json
import sys
from pathlib import Path

import click

from .analyzer import TransitionAnalyzer
from .compatibility import CompatibilityScorer
from .exceptions import FeatureFileError, InvalidFeatureError
from .instructions import InstructionFormatter
from .logging_config import get_logger, setup_logging
from .models import FeatureVector
from .playlist import generate_playlist
from .visualizer import render_transition

logger = get_logger(__name__)


def load_features(file_path: str) -> FeatureVector:
    """Loads a track's feature document from a JSON file.

    Args:
        file_path: Path to a JSON object in the feature store layout.

    Returns:
        FeatureVector: The validated features. The file stem is used as the
        track id when the document has none.

    Raises:
        FeatureFileError: If the file cannot be read, decoded or validated.
    """
    path = Path(file_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Failed to read %s: %s", file_path, e)
        raise FeatureFileError(f"Unable to load feature file: {file_path}") from e

    if isinstance(data, dict) and not any(k in data for k in ("id", "trackId", "track_id")):
        data = {**data, "trackId": path.stem}
    try:
        return FeatureVector.from_dict(data)
    except InvalidFeatureError as e:
        logger.debug("Invalid features in %s: %s", file_path, e)
        raise FeatureFileError(f"Unable to load feature file: {file_path}") from e


def _load_all(file_paths):
    try:
        return [load_features(p) for p in file_paths]
    except FeatureFileError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def format_compatibility(score) -> str:
    """Format a compatibility breakdown as a single text line."""
    return (
        f"overall {score.overall:.2f} (tempo {score.tempo:.2f}, key {score.key:.2f}, "
        f"energy {score.energy:.2f}, spectral {score.spectral:.2f}, rhythm {score.rhythm:.2f})"
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """mixpoint - Track compatibility and transition planning for DJ mixing."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("track_a")
@click.argument("track_b")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
def compare(track_a, track_b, output_format):
    """Score the compatibility of two tracks.

    Example:
        mixpoint compare track1.json track2.json
    """
    a, b = _load_all([track_a, track_b])
    score = CompatibilityScorer().score(a, b)

    if output_format == "json":
        output = {"track1": a.track_id, "track2": b.track_id, **score.to_dict()}
        click.echo(json.dumps(output, indent=2))
    else:
        click.echo(f"{a.display_name} ↔ {b.display_name}")
        click.echo(f"Compatibility: {format_compatibility(score)}")


@cli.command()
@click.argument("from_track")
@click.argument("to_track")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@click.option("--visual", is_flag=True, help="Render timelines of the candidate points")
def transition(from_track, to_track, output_format, visual):
    """Find transition points and mixing instructions from one track into another.

    Example:
        mixpoint transition outgoing.json incoming.json --visual
    """
    a, b = _load_all([from_track, to_track])
    analysis = TransitionAnalyzer().analyze(a, b)
    instructions = InstructionFormatter().format(analysis, a, b)

    if output_format == "json":
        output = {
            "from": a.track_id,
            "to": b.track_id,
            "analysis": analysis.to_dict(),
            "instructions": instructions,
        }
        click.echo(json.dumps(output, indent=2))
        return

    if visual:
        render_transition(a, b, analysis)
        click.echo()
    else:
        click.echo(f"Transition: {a.display_name} → {b.display_name}")
    for line in instructions:
        click.echo(line)


@cli.command()
@click.argument("seed")
@click.argument("candidates", nargs=-1, required=True)
@click.option("--limit", default=10, type=int, help="Maximum results (default: 10)")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
def rank(seed, candidates, limit, output_format):
    """Rank candidate tracks by compatibility with a seed track.

    Example:
        mixpoint rank seed.json library/*.json --limit 5
    """
    seed_track, *pool = _load_all([seed, *candidates])
    ranked = CompatibilityScorer().find_compatible(seed_track, pool, limit=limit)

    if output_format == "json":
        output = [{"track": track.track_id, **score.to_dict()} for track, score in ranked]
        click.echo(json.dumps(output, indent=2))
        return

    if not ranked:
        click.echo("No candidate tracks")
        return
    click.echo(f"Most compatible with {seed_track.display_name}:")
    for i, (track, score) in enumerate(ranked, 1):
        click.echo(f"{i}. {track.display_name}: {format_compatibility(score)}")


@cli.command()
@click.argument("seed")
@click.argument("candidates", nargs=-1, required=True)
@click.option("--length", default=10, type=int, help="Playlist length including the seed")
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
def playlist(seed, candidates, length, output_format):
    """Build a playlist from a seed track with transitions between each pair.

    Example:
        mixpoint playlist seed.json library/*.json --length 8
    """
    seed_track, *pool = _load_all([seed, *candidates])
    items = generate_playlist(seed_track, pool, length=length)

    if output_format == "json":
        click.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return

    for item in items:
        line = f"{item.position + 1}. {item.track.display_name}"
        if item.compatibility:
            line += f" (compatibility {item.compatibility.overall:.2f})"
        click.echo(line)
        if item.transition_to:
            click.echo(f"   Transition: {item.transition_to.transition_type}")
            for instruction in item.instructions:
                click.echo(f"   {instruction}")


if __name__ == "__main__":
    cli()
