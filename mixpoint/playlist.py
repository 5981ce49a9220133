"""Seed-based playlist generation."""

from typing import List, Sequence

from .analyzer import TransitionAnalyzer
from .compatibility import CompatibilityScorer
from .config import DEFAULT_CONFIG, EngineConfig
from .instructions import InstructionFormatter
from .logging_config import get_logger
from .models import FeatureVector, PlaylistItem

logger = get_logger(__name__)


def generate_playlist(
    seed: FeatureVector,
    candidates: Sequence[FeatureVector],
    length: int = 10,
    config: EngineConfig = None,
) -> List[PlaylistItem]:
    """Builds a playlist starting from a seed track.

    The seed opens the playlist; the remaining slots are filled with the
    candidates most compatible with the seed. Each track except the last
    carries the analysis and instructions for mixing into the next one.

    Args:
        seed: Features of the seed track.
        candidates: Library tracks to choose from. Tracks sharing the seed's
            track_id are skipped.
        length: Total number of tracks, seed included.
        config: Engine configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        Playlist items ordered by position.
    """
    if length < 1:
        return []

    config = config or DEFAULT_CONFIG
    scorer = CompatibilityScorer(config)
    analyzer = TransitionAnalyzer(config)
    formatter = InstructionFormatter()

    pool = [
        c for c in candidates if seed.track_id is None or c.track_id != seed.track_id
    ]
    ranked = scorer.find_compatible(seed, pool, limit=length - 1)

    items = [PlaylistItem(track=seed, position=0)]
    for position, (track, score) in enumerate(ranked, 1):
        items.append(PlaylistItem(track=track, position=position, compatibility=score))

    for current, following in zip(items, items[1:]):
        current.transition_to = analyzer.analyze(current.track, following.track)
        current.instructions = formatter.format(
            current.transition_to, current.track, following.track
        )

    logger.info("Generated playlist of %d tracks from %s", len(items), seed.display_name)
    return items
