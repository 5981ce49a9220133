"""Transition analysis between an outgoing and an incoming track."""

from .config import DEFAULT_CONFIG, EngineConfig
from .logging_config import get_logger
from .models import FeatureVector, TransitionAnalysis
from .scoring import (
    recommended_length,
    score_energy_compatibility,
    score_key_compatibility,
    transition_confidence,
)
from .transitions import TransitionPointSearch

logger = get_logger(__name__)


class TransitionAnalyzer:
    """Combines point search and compatibility scores into a mixing recommendation."""

    def __init__(self, config: EngineConfig = None):
        """Initialize analyzer with configuration.

        Args:
            config: Engine configuration. Uses DEFAULT_CONFIG if not provided.
        """
        self.config = config or DEFAULT_CONFIG
        self.point_search = TransitionPointSearch(self.config)

    def analyze(self, from_track: FeatureVector, to_track: FeatureVector) -> TransitionAnalysis:
        """Analyzes the transition from one track into another.

        Args:
            from_track: Features of the outgoing track.
            to_track: Features of the incoming track.

        Returns:
            TransitionAnalysis with up to config.optimal_point_limit points.
        """
        beat_score = self.point_search.beat_alignment_score(from_track, to_track)
        energy_score = score_energy_compatibility(from_track.energy, to_track.energy)
        key_score = score_key_compatibility(from_track.key, to_track.key)

        points = self.point_search.search(from_track, to_track)[: self.config.optimal_point_limit]
        transition_type = self.determine_transition_type(beat_score, energy_score, key_score)

        analysis = TransitionAnalysis(
            optimal_points=points,
            beat_alignment_score=beat_score,
            energy_match_score=energy_score,
            key_compatibility_score=key_score,
            recommended_length=recommended_length(from_track.bpm, beat_score, energy_score),
            transition_type=transition_type,
            confidence=transition_confidence(beat_score, energy_score, key_score),
        )

        logger.debug(
            "Transition %s -> %s: type=%s, points=%d, confidence=%.2f",
            from_track.display_name,
            to_track.display_name,
            transition_type,
            len(points),
            analysis.confidence,
        )
        return analysis

    def determine_transition_type(
        self, beat_score: float, energy_score: float, key_score: float
    ) -> str:
        """Pick a technique from the three compatibility scores.

        High overall compatibility is beatmatched. Otherwise a poor energy
        match calls for an echo out, then a poor key match for a filter fade.
        """
        cfg = self.config
        overall = (beat_score + energy_score + key_score) / 3

        if overall > cfg.beatmatch_threshold:
            return "beatmatch"
        if energy_score < cfg.echo_out_energy_threshold:
            return "echo_out"
        if key_score < cfg.filter_fade_key_threshold:
            return "filter_fade"
        return "beatmatch"
