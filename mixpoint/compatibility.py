"""Pairwise track compatibility scoring."""

from typing import List, Sequence, Tuple

from .config import DEFAULT_CONFIG, EngineConfig
from .logging_config import get_logger
from .models import CompatibilityScore, FeatureVector
from .scoring import (
    score_energy_compatibility,
    score_key_compatibility,
    score_rhythm_compatibility,
    score_spectral_compatibility,
    score_tempo_compatibility,
    weighted_overall,
)

logger = get_logger(__name__)


class CompatibilityScorer:
    """Scores how well two tracks mix along tempo, key, energy, spectral and rhythm."""

    def __init__(self, config: EngineConfig = None):
        """Initialize scorer with configuration.

        Args:
            config: Engine configuration. Uses DEFAULT_CONFIG if not provided.
        """
        self.config = config or DEFAULT_CONFIG

    @property
    def weights(self) -> Tuple[float, float, float, float, float]:
        cfg = self.config
        return (
            cfg.weight_tempo,
            cfg.weight_key,
            cfg.weight_energy,
            cfg.weight_spectral,
            cfg.weight_rhythm,
        )

    def score(self, a: FeatureVector, b: FeatureVector) -> CompatibilityScore:
        """Scores the compatibility of two tracks.

        Missing features read as their defaults, so every valid pair of
        feature vectors produces a score.

        Args:
            a: Features of the first track.
            b: Features of the second track.

        Returns:
            CompatibilityScore with every field in [0, 1].
        """
        tempo = score_tempo_compatibility(a.bpm, b.bpm)
        key = score_key_compatibility(a.key, b.key)
        energy = score_energy_compatibility(a.energy, b.energy)
        spectral = score_spectral_compatibility(a.centroid, b.centroid)
        rhythm = score_rhythm_compatibility(a.bpm, b.bpm)

        overall = weighted_overall(tempo, key, energy, spectral, rhythm, self.weights)

        return CompatibilityScore(
            overall=overall,
            tempo=tempo,
            key=key,
            energy=energy,
            spectral=spectral,
            rhythm=rhythm,
        )

    def find_compatible(
        self,
        seed: FeatureVector,
        candidates: Sequence[FeatureVector],
        limit: int = None,
    ) -> List[Tuple[FeatureVector, CompatibilityScore]]:
        """Ranks candidate tracks by compatibility with a seed track.

        Ties keep the candidates' input order.

        Args:
            seed: Features of the seed track.
            candidates: Features of the tracks to rank.
            limit: Maximum number of results. Uses config.default_match_limit
                if not provided.

        Returns:
            Up to ``limit`` (track, score) pairs, best first.
        """
        if limit is None:
            limit = self.config.default_match_limit
        scored = [(candidate, self.score(seed, candidate)) for candidate in candidates]
        scored.sort(key=lambda pair: pair[1].overall, reverse=True)
        logger.debug(
            "Ranked %d candidates against %s (limit %d)",
            len(scored),
            seed.display_name,
            limit,
        )
        return scored[: max(0, limit)]
