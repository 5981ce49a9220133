"""Configuration for mixpoint scoring and transition search parameters."""

from dataclasses import dataclass
from typing import Tuple

from .exceptions import ConfigError


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for compatibility scoring and transition analysis."""

    # Compatibility scoring weights (must sum to 1.0)
    weight_tempo: float = 0.30
    weight_key: float = 0.25
    weight_energy: float = 0.20
    weight_spectral: float = 0.15
    weight_rhythm: float = 0.10

    # BPM difference at which beat alignment reaches zero
    bpm_alignment_range: float = 20.0

    # Search windows into the incoming track (seconds)
    incoming_beat_window: float = 30.0
    incoming_segment_window: float = 60.0

    # Beat alignment search
    beat_strength_threshold: float = 0.6
    beat_point_limit: int = 10

    # Phrase boundary search (lengths in beats)
    phrase_lengths: Tuple[int, ...] = (8, 16, 32)
    phrase_score: float = 0.8
    phrase_point_limit: int = 5

    # Structural segment search
    structural_lead_time: float = 8.0
    structural_length: float = 16.0
    structural_point_limit: int = 3

    # Point combination
    duplicate_tolerance: float = 2.0
    optimal_point_limit: int = 5

    # Transition type decision thresholds
    beatmatch_threshold: float = 0.8
    echo_out_energy_threshold: float = 0.3
    filter_fade_key_threshold: float = 0.4

    # Library matching
    default_match_limit: int = 10

    def __post_init__(self):
        total = (
            self.weight_tempo
            + self.weight_key
            + self.weight_energy
            + self.weight_spectral
            + self.weight_rhythm
        )
        if abs(total - 1.0) > 1e-9:
            raise ConfigError(f"Compatibility weights must sum to 1.0, got {total:.4f}")
        if any(length <= 0 for length in self.phrase_lengths):
            raise ConfigError("Phrase lengths must be positive")


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
