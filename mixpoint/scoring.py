"""Pure scoring functions and shared lookup tables for track compatibility."""

import math
from types import MappingProxyType
from typing import Mapping, Tuple

from .exceptions import InvalidFeatureError

# --- Shared tables ---

# Position on the circle of fifths. Minor keys follow the same cycle, offset by 12.
_FIFTHS_ORDER = ("C", "G", "D", "A", "E", "B", "F#", "C#", "G#", "D#", "A#", "F")

CIRCLE_OF_FIFTHS: Mapping[str, int] = MappingProxyType(
    {
        **{name: i for i, name in enumerate(_FIFTHS_ORDER)},
        **{name + "m": i + 12 for i, name in enumerate(_FIFTHS_ORDER)},
    }
)

_FLAT_TO_SHARP = MappingProxyType(
    {"Db": "C#", "Eb": "D#", "Gb": "F#", "Ab": "G#", "Bb": "A#", "Cb": "B", "Fb": "E"}
)

# (max difference, score) bands, checked in order
TEMPO_BANDS: Tuple[Tuple[float, float], ...] = ((0.0, 1.0), (5.0, 0.8), (10.0, 0.6), (20.0, 0.4))
TEMPO_FLOOR = 0.2

KEY_DISTANCE_BANDS: Tuple[Tuple[int, float], ...] = ((0, 1.0), (1, 0.8), (2, 0.6), (3, 0.4))
KEY_FLOOR = 0.2

# (outgoing section, incoming section) -> preference
STRUCTURAL_PREFERENCES: Mapping[Tuple[str, str], float] = MappingProxyType(
    {
        ("chorus", "intro"): 1.0,
        ("outro", "intro"): 0.9,
        ("verse", "verse"): 0.8,
        ("chorus", "verse"): 0.7,
        ("bridge", "intro"): 0.8,
    }
)

# Section pairs with a dedicated technique; everything else is beatmatched
STRUCTURAL_TRANSITION_TYPES: Mapping[Tuple[str, str], str] = MappingProxyType(
    {
        ("outro", "intro"): "echo_out",
        ("chorus", "intro"): "filter_fade",
        ("verse", "verse"): "beatmatch",
    }
)


def round_half_up(x: float) -> float:
    """Round to the nearest integer with .5 going up (8.5 -> 9)."""
    return float(math.floor(x + 0.5))


# --- Keys ---


def normalize_key(key: str) -> str:
    """Normalize a key name to sharp notation with a trailing ``m`` for minor.

    Raises:
        InvalidFeatureError: If the key cannot be parsed.
    """
    k = key.strip()
    minor = k.endswith("m") and len(k) > 1
    root = k[:-1] if minor else k
    if len(root) == 2 and root[1] in ("b", "#"):
        root = root[0].upper() + root[1]
    else:
        root = root.upper()
    root = _FLAT_TO_SHARP.get(root, root)
    name = root + ("m" if minor else "")
    if name not in CIRCLE_OF_FIFTHS:
        raise InvalidFeatureError(f"Unrecognized musical key: {key!r}")
    return name


def key_distance(key1: str, key2: str) -> int:
    """Distance between two keys on the circle of fifths."""
    diff = CIRCLE_OF_FIFTHS.get(key1, 0) - CIRCLE_OF_FIFTHS.get(key2, 0)
    return min(abs(diff), abs(diff + 12), abs(diff - 12))


def score_key_compatibility(key1: str, key2: str) -> float:
    """Score harmonic compatibility from circle-of-fifths distance."""
    distance = key_distance(key1, key2)
    for max_distance, score in KEY_DISTANCE_BANDS:
        if distance <= max_distance:
            return score
    return KEY_FLOOR


# --- Per-dimension compatibility ---


def score_tempo_compatibility(bpm1: float, bpm2: float) -> float:
    """Score tempo closeness in discrete BPM tolerance bands."""
    difference = abs(bpm1 - bpm2)
    for max_diff, score in TEMPO_BANDS:
        if difference <= max_diff:
            return score
    return TEMPO_FLOOR


def score_energy_compatibility(energy1: float, energy2: float) -> float:
    """Linear decay, reaching zero at an energy gap of 0.5."""
    return max(0.0, 1.0 - abs(energy1 - energy2) * 2)


def score_spectral_compatibility(centroid1: float, centroid2: float) -> float:
    """Relative spectral centroid closeness.

    The difference is normalized by the larger centroid, floored at 1 so that
    near-silent or missing centroids do not divide by zero. Below that floor
    the score falls off with the absolute difference instead of the ratio.
    """
    difference = abs(centroid1 - centroid2)
    normalized = difference / max(centroid1, centroid2, 1.0)
    return max(0.0, 1.0 - normalized)


def score_rhythm_compatibility(bpm1: float, bpm2: float) -> float:
    """Tempo ratio, used as a proxy for rhythmic similarity."""
    return min(bpm1, bpm2) / max(bpm1, bpm2)


def weighted_overall(
    tempo: float,
    key: float,
    energy: float,
    spectral: float,
    rhythm: float,
    weights: Tuple[float, float, float, float, float],
) -> float:
    """Combine dimension scores with (tempo, key, energy, spectral, rhythm) weights."""
    w_tempo, w_key, w_energy, w_spectral, w_rhythm = weights
    total = (
        tempo * w_tempo
        + key * w_key
        + energy * w_energy
        + spectral * w_spectral
        + rhythm * w_rhythm
    )
    # Float summation can land an ulp above 1.0
    return min(1.0, total)


# --- Transition scoring ---


def score_bpm_alignment(bpm1: float, bpm2: float, bpm_range: float) -> float:
    """Beat alignment quality, falling to zero at ``bpm_range`` BPM apart."""
    return max(0.0, 1.0 - abs(bpm1 - bpm2) / bpm_range)


def optimal_length_at(from_time: float) -> float:
    """Transition length in seconds, growing for later cue points (8-12s)."""
    return round_half_up(8.0 + min(4.0, from_time / 30.0))


def recommended_length(bpm: float, beat_score: float, energy_score: float) -> float:
    """16 beats at ``bpm``, scaled 0.5x-1.5x by beat and energy compatibility."""
    base_length = 60.0 / bpm * 16
    multiplier = 0.5 + (beat_score + energy_score) / 2
    return max(1.0, round_half_up(base_length * multiplier))


def transition_confidence(beat_score: float, energy_score: float, key_score: float) -> float:
    return min(1.0, beat_score * 0.4 + energy_score * 0.3 + key_score * 0.3)
