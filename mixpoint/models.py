"""Domain models for mixpoint."""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import InvalidFeatureError
from .scoring import normalize_key

SEGMENT_TYPES = ("intro", "verse", "chorus", "bridge", "outro")
TRANSITION_TYPES = ("beatmatch", "echo_out", "filter_fade", "quick_cut")

DEFAULT_TEMPO = 120.0
DEFAULT_KEY = "C"
DEFAULT_ENERGY = 0.5
DEFAULT_CENTROID = 0.0


def _check_unit(value: float, name: str):
    if not 0.0 <= value <= 1.0:
        raise InvalidFeatureError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class StructureSegment:
    """A labeled time range within a track."""

    start: float  # seconds
    end: float  # seconds
    type: str  # intro, verse, chorus, bridge, outro
    confidence: float = 1.0  # 0-1

    def __post_init__(self):
        if self.type not in SEGMENT_TYPES:
            raise InvalidFeatureError(f"Unknown segment type: {self.type!r}")
        if not self.start < self.end:
            raise InvalidFeatureError(
                f"Segment start must precede end ({self.start} >= {self.end})"
            )
        _check_unit(self.confidence, "Segment confidence")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StructureSegment":
        """Build a segment from a loosely typed mapping."""
        if not isinstance(data, Mapping):
            raise InvalidFeatureError(f"Segment must be an object, got {type(data).__name__}")
        try:
            return cls(
                start=float(data["start"]),
                end=float(data["end"]),
                type=str(data["type"]),
                confidence=float(data.get("confidence", 1.0)),
            )
        except KeyError as e:
            raise InvalidFeatureError(f"Segment is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise InvalidFeatureError(f"Malformed segment: {e}") from e


@dataclass(frozen=True)
class FeatureVector:
    """Immutable snapshot of one track's analyzed properties.

    Optional fields keep the value the upstream extractor produced (None when
    it produced nothing). Scoring code reads the ``bpm``, ``key``, ``energy``
    and ``centroid`` properties, which substitute the documented defaults.
    """

    tempo: Optional[float] = None  # BPM
    musical_key: Optional[str] = None  # e.g. "A", "F#m"
    energy_level: Optional[float] = None  # 0-1
    spectral_centroid: Optional[float] = None  # Hz, >= 0
    beat_positions: Tuple[float, ...] = ()  # seconds, strictly increasing
    structure_segments: Tuple[StructureSegment, ...] = ()
    track_id: Optional[str] = None
    title: Optional[str] = None
    artist: Optional[str] = None

    def __post_init__(self):
        # Frozen dataclass: normalize through object.__setattr__
        beats = tuple(float(b) for b in self.beat_positions)
        object.__setattr__(self, "beat_positions", beats)
        object.__setattr__(self, "structure_segments", tuple(self.structure_segments))

        if self.tempo is not None and not (math.isfinite(self.tempo) and self.tempo > 0):
            raise InvalidFeatureError(f"Tempo must be a positive number, got {self.tempo}")
        if self.energy_level is not None:
            _check_unit(self.energy_level, "Energy level")
        if self.spectral_centroid is not None and not self.spectral_centroid >= 0:
            raise InvalidFeatureError(
                f"Spectral centroid must be non-negative, got {self.spectral_centroid}"
            )
        if self.musical_key is not None:
            object.__setattr__(self, "musical_key", normalize_key(self.musical_key))

        for prev, cur in zip(beats, beats[1:]):
            if not cur > prev:
                raise InvalidFeatureError(
                    f"Beat positions must be strictly increasing ({prev} then {cur})"
                )
        for segment in self.structure_segments:
            if not isinstance(segment, StructureSegment):
                raise InvalidFeatureError("Structure segments must be StructureSegment instances")

    @property
    def bpm(self) -> float:
        return self.tempo if self.tempo is not None else DEFAULT_TEMPO

    @property
    def key(self) -> str:
        return self.musical_key if self.musical_key is not None else DEFAULT_KEY

    @property
    def energy(self) -> float:
        return self.energy_level if self.energy_level is not None else DEFAULT_ENERGY

    @property
    def centroid(self) -> float:
        return self.spectral_centroid if self.spectral_centroid is not None else DEFAULT_CENTROID

    @property
    def display_name(self) -> str:
        """Get display name for the track."""
        if self.artist and self.title:
            return f"{self.artist} - {self.title}"
        return self.title or self.track_id or "Unknown track"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureVector":
        """Build a feature vector from a stored feature document.

        Accepts the camelCase keys of the feature store (``musicalKey``,
        ``energyLevel``, ``beatPositions``...) as well as snake_case keys.

        Raises:
            InvalidFeatureError: If a field has the wrong shape or violates
                its invariant.
        """
        if not isinstance(data, Mapping):
            raise InvalidFeatureError(
                f"Feature document must be an object, got {type(data).__name__}"
            )

        def pick(*names):
            for name in names:
                if data.get(name) is not None:
                    return data[name]
            return None

        def number(*names) -> Optional[float]:
            value = pick(*names)
            if value is None:
                return None
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidFeatureError(f"{names[0]} must be a number, got {value!r}")
            return float(value)

        beats = pick("beatPositions", "beat_positions") or []
        if not isinstance(beats, (list, tuple)) or not all(
            isinstance(b, (int, float)) and not isinstance(b, bool) for b in beats
        ):
            raise InvalidFeatureError("beatPositions must be a list of numbers")

        raw_segments = pick("structureSegments", "structure_segments") or []
        if not isinstance(raw_segments, (list, tuple)):
            raise InvalidFeatureError("structureSegments must be a list")

        key = pick("musicalKey", "musical_key", "key")
        track_id = pick("trackId", "track_id", "id")
        title = pick("title")
        artist = pick("artist")

        return cls(
            tempo=number("tempo", "bpm"),
            musical_key=str(key) if key is not None else None,
            energy_level=number("energyLevel", "energy_level", "energy"),
            spectral_centroid=number("spectralCentroid", "spectral_centroid"),
            beat_positions=tuple(beats),
            structure_segments=tuple(StructureSegment.from_dict(s) for s in raw_segments),
            track_id=str(track_id) if track_id is not None else None,
            title=str(title) if title is not None else None,
            artist=str(artist) if artist is not None else None,
        )


@dataclass
class CompatibilityScore:
    """Pairwise compatibility between two tracks, every field in [0, 1]."""

    overall: float
    tempo: float
    key: float
    energy: float
    spectral: float
    rhythm: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class TransitionPoint:
    """A candidate (outgoing time, incoming time) pair for a mix."""

    from_track_time: float  # seconds into the outgoing track
    to_track_time: float  # seconds into the incoming track
    score: float  # 0-1
    type: str  # beatmatch, echo_out, filter_fade, quick_cut
    length: float  # seconds
    confidence: float  # 0-1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TransitionAnalysis:
    """Result of analyzing a transition between two tracks."""

    optimal_points: List[TransitionPoint]
    beat_alignment_score: float
    energy_match_score: float
    key_compatibility_score: float
    recommended_length: float  # seconds
    transition_type: str
    confidence: float

    @property
    def best_point(self) -> Optional[TransitionPoint]:
        return self.optimal_points[0] if self.optimal_points else None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PlaylistItem:
    """A track placed in a generated playlist."""

    track: FeatureVector
    position: int
    compatibility: Optional[CompatibilityScore] = None  # None for the seed
    transition_to: Optional[TransitionAnalysis] = None  # None for the last item
    instructions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "track_id": self.track.track_id,
            "name": self.track.display_name,
            "position": self.position,
            "compatibility": self.compatibility.to_dict() if self.compatibility else None,
            "transition_to": self.transition_to.to_dict() if self.transition_to else None,
            "instructions": list(self.instructions),
        }
