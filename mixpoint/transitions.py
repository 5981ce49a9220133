"""Transition point search over beats, phrases and structural segments."""

from typing import List, Sequence

import numpy as np

from .config import DEFAULT_CONFIG, EngineConfig
from .logging_config import get_logger
from .models import FeatureVector, TransitionPoint
from .scoring import (
    STRUCTURAL_PREFERENCES,
    STRUCTURAL_TRANSITION_TYPES,
    optimal_length_at,
    score_bpm_alignment,
    score_rhythm_compatibility,
)

logger = get_logger(__name__)


def _by_score(points: List[TransitionPoint]) -> List[TransitionPoint]:
    # sorted() is stable, so equal scores keep generation order
    return sorted(points, key=lambda p: p.score, reverse=True)


class TransitionPointSearch:
    """Proposes and ranks candidate mix points between an outgoing and incoming track."""

    def __init__(self, config: EngineConfig = None):
        """Initialize search with configuration.

        Args:
            config: Engine configuration. Uses DEFAULT_CONFIG if not provided.
        """
        self.config = config or DEFAULT_CONFIG

    def beat_alignment_score(self, from_track: FeatureVector, to_track: FeatureVector) -> float:
        """BPM compatibility of the pair, 1.0 at equal tempo."""
        return score_bpm_alignment(from_track.bpm, to_track.bpm, self.config.bpm_alignment_range)

    def find_beat_alignments(
        self, from_track: FeatureVector, to_track: FeatureVector
    ) -> List[TransitionPoint]:
        """Find strong-beat pairs whose 4-beat phase lines up.

        Every 4th beat of each track is taken as a downbeat. Each outgoing
        downbeat is paired with each incoming downbeat inside the incoming
        window, and the pair's strength is the tempo ratio times the absolute
        4-beat phase cosine.

        Args:
            from_track: Features of the outgoing track.
            to_track: Features of the incoming track.

        Returns:
            Up to config.beat_point_limit beatmatch points, strongest first.
        """
        cfg = self.config
        from_beats = np.asarray(from_track.beat_positions, dtype=float)
        to_beats = np.asarray(to_track.beat_positions, dtype=float)
        if len(from_beats) == 0 or len(to_beats) == 0:
            return []

        from_strong = from_beats[::4]
        to_strong = to_beats[::4]
        to_strong = to_strong[to_strong < cfg.incoming_beat_window]
        if len(to_strong) == 0:
            return []

        bpm_ratio = score_rhythm_compatibility(from_track.bpm, to_track.bpm)
        # Rows are outgoing beats, columns incoming beats
        phase = np.cos(2 * np.pi * np.subtract.outer(from_strong, to_strong) / 4)
        strength = bpm_ratio * np.abs(phase)

        rows, cols = np.nonzero(strength > cfg.beat_strength_threshold)
        if len(rows) == 0:
            return []
        kept = strength[rows, cols]
        order = np.argsort(-kept, kind="stable")[: cfg.beat_point_limit]

        points = []
        for idx in order:
            from_time = float(from_strong[rows[idx]])
            value = float(kept[idx])
            points.append(
                TransitionPoint(
                    from_track_time=from_time,
                    to_track_time=float(to_strong[cols[idx]]),
                    score=value,
                    type="beatmatch",
                    length=optimal_length_at(from_time),
                    confidence=value,
                )
            )
        return points

    def find_phrase_transitions(
        self, from_track: FeatureVector, to_track: FeatureVector
    ) -> List[TransitionPoint]:
        """Pair outgoing phrase boundaries with early incoming phrase starts."""
        cfg = self.config
        from_beats = from_track.beat_positions
        to_beats = to_track.beat_positions
        points = []

        for phrase_length in cfg.phrase_lengths:
            for i in range(phrase_length, len(from_beats), phrase_length):
                from_time = from_beats[i]
                for j in range(0, min(len(to_beats), phrase_length * 2), phrase_length):
                    to_time = to_beats[j]
                    if to_time < cfg.incoming_beat_window:
                        points.append(
                            TransitionPoint(
                                from_track_time=from_time,
                                to_track_time=to_time,
                                score=cfg.phrase_score,
                                type="beatmatch",
                                length=optimal_length_at(from_time),
                                confidence=cfg.phrase_score,
                            )
                        )

        return _by_score(points)[: cfg.phrase_point_limit]

    def find_structural_transitions(
        self, from_track: FeatureVector, to_track: FeatureVector
    ) -> List[TransitionPoint]:
        """Match outgoing and incoming sections against the preferred pairings.

        The cue sits config.structural_lead_time seconds before the outgoing
        section ends and at the start of the incoming section. Only incoming
        sections starting inside config.incoming_segment_window are considered.
        """
        cfg = self.config
        points = []

        for from_segment in from_track.structure_segments:
            for to_segment in to_track.structure_segments:
                if to_segment.start >= cfg.incoming_segment_window:
                    continue
                pair = (from_segment.type, to_segment.type)
                preference = STRUCTURAL_PREFERENCES.get(pair)
                if preference is None:
                    continue
                confidence = from_segment.confidence * to_segment.confidence
                points.append(
                    TransitionPoint(
                        from_track_time=from_segment.end - cfg.structural_lead_time,
                        to_track_time=to_segment.start,
                        score=preference * confidence,
                        type=STRUCTURAL_TRANSITION_TYPES.get(pair, "beatmatch"),
                        length=cfg.structural_length,
                        confidence=confidence,
                    )
                )

        return _by_score(points)[: cfg.structural_point_limit]

    def remove_duplicate_points(self, points: Sequence[TransitionPoint]) -> List[TransitionPoint]:
        """Drop points within the duplicate tolerance of an earlier point on both tracks."""
        tolerance = self.config.duplicate_tolerance
        unique: List[TransitionPoint] = []
        for point in points:
            is_duplicate = any(
                abs(existing.from_track_time - point.from_track_time) < tolerance
                and abs(existing.to_track_time - point.to_track_time) < tolerance
                for existing in unique
            )
            if not is_duplicate:
                unique.append(point)
        return unique

    def combine(
        self,
        beat_points: Sequence[TransitionPoint],
        phrase_points: Sequence[TransitionPoint],
        structural_points: Sequence[TransitionPoint],
    ) -> List[TransitionPoint]:
        """Merge the three generators' points, deduplicated and ranked by score.

        Generator order decides which of two duplicates survives: beat
        alignments win over phrase points, which win over structural points.
        """
        all_points = [*beat_points, *phrase_points, *structural_points]
        return _by_score(self.remove_duplicate_points(all_points))

    def search(self, from_track: FeatureVector, to_track: FeatureVector) -> List[TransitionPoint]:
        """Run every generator and return the combined ranking."""
        beat_points = self.find_beat_alignments(from_track, to_track)
        phrase_points = self.find_phrase_transitions(from_track, to_track)
        structural_points = self.find_structural_transitions(from_track, to_track)
        logger.debug(
            "Candidate points: %d beat, %d phrase, %d structural",
            len(beat_points),
            len(phrase_points),
            len(structural_points),
        )
        return self.combine(beat_points, phrase_points, structural_points)
