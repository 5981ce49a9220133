"""Human-readable mixing instructions for a transition analysis."""

from typing import List

from .models import FeatureVector, TransitionAnalysis
from .scoring import round_half_up

NO_POINTS_MESSAGE = "No optimal transition points found. Consider manual mixing."

_TYPE_DIRECTIVES = {
    "beatmatch": "Beatmatch transition: match tempos and align beats for a seamless mix",
    "echo_out": "Echo out: apply echo/delay to the outgoing track while bringing in the new track",
    "filter_fade": "Filter fade: low-pass filter the outgoing track while fading in the new track",
    "quick_cut": "Quick cut: sharp transition at a musical phrase boundary",
}


def format_timecode(seconds: float) -> str:
    """Formats seconds as M:SS.

    Example:
        >>> format_timecode(125.7)
        '2:05'
    """
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def confidence_label(confidence: float) -> str:
    if confidence >= 0.8:
        return "High"
    if confidence >= 0.5:
        return "Medium"
    return "Low"


class InstructionFormatter:
    """Renders a TransitionAnalysis as step-by-step DJ directives."""

    def format(
        self, analysis: TransitionAnalysis, from_track: FeatureVector, to_track: FeatureVector
    ) -> List[str]:
        """Builds the instruction lines for a transition.

        Args:
            analysis: Result of TransitionAnalyzer.analyze.
            from_track: Features of the outgoing track.
            to_track: Features of the incoming track.

        Returns:
            Instruction lines in display order. A single fallback line when the
            analysis found no transition points.
        """
        best = analysis.best_point
        if best is None:
            return [NO_POINTS_MESSAGE]

        lines = [
            f"Optimal cue point: {format_timecode(best.from_track_time)} → "
            f"{format_timecode(best.to_track_time)}"
        ]

        directive = _TYPE_DIRECTIVES.get(best.type)
        if directive:
            lines.append(directive)
        if best.type == "beatmatch":
            lines.append(f"Transition length: {analysis.recommended_length:g} seconds")

        if analysis.key_compatibility_score > 0.7:
            lines.append("Key match: excellent harmonic compatibility")
        elif analysis.key_compatibility_score < 0.4:
            lines.append("Key clash: use filter or echo to mask harmonic differences")

        from_bpm = from_track.bpm
        to_bpm = to_track.bpm
        if abs(from_bpm - to_bpm) > 5:
            lines.append(
                f"BPM: gradually adjust from {round_half_up(from_bpm):.0f} "
                f"to {round_half_up(to_bpm):.0f} BPM"
            )

        if analysis.energy_match_score > 0.8:
            lines.append("Energy: perfect energy flow, maintain current intensity")
        elif analysis.energy_match_score < 0.3:
            lines.append("Energy: significant energy change, use a buildup or breakdown")

        lines.append(
            f"Confidence: {confidence_label(analysis.confidence)} "
            f"({round_half_up(analysis.confidence * 100):.0f}%)"
        )
        return lines
