"""Rich terminal renderer for transition analysis results."""

from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mixpoint.instructions import confidence_label, format_timecode
from mixpoint.models import FeatureVector, StructureSegment, TransitionAnalysis

SECTION_COLORS = {
    "intro": "cyan",
    "verse": "green",
    "chorus": "red",
    "bridge": "magenta",
    "outro": "blue",
}


def track_duration(track: FeatureVector, extra_times: Sequence[float] = ()) -> float:
    """Best-effort track length from the last beat, segment end or cue time."""
    times = list(extra_times)
    if track.beat_positions:
        times.append(track.beat_positions[-1])
    times.extend(s.end for s in track.structure_segments)
    return max(times, default=0.0)


def _place(line: Text, pos: int, label: str, width: int, style: str):
    """Write label into line starting at pos, clipped to width."""
    for i, ch in enumerate(label):
        p = pos + i
        if 0 <= p < width:
            line.plain = line.plain[:p] + ch + line.plain[p + 1 :]
    line.stylize(style, max(pos, 0), min(pos + len(label), width))


def _column(t: float, duration: float, width: int) -> int:
    if duration <= 0:
        return 0
    return max(0, min(int(t / duration * width), width - 1))


def _build_section_line(
    duration: float, width: int, segments: Sequence[StructureSegment]
) -> Text:
    """Build a section label line showing the track's structure."""
    if not segments:
        return Text()
    line = Text(" " * width)
    for s in segments:
        start_pos = _column(s.start, duration, width)
        end_pos = min(int(s.end / duration * width), width) if duration > 0 else width
        label = s.type[:5].upper()
        mid = start_pos + (end_pos - start_pos) // 2 - len(label) // 2
        mid = max(start_pos, min(mid, width - len(label)))
        _place(line, mid, label, width, SECTION_COLORS.get(s.type, "white"))
    return line


def _build_point_line(duration: float, width: int, times: Sequence[float], color: str) -> Text:
    """Build a line numbering candidate cue positions, best first."""
    if not times:
        return Text()
    line = Text(" " * width)
    # Draw worst first so better-ranked markers stay visible on collisions
    for rank in range(len(times), 0, -1):
        pos = _column(times[rank - 1], duration, width)
        _place(line, pos, str(rank), width, f"bold {color}")
    return line


def _build_timeline(duration: float, width: int) -> Text:
    """Build a timeline ruler with minute markers."""
    line = Text(" " * width)
    if duration <= 0:
        return line
    t = 0.0
    while t <= duration:
        pos = int(t / duration * (width - 1))
        label = format_timecode(t)
        for i, ch in enumerate(label):
            p = pos + i
            if p < width:
                line.plain = line.plain[:p] + ch + line.plain[p + 1 :]
        t += 60.0
    line.stylize("dim", 0, width)
    return line


def _track_block(
    label: str, track: FeatureVector, times: List[float], width: int, color: str
) -> Text:
    duration = track_duration(track, times)
    content = Text()
    content.append(f"{label}: {track.display_name}", style=f"bold {color}")
    content.append(f"  {track.bpm:.1f} BPM  Key: {track.key}  Energy: {track.energy:.2f}\n")
    section_line = _build_section_line(duration, width, track.structure_segments)
    if section_line.plain.strip():
        content.append_text(section_line)
        content.append("\n")
    point_line = _build_point_line(duration, width, times, color)
    if point_line.plain.strip():
        content.append_text(point_line)
        content.append("\n")
    content.append_text(_build_timeline(duration, width))
    return content


def build_points_table(analysis: TransitionAnalysis) -> Table:
    """Tabulate the optimal points in rank order."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Out")
    table.add_column("In")
    table.add_column("Type")
    table.add_column("Length", justify="right")
    table.add_column("Score", justify="right")
    for i, p in enumerate(analysis.optimal_points, 1):
        table.add_row(
            str(i),
            format_timecode(p.from_track_time),
            format_timecode(p.to_track_time),
            p.type,
            f"{p.length:g}s",
            f"{p.score:.2f}",
        )
    return table


def render_transition(
    from_track: FeatureVector,
    to_track: FeatureVector,
    analysis: TransitionAnalysis,
    width: int = 70,
    console: Optional[Console] = None,
) -> None:
    """Render a transition analysis to the terminal.

    Args:
        from_track: Features of the outgoing track.
        to_track: Features of the incoming track.
        analysis: Result of TransitionAnalyzer.analyze.
        width: Character width of the track timelines.
        console: Console to print to. A new stdout console if not provided.
    """
    console = console or Console()

    header = Text(
        f"Type: {analysis.transition_type}  "
        f"Length: {analysis.recommended_length:g}s  "
        f"Confidence: {confidence_label(analysis.confidence)} ({analysis.confidence:.2f})\n"
        f"Beat: {analysis.beat_alignment_score:.2f}  "
        f"Energy: {analysis.energy_match_score:.2f}  "
        f"Key: {analysis.key_compatibility_score:.2f}"
    )

    out_times = [p.from_track_time for p in analysis.optimal_points]
    in_times = [p.to_track_time for p in analysis.optimal_points]

    content = Text()
    content.append_text(header)
    content.append("\n\n")
    content.append_text(_track_block("OUT", from_track, out_times, width, "red"))
    content.append("\n\n")
    content.append_text(_track_block("IN", to_track, in_times, width, "green"))

    title = f"{from_track.display_name} → {to_track.display_name}"
    console.print(Panel(content, title=title, expand=False))
    if analysis.optimal_points:
        console.print(build_points_table(analysis))
    else:
        console.print("No optimal transition points found")
