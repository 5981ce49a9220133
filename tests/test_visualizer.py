"""Tests for the rich transition renderer."""

import io

from rich.console import Console

from mixpoint.analyzer import TransitionAnalyzer
from mixpoint.models import FeatureVector, StructureSegment
from mixpoint.visualizer import (
    _build_point_line,
    _build_section_line,
    _build_timeline,
    render_transition,
    track_duration,
)


def _console():
    return Console(file=io.StringIO(), record=True, width=100, color_system=None)


def _track(title, segments=(), beats=()):
    return FeatureVector(
        tempo=120.0,
        beat_positions=beats,
        structure_segments=segments,
        title=title,
    )


OUTGOING = _track(
    "Outgoing",
    segments=[
        StructureSegment(0.0, 30.0, "intro", 0.9),
        StructureSegment(30.0, 120.0, "chorus", 0.9),
        StructureSegment(120.0, 180.0, "outro", 0.8),
    ],
    beats=[i * 0.5 for i in range(360)],
)
INCOMING = _track(
    "Incoming",
    segments=[StructureSegment(0.0, 20.0, "intro", 1.0)],
    beats=[i * 0.5 for i in range(120)],
)


def test_track_duration():
    assert track_duration(OUTGOING) == 180.0
    assert track_duration(FeatureVector(), [42.0]) == 42.0
    assert track_duration(FeatureVector()) == 0.0


def test_section_line_labels():
    line = _build_section_line(180.0, 60, OUTGOING.structure_segments)
    assert "INTRO" in line.plain
    assert "CHORU" in line.plain
    assert "OUTRO" in line.plain
    assert len(line.plain) == 60


def test_point_line_ranks_best_on_top():
    line = _build_point_line(100.0, 50, [10.0, 10.0, 90.0], "red")
    assert line.plain[5] == "1"
    assert line.plain[45] == "3"


def test_timeline_minute_markers():
    line = _build_timeline(180.0, 70)
    assert line.plain.startswith("0:00")
    assert "1:00" in line.plain
    assert "2:00" in line.plain


def test_render_transition():
    console = _console()
    analysis = TransitionAnalyzer().analyze(OUTGOING, INCOMING)
    render_transition(OUTGOING, INCOMING, analysis, width=60, console=console)
    text = console.export_text()
    assert "Outgoing → Incoming" in text
    assert "OUT: Outgoing" in text
    assert "IN: Incoming" in text
    assert f"Type: {analysis.transition_type}" in text
    assert "Score" in text


def test_render_without_points():
    console = _console()
    empty = FeatureVector()
    analysis = TransitionAnalyzer().analyze(empty, empty)
    render_transition(empty, empty, analysis, console=console)
    assert "No optimal transition points found" in console.export_text()
