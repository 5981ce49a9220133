"""Tests for pairwise compatibility scoring and library ranking."""

import itertools

import pytest

from mixpoint.compatibility import CompatibilityScorer
from mixpoint.config import EngineConfig
from mixpoint.exceptions import ConfigError
from mixpoint.models import FeatureVector

# --- Helpers ---


def _make_track(track_id="t", tempo=128.0, key="A", energy=0.7, centroid=None):
    return FeatureVector(
        tempo=tempo,
        musical_key=key,
        energy_level=energy,
        spectral_centroid=centroid,
        track_id=track_id,
    )


SAMPLE_TRACKS = [
    _make_track("a", 128.0, "A", 0.70),
    _make_track("b", 130.0, "E", 0.72),
    _make_track("c", 174.0, "F#m", 0.95, 3200.0),
    _make_track("d", 90.0, "C", 0.20, 800.0),
    _make_track("e", 122.5, "Bbm", 0.45, 0.4),
    FeatureVector(track_id="f"),
]


class TestScore:
    def setup_method(self):
        self.scorer = CompatibilityScorer()

    def test_worked_example(self):
        a = _make_track(tempo=128.0, key="A", energy=0.70)
        b = _make_track(tempo=130.0, key="E", energy=0.72)
        score = self.scorer.score(a, b)
        assert score.tempo == 0.8
        assert score.key == 0.8
        assert score.energy == pytest.approx(0.96)
        assert score.spectral == 1.0
        assert score.rhythm == pytest.approx(0.984615, abs=1e-6)
        assert score.overall == pytest.approx(0.88046, abs=1e-5)

    def test_identical_track_scores_one(self):
        a = _make_track(centroid=1500.0)
        score = self.scorer.score(a, a)
        assert score.tempo == 1.0
        assert score.key == 1.0
        assert score.energy == 1.0
        assert score.rhythm == 1.0
        assert score.overall == pytest.approx(1.0)

    def test_empty_vectors_use_defaults(self):
        score = self.scorer.score(FeatureVector(), FeatureVector())
        assert score.overall == pytest.approx(1.0)

    def test_missing_tempo_reads_as_120(self):
        score = self.scorer.score(FeatureVector(), _make_track(tempo=125.0))
        assert score.tempo == 0.8
        assert score.rhythm == pytest.approx(120.0 / 125.0)

    def test_large_tempo_mismatch(self):
        score = self.scorer.score(_make_track(tempo=174.0), _make_track(tempo=90.0))
        assert score.tempo == 0.2

    def test_all_fields_in_unit_range(self):
        for a, b in itertools.product(SAMPLE_TRACKS, repeat=2):
            score = self.scorer.score(a, b)
            for value in score.to_dict().values():
                assert 0.0 <= value <= 1.0

    def test_symmetric_dimensions(self):
        for a, b in itertools.combinations(SAMPLE_TRACKS, 2):
            ab = self.scorer.score(a, b)
            ba = self.scorer.score(b, a)
            assert ab.tempo == ba.tempo
            assert ab.key == ba.key
            assert ab.energy == ba.energy
            assert ab.rhythm == ba.rhythm

    def test_overall_is_weighted_sum(self):
        a, b = SAMPLE_TRACKS[2], SAMPLE_TRACKS[3]
        s = self.scorer.score(a, b)
        expected = (
            0.30 * s.tempo + 0.25 * s.key + 0.20 * s.energy + 0.15 * s.spectral + 0.10 * s.rhythm
        )
        assert s.overall == pytest.approx(expected)


class TestConfigWeights:
    def test_custom_weights(self):
        config = EngineConfig(
            weight_tempo=1.0,
            weight_key=0.0,
            weight_energy=0.0,
            weight_spectral=0.0,
            weight_rhythm=0.0,
        )
        scorer = CompatibilityScorer(config)
        score = scorer.score(_make_track(tempo=128.0), _make_track(tempo=140.0))
        assert score.overall == score.tempo == 0.4

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ConfigError):
            EngineConfig(weight_tempo=0.5)


class TestFindCompatible:
    def setup_method(self):
        self.scorer = CompatibilityScorer()
        self.seed = SAMPLE_TRACKS[0]
        self.candidates = SAMPLE_TRACKS[1:]

    def test_sorted_descending(self):
        ranked = self.scorer.find_compatible(self.seed, self.candidates, limit=10)
        overalls = [score.overall for _, score in ranked]
        assert overalls == sorted(overalls, reverse=True)
        assert len(ranked) == len(self.candidates)

    def test_best_match_first(self):
        ranked = self.scorer.find_compatible(self.seed, self.candidates, limit=1)
        assert len(ranked) == 1
        assert ranked[0][0].track_id == "b"

    def test_limit_caps_results(self):
        assert len(self.scorer.find_compatible(self.seed, self.candidates, limit=2)) == 2
        assert self.scorer.find_compatible(self.seed, self.candidates, limit=0) == []
        assert self.scorer.find_compatible(self.seed, self.candidates, limit=-3) == []

    def test_default_limit(self):
        many = [_make_track(str(i), tempo=100.0 + i) for i in range(15)]
        assert len(self.scorer.find_compatible(self.seed, many)) == 10

    def test_ties_keep_input_order(self):
        twins = [_make_track("first"), _make_track("second"), _make_track("third")]
        ranked = self.scorer.find_compatible(self.seed, twins, limit=3)
        assert [track.track_id for track, _ in ranked] == ["first", "second", "third"]

    def test_empty_candidates(self):
        assert self.scorer.find_compatible(self.seed, [], limit=5) == []

    def test_does_not_mutate_candidates(self):
        candidates = list(self.candidates)
        self.scorer.find_compatible(self.seed, candidates, limit=2)
        assert candidates == list(self.candidates)
