"""
Touch Analyzer Unit Tests

Tests for TouchAnalyzer tap duration and swipe speed scoring.
"""

import pytest

from cadence.schemas.outputs import ConfidenceLevel

from tests.conftest import make_swipes, make_taps


class TestTouchAnalyzer:
    """Tap and swipe metrics against a touch baseline."""

    def test_empty_batch_returns_default(self, touch_analyzer):
        result = touch_analyzer.analyze([], {"avg_tap_duration": 100.0})
        assert result.score == 50
        assert result.confidence == ConfidenceLevel.UNKNOWN

    def test_tap_duration_mismatch(self, touch_analyzer):
        result = touch_analyzer.analyze(make_taps(duration=200.0), {"avg_tap_duration": 100.0})

        assert [f.name for f in result.factors] == ["Tap Duration Mismatch"]
        assert result.factors[0].impact == -25
        assert result.score == 75

    def test_tap_within_tolerance(self, touch_analyzer):
        result = touch_analyzer.analyze(make_taps(duration=140.0), {"avg_tap_duration": 100.0})
        assert result.score == 100

    def test_swipe_speed_missing_counts_as_zero(self, touch_analyzer):
        metrics = touch_analyzer.extract_metrics(make_swipes([2.0, None]))
        assert metrics["avg_swipe_speed"] == pytest.approx(1.0)

    def test_swipe_speed_anomaly(self, touch_analyzer):
        result = touch_analyzer.analyze(make_swipes([4.0, 4.0]), {"avg_swipe_speed": 2.0})

        assert [f.name for f in result.factors] == ["Swipe Speed Anomaly"]
        assert result.score == 80

    def test_both_penalties(self, touch_analyzer):
        events = make_taps(duration=300.0) + make_swipes([10.0], start=2_000_000.0)
        result = touch_analyzer.analyze(
            events,
            {"avg_tap_duration": 100.0, "avg_swipe_speed": 2.0}
        )
        assert result.score == 55
        assert result.confidence == ConfidenceLevel.LOW

    def test_swipes_only_leave_tap_duration_unset(self, touch_analyzer):
        metrics = touch_analyzer.extract_metrics(make_swipes([3.0]))
        assert metrics["avg_tap_duration"] is None

    def test_digest(self, touch_analyzer):
        digest = touch_analyzer.digest(make_taps(count=12) + make_swipes([1.0, 2.0]))
        assert len(digest["tap_durations"]) == 10
        assert digest["swipe_speeds"] == [1.0, 2.0]
