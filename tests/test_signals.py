"""Tests for signal and grade classification."""

import pytest

from cookin_deal.models import Grade, Signal
from cookin_deal.underwriting import classify_grade, classify_signal, describe_signal


class TestSignal:
    """Tests for ROI -> signal."""

    @pytest.mark.parametrize(
        ("roi", "expected"),
        [
            (40, Signal.STRONG_BUY),
            (25, Signal.STRONG_BUY),
            (24.99, Signal.BUY),
            (15, Signal.BUY),
            (14.99, Signal.CONSIDER),
            (10, Signal.CONSIDER),
            (9.99, Signal.RENEGOTIATE),
            (0, Signal.RENEGOTIATE),
            (-0.01, Signal.PASS),
            (-100, Signal.PASS),
        ],
    )
    def test_boundaries(self, roi: float, expected: Signal) -> None:
        assert classify_signal(roi) == expected

    def test_rank_order(self) -> None:
        ordered = [Signal.PASS, Signal.RENEGOTIATE, Signal.CONSIDER, Signal.BUY, Signal.STRONG_BUY]
        assert [s.rank for s in ordered] == [0, 1, 2, 3, 4]

    def test_display_values(self) -> None:
        assert Signal.STRONG_BUY.value == "STRONG BUY"
        assert Signal.PASS.value == "PASS"

    def test_every_signal_described(self) -> None:
        for signal in Signal:
            assert describe_signal(signal)


class TestGrade:
    """Tests for ROI -> letter grade."""

    @pytest.mark.parametrize(
        ("roi", "expected"),
        [
            (20, Grade.A),
            (19.99, Grade.B_PLUS),
            (15, Grade.B_PLUS),
            (10, Grade.B_MINUS),
            (5, Grade.C),
            (4.99, Grade.D),
            (0, Grade.D),
            (-1, Grade.F),
        ],
    )
    def test_boundaries(self, roi: float, expected: Grade) -> None:
        assert classify_grade(roi) == expected

    def test_grade_scale_differs_from_signal(self) -> None:
        # 22% ROI is a BUY but already an A
        assert classify_signal(22) == Signal.BUY
        assert classify_grade(22) == Grade.A
