"""ROI-based deal signal and letter grade."""

from __future__ import annotations

from ..models import Grade, Signal

# (min ROI %, signal), evaluated top-down, first match wins
_SIGNAL_THRESHOLDS: list[tuple[float, Signal]] = [
    (25, Signal.STRONG_BUY),
    (15, Signal.BUY),
    (10, Signal.CONSIDER),
    (0, Signal.RENEGOTIATE),
]

# Grade uses its own scale; it does not line up with the signal bands.
_GRADE_THRESHOLDS: list[tuple[float, Grade]] = [
    (20, Grade.A),
    (15, Grade.B_PLUS),
    (10, Grade.B_MINUS),
    (5, Grade.C),
    (0, Grade.D),
]

_SIGNAL_DESCRIPTIONS: dict[Signal, str] = {
    Signal.STRONG_BUY: "Excellent returns. Move quickly.",
    Signal.BUY: "Solid deal with healthy margins.",
    Signal.CONSIDER: "Thin margins. Verify rehab and ARV.",
    Signal.RENEGOTIATE: "Returns too low at this price. Negotiate down.",
    Signal.PASS: "Projected loss. Walk away or restructure.",
}


def classify_signal(roi: float) -> Signal:
    """Map ROI (percent) to a signal.

    >= 25 STRONG BUY, >= 15 BUY, >= 10 CONSIDER, >= 0 RENEGOTIATE, else PASS.
    """
    for threshold, signal in _SIGNAL_THRESHOLDS:
        if roi >= threshold:
            return signal
    return Signal.PASS


def classify_grade(roi: float) -> Grade:
    """Map ROI (percent) to a letter grade.

    >= 20 A, >= 15 B+, >= 10 B-, >= 5 C, >= 0 D, else F.
    """
    for threshold, grade in _GRADE_THRESHOLDS:
        if roi >= threshold:
            return grade
    return Grade.F


def describe_signal(signal: Signal) -> str:
    """One-line guidance for a signal."""
    return _SIGNAL_DESCRIPTIONS[signal]
