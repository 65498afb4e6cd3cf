"""Shared fixtures for the rsvp-tui test suite.

Playback and the app take an injectable clock, so timing tests drive a
FakeClock by hand instead of sleeping.
"""

import pytest

from rsvp_words import TextBuffer

SAMPLE = "The quick  brown\nfox"


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_text():
    return TextBuffer.from_string(SAMPLE)
