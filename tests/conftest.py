"""Shared fixtures: synthetic corpora with known metres.

Times are ticks of a 96-per-semibreve timebase:
- 4/4 -> barlength 96, pulses 4
- 3/4 -> barlength 72, pulses 3
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from metre_inference.core import Event


def make_sequence(durations, barlength=96, pulses=4, phase=0, start=0, **attributes):
    """Events with consecutive onsets and the given durations."""
    events = []
    onset = start
    for duration in durations:
        events.append(
            Event(
                onset=onset,
                duration=duration,
                barlength=barlength,
                pulses=pulses,
                phase=phase,
                attributes=dict(attributes),
            )
        )
        onset += duration
    return events


def bars(pattern, n_bars):
    """Repeat a one-bar duration pattern."""
    return list(pattern) * n_bars


# One-bar rhythms
COMMON_TIME_PATTERNS = [(48, 24, 24), (24, 24, 24, 24), (48, 48)]
TRIPLE_TIME_PATTERNS = [(48, 24), (24, 24, 24), (72,)]


@pytest.fixture
def common_time_pieces():
    """Three 4/4 pieces, 8 bars each."""
    return [make_sequence(bars(p, 8), 96, 4) for p in COMMON_TIME_PATTERNS]


@pytest.fixture
def triple_time_pieces():
    """Three 3/4 pieces, 8 bars each."""
    return [make_sequence(bars(p, 8), 72, 3) for p in TRIPLE_TIME_PATTERNS]


@pytest.fixture
def mixed_corpus(common_time_pieces, triple_time_pieces):
    """4/4 and 3/4 pieces, interleaved."""
    corpus = []
    for common, triple in zip(common_time_pieces, triple_time_pieces):
        corpus.extend([common, triple])
    return corpus


@pytest.fixture
def sequence_factory():
    """Expose make_sequence to tests."""
    return make_sequence
