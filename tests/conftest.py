import random

import pytest

from qkd_engine import Basis, QuantumBit


class ScriptedSource:
    """Random source that replays a fixed list of draws."""

    def __init__(self, values):
        self._values = list(values)

    def random(self):
        assert self._values, "scripted random source exhausted"
        return self._values.pop(0)

    @property
    def remaining(self):
        return len(self._values)


@pytest.fixture
def scripted():
    return ScriptedSource


@pytest.fixture
def seeded():
    return random.Random(1984)


@pytest.fixture
def make_bit():
    def _make(index, value, basis, prefix="alice", timestamp=1000):
        return QuantumBit.encoded(
            id=f"{prefix}-{index}",
            value=value,
            basis=basis,
            timestamp=timestamp + index * 100,
        )
    return _make
