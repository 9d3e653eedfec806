import random

import pytest

from qkd_backend.session_manager import SessionManager
from qkd_engine import Phase, UnknownProtocolError


@pytest.fixture
def events():
    return []


@pytest.fixture
def manager(events):
    return SessionManager(rng=random.Random(1), on_change=lambda v, s: events.append((v, s.phase)))


def test_changes_are_reported_per_variant(manager, events):
    with manager.locked("sarg04") as session:
        session.generate(4)
    with manager.locked("BB84") as session:
        session.generate(4)
        session.measure(hacker_present=False)
    assert events == [
        ("sarg04", Phase.TRANSMISSION),
        ("bb84", Phase.TRANSMISSION),
        ("bb84", Phase.SIFTING),
    ]


def test_configuration_is_not_reported(manager, events):
    with manager.locked("bb84") as session:
        session.configure_hacker(session.get_hacker_config())
    assert events == []


def test_without_callback():
    manager = SessionManager(rng=random.Random(1))
    with manager.locked("bb84") as session:
        assert len(session.generate(3)) == 3


def test_unknown_variant(manager):
    assert not manager.has("e91")
    with pytest.raises(UnknownProtocolError):
        with manager.locked("e91"):
            pass
