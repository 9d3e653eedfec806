"""
session_manager.py — One QKD session per protocol variant, each behind its own lock.
"""
from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from threading import Lock
from typing import Callable, Dict, Iterator, List, Optional

from qkd_engine import PROTOCOLS, QKDSession, RandomSource, SessionState, make_protocol

# (variant, snapshot) -> None, called after every change to a session
ChangeCallback = Callable[[str, SessionState], None]


class SessionManager:
    """
    Owns the independent sessions the API routes to by variant tag.
    Every operation on a session must run inside ``locked(variant)``.
    """

    def __init__(self, rng: Optional[RandomSource] = None, on_change: Optional[ChangeCallback] = None):
        self._sessions: Dict[str, QKDSession] = {}
        self._locks: Dict[str, Lock] = {}
        for name in PROTOCOLS:
            session = QKDSession(make_protocol(name), rng=rng)
            if on_change is not None:
                session.subscribe(partial(on_change, name))
            self._sessions[name] = session
            self._locks[name] = Lock()

    @property
    def variants(self) -> List[str]:
        return list(self._sessions)

    def has(self, variant: str) -> bool:
        return variant.lower() in self._sessions

    @contextmanager
    def locked(self, variant: str) -> Iterator[QKDSession]:
        """Exclusive access to the session for *variant* (raises UnknownProtocolError)."""
        name = make_protocol(variant).name
        with self._locks[name]:
            yield self._sessions[name]
