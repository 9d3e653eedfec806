"""
QKDSession: one protocol variant's session and its phase state machine.

Phases only move forward:

    Preparation -> Transmission -> Sifting -> ErrorCheck -> Complete

each step caused by generate(), measure(), sift() and complete().  reset()
is the only way back.  Calls made out of their natural order are not
rejected; they work on whatever bits are currently present.

A session has no internal locking.  Callers that share one across threads
must serialize access to it.
"""
import logging
import uuid
from dataclasses import replace
from typing import Callable, List, Optional

from .attacks import EavesdropperConfig
from .generator import BitGenerator, now_ms
from .pipeline import MeasurementPipeline
from .protocols import BB84, ProtocolPolicy
from .quantum_channel import NoiseConfig
from .qubit import QuantumBit
from .randomness import RandomSource, default_source
from .session_state import Phase, SessionState
from .sifting import sift

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]


class QKDSession:
    """Owns the state of one QKD run and exposes the protocol operations."""

    def __init__(
        self,
        protocol: ProtocolPolicy = BB84,
        rng: Optional[RandomSource] = None,
        hacker_config: Optional[EavesdropperConfig] = None,
        noise_config: Optional[NoiseConfig] = None,
    ):
        self.protocol = protocol
        self.rng = rng or default_source()
        self._hacker_config = hacker_config or EavesdropperConfig()
        self._noise_config = noise_config or NoiseConfig()
        self._listeners: List[Listener] = []
        self._state = self._fresh_state()

    # ------------------------------------------------------------------ #
    #  Protocol steps                                                      #
    # ------------------------------------------------------------------ #
    def generate(self, count: int) -> List[QuantumBit]:
        """Alice prepares *count* random bits.  Phase -> Transmission."""
        start = now_ms()
        generator = BitGenerator(self.rng, drift=self.protocol.drift_for(self._noise_config))
        bits = generator.generate(count, start_ms=start)

        self._state.sender_bits = bits
        self._state.start_time = start
        self._advance(Phase.TRANSMISSION, f"generated {len(bits)} bits")
        return list(bits)

    def measure(self, hacker_present: bool) -> List[QuantumBit]:
        """Bob measures every transmitted bit, optionally via Eve.  Phase -> Sifting."""
        pipeline = MeasurementPipeline(self._noise_config, self._hacker_config, self.rng)
        result = pipeline.run(self._state.sender_bits, hacker_present)

        self._state.receiver_bits = result.receiver_bits
        self._state.intercepted_bits = result.intercepted_bits
        self._state.hacker_present = hacker_present
        self._advance(
            Phase.SIFTING,
            f"measured {len(result.receiver_bits)} bits, "
            f"Eve={'ON' if hacker_present else 'OFF'}, "
            f"intercepted {len(result.intercepted_bits)}",
        )
        return list(result.receiver_bits)

    def sift(self) -> str:
        """Keeps matching-basis positions and estimates the error rate.  Phase -> ErrorCheck."""
        result = sift(self._state.sender_bits, self._state.receiver_bits, self.protocol.sifting_rule)

        self._state.shared_key = result.shared_key
        self._state.error_rate = result.error_rate
        self._advance(
            Phase.ERROR_CHECK,
            f"sifted key {result.kept_count} bits, error rate {result.error_rate:.1f}%",
        )
        return result.shared_key

    def complete(self) -> SessionState:
        """Stamps the end time.  Phase -> Complete."""
        self._state.end_time = now_ms()
        self._advance(Phase.COMPLETE, "session complete")
        return self._state.snapshot()

    def reset(self) -> None:
        """Discards all bits and starts a new session id."""
        previous = self._state.session_id
        self._state = self._fresh_state()
        logger.info("%s reset (was %s)", self._state.session_id, previous)
        self._notify()

    # ------------------------------------------------------------------ #
    #  Configuration                                                       #
    # ------------------------------------------------------------------ #
    def configure_hacker(self, config: EavesdropperConfig) -> None:
        """Takes effect on the next measure(); phase and bits are untouched."""
        self._hacker_config = replace(config)
        logger.info("%s eavesdropper config %s", self._state.session_id, config)

    def configure_noise(self, config: NoiseConfig) -> None:
        """Takes effect on the next generate() / measure(); phase and bits are untouched."""
        self._noise_config = replace(config)
        logger.info("%s noise config %s", self._state.session_id, config)

    def get_hacker_config(self) -> EavesdropperConfig:
        return replace(self._hacker_config)

    def get_noise_config(self) -> NoiseConfig:
        return replace(self._noise_config)

    # ------------------------------------------------------------------ #
    #  Observation                                                         #
    # ------------------------------------------------------------------ #
    def get_state(self) -> SessionState:
        return self._state.snapshot()

    @property
    def phase(self) -> Phase:
        return self._state.phase

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Calls *listener* with a snapshot after each change.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------ #
    #  Internals                                                           #
    # ------------------------------------------------------------------ #
    def _fresh_state(self) -> SessionState:
        return SessionState(
            session_id=f"{self.protocol.session_prefix}-{uuid.uuid4()}",
            start_time=now_ms(),
        )

    def _advance(self, phase: Phase, detail: str) -> None:
        self._state.phase = phase
        logger.info("%s %s: %s", self._state.session_id, phase.value, detail)
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self._state.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
