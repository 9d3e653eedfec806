"""
Basis sifting, error estimation and channel analysis.
"""
from dataclasses import dataclass
from typing import Callable, List, Sequence

from . import config
from .qubit import QuantumBit
from .session_state import SessionState

# (sender_bit, receiver_bit) -> keep position in the key
SiftingRule = Callable[[QuantumBit, QuantumBit], bool]


def bases_match(sender: QuantumBit, receiver: QuantumBit) -> bool:
    return sender.basis == receiver.basis


@dataclass
class SiftResult:
    shared_key: str
    error_rate: float        # percent, 0..100
    kept_count: int
    error_count: int


def sift(
    sender_bits: Sequence[QuantumBit],
    receiver_bits: Sequence[QuantumBit],
    keep: SiftingRule = bases_match,
) -> SiftResult:
    """
    Compares the two sequences position by position.  Positions past the end
    of the receiver sequence are skipped.
    """
    key: List[str] = []
    errors = 0
    for sender, receiver in zip(sender_bits, receiver_bits):
        if not keep(sender, receiver):
            continue
        key.append(str(sender.value))
        if sender.value != receiver.value:
            errors += 1

    return SiftResult(
        shared_key="".join(key),
        error_rate=_error_rate(errors, len(key)),
        kept_count=len(key),
        error_count=errors,
    )


def _error_rate(errors: int, compared: int) -> float:
    if not compared:
        return 0.0
    return errors / compared * 100.0


def detect_eavesdropping(error_rate: float) -> bool:
    """Error rates above ~11% typically indicate an eavesdropper."""
    return error_rate > config.EAVESDROPPING_THRESHOLD


def format_binary_key(key: str, group_size: int = 8) -> str:
    """Splits *key* into space-separated groups for display."""
    if not key or group_size <= 0:
        return key
    return " ".join(key[i:i + group_size] for i in range(0, len(key), group_size))


@dataclass
class ChannelAnalysis:
    basis_matching_rate: float   # percent of sender bits whose basis Bob matched
    sifted_key_length: int
    theoretical_error_rate: float


def analyze_channel(state: SessionState) -> ChannelAnalysis:
    matching = sum(
        1 for sender, receiver in zip(state.sender_bits, state.receiver_bits)
        if bases_match(sender, receiver)
    )
    total = len(state.sender_bits)
    return ChannelAnalysis(
        basis_matching_rate=matching / total * 100.0 if total else 0.0,
        sifted_key_length=len(state.shared_key),
        theoretical_error_rate=config.THEORETICAL_EVE_ERROR_RATE if state.hacker_present else 0.0,
    )
