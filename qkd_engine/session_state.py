"""
Session phases and the full session state snapshot.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List

from .qubit import QuantumBit


class Phase(str, Enum):
    PREPARATION = "Preparation"
    TRANSMISSION = "Transmission"
    SIFTING = "Sifting"
    ERROR_CHECK = "ErrorCheck"
    COMPLETE = "Complete"


@dataclass
class SessionState:
    """Everything one QKD session has produced so far."""
    session_id: str
    start_time: int
    end_time: int = 0
    phase: Phase = Phase.PREPARATION

    sender_bits: List[QuantumBit] = field(default_factory=list)
    receiver_bits: List[QuantumBit] = field(default_factory=list)
    intercepted_bits: List[QuantumBit] = field(default_factory=list)   # sparse, id-tagged

    shared_key: str = ""
    error_rate: float = 0.0       # percent
    hacker_present: bool = False

    def snapshot(self) -> "SessionState":
        """Copy that shares no mutable containers with this state."""
        return replace(
            self,
            sender_bits=list(self.sender_bits),
            receiver_bits=list(self.receiver_bits),
            intercepted_bits=list(self.intercepted_bits),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender_bits": [b.to_dict() for b in self.sender_bits],
            "receiver_bits": [b.to_dict() for b in self.receiver_bits],
            "shared_key": self.shared_key,
            "intercepted_bits": [b.to_dict() for b in self.intercepted_bits],
            "error_rate": self.error_rate,
            "hacker_present": self.hacker_present,
            "phase": self.phase.value,
            "session_id": self.session_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
