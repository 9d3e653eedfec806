"""
QuantumBit: a single photon exchanged (or read) during a QKD session.

Sender, receiver and eavesdropper readings all share this record; the id
prefix tells them apart ("alice-3", "bob-3", "hacker-3").
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .encoding import Basis, POLARIZATION_SYMBOLS, encode
from .randomness import RandomSource, random_bit


@dataclass(frozen=True)
class QuantumBit:
    """A classical bit encoded in a basis as a polarization angle."""
    id: str
    value: int
    basis: Basis
    polarization: int
    timestamp: int

    # ------------------------------------------------------------------ #
    #  Factory                                                             #
    # ------------------------------------------------------------------ #
    @classmethod
    def encoded(
        cls,
        id: str,
        value: int,
        basis: Basis,
        timestamp: int,
        polarization: Optional[int] = None,
    ) -> "QuantumBit":
        """
        Builds a bit whose polarization comes from the encoding table,
        unless an explicit (e.g. drifted) *polarization* is given.
        """
        assert value in (0, 1), "Bit must be 0 or 1"
        if polarization is None:
            polarization = encode(basis, value)
        return cls(
            id=id,
            value=value,
            basis=Basis(basis),
            polarization=polarization,
            timestamp=timestamp,
        )

    # ------------------------------------------------------------------ #
    #  Quantum mechanics                                                   #
    # ------------------------------------------------------------------ #
    def measure(self, measurement_basis: Basis, rng: RandomSource) -> int:
        """
        Returns the bit read in *measurement_basis*.

        Matching bases give the encoded value; mismatched bases give a
        50 / 50 outcome.
        """
        if self.basis == measurement_basis:
            return self.value
        return random_bit(rng)

    # ------------------------------------------------------------------ #
    #  Helpers                                                             #
    # ------------------------------------------------------------------ #
    @property
    def symbol(self) -> str:
        return POLARIZATION_SYMBOLS.get(self.polarization, "?")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "basis": self.basis.value,
            "polarization": self.polarization,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return (
            f"QuantumBit(id='{self.id}', value={self.value}, "
            f"basis='{self.basis.symbol}', pol={self.polarization}°)"
        )
