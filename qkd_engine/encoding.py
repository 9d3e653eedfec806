"""
Encoding table for polarization-encoded qubits.

Polarization map:
  Rectilinear (+) basis:  0° = bit 0,  90° = bit 1
  Diagonal    (×) basis: 45° = bit 0, 135° = bit 1
"""
from enum import Enum
from typing import Optional, Tuple


class Basis(str, Enum):
    RECTILINEAR = "Rectilinear"
    DIAGONAL = "Diagonal"

    @property
    def symbol(self) -> str:
        return "+" if self is Basis.RECTILINEAR else "x"


POLARIZATION_TABLE = {
    (Basis.RECTILINEAR, 0): 0,
    (Basis.RECTILINEAR, 1): 90,
    (Basis.DIAGONAL, 0): 45,
    (Basis.DIAGONAL, 1): 135,
}

_DECODE_TABLE = {angle: key for key, angle in POLARIZATION_TABLE.items()}

POLARIZATION_SYMBOLS = {
    0:   "→",
    90:  "↑",
    45:  "↗",
    135: "↖",
}


def encode(basis: Basis, bit: int) -> int:
    """Returns the polarization angle (degrees) for *bit* in *basis*."""
    return POLARIZATION_TABLE[(Basis(basis), bit)]


def decode(polarization: int) -> Optional[Tuple[Basis, int]]:
    """
    Returns the (basis, bit) pair for one of the four table angles,
    or None for a drifted angle that is not in the table.
    """
    return _DECODE_TABLE.get(polarization)
