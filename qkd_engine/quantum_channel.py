"""
Quantum channel with configurable noise sources:
  - Photon loss         : photon is dropped with probability loss_probability
  - Dark counts         : phantom detection with probability dark_count_rate
  - Detector efficiency : detector registers the photon with this probability
  - Polarization drift  : transmitted angle rotates by drift degrees per bit
"""
import math
from dataclasses import dataclass
from typing import Optional

from . import config
from .encoding import Basis
from .qubit import QuantumBit
from .randomness import RandomSource, flip_with, random_basis, random_bit


@dataclass
class NoiseConfig:
    """All noise parameters in one place.  Zero everywhere means an ideal channel."""
    detector_efficiency: float = 0.0
    dark_count_rate: float = 0.0
    polarization_drift: float = 0.0
    loss_probability: float = 0.0

    def drift(self, base_polarization: int, index: int) -> int:
        """
        Drifted angle for the *index*-th photon, folded into [0, 180).
        A drift that is not a finite angle leaves the photon undrifted.
        """
        drifted = base_polarization + self.polarization_drift * index
        if not math.isfinite(drifted):
            return base_polarization
        return _round_half_away(drifted) % 180

    def detector_fails(self, rng: RandomSource) -> bool:
        # An efficiency of 0 means the detector is not modelled at all.
        if self.detector_efficiency <= 0:
            return False
        return rng.random() > self.detector_efficiency


def _round_half_away(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def receiver_bit(index: int, value: int, basis: Basis, sender: QuantumBit) -> QuantumBit:
    return QuantumBit.encoded(
        id=f"bob-{index}",
        value=value,
        basis=basis,
        timestamp=sender.timestamp + config.RECEIVER_OFFSET_MS,
    )


class QuantumChannel:
    """Models the physical (simulated) channel and the receiver's detector."""

    def __init__(self, noise: Optional[NoiseConfig], rng: RandomSource):
        self.noise = noise or NoiseConfig()
        self.rng = rng

    def early_detection(self, sender: QuantumBit, index: int) -> Optional[QuantumBit]:
        """
        Returns the receiver's reading when the photon never reaches the
        detector intact: a placeholder when it is lost, or a random click
        when a dark count fires.  Returns None when the photon travels on.
        """
        if self.rng.random() < self.noise.loss_probability:
            return QuantumBit(
                id=f"bob-{index}",
                value=0,
                basis=Basis.RECTILINEAR,
                polarization=0,
                timestamp=sender.timestamp + config.RECEIVER_OFFSET_MS,
            )

        if self.rng.random() < self.noise.dark_count_rate:
            dark_basis = random_basis(self.rng)
            dark_value = random_bit(self.rng)
            return receiver_bit(index, dark_value, dark_basis, sender)

        return None

    def detect(self, photon: QuantumBit, sender: QuantumBit, index: int) -> QuantumBit:
        """Receiver measures *photon* (the one actually arriving) in a random basis."""
        bob_basis = random_basis(self.rng)

        if self.noise.detector_fails(self.rng):
            bob_value = random_bit(self.rng)
        else:
            bob_value = photon.measure(bob_basis, self.rng)

        bob_value = flip_with(self.rng, bob_value, config.RESIDUAL_FLIP_RATE)
        return receiver_bit(index, bob_value, bob_basis, sender)
