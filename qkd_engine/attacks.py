"""
attacks.py
==========
Intercept-resend eavesdropper model.

Eve intercepts a fraction of the photons, measures each one in a basis of
her own choosing and re-emits a fresh photon in that basis.  Her apparatus
is imperfect: the reading can flip (measurement error) and so can the
re-emitted value (resend error).

  apply(photon, index) -> (photon_out, intercepted_or_None)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from . import config
from .qubit import QuantumBit
from .randomness import RandomSource, flip_with, random_basis


@dataclass
class EavesdropperConfig:
    """Eve's parameters.  Probabilities in [0, 1]; not validated here."""
    interception_rate: float = config.DEFAULT_INTERCEPTION_RATE
    measurement_error_rate: float = config.DEFAULT_MEASUREMENT_ERROR_RATE
    resend_error_rate: float = config.DEFAULT_RESEND_ERROR_RATE


class InterceptResendAttack:
    """
    Classic intercept-resend attack with noisy measurement and re-emission.

    With a perfect apparatus and a 100% interception rate, Eve guesses the
    wrong basis half the time and Bob then reads a random value, so the
    sifted error rate rises by about 25%.
    """

    def __init__(self, eve_config: Optional[EavesdropperConfig], rng: RandomSource):
        self.config = eve_config or EavesdropperConfig()
        self.rng = rng

    def apply(self, photon: QuantumBit, index: int) -> Tuple[QuantumBit, Optional[QuantumBit]]:
        """
        Returns the photon that continues to Bob and Eve's reading.
        If the photon is not intercepted, it is returned unchanged with None.
        """
        if self.rng.random() >= self.config.interception_rate:
            return photon, None   # Eve lets this one pass

        eve_basis = random_basis(self.rng)
        eve_bit = photon.measure(eve_basis, self.rng)
        eve_bit = flip_with(self.rng, eve_bit, self.config.measurement_error_rate)

        intercepted = QuantumBit.encoded(
            id=f"hacker-{index}",
            value=eve_bit,
            basis=eve_basis,
            timestamp=photon.timestamp,
        )

        # Re-emit a fresh photon in Eve's basis
        resend_bit = flip_with(self.rng, eve_bit, self.config.resend_error_rate)
        resent = QuantumBit.encoded(
            id=photon.id,
            value=resend_bit,
            basis=eve_basis,
            timestamp=photon.timestamp,
        )
        return resent, intercepted
