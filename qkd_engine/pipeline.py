"""
Measurement pipeline: turns the sender's bits into the receiver's readings.

Per photon, in order: loss / dark count, optional interception, then the
receiver's detector.  Lost photons and dark counts still yield a receiver
bit, so the receiver sequence always matches the sender sequence in length.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from . import config
from .attacks import EavesdropperConfig, InterceptResendAttack
from .generator import chunk_ranges
from .quantum_channel import NoiseConfig, QuantumChannel
from .qubit import QuantumBit
from .randomness import RandomSource, spawn_sources

logger = logging.getLogger(__name__)


@dataclass
class MeasurementResult:
    receiver_bits: List[QuantumBit] = field(default_factory=list)
    intercepted_bits: List[QuantumBit] = field(default_factory=list)


class MeasurementPipeline:
    """Noise model + eavesdropper + detector, applied bit by bit."""

    def __init__(
        self,
        noise: Optional[NoiseConfig],
        eve_config: Optional[EavesdropperConfig],
        rng: RandomSource,
        parallel_threshold: int = config.PARALLEL_THRESHOLD,
        workers: int = config.PARALLEL_WORKERS,
    ):
        self.noise = noise or NoiseConfig()
        self.eve_config = eve_config or EavesdropperConfig()
        self.rng = rng
        self.parallel_threshold = parallel_threshold
        self.workers = max(1, workers)

    def run(self, sender_bits: Sequence[QuantumBit], hacker_present: bool) -> MeasurementResult:
        count = len(sender_bits)
        if count <= self.parallel_threshold:
            pairs = self._measure_range(sender_bits, range(count), hacker_present, self.rng)
        else:
            ranges = chunk_ranges(count, self.workers)
            sources = spawn_sources(self.rng, len(ranges))
            logger.debug("Measuring %d bits across %d workers", count, len(ranges))
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                parts = executor.map(
                    lambda job: self._measure_range(sender_bits, job[0], hacker_present, job[1]),
                    zip(ranges, sources),
                )
                pairs = [pair for part in parts for pair in part]

        result = MeasurementResult()
        for bob_bit, intercepted in pairs:
            result.receiver_bits.append(bob_bit)
            if intercepted is not None:
                result.intercepted_bits.append(intercepted)
        return result

    # ------------------------------------------------------------------ #
    #  Internal: per-photon processing                                     #
    # ------------------------------------------------------------------ #
    def _measure_range(
        self,
        sender_bits: Sequence[QuantumBit],
        indices: range,
        hacker_present: bool,
        rng: RandomSource,
    ) -> List[Tuple[QuantumBit, Optional[QuantumBit]]]:
        # Channel and attack are built per worker so each one draws from its own source
        channel = QuantumChannel(self.noise, rng)
        attack = InterceptResendAttack(self.eve_config, rng) if hacker_present else None
        return [self._process_photon(i, sender_bits[i], channel, attack) for i in indices]

    @staticmethod
    def _process_photon(
        index: int,
        sender: QuantumBit,
        channel: QuantumChannel,
        attack: Optional[InterceptResendAttack],
    ) -> Tuple[QuantumBit, Optional[QuantumBit]]:
        early = channel.early_detection(sender, index)
        if early is not None:
            return early, None

        photon, intercepted = sender, None
        if attack is not None:
            photon, intercepted = attack.apply(sender, index)

        return channel.detect(photon, sender, index), intercepted
