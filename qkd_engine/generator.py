"""
Bit generator: the sender's random bit sequence.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from . import config
from .encoding import encode
from .qubit import QuantumBit
from .randomness import RandomSource, random_basis, random_bit, spawn_sources

logger = logging.getLogger(__name__)

# (base_polarization, index) -> transmitted polarization
DriftFunction = Callable[[int, int], int]


def no_drift(base_polarization: int, index: int) -> int:
    return base_polarization


def now_ms() -> int:
    return int(time.time() * 1000)


def chunk_ranges(count: int, chunks: int) -> List[range]:
    """Splits [0, count) into at most *chunks* contiguous ranges."""
    size = -(-count // chunks) if count else 0
    return [range(start, min(start + size, count)) for start in range(0, count, size or 1)]


class BitGenerator:
    """Produces polarization-encoded sender bits."""

    def __init__(
        self,
        rng: RandomSource,
        drift: Optional[DriftFunction] = None,
        parallel_threshold: int = config.PARALLEL_THRESHOLD,
        workers: int = config.PARALLEL_WORKERS,
    ):
        self.rng = rng
        self.drift = drift or no_drift
        self.parallel_threshold = parallel_threshold
        self.workers = max(1, workers)

    def generate(self, count: int, start_ms: Optional[int] = None) -> List[QuantumBit]:
        """Returns *count* bits with random values and bases."""
        start_ms = now_ms() if start_ms is None else start_ms

        if count <= self.parallel_threshold:
            return self._generate_range(range(count), self.rng, start_ms)

        ranges = chunk_ranges(count, self.workers)
        sources = spawn_sources(self.rng, len(ranges))
        logger.debug("Generating %d bits across %d workers", count, len(ranges))
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            parts = executor.map(
                lambda job: self._generate_range(job[0], job[1], start_ms),
                zip(ranges, sources),
            )
            return [bit for part in parts for bit in part]

    def _generate_range(self, indices: range, rng: RandomSource, start_ms: int) -> List[QuantumBit]:
        bits = []
        for i in indices:
            value = random_bit(rng)
            basis = random_basis(rng)
            bits.append(QuantumBit.encoded(
                id=f"alice-{i}",
                value=value,
                basis=basis,
                timestamp=start_ms + i * config.BIT_TIMESTAMP_STEP_MS,
                polarization=self.drift(encode(basis, value), i),
            ))
        return bits
