"""
Protocol policies.

BB84 and SARG04 share the whole generation / measurement / sifting
pipeline.  A policy only decides what differs between them:

  - whether polarization drift is applied while the sender prepares bits
  - which positions survive sifting
  - the prefix used for session identifiers
"""
from dataclasses import dataclass

from .generator import DriftFunction, no_drift
from .quantum_channel import NoiseConfig
from .sifting import SiftingRule, bases_match


class UnknownProtocolError(ValueError):
    pass


@dataclass(frozen=True)
class ProtocolPolicy:
    name: str
    label: str
    session_prefix: str
    drift_aware: bool = False
    sifting_rule: SiftingRule = bases_match

    def drift_for(self, noise: NoiseConfig) -> DriftFunction:
        if self.drift_aware:
            return noise.drift
        return no_drift


BB84 = ProtocolPolicy(
    name="bb84",
    label="BB84",
    session_prefix="QKD",
)

# SARG04 keeps the BB84 basis-equality sifting rule.  The real protocol
# announces non-orthogonal state pairs instead; that is not modelled.
SARG04 = ProtocolPolicy(
    name="sarg04",
    label="SARG04",
    session_prefix="SARG04",
    drift_aware=True,
)

PROTOCOLS = {
    "bb84":   BB84,
    "sarg04": SARG04,
}


def make_protocol(name: str) -> ProtocolPolicy:
    """Look up a protocol policy by name (case-insensitive)."""
    policy = PROTOCOLS.get(name.lower())
    if policy is None:
        raise UnknownProtocolError(f"Unknown protocol: {name!r}")
    return policy
