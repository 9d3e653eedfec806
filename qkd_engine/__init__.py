from .encoding import Basis, encode, decode
from .qubit import QuantumBit
from .randomness import RandomSource, default_source
from .generator import BitGenerator
from .quantum_channel import NoiseConfig, QuantumChannel
from .attacks import EavesdropperConfig, InterceptResendAttack
from .pipeline import MeasurementPipeline, MeasurementResult
from .sifting import (
    SiftResult,
    ChannelAnalysis,
    sift,
    detect_eavesdropping,
    format_binary_key,
    analyze_channel,
)
from .session_state import Phase, SessionState
from .protocols import (
    ProtocolPolicy,
    BB84,
    SARG04,
    PROTOCOLS,
    UnknownProtocolError,
    make_protocol,
)
from .session import QKDSession
