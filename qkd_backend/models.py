"""
models.py — Pydantic schemas for request/response validation.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from qkd_engine import (
    ChannelAnalysis,
    EavesdropperConfig,
    NoiseConfig,
    QuantumBit,
    SessionState,
)

from .config import DEFAULT_BIT_COUNT, MAX_BIT_COUNT


# ── Requests ─────────────────────────────────────────────────────────── #

class GenerateRequest(BaseModel):
    count: int = Field(DEFAULT_BIT_COUNT, ge=0, le=MAX_BIT_COUNT)

class MeasureRequest(BaseModel):
    hacker_present: bool = False

class HackerConfigRequest(BaseModel):
    interception_rate: float = Field(0.5, ge=0.0, le=1.0)
    measurement_error_rate: float = Field(0.1, ge=0.0, le=1.0)
    resend_error_rate: float = Field(0.1, ge=0.0, le=1.0)

    def to_config(self) -> EavesdropperConfig:
        return EavesdropperConfig(**self.model_dump())

class NoiseConfigRequest(BaseModel):
    detector_efficiency: float = Field(
        0.0, ge=0.0, le=1.0,
        description=(
            "Probability the detector registers a photon. 0 disables the detector "
            "model (ideal detector); any positive value fails with probability "
            "1 - efficiency, so values near 0 make almost every reading random."
        ),
    )
    dark_count_rate: float = Field(0.0, ge=0.0, le=1.0)
    polarization_drift: float = Field(0.0, allow_inf_nan=False)   # degrees per bit, any sign
    loss_probability: float = Field(0.0, ge=0.0, le=1.0)

    def to_config(self) -> NoiseConfig:
        return NoiseConfig(**self.model_dump())


# ── Responses ────────────────────────────────────────────────────────── #

class QuantumBitModel(BaseModel):
    id: str
    value: int
    basis: str            # "Rectilinear" | "Diagonal"
    polarization: int     # degrees
    timestamp: int        # ms

    @classmethod
    def from_bit(cls, bit: QuantumBit) -> "QuantumBitModel":
        return cls(**bit.to_dict())

class SessionStateModel(BaseModel):
    protocol: str
    session_id: str
    phase: str
    sender_bits: List[QuantumBitModel] = []
    receiver_bits: List[QuantumBitModel] = []
    intercepted_bits: List[QuantumBitModel] = []
    shared_key: str = ""
    error_rate: float = 0.0
    hacker_present: bool = False
    start_time: int = 0
    end_time: int = 0

    @classmethod
    def from_state(cls, protocol: str, state: SessionState) -> "SessionStateModel":
        return cls(protocol=protocol, **state.to_dict())

class SiftResponse(BaseModel):
    shared_key: str
    formatted_key: str
    error_rate: float
    eavesdropping_detected: bool
    state: SessionStateModel

class ChannelAnalysisModel(BaseModel):
    basis_matching_rate: float
    sifted_key_length: int
    theoretical_error_rate: float
    eavesdropping_detected: bool = False

    @classmethod
    def from_analysis(cls, analysis: ChannelAnalysis, detected: bool) -> "ChannelAnalysisModel":
        return cls(
            basis_matching_rate=analysis.basis_matching_rate,
            sifted_key_length=analysis.sifted_key_length,
            theoretical_error_rate=analysis.theoretical_error_rate,
            eavesdropping_detected=detected,
        )
