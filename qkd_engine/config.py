"""
config.py — Simulation engine configuration.
"""
import os

# Timing (milliseconds)
BIT_TIMESTAMP_STEP_MS = int(os.environ.get("QKD_BIT_TIMESTAMP_STEP_MS", 100))
RECEIVER_OFFSET_MS = int(os.environ.get("QKD_RECEIVER_OFFSET_MS", 50))

# Residual detector noise applied to every receiver reading
RESIDUAL_FLIP_RATE = 0.01

# Parallel fan-out for large bit counts
PARALLEL_THRESHOLD = int(os.environ.get("QKD_PARALLEL_THRESHOLD", 1000))
PARALLEL_WORKERS = int(os.environ.get("QKD_PARALLEL_WORKERS", 4))

# Eavesdropper defaults
DEFAULT_INTERCEPTION_RATE = 0.5
DEFAULT_MEASUREMENT_ERROR_RATE = 0.1
DEFAULT_RESEND_ERROR_RATE = 0.1

# Error rates above this (percent) indicate eavesdropping
EAVESDROPPING_THRESHOLD = 11.0

# Expected error rate (percent) reported by channel analysis when Eve is present
THEORETICAL_EVE_ERROR_RATE = 12.5
