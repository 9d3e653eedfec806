"""
config.py — API configuration.
"""
import os

# Server
HOST = os.environ.get("QKD_HOST", "0.0.0.0")
PORT = int(os.environ.get("QKD_PORT", 3030))
LOG_LEVEL = os.environ.get("QKD_LOG_LEVEL", "INFO")

# Requests
MAX_BIT_COUNT = int(os.environ.get("QKD_MAX_BIT_COUNT", 100_000))
DEFAULT_BIT_COUNT = 50

# CORS
CORS_ORIGINS = os.environ.get(
    "QKD_CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001,http://127.0.0.1:3000",
).split(",")
