"""
main.py — FastAPI application entry point.

Thin request layer over the QKD simulation engine.  Each protocol variant
("bb84", "sarg04") owns one session; routes pick it by the ``variant`` path
tag, run one operation under that session's lock and return its snapshot.
Every change is also pushed to WebSocket clients on ``/ws``.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from qkd_engine import SessionState, analyze_channel, detect_eavesdropping, format_binary_key

from .config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT
from .models import (
    ChannelAnalysisModel,
    GenerateRequest,
    HackerConfigRequest,
    MeasureRequest,
    NoiseConfigRequest,
    QuantumBitModel,
    SessionStateModel,
    SiftResponse,
)
from .session_manager import SessionManager
from .websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)


# ── Global state ─────────────────────────────────────────────────────── #

ws_manager = ConnectionManager()


def _broadcast_state(variant: str, state: SessionState) -> None:
    ws_manager.publish(ws_manager.make_event("simulation_update", {
        "variant": variant,
        "state": SessionStateModel.from_state(variant, state).model_dump(),
    }))


session_manager = SessionManager(on_change=_broadcast_state)

app = FastAPI(
    title="QKD Simulator",
    description="BB84 / SARG04 quantum key distribution simulator",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_variant(variant: str) -> str:
    if not session_manager.has(variant):
        raise HTTPException(404, f"Unknown protocol variant: {variant}")
    return variant.lower()


# ===================================================================== #
#  SIMULATION ROUTES                                                      #
# ===================================================================== #

@app.post("/api/{variant}/generate", response_model=List[QuantumBitModel])
async def generate_bits(variant: str, body: GenerateRequest):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        bits = session.generate(body.count)
    return [QuantumBitModel.from_bit(b) for b in bits]


@app.post("/api/{variant}/measure", response_model=List[QuantumBitModel])
async def measure_bits(variant: str, body: MeasureRequest):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        bits = session.measure(body.hacker_present)
    return [QuantumBitModel.from_bit(b) for b in bits]


@app.post("/api/{variant}/sift", response_model=SiftResponse)
async def sift_key(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        key = session.sift()
        snapshot = session.get_state()
    state = SessionStateModel.from_state(variant, snapshot)
    return SiftResponse(
        shared_key=key,
        formatted_key=format_binary_key(key),
        error_rate=snapshot.error_rate,
        eavesdropping_detected=detect_eavesdropping(snapshot.error_rate),
        state=state,
    )


@app.post("/api/{variant}/complete", response_model=SessionStateModel)
async def complete_simulation(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        state = SessionStateModel.from_state(variant, session.complete())
    return state


@app.post("/api/{variant}/reset", response_model=SessionStateModel)
async def reset_simulation(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        session.reset()
        state = SessionStateModel.from_state(variant, session.get_state())
    return state


@app.post("/api/{variant}/configure-hacker")
async def configure_hacker(variant: str, body: HackerConfigRequest):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        session.configure_hacker(body.to_config())
    return {"message": "Hacker configuration updated"}


@app.post("/api/{variant}/configure-noise")
async def configure_noise(variant: str, body: NoiseConfigRequest):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        session.configure_noise(body.to_config())
    return {"message": "Noise configuration updated"}


@app.get("/api/{variant}/config")
async def get_config(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        hacker = session.get_hacker_config()
        noise = session.get_noise_config()
    return {
        "hacker": asdict(hacker),
        "noise": asdict(noise),
    }


@app.get("/api/{variant}/state", response_model=SessionStateModel)
async def get_state(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        return SessionStateModel.from_state(variant, session.get_state())


@app.get("/api/{variant}/analysis", response_model=ChannelAnalysisModel)
async def get_analysis(variant: str):
    variant = _require_variant(variant)
    with session_manager.locked(variant) as session:
        snapshot = session.get_state()
    return ChannelAnalysisModel.from_analysis(
        analyze_channel(snapshot),
        detect_eavesdropping(snapshot.error_rate),
    )


# ===================================================================== #
#  WEBSOCKET                                                              #
# ===================================================================== #

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await ws_manager.connect(websocket)
    try:
        while True:
            # Clients only listen; incoming frames are ignored
            await websocket.receive_text()
    except WebSocketDisconnect:
        ws_manager.disconnect(websocket)


# ===================================================================== #
#  HEALTH                                                                 #
# ===================================================================== #

@app.get("/api/health")
async def health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "variants": session_manager.variants,
        "websocket_clients": ws_manager.connection_count,
    }


# ===================================================================== #
#  RUN                                                                    #
# ===================================================================== #

def main() -> None:
    import uvicorn
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting QKD Simulator on %s:%d", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
