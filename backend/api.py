"""FastAPI backend for pin proximity tracking and sonar alerts."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Query, Response, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.websockets import WebSocketDisconnect

from alerts import AlertTick, LoggingPlayback
from alerts.tone import cue_to_wav_bytes, render_cue
from common.config import (
    ALERT_WS_QUEUE_SIZE,
    API_HOST,
    API_PORT,
    CORS_ORIGINS,
    CUE_DURATION_MS,
    CUE_SAMPLE_RATE,
)
from common.types import GeoPosition, Pin, TrackedPin
from engine import ProximityEngine
from mapping.viewport import Viewport
from storage import InMemoryPinStore, PinAlreadyExistsError, PinNotFoundError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pin Sonar Backend API",
    description="API for geotagged audio pin proximity, radar placement and sonar alerts",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(CORS_ORIGINS),
    allow_origin_regex=r"^https?://(10\.\d+\.\d+\.\d+|192\.168\.\d+\.\d+|172\.(1[6-9]|2\d|3[0-1])\.\d+\.\d+)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

pin_store: InMemoryPinStore | None = None
engine: ProximityEngine | None = None


class PositionErrorRequest(BaseModel):
    reason: str = "unknown"


@asynccontextmanager
async def lifespan(_: FastAPI):
    global engine, pin_store

    pin_store = InMemoryPinStore()
    engine = ProximityEngine(pin_store=pin_store, playback=LoggingPlayback())

    yield

    if engine:
        engine.shutdown()
        engine = None
    pin_store = None


app.router.lifespan_context = lifespan


def _require_engine() -> ProximityEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


@app.get("/")
def read_root():
    return {
        "status": "ok",
        "message": "Pin Sonar Backend API is running",
        "endpoints": {
            "position": "/api/position",
            "position_error": "/api/position/error",
            "pins": "/api/pins",
            "tracked": "/api/tracked",
            "lock": "/api/lock",
            "radar": "/api/radar",
            "map": "/api/map",
            "alert_session": "/api/alerts/session",
            "alert_cue": "/api/alerts/cue.wav",
            "alerts_ws": "/api/alerts/ws",
            "health": "/health",
        },
    }


@app.get("/health")
def health_check():
    current = _require_engine()
    return {
        "status": "ok",
        "pins": len(pin_store) if pin_store is not None else 0,
        "has_position": current.get_position() is not None,
        "alert_active": current.scheduler.is_active,
    }


@app.post("/api/position")
def update_position(position: GeoPosition):
    current = _require_engine()
    current.update_position(position)
    return current.lock_summary()


@app.post("/api/position/error")
def report_position_error(body: PositionErrorRequest):
    current = _require_engine()
    current.report_position_error(body.reason)
    return current.lock_summary()


@app.get("/api/pins", response_model=List[Pin])
def list_pins() -> List[Pin]:
    if pin_store is None:
        raise HTTPException(status_code=503, detail="Pin store not initialized")
    return pin_store.list_pins()


@app.post("/api/pins", response_model=Pin, status_code=201)
def add_pin(pin: Pin) -> Pin:
    current = _require_engine()
    try:
        current.add_pin(pin)
    except PinAlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return pin


@app.get("/api/pins/{pin_id}", response_model=Pin)
def get_pin(pin_id: str) -> Pin:
    if pin_store is None:
        raise HTTPException(status_code=503, detail="Pin store not initialized")
    try:
        return pin_store.get_pin(pin_id)
    except PinNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@app.get("/api/tracked", response_model=List[TrackedPin])
def get_tracked_pins() -> List[TrackedPin]:
    return _require_engine().get_tracked_pins()


@app.get("/api/lock")
def get_lock_state():
    return _require_engine().lock_summary()


@app.get("/api/alerts/session")
def get_alert_session():
    session = _require_engine().scheduler.session
    if session is None:
        return {"status": "idle"}
    return session.to_dict()


@app.get("/api/radar")
def get_radar(radius_px: float | None = Query(default=None, gt=0)):
    current = _require_engine()
    radius = radius_px or current.config.radar_radius_px
    return {"radius_px": radius, "points": current.radar_points(radius)}


@app.get("/api/map")
def get_map(
    width: int | None = Query(default=None, gt=0),
    height: int | None = Query(default=None, gt=0),
    pixels_per_meter: float | None = Query(default=None, gt=0),
):
    # Unset parameters fall back to the Viewport defaults
    fields = {
        name: value
        for name, value in (
            ("width", width),
            ("height", height),
            ("pixels_per_meter", pixels_per_meter),
        )
        if value is not None
    }
    viewport = Viewport(**fields)
    points = _require_engine().map_points(viewport)
    if points is None:
        raise HTTPException(status_code=404, detail="No position available")
    return {"viewport": viewport.model_dump(), **points}


@app.get("/api/alerts/cue.wav")
def get_alert_cue(
    frequency_hz: float = Query(..., ge=20, le=20000),
    duration_ms: int = Query(default=CUE_DURATION_MS, gt=0, le=2000),
):
    samples = render_cue(frequency_hz, duration_ms=duration_ms, sample_rate=CUE_SAMPLE_RATE)
    return Response(
        content=cue_to_wav_bytes(samples, CUE_SAMPLE_RATE),
        media_type="audio/wav",
        headers={"Cache-Control": "public, max-age=3600"},
    )


def _offer_latest(queue: asyncio.Queue, tick: AlertTick) -> None:
    # A slow client gets the newest cue; older ones are dropped, not queued.
    if queue.full():
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            pass
    queue.put_nowait(tick)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Clients only listen; any inbound frame other than a disconnect is ignored.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@app.websocket("/api/alerts/ws")
async def websocket_alerts(websocket: WebSocket):
    await websocket.accept()

    if not engine:
        await websocket.send_json({"type": "error", "message": "Engine unavailable"})
        await websocket.close(code=1011)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, ALERT_WS_QUEUE_SIZE))

    def _on_tick(tick: AlertTick):
        loop.call_soon_threadsafe(_offer_latest, queue, tick)

    unsubscribe = engine.subscribe(_on_tick)
    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await websocket.send_json({"type": "ready", **engine.lock_summary()})
        while True:
            next_tick = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {next_tick, disconnected},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if disconnected in done:
                next_tick.cancel()
                break
            tick = next_tick.result()
            await websocket.send_json({"type": "alert", **tick.model_dump()})
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Alert websocket stream failed")
    finally:
        unsubscribe()
        disconnected.cancel()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host=API_HOST, port=API_PORT, workers=1, loop="asyncio")
