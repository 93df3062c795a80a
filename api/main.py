import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from api.engine.constants import ENGINE_VERSION, PROTOCOL_VERSION
from api.engine.protocol_gateway_v1 import ProtocolGateway
from api.engine.runtime_settings_v1 import load_runtime_settings
from api.engine.session_registry_v1 import SessionRegistry
from api.engine.target_selector_v1 import advance_target
from api.engine.wall_target_state_v1 import GameSession
from engine.shape_catalog import catalog_fingerprint


logger = logging.getLogger(__name__)


class ClientEnvelopeV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: StrictStr
    payload: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ok: bool
    engine_version: str
    protocol_version: str
    catalog_fingerprint: str
    connected_clients: int
    time: str


class WallTargetResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    targetShape: int = Field(..., description="Target block value (1-5)")
    shapeIndex: int = Field(..., description="Index into the shape catalog for targetShape")
    shape: List[int] = Field(default_factory=list)


SETTINGS = load_runtime_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = GameSession()
    rng = SETTINGS.make_rng()
    gateway = ProtocolGateway(session=session, registry=SessionRegistry(), rng=rng)
    advance_target(session, rng)
    app.state.gateway = gateway
    logger.info("Wall server ready on socket path %s", SETTINGS.socket_path)
    yield


app = FastAPI(title="Numberblocks Wall Server", version=ENGINE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.allow_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


def _gateway(app_obj: Any) -> ProtocolGateway:
    return app_obj.state.gateway


@app.get("/health", response_model=HealthResponse)
def health(request: Request):
    gateway = _gateway(request.app)
    return HealthResponse(
        ok=True,
        engine_version=ENGINE_VERSION,
        protocol_version=PROTOCOL_VERSION,
        catalog_fingerprint=catalog_fingerprint(),
        connected_clients=gateway.registry.count,
        time=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/wall_target", response_model=WallTargetResponse)
def wall_target(request: Request):
    target = _gateway(request.app).session.target
    return WallTargetResponse(
        targetShape=target.value,
        shapeIndex=target.shape_index,
        shape=list(target.shape),
    )


def _frame_text(message: Dict[str, Any]) -> str:
    text = message.get("text")
    if isinstance(text, str):
        return text
    data = message.get("bytes")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return ""


def _parse_envelope(raw: str, connection_id: str) -> Optional[ClientEnvelopeV1]:
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Dropping non-JSON frame from client %s", connection_id)
        return None
    try:
        return ClientEnvelopeV1.model_validate(parsed)
    except ValidationError as exc:
        logger.warning("Dropping malformed envelope from client %s: %s", connection_id, exc.errors())
        return None


@app.websocket(SETTINGS.socket_path)
async def wall_socket(websocket: WebSocket):
    gateway = _gateway(websocket.app)
    await websocket.accept()
    connection_id = await gateway.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message.get("type") == "websocket.disconnect":
                break
            envelope = _parse_envelope(_frame_text(message), connection_id)
            if envelope is None:
                continue
            await gateway.handle(connection_id, envelope.type, envelope.payload)
    finally:
        gateway.disconnect(connection_id)
