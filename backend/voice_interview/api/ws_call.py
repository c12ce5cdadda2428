from fastapi import APIRouter, HTTPException, WebSocket
from starlette.websockets import WebSocketState
import asyncio
import json
import logging
import time

from voice_interview.api.components import ResultsNavigator, WebSocketVoiceBridge
from voice_interview.auth import extract_bearer_token, resolve_user_id_from_token
from voice_interview.clients.identity import BackendIdentityResolver
from voice_interview.clients.interviews_api import InterviewsApiClient
from voice_interview.core.config import WS_MAX_TEXT_BYTES
from voice_interview.core.logger import log_event
from voice_interview.session.controller import CallSessionController
from voice_interview.session.events import parse_call_event
from voice_interview.session.finalizer import FinalizationPipeline
from voice_interview.session.models import CallConfig
from voice_interview.session.records import SessionRecordResolver
from voice_interview.system_metrics import decrement_metric, increment_metric

logger = logging.getLogger("voice_interview.ws_call")

router = APIRouter()


class CallDependencyProvider:
    def create_store(self, token: str) -> InterviewsApiClient:
        return InterviewsApiClient(token=token)

    def create_identity_resolver(self, store: InterviewsApiClient) -> BackendIdentityResolver:
        return BackendIdentityResolver(store)


dependency_provider = CallDependencyProvider()


@router.websocket("/ws/call")
async def call_ws(websocket: WebSocket):
    token = extract_bearer_token(
        websocket.headers.get("authorization"),
        websocket.query_params.get("token"),
    )
    try:
        user_id = resolve_user_id_from_token(token)
    except HTTPException:
        await websocket.close(code=1008, reason="Unauthorized")
        return

    await websocket.accept()
    send_lock = asyncio.Lock()

    async def _safe_send(payload: dict) -> None:
        if websocket.client_state != WebSocketState.CONNECTED:
            return
        try:
            encoded = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("ws payload encode failed | err=%s", exc)
            return
        async with send_lock:
            await websocket.send_text(encoded)

    store = dependency_provider.create_store(token)
    identity = dependency_provider.create_identity_resolver(store)
    resolver = SessionRecordResolver(store, identity)
    pipeline = FinalizationPipeline(
        store=store,
        resolver=resolver,
        navigate_fn=ResultsNavigator(send_fn=_safe_send).navigate,
    )
    controller = CallSessionController(
        voice=WebSocketVoiceBridge(send_fn=_safe_send),
        resolver=resolver,
        pipeline=pipeline,
        notify_fn=_safe_send,
    )
    session_id = controller.session.session_id

    def _log_event(event: str, **fields):
        log_event("ws_call", event, session_id, **fields)

    increment_metric("relay_connections_active")
    _log_event("connect", user_id=user_id)
    await _safe_send({"type": "ready", "session_id": session_id})

    stop_reason = "client_disconnect"
    try:
        while True:
            msg = await websocket.receive()
            if msg["type"] == "websocket.disconnect":
                break

            text_payload = msg.get("text")
            if not text_payload:
                continue
            if len(text_payload.encode("utf-8")) > WS_MAX_TEXT_BYTES:
                logger.warning("WS message too large | session_id=%s bytes=%s", session_id, len(text_payload.encode("utf-8")))
                stop_reason = "message_too_large"
                await websocket.close(code=1009, reason="Message too large")
                break

            try:
                payload = json.loads(text_payload)
            except ValueError:
                logger.warning("WS message not JSON | session_id=%s", session_id)
                continue
            if not isinstance(payload, dict):
                continue

            payload_type = str(payload.get("type") or "").strip().lower()

            if payload_type == "ping":
                await _safe_send({"type": "pong", "session_id": session_id, "ts": time.time()})
                continue

            if payload_type == "start_call":
                try:
                    config = CallConfig.from_payload(payload.get("config") or {})
                except ValueError as exc:
                    await _safe_send({"type": "error", "message": str(exc)})
                    continue
                if not config.candidate_id:
                    config.candidate_id = user_id
                if not await controller.start_call(config):
                    await _safe_send({"type": "error", "message": "call already active"})
                continue

            if payload_type == "stop_call":
                await controller.stop_call()
                continue

            if payload_type == "set_muted":
                await controller.set_muted(bool(payload.get("muted")))
                continue

            event = parse_call_event(payload)
            if event is None:
                _log_event("message_ignored", message_type=payload_type or "unknown")
                continue
            await controller.dispatch(event)
    finally:
        await controller.close()
        decrement_metric("relay_connections_active")
        _log_event("disconnect", reason=stop_reason, state=controller.state.value)
