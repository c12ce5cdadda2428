import logging
from typing import Any

import httpx

from voice_interview.core.config import INTERVIEWS_API_TIMEOUT_SEC, INTERVIEWS_API_URL
from voice_interview.schemas import (
    ApiEnvelope,
    SessionRecord,
    SessionRecordCreate,
    SessionRecordKind,
    SessionRecordUpdate,
    TurnRecordCreate,
)

logger = logging.getLogger("voice_interview.clients.interviews_api")


class InterviewsApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InterviewsApiClient:
    """
    Thin async client for the interview persistence backend.

    Every response is a {success, data, message} envelope; a non-2xx status
    or success=false raises InterviewsApiError. Transport failures surface as
    httpx.HTTPError.
    """

    def __init__(
        self,
        base_url: str = INTERVIEWS_API_URL,
        token: str | None = None,
        timeout_sec: float = INTERVIEWS_API_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = str(base_url or "").rstrip("/")
        self.token = token
        self.timeout_sec = timeout_sec
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(self, method: str, path: str, payload: dict | None = None) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_sec,
            transport=self.transport,
        ) as client:
            response = await client.request(method, path, json=payload, headers=self._headers())

        try:
            body = response.json()
        except ValueError:
            body = {}
        envelope = ApiEnvelope.model_validate(body) if isinstance(body, dict) else ApiEnvelope()

        if response.status_code >= 400 or not envelope.success:
            message = envelope.message or f"{method} {path} failed"
            logger.warning(
                "interviews api error | method=%s path=%s status=%s message=%s",
                method,
                path,
                response.status_code,
                message,
            )
            raise InterviewsApiError(message, status_code=response.status_code)
        return envelope.data

    async def create_session_record(self, kind: SessionRecordKind, params: SessionRecordCreate) -> SessionRecord:
        if kind is SessionRecordKind.PRACTICE and not params.application_id:
            raise ValueError("practice interview requires an application id")
        if kind is SessionRecordKind.STANDALONE and not params.candidate_id:
            raise ValueError("standalone interview requires a candidate id")

        data = await self.request("POST", "/interviews", params.to_payload())
        return SessionRecord.model_validate(data)

    async def update_session_record(self, record_id: str, update: SessionRecordUpdate) -> SessionRecord:
        data = await self.request("PUT", f"/interviews/{record_id}", update.to_payload())
        return SessionRecord.model_validate(data)

    async def create_turn_record(self, turn: TurnRecordCreate) -> None:
        await self.request("POST", "/interview-exchanges", turn.to_payload())

    async def trigger_analysis(self, record_id: str) -> None:
        await self.request("POST", f"/interviews/{record_id}/analyze")
