"""Per-request audit trail of who changed which proposal."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any, Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp, Message

REQUEST_ID_HEADER = "X-Request-ID"
MASK = "***"
CREDENTIAL_KEYS = frozenset({"password", "access_token", "refresh_token", "authorization"})


def mask_credentials(value: Any) -> Any:
    """Return ``value`` with every credential-named key replaced by ``***``, at any depth."""
    if isinstance(value, list):
        return [mask_credentials(item) for item in value]
    if not isinstance(value, dict):
        return value
    return {
        key: MASK if str(key).lower() in CREDENTIAL_KEYS else mask_credentials(item)
        for key, item in value.items()
    }


def _decode_body(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return mask_credentials(json.loads(raw))
    except json.JSONDecodeError:
        return "<binary>"


@dataclass(slots=True)
class AuditLogRecord:
    timestamp: str
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    actor: str | None
    ip_address: str | None
    query: dict[str, Any]
    body: Any

    def to_json(self) -> str:
        payload = asdict(self)
        payload["duration_ms"] = round(self.duration_ms, 2)
        return json.dumps(payload, default=str)


class AuditMiddleware(BaseHTTPMiddleware):
    """Write one JSON ``AuditLogRecord`` per request to the ``audit`` logger.

    The actor is whatever principal the bearer-token dependency left on
    ``request.state.actor``; anonymous reads are logged with ``actor: null``.
    """

    def __init__(self, app: ASGIApp, *, logger: logging.Logger | None = None) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("audit")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id

        raw_body = await request.body()
        _replay_body(request, raw_body)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        self._logger.info(
            AuditLogRecord(
                timestamp=datetime.now(UTC).isoformat(),
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=(time.perf_counter() - started) * 1000,
                actor=getattr(request.state, "actor", None),
                ip_address=request.client.host if request.client else None,
                query=mask_credentials(dict(request.query_params)),
                body=_decode_body(raw_body),
            ).to_json()
        )
        return response


def _replay_body(request: Request, raw_body: bytes) -> None:
    """Let the route read the body this middleware already consumed."""
    pending = [raw_body]

    async def receive() -> Message:
        body = pending.pop() if pending else b""
        return {"type": "http.request", "body": body, "more_body": False}

    request._receive = receive  # type: ignore[attr-defined]


__all__ = ["AuditLogRecord", "AuditMiddleware", "mask_credentials"]
