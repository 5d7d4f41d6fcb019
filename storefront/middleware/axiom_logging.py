"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per request to Axiom: method, path, status
code, duration, the JSON request body, and the ``detail`` of error
responses. Credentials (passwords, tokens, cookies) are masked before
anything leaves the process.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from storefront.config import settings
from storefront.logging import get_logger

logger = get_logger(__name__)

# 마스킹 대상 키 — camelCase 본문 키(newPassword, accessToken)도 포함
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|cookie|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def mask_sensitive(data: Any) -> Any:
    """민감 필드 마스킹 — Recursively mask credential-like keys in dicts/lists."""
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


async def _read_json_body(request: Request) -> Any:
    body_bytes: bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return mask_sensitive(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs every API request to Axiom.
    Pass-through when AXIOM_API_TOKEN / AXIOM_DATASET are not configured
    and no client is injected.
    """

    def __init__(self, app: Any, client: AxiomClient | None = None) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = client
        self._dataset: str = settings.AXIOM_DATASET

        if self._client is None and settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _unwrap_error(self, response: Response) -> tuple[Response, str]:
        """에러 응답 body에서 사유 추출 후 응답을 다시 구성합니다.

        Read the streamed error body, pull out ``detail``, and rebuild the
        response since the body iterator can only be consumed once.
        """
        raw = b""
        async for chunk in response.body_iterator:
            raw += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        try:
            detail: Any = json.loads(raw).get("detail", "")
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
            detail = raw.decode("utf-8", errors="replace")
        if not isinstance(detail, str):
            # 422 검증 오류는 목록 — Validation errors arrive as a list
            detail = json.dumps(mask_sensitive(detail))

        rebuilt = Response(
            content=raw,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
        return rebuilt, detail

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS or self._client is None:
            return await call_next(request)

        start_time = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}

        if request.method in _BODY_METHODS:
            request_body = await _read_json_body(request)
            if request_body is not None:
                event["request_body"] = request_body

        event["status_code"] = 500
        try:
            response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                response, event["error"] = await self._unwrap_error(response)
        except Exception as exc:
            event["error"] = type(exc).__name__
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            try:
                self._client.ingest_events(self._dataset, [event])
            except Exception as exc:
                logger.warning("axiom_ingest_failed", error=str(exc), path=event["path"])

        return response
