"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 라우터, 만료 토큰 정리 작업 등록.

FastAPI application entry point — Middleware and router registration, plus
the background sweeper that purges expired refresh tokens and blacklist
entries every TOKEN_SWEEP_INTERVAL_SECONDS.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.database import utcnow
from storefront.logging import get_logger
from storefront.middleware.axiom_logging import AxiomLoggingMiddleware
from storefront.maintenance import sweep_once

logger = get_logger(__name__)


async def _sweep_forever(interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await sweep_once()
        except Exception:
            logger.exception("periodic_token_sweep_failed")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """앱 수명 주기 — 주기적 토큰 정리 작업 시작/종료.

    Start the periodic sweeper on startup (unless the interval is 0) and
    cancel it on shutdown.
    """
    task: asyncio.Task[None] | None = None
    if settings.TOKEN_SWEEP_INTERVAL_SECONDS > 0:
        task = asyncio.create_task(_sweep_forever(settings.TOKEN_SWEEP_INTERVAL_SECONDS))
        logger.info("token_sweeper_started", interval_seconds=settings.TOKEN_SWEEP_INTERVAL_SECONDS)
    try:
        yield
    finally:
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — 리프레시 쿠키 전달을 위해 credentials 허용, origin은 명시 목록만
# (Credentials allowed for the refresh cookie, so origins must be listed explicitly)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    now: datetime = utcnow()
    return {"status": "ok", "timestamp": now.isoformat()}


# ---------------------------------------------------------------------------
# 라우터 등록 — /auth, /users
# ---------------------------------------------------------------------------
from storefront.api.routes import api_router  # noqa: E402

app.include_router(api_router)
