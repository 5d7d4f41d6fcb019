"""유지보수 스크립트 — 만료된 리프레시 토큰과 블랙리스트 항목 정리.

Maintenance script — Purges expired refresh tokens and blacklist entries.
``sweep_once`` is also what the in-process sweeper in ``main.py`` runs; the
command is meant for cron when that sweeper is disabled
(TOKEN_SWEEP_INTERVAL_SECONDS=0).

Usage:
    python -m storefront.maintenance
"""

import asyncio

from storefront.database import async_session, engine
from storefront.logging import get_logger
from storefront.services.session_service import session_service

logger = get_logger(__name__)


async def sweep_once() -> tuple[int, int]:
    """만료 토큰을 한 번 정리합니다 — Run one sweep in its own session.

    Returns:
        tuple[int, int]: (리프레시 삭제 수, 폐기 목록 삭제 수)
                         (Refresh rows removed, blacklist rows removed)
    """
    async with async_session() as db:
        removed: tuple[int, int] = await session_service.sweep_expired(db)
        await db.commit()
        return removed


async def main() -> None:
    """만료 토큰 정리 1회 실행 — Run a single sweep and report the counts."""
    refresh_removed, blacklist_removed = await sweep_once()
    logger.info(
        "maintenance_sweep_completed",
        refresh_removed=refresh_removed,
        blacklist_removed=blacklist_removed,
    )
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
