"""API 서버 실행 스크립트 — uvicorn.

Run the storefront API server.

Usage:
    python -m storefront.server
    python -m storefront.server --reload  # 개발 모드 (Development mode)
"""

import argparse

import uvicorn

from storefront.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the storefront API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    uvicorn.run(
        "storefront.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload or settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
