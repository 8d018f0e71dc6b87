from __future__ import annotations

import time
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, settings
from .logging import configure_logging, logger
from .middleware import RequestIDMiddleware
from .routers import health, review
from .srs import ReviewScheduler


def create_app(scheduler: Optional[ReviewScheduler] = None, cfg: Optional[Settings] = None) -> FastAPI:
    """Build the API around a single scheduler instance.

    スケジューラはプロセス内で1つだけ生成し、app.state 経由で各ルータへ渡す。
    起動: uvicorn sawasdee.main:create_app --factory
    テストでは任意のストア/時計を持つスケジューラを注入できる。
    """
    cfg = cfg or settings
    configure_logging()

    app = FastAPI(title="Sawasdee Review API", version=__version__)
    app.state.scheduler = scheduler or ReviewScheduler.from_settings(cfg)
    app.state.max_due = cfg.srs_max_due

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.time()
        is_error = False
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        except Exception:
            is_error = True
            raise
        finally:
            logger.info(
                "request_complete",
                path=request.url.path,
                method=request.method,
                status=status,
                latency_ms=round((time.time() - start) * 1000, 2),
                is_error=is_error,
            )

    # リクエストID付与（access_log より外側で束縛し、ログに request_id を載せる）
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(review.router, prefix="/api/review")  # 復習（SRS）
    app.include_router(health.router)  # ヘルスチェック
    return app
