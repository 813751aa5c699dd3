"""FastAPI adapter — thin translation layer, no business logic."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from fetchstats import create_fetcher
from fetchstats.engine.fetcher import Fetcher
from fetchstats.engine.models import FetchRequest, FetchResult
from fetchstats.errors import FetchError, UnsupportedSchemeError

logger = logging.getLogger(__name__)


def create_app(fetcher: Fetcher | None = None) -> FastAPI:
    fetcher = fetcher or create_fetcher()
    app = FastAPI(title="fetchstats API", version="0.1.0")

    @app.post("/fetch", response_model=FetchResult)
    async def fetch(request: FetchRequest) -> FetchResult:
        try:
            # Never let API callers choose a path on the server
            return await fetcher.fetch(request.model_copy(update={"out_file": os.devnull}))
        except UnsupportedSchemeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except FetchError as exc:
            logger.warning("fetch failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    @app.get("/reporters")
    async def reporters() -> JSONResponse:
        return JSONResponse([
            {"name": r.name, "title": r.title(), "description": r.description()}
            for r in fetcher.registry
        ])

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return app


def serve() -> None:
    """Entry-point for ``fetchstats-web`` console script."""
    import uvicorn

    uvicorn.run(
        "fetchstats.adapters.web_fastapi.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
