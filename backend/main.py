"""
Application entry point.

`create_app()` wires repositories into services and the services onto
`app.state`. With no repositories supplied it opens a psycopg connection
pool in the lifespan and uses the PostgreSQL repositories; tests pass
in-memory repositories instead.

Run locally with:
    python main.py --port 9001
"""

import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from api import router
from db import create_pool
from logging_config import configure_logging
from repo_readings import RainfallRepo, RainfallRepository, RiverRepo, RiverRepository
from service_readings import RainfallService, RiverService
from settings import settings

logger = logging.getLogger(__name__)


def create_app(
    river_repo: Optional[RiverRepository] = None,
    rainfall_repo: Optional[RainfallRepository] = None,
    request_timeout: Optional[float] = None,
) -> FastAPI:
    configure_logging()
    timeout = settings.request_timeout_seconds if request_timeout is None else request_timeout

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        pool = None
        river, rainfall = river_repo, rainfall_repo
        if river is None or rainfall is None:
            pool = create_pool()
            pool.open()
            river = river or RiverRepo(pool)
            rainfall = rainfall or RainfallRepo(pool)
        app.state.river_service = RiverService(river)
        app.state.rainfall_service = RainfallService(rainfall)
        try:
            yield
        finally:
            if pool is not None:
                pool.close()

    app = FastAPI(title="Flood Readings API", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def request_timeout_middleware(request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Request timed out",
                extra={"path": request.url.path, "timeout_s": timeout},
            )
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"error": "Request timed out"},
            )

    @app.exception_handler(HTTPException)
    async def error_envelope(_request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Serve river and rainfall readings.")
    parser.add_argument("--port", type=int, default=settings.port, help="TCP port to listen on")
    args = parser.parse_args()
    logger.info("Listening on port %s", args.port)
    uvicorn.run(app, host="0.0.0.0", port=args.port, log_config=None)
