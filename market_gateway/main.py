"""Local development server exposing the serverless handler over HTTP."""

from __future__ import annotations

import os
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from loguru import logger

from market_gateway import APP_VERSION
from market_gateway.api.routes import mount
from market_gateway.handler import get_dispatcher
from market_gateway.logging_utils import logging_context, setup_logging

__all__ = ["app"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    dispatcher = get_dispatcher()
    if dispatcher.config.missing_keys:
        logger.warning(
            "Provider keys missing ({}); every action will answer 500",
            ",".join(dispatcher.config.missing_keys),
        )
    logger.info(
        "market-gateway {} env={} actions={}",
        APP_VERSION,
        os.getenv("ENV", "local"),
        ",".join(dispatcher.actions),
    )
    yield


app = FastAPI(title="Market Gateway", version=APP_VERSION, lifespan=lifespan)
mount(app.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    started = time.perf_counter()
    status = 500
    with logging_context(request_id=request_id):
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            logger.log(
                "INFO" if status < 500 else "WARNING",
                "{} {} -> {} in {:.1f}ms",
                request.method,
                request.url.path,
                status,
                (time.perf_counter() - started) * 1000.0,
            )
