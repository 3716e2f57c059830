#!/usr/bin/env python3
"""
Anonymous message board API.

``create_app`` wires the thread store, the password hasher and the
routers into a FastAPI application; the module-level ``app`` is what
uvicorn serves::

    uvicorn app:app --reload
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from config import (ALLOWED_ORIGINS, BCRYPT_ROUNDS, DB_PATH, GZIP_MIN_SIZE, HTTP_REQUEST_ENTITY_TOO_LARGE,
                    LOG_FILE, LOG_LEVEL, MAX_REQUEST_SIZE_MB)
from database import BoardStore
from endpoints import get_all_routers, initialize_endpoints
from exceptions import Messages
from logging_config import setup_logging
from security import PasswordHasher
from threads import timestamp

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE_MB * 1024 * 1024:
            return PlainTextResponse("Request entity too large", status_code=HTTP_REQUEST_ENTITY_TOO_LARGE)

        response = await call_next(request)

        # Framing only by our own pages, no DNS prefetching, referrer only to our own pages
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["X-DNS-Prefetch-Control"] = "off"
        response.headers["Referrer-Policy"] = "same-origin"
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response


def create_app(db_path: str = DB_PATH, bcrypt_rounds: int = BCRYPT_ROUNDS) -> FastAPI:
    setup_logging(LOG_LEVEL, LOG_FILE)

    app = FastAPI(title="Anonymous Message Board API",
                  description="Anonymous threads and replies with password-gated moderation",
                  version="1.0.0")

    store = BoardStore(db_path)
    initialize_endpoints(store, PasswordHasher(rounds=bcrypt_rounds))

    app.add_middleware(GZipMiddleware, minimum_size=GZIP_MIN_SIZE)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"]
    )

    @app.get("/api/health")
    async def health_check():
        return JSONResponse({"status": "healthy", "timestamp": timestamp()})

    for router in get_all_routers():
        app.include_router(router)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return PlainTextResponse(Messages.ERROR)

    @app.on_event("startup")
    async def startup_event():
        await store.init_schema()

    return app


app = create_app()
