"""
eventrank-api entrypoint.

Run with: uvicorn main:app --reload
"""
from __future__ import annotations

import logging
import time as _t

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from routers import events as events_router

app = FastAPI(title="eventrank-api", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_log = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    # one line per request; ranking routes also report the debug flag
    start = _t.perf_counter()  # monotonic for durations
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((_t.perf_counter() - start) * 1000)
        status = getattr(response, "status_code", "-")
        _log.info(
            "method=%s path=%s status=%s dur_ms=%s debug=%s ua=%s",
            request.method,
            request.url.path,
            status,
            dur_ms,
            request.query_params.get("debug", "false"),
            request.headers.get("user-agent", "-"),
        )

# Routers
app.include_router(events_router.router)


@app.get("/ping")
def ping():
    return {"ok": True, "ts": _t.time()}


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.app_env}


@app.get("/")
def root():
    return {"ok": True, "service": "eventrank-api"}
