from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from config import settings
from schemas import Event, UserPreferences
from services.normalize import CatalogError, filter_by_status, normalize_catalog
from services.recommend import (
    recommend,
    score_events,
    similarity_score,
    trending,
    trending_score,
)

router = APIRouter(prefix="/events", tags=["events"])

# ---------- Requests / Responses ----------


class CatalogRequest(BaseModel):
    events: List[Dict[str, Any]] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=1)
    statuses: Optional[List[str]] = Field(
        default=None, description="Keep only these statuses, e.g. ['upcoming']"
    )


class RecommendRequest(CatalogRequest):
    preferences: UserPreferences


class TrendingRequest(CatalogRequest):
    now: Optional[datetime] = Field(
        default=None, description="Pin the clock; defaults to server time"
    )


class EventsResponse(BaseModel):
    count: int
    items: List[Event]
    errors: List[str] = Field(default_factory=list)
    debug: Optional[Dict[str, Any]] = None


# ---------- Helpers ----------


def _prepare(req: CatalogRequest) -> tuple[List[Event], List[str], int]:
    if len(req.events) > settings.max_catalog_size:
        raise HTTPException(
            status_code=413,
            detail=f"catalog too large: {len(req.events)} > {settings.max_catalog_size}",
        )
    limit = req.limit or settings.default_limit
    if limit > settings.max_limit:
        raise HTTPException(
            status_code=422, detail=f"limit must be <= {settings.max_limit}"
        )
    try:
        events, errors = normalize_catalog(
            req.events, strict=settings.strict_catalog
        )
    except CatalogError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return filter_by_status(events, req.statuses), errors, limit


def _debug_scores(
    items: List[Event], catalog: List[Event], scorer: Callable[[Event], int]
) -> Dict[str, Any]:
    by_id = {s.event.id: s.score for s in score_events(catalog, scorer)}
    return {"scores": {e.id: by_id[e.id] for e in items}}


# ---------- Routes ----------


@router.post("/recommendations", response_model=EventsResponse)
def post_recommendations(
    req: RecommendRequest, debug: bool = Query(False)
) -> EventsResponse:
    """
    Personalized ranking of the posted catalog against `preferences`.
    """
    try:
        catalog, errors, limit = _prepare(req)
        items = recommend(req.preferences, catalog, limit)
        dbg = None
        if debug:
            dbg = _debug_scores(
                items, catalog, lambda e: similarity_score(e, req.preferences)
            )
        return EventsResponse(
            count=len(items), items=items, errors=errors, debug=dbg
        )
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500, detail=f"events.recommendations failed: {exc!r}"
        )


@router.post("/trending", response_model=EventsResponse)
def post_trending(
    req: TrendingRequest, debug: bool = Query(False)
) -> EventsResponse:
    """
    Trending ranking of the posted catalog. Uses `now` when given,
    server time otherwise.
    """
    try:
        catalog, errors, limit = _prepare(req)
        now = req.now or datetime.now(timezone.utc)
        items = trending(catalog, limit, now=now)
        dbg = None
        if debug:
            dbg = _debug_scores(items, catalog, lambda e: trending_score(e, now))
            dbg["now"] = now.isoformat()
        return EventsResponse(
            count=len(items), items=items, errors=errors, debug=dbg
        )
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500, detail=f"events.trending failed: {exc!r}"
        )


@router.post("/normalize", response_model=EventsResponse)
def post_normalize(req: CatalogRequest) -> EventsResponse:
    try:
        catalog, errors, _ = _prepare(req)
        return EventsResponse(count=len(catalog), items=catalog, errors=errors)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=500, detail=f"events.normalize failed: {exc!r}"
        )
