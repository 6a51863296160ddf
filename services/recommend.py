from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from schemas import Event, UserPreferences

logger = logging.getLogger(__name__)

MS_PER_DAY = 1000 * 60 * 60 * 24

# hand-tuned additive scorers; no state is kept between calls


@dataclass(frozen=True)
class ScoredEvent:
    event: Event
    score: int


def epoch_millis(dt: datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000


def similarity_score(event: Event, preferences: UserPreferences) -> int:
    score = 0

    lo, hi = preferences.price_range
    if lo <= event.ticket_price <= hi:
        score += 2

    if event.type and event.type.strip().lower() in preferences.categories:
        score += 3

    wanted = preferences.location.lower()
    if wanted and event.location and wanted in event.location.lower():
        score += 2

    start, end = preferences.date_range
    if start <= epoch_millis(event.date) <= end:
        score += 2

    return score


def trending_score(event: Event, now: datetime) -> int:
    score = 0

    days_until = (epoch_millis(event.date) - epoch_millis(now)) / MS_PER_DAY
    if 0 < days_until <= 7:
        score += 3
    elif 7 < days_until <= 30:
        score += 2

    cap = event.max_attendees
    if cap:
        if cap > 100:
            score += 3
        elif cap > 50:
            score += 2
        elif cap > 20:
            score += 1

    if event.ticket_price > 100:
        score += 2
    elif event.ticket_price > 50:
        score += 1

    return score


def score_events(
    events: Iterable[Event], scorer: Callable[[Event], int]
) -> List[ScoredEvent]:
    """
    Score every event and sort best-first.

    sorted() is stable (also with reverse=True), so tied events keep
    their input order.
    """
    scored = [ScoredEvent(event=e, score=scorer(e)) for e in events]
    return sorted(scored, key=lambda s: s.score, reverse=True)


def _top(scored: List[ScoredEvent], limit: int) -> List[Event]:
    if scored:
        logger.debug(
            "ranked %d events, limit=%d, top_score=%d",
            len(scored), limit, scored[0].score,
        )
    return [s.event for s in scored[:limit]]


def recommend(
    preferences: UserPreferences, events: List[Event], limit: int = 3
) -> List[Event]:
    """
    Personalized top-N. Inverted price/date ranges are not validated,
    they simply never match.
    """
    if not events:
        return []
    scored = score_events(events, lambda e: similarity_score(e, preferences))
    return _top(scored, limit)


def trending(
    events: List[Event], limit: int = 3, *, now: Optional[datetime] = None
) -> List[Event]:
    """
    User-independent top-N by time-to-event, capacity and price tier.

    `now` pins the clock; when omitted the wall clock is read on every call.
    """
    if not events:
        return []
    if now is None:
        now = datetime.now(timezone.utc)
    scored = score_events(events, lambda e: trending_score(e, now))
    return _top(scored, limit)
