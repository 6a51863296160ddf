from __future__ import annotations

import hashlib
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from schemas import Event

logger = logging.getLogger(__name__)

ISO_Z_FMT = "%Y-%m-%dT%H:%M:%SZ"

_ws_re = re.compile(r"\s+")


class CatalogError(ValueError):
    """A catalog document could not be turned into an Event."""


def normalize_text(s: str | None) -> str | None:
    if not s:
        return None
    s = _ws_re.sub(" ", s).strip()
    return s or None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text_field(doc: Mapping[str, Any], key: str) -> Optional[str]:
    value = doc.get(key)
    if value is not None and not isinstance(value, str):
        raise CatalogError(f"{key} must be a string, got {type(value).__name__}")
    return normalize_text(value)


def parse_event_date(value: Any) -> Optional[datetime]:
    """
    Best-effort parser for stored event dates.
    Accepts datetime/date objects, epoch millis, ISO strings (with or
    without 'Z') and store timestamp mappings ({"seconds": ..}).
    Returns an aware UTC datetime or None if parsing fails.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        if not _is_number(seconds) or not _is_number(nanos):
            return None
        return parse_event_date(seconds * 1000 + nanos / 1_000_000)

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            if value.endswith("Z"):
                dt = datetime.fromisoformat(value[:-1] + "+00:00")
            else:
                dt = datetime.fromisoformat(value)
        except ValueError:
            return None
        return parse_event_date(dt)

    return None


def _coerce_price(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if price != price or price < 0:  # NaN or negative
        return 0.0
    return price


def _coerce_capacity(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        cap = int(value)
    except (TypeError, ValueError):
        return None
    return cap if cap > 0 else None


def _stable_id(title: Any, when: datetime, location: Optional[str]) -> str:
    key = f"{title}|{when.strftime(ISO_Z_FMT)}|{location}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]


def normalize_event(doc: Mapping[str, Any]) -> Event:
    if not isinstance(doc, Mapping):
        raise CatalogError(f"expected an object, got {type(doc).__name__}")

    when = parse_event_date(doc.get("date"))
    if when is None:
        raise CatalogError(f"unparseable date: {doc.get('date')!r}")

    location = _text_field(doc, "location")
    kind = _text_field(doc, "type")
    title = _text_field(doc, "title")

    event_id = doc.get("id")
    if event_id is None or str(event_id).strip() == "":
        event_id = _stable_id(title, when, location)

    data: Dict[str, Any] = {
        "id": str(event_id),
        "ticketPrice": _coerce_price(doc.get("ticketPrice", doc.get("ticket_price"))),
        "maxAttendees": _coerce_capacity(
            doc.get("maxAttendees", doc.get("max_attendees"))
        ),
        "type": kind.lower() if kind else None,
        "location": location,
        "date": when,
        "title": title,
        "description": doc.get("description"),
        "status": doc.get("status"),
        "isVirtual": bool(doc.get("isVirtual", doc.get("is_virtual", False))),
        "organizerId": doc.get("organizerId", doc.get("organizer_id")),
    }
    try:
        return Event.model_validate(data)
    except ValidationError as ve:
        raise CatalogError(str(ve)) from ve


def normalize_catalog(
    docs: Iterable[Mapping[str, Any]], *, strict: bool = False
) -> Tuple[List[Event], List[str]]:
    """
    Normalize raw store documents into a rankable catalog.

    Bad documents are skipped and reported as "item#<idx> ..." unless
    `strict`, in which case the first one raises CatalogError.
    Repeated ids keep their first occurrence only.
    """
    events: List[Event] = []
    errors: List[str] = []
    seen: set[str] = set()

    for idx, doc in enumerate(docs):
        try:
            ev = normalize_event(doc)
        except CatalogError as e:
            if strict:
                raise CatalogError(f"item#{idx}: {e}") from e
            logger.info("Skipping catalog item#%d: %s", idx, e)
            errors.append(f"item#{idx} normalization failed: {e}")
            continue
        if ev.id in seen:
            errors.append(f"item#{idx} duplicate id {ev.id!r} dropped")
            continue
        seen.add(ev.id)
        events.append(ev)

    return events, errors


def filter_by_status(
    events: Iterable[Event], statuses: Optional[Iterable[str]]
) -> List[Event]:
    if not statuses:
        return list(events)
    wanted = {s.lower() for s in statuses}
    return [e for e in events if (e.status or "").lower() in wanted]
