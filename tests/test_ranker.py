from datetime import datetime, timedelta, timezone

from schemas import Event, UserPreferences
from services.recommend import (
    epoch_millis,
    recommend,
    similarity_score,
    trending,
    trending_score,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def ev(id, **kw):
    kw.setdefault("date", NOW + timedelta(days=60))
    return Event(id=id, **kw)


def prefs(**kw):
    kw.setdefault("price_range", (0, 100))
    return UserPreferences(**kw)


ANY = prefs(price_range=(0, 1_000_000))


def test_recommend_example_concert_beats_gala():
    a = ev("A", ticket_price=50, type="concert")
    b = ev("B", ticket_price=200, type="gala")
    p = prefs(categories=["concert"], date_range=(0, float("inf")))
    # A: price 2 + category 3 + date 2, B: date 2 only.
    # The open date range matches both, hence 7 and 2 rather than 5 and 0.
    assert similarity_score(a, p) == 7
    assert similarity_score(b, p) == 2
    assert recommend(p, [a, b], 2) == [a, b]
    assert recommend(p, [b, a], 2) == [a, b]


def test_empty_catalog():
    assert recommend(ANY, [], 3) == []
    assert trending([], 3, now=NOW) == []


def test_limit_bounds_and_zero_scores_still_returned():
    events = [ev(str(i), ticket_price=500) for i in range(5)]
    p = prefs(price_range=(0, 10), date_range=(0, 1))
    assert all(similarity_score(e, p) == 0 for e in events)
    out = recommend(p, events, 3)
    assert out == events[:3]
    assert recommend(p, events[:2], 3) == events[:2]
    assert recommend(p, events) == events[:3]  # default limit


def test_stable_under_ties():
    events = [ev(c, type="gala") for c in "wxyz"]
    events.insert(2, ev("hit", type="concert"))
    out = recommend(prefs(categories=["concert"]), events, 5)
    assert [e.id for e in out] == ["hit", "w", "x", "y", "z"]


def test_price_into_range_adds_two():
    p = prefs(price_range=(10, 20), categories=["webinar"], location="riga")
    outside = ev("o", ticket_price=25, type="webinar", location="Riga")
    inside = outside.model_copy(update={"ticket_price": 15})
    assert similarity_score(inside, p) - similarity_score(outside, p) == 2


def test_price_range_is_inclusive():
    p = prefs(price_range=(10, 20), date_range=(0, 1))
    assert similarity_score(ev("lo", ticket_price=10), p) == 2
    assert similarity_score(ev("hi", ticket_price=20), p) == 2


def test_category_membership_adds_three():
    p = prefs(categories=["marathon", "marathon", "gala"])
    member = ev("m", type="marathon", ticket_price=500)
    other = ev("o", type="concert", ticket_price=500)
    untyped = ev("u", ticket_price=500)
    assert similarity_score(member, p) - similarity_score(other, p) == 3
    assert similarity_score(untyped, p) == similarity_score(other, p)


def test_location_case_insensitive_substring():
    p = prefs(price_range=(-1, -2), date_range=(0, 1), location="VILNIUS")
    assert similarity_score(ev("a", location="Old Town, Vilnius"), p) == 2
    assert similarity_score(ev("b", location="Kaunas"), p) == 0
    assert similarity_score(ev("c"), p) == 0


def test_empty_location_preference_never_matches():
    p = prefs(price_range=(-1, -2), date_range=(0, 1), location="")
    assert similarity_score(ev("a", location="Anywhere"), p) == 0


def test_date_range_uses_epoch_millis_inclusive():
    when = datetime(2025, 7, 1, tzinfo=timezone.utc)
    ms = epoch_millis(when)
    e = ev("d", date=when, ticket_price=500)
    assert similarity_score(e, prefs(date_range=(ms, ms))) == 2
    assert similarity_score(e, prefs(date_range=(ms + 1, ms + 2))) == 0


def test_naive_dates_are_utc():
    naive = datetime(2025, 7, 1)
    assert epoch_millis(naive) == epoch_millis(naive.replace(tzinfo=timezone.utc))


def test_inverted_ranges_do_not_raise():
    p = prefs(price_range=(100, 0), date_range=(10, 0), categories=["gala"])
    e = ev("g", type="gala", ticket_price=50)
    assert similarity_score(e, p) == 3
    assert recommend(p, [e], 1) == [e]


def test_max_score_is_nine():
    when = NOW + timedelta(days=2)
    p = prefs(
        categories=["workshop"],
        location="berlin",
        date_range=(0, epoch_millis(when)),
    )
    e = ev("w", ticket_price=0, type="workshop", location="Berlin", date=when)
    assert similarity_score(e, p) == 9


def test_inputs_are_not_mutated():
    events = [ev("1", ticket_price=10), ev("2", ticket_price=200)]
    before = [e.model_dump() for e in events]
    recommend(prefs(), events, 1)
    trending(events, 1, now=NOW)
    assert [e.model_dump() for e in events] == before
    assert [e.id for e in events] == ["1", "2"]


def test_trending_closer_event_scores_higher():
    soon = ev("soon", date=NOW + timedelta(days=3))
    later = ev("later", date=NOW + timedelta(days=20))
    assert trending_score(soon, NOW) == 3
    assert trending_score(later, NOW) == 2
    assert trending([later, soon], 2, now=NOW) == [soon, later]


def test_trending_time_windows():
    def at(days):
        return trending_score(ev("t", date=NOW + timedelta(days=days)), NOW)

    assert at(0) == 0
    assert at(-1) == 0
    assert at(7) == 3
    assert at(7.5) == 2
    assert at(30) == 2
    assert at(31) == 0


def test_trending_capacity_tiers():
    def cap(n):
        return trending_score(ev("c", max_attendees=n), NOW)

    assert cap(None) == 0
    assert cap(20) == 0
    assert cap(21) == 1
    assert cap(50) == 1
    assert cap(51) == 2
    assert cap(100) == 2
    assert cap(101) == 3


def test_trending_price_tiers():
    def price(p):
        return trending_score(ev("p", ticket_price=p), NOW)

    assert price(0) == 0
    assert price(50) == 0
    assert price(51) == 1
    assert price(100) == 1
    assert price(101) == 2


def test_trending_bigger_venue_first():
    when = NOW + timedelta(days=10)
    small = ev("small", max_attendees=30, date=when, ticket_price=20)
    big = ev("big", max_attendees=150, date=when, ticket_price=20)
    assert trending([small, big], 2, now=NOW) == [big, small]


def test_trending_reads_clock_when_now_omitted():
    real_now = datetime.now(timezone.utc)
    soon = Event(id="soon", date=real_now + timedelta(days=3))
    far = Event(id="far", date=real_now + timedelta(days=365))
    assert trending([far, soon], 1) == [soon]


def test_trending_limit_and_subsequence():
    events = [ev(str(i), max_attendees=10 * i) for i in range(1, 8)]
    out = trending(events, 4, now=NOW)
    assert len(out) == 4
    assert len({e.id for e in out}) == 4
    assert all(e in events for e in out)


def test_category_match_ignores_case():
    p = prefs(price_range=(-1, -2), date_range=(0, 1), categories=[" Concert "])
    assert p.categories == ["concert"]
    assert similarity_score(ev("a", type="concert"), p) == 3
    assert similarity_score(ev("b", type="CONCERT"), p) == 3
    assert similarity_score(ev("c", type="gala"), p) == 0
