"""
Property-based tests for time block invariants.

Blocks are generated as minute offsets on the pinned day. Each example
works under a fresh owner id, so examples sharing the test database do
not see each other's blocks.
"""

import uuid
from datetime import timedelta

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from focusflow.errors import InvalidInterval
from focusflow.time_truth import intervals_overlap
from tests.fixtures import at

BASE = at(0)

intervals = st.tuples(
    st.integers(min_value=0, max_value=24 * 60),
    st.integers(min_value=1, max_value=8 * 60),
).map(lambda t: (BASE + timedelta(minutes=t[0]), BASE + timedelta(minutes=t[0] + t[1])))

db_settings = settings(
    max_examples=40,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)


def _owner() -> str:
    return f"prop-{uuid.uuid4().hex[:8]}"


@given(existing=intervals, candidate=intervals)
def test_overlap_rule_is_half_open_intersection(existing, candidate):
    (es, ee), (s, e) = existing, candidate
    assert intervals_overlap(es, ee, s, e) == (es < e and s < ee)


@given(a=intervals, b=intervals)
def test_overlap_is_symmetric(a, b):
    assert intervals_overlap(*a, *b) == intervals_overlap(*b, *a)


@given(start=intervals)
def test_adjacent_intervals_never_overlap(start):
    s, e = start
    assert not intervals_overlap(s, e, e, e + timedelta(minutes=30))


@db_settings
@given(blocks=st.lists(intervals, max_size=8), candidate=intervals)
def test_overlap_query_matches_predicate(manager, blocks, candidate):
    owner = _owner()
    created = [manager.create(owner, "p", None, s, e) for s, e in blocks]

    found = {b.id for b in manager.find_overlapping(owner, *candidate)}

    expected = {b.id for b in created if intervals_overlap(b.start_time, b.end_time, *candidate)}
    assert found == expected


@db_settings
@given(blocks=st.lists(intervals, max_size=8), window=intervals)
def test_range_returns_exactly_contained_blocks(manager, blocks, window):
    owner = _owner()
    created = [manager.create(owner, "p", None, s, e) for s, e in blocks]
    lo, hi = window

    found = manager.find_by_owner_and_range(owner, lo, hi)

    expected = {b.id for b in created if b.start_time >= lo and b.end_time <= hi}
    assert {b.id for b in found} == expected
    assert [b.start_time for b in found] == sorted(b.start_time for b in found)


@db_settings
@given(blocks=st.lists(intervals, max_size=8))
def test_stats_match_durations(manager, blocks):
    owner = _owner()
    for s, e in blocks:
        manager.create(owner, "p", None, s, e)

    stats = manager.stats(owner)
    hours = [(e - s).total_seconds() / 3600 for s, e in blocks]

    assert stats.count == len(blocks)
    assert stats.total_hours == pytest.approx(sum(hours), abs=1e-6)
    if blocks:
        assert stats.average_hours == pytest.approx(sum(hours) / len(hours), abs=1e-6)
    else:
        assert stats.average_hours is None


@db_settings
@given(start=intervals, shrink=st.integers(min_value=0, max_value=120))
def test_non_positive_interval_never_persisted(manager, start, shrink):
    owner = _owner()
    s, _ = start
    with pytest.raises(InvalidInterval):
        manager.create(owner, "p", None, s, s - timedelta(minutes=shrink))
    assert manager.find_by_owner(owner) == []


@db_settings
@given(blocks=st.lists(intervals, min_size=1, max_size=6))
def test_delete_removes_only_target(manager, blocks):
    owner = _owner()
    created = [manager.create(owner, "p", None, s, e) for s, e in blocks]
    target = created[0]

    manager.delete(target.id, owner)

    remaining = {b.id for b in manager.find_by_owner(owner)}
    assert remaining == {b.id for b in created[1:]}
