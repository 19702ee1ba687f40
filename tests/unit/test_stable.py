import sqlite3
from contextlib import contextmanager

import pytest

from traffic_rewards_api.app.core.codec import U64_MAX
from traffic_rewards_api.app.core.context import AppContext
from traffic_rewards_api.app.core.db import CELL, MAP, MemoryManager
from traffic_rewards_api.app.core.errors import OperationFailed
from traffic_rewards_api.app.core.stable import IdCounter, RecordStore, decode_u64, encode_u64
from traffic_rewards_api.app.schemas.profile import PROFILE_CODEC, UserProfile
from traffic_rewards_api.app.schemas.report import TrafficReport


def _report_record(report_id):
    return TrafficReport(
        id=report_id,
        reporter_id=1,
        description="Flooded underpass",
        location="Station Rd",
        timestamp=1_700_000_000_000_000_000,
        severity=4,
    )


@contextmanager
def _broken_cursor():
    raise sqlite3.OperationalError("disk I/O error")
    yield  # pragma: no cover


def test_u64_keys_sort_like_integers():
    keys = [0, 1, 255, 256, 2**32, U64_MAX]
    assert sorted(keys, key=encode_u64) == keys
    assert [decode_u64(encode_u64(k)) for k in keys] == keys


def test_counter_starts_at_one_and_increases(context):
    counter = context.report_counter
    assert counter.get() == 0
    assert [counter.next() for _ in range(5)] == [1, 2, 3, 4, 5]
    assert counter.get() == 5


def test_counters_are_independent(context):
    context.report_counter.next()
    context.report_counter.next()
    assert context.user_counter.get() == 0
    assert context.user_counter.next() == 1
    assert context.report_counter.next() == 3


def test_counter_survives_restart(db_path):
    first = AppContext.open(db_path)
    first.report_counter.next()
    first.report_counter.next()

    second = AppContext.open(db_path)
    assert second.report_counter.get() == 2
    assert second.report_counter.next() == 3


def test_counter_exhaustion_raises(db_path):
    counter = IdCounter(MemoryManager(db_path).get(0, CELL), initial=U64_MAX - 1)
    assert counter.next() == U64_MAX
    with pytest.raises(OperationFailed, match="exhausted"):
        counter.next()
    assert counter.get() == U64_MAX


def test_counter_write_failure_raises_operation_failed(context, monkeypatch):
    monkeypatch.setattr(context.report_counter.partition, "cursor", _broken_cursor)
    with pytest.raises(OperationFailed, match="Failed to generate ID"):
        context.report_counter.next()


def test_counter_requires_cell_partition(db_path):
    with pytest.raises(ValueError):
        IdCounter(MemoryManager(db_path).get(0, MAP))


def test_store_requires_map_partition(db_path):
    with pytest.raises(ValueError):
        RecordStore(MemoryManager(db_path).get(0, CELL), PROFILE_CODEC)


def test_store_get_insert_remove(context):
    store = context.profiles
    profile = UserProfile(id=7, username="User7", points=3, contributions=1)

    assert store.get(7) is None
    assert store.insert(7, profile) is None
    assert store.get(7) == profile
    assert 7 in store
    assert len(store) == 1

    updated = profile.model_copy(update={"points": 9})
    assert store.insert(7, updated) == profile
    assert store.get(7) == updated

    assert store.remove(7) == updated
    assert store.remove(7) is None
    assert 7 not in store
    assert len(store) == 0


def test_stores_do_not_share_keys(context):
    context.profiles.insert(1, UserProfile.default_for(1))
    assert context.reports.get(1) is None
    assert len(context.reports) == 0


def test_store_handles_extreme_keys(context):
    for key in (0, U64_MAX):
        context.profiles.insert(key, UserProfile.default_for(key))
    assert context.profiles.get(0).username == "User0"
    assert context.profiles.get(U64_MAX).username == f"User{U64_MAX}"


def test_store_write_failure_raises_operation_failed(context, monkeypatch):
    monkeypatch.setattr(context.profiles.partition, "cursor", _broken_cursor)
    with pytest.raises(OperationFailed):
        context.profiles.insert(1, UserProfile.default_for(1))
    with pytest.raises(OperationFailed):
        context.profiles.remove(1)


def test_store_survives_restart(db_path):
    AppContext.open(db_path).profiles.insert(3, UserProfile(id=3, username="User3", points=30))
    assert AppContext.open(db_path).profiles.get(3).points == 30


def test_store_read_failure_raises_operation_failed(context, monkeypatch):
    monkeypatch.setattr(context.reports.partition, "cursor", _broken_cursor)
    with pytest.raises(OperationFailed, match="Failed to read record 1"):
        context.reports.get(1)
    with pytest.raises(OperationFailed):
        1 in context.reports
    with pytest.raises(OperationFailed):
        len(context.reports)


def test_counter_read_failure_raises_operation_failed(context, monkeypatch):
    monkeypatch.setattr(context.report_counter.partition, "cursor", _broken_cursor)
    with pytest.raises(OperationFailed, match="Failed to read counter"):
        context.report_counter.get()


def test_counter_shared_between_open_contexts(db_path):
    # Two handles on one file, as two server processes would hold.
    first = AppContext.open(db_path)
    second = AppContext.open(db_path)
    issued = []
    for _ in range(5):
        issued.append(first.report_counter.next())
        issued.append(second.report_counter.next())
    assert issued == list(range(1, 11))


def test_report_store_survives_restart(db_path):
    report = _report_record(5)
    AppContext.open(db_path).reports.insert(5, report)

    reopened = AppContext.open(db_path)
    assert reopened.reports.get(5) == report
    assert len(reopened.reports) == 1
