import pytest
from datetime import timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.monitoring.domain.sample_store import SampleStore
from conftest import NOW, make_sample


@pytest.mark.asyncio
async def test_insert_many_returns_count_and_keeps_duplicates(db: AsyncSession, user):
    store = SampleStore(db)
    inserted = await store.insert_many([
        make_sample(user.id, value=10.0),
        make_sample(user.id, value=10.0),  # identical sample, still appended
    ])

    assert inserted == 2
    assert await store.count(user.id) == 2


@pytest.mark.asyncio
async def test_insert_many_empty_batch_is_noop(db: AsyncSession, user):
    assert await SampleStore(db).insert_many([]) == 0


@pytest.mark.asyncio
async def test_query_is_scoped_to_owner(db: AsyncSession, user, other_user):
    store = SampleStore(db)
    await store.insert_many([
        make_sample(user.id, value=1.0),
        make_sample(other_user.id, value=2.0),
    ])

    mine = await store.query(user.id)
    theirs = await store.query(other_user.id)

    assert [s.value for s in mine] == [1.0]
    assert [s.value for s in theirs] == [2.0]


@pytest.mark.asyncio
async def test_query_orders_by_timestamp(db: AsyncSession, user):
    store = SampleStore(db)
    await store.insert_many([
        make_sample(user.id, value=2.0, timestamp=NOW - timedelta(hours=1)),
        make_sample(user.id, value=3.0, timestamp=NOW),
        make_sample(user.id, value=1.0, timestamp=NOW - timedelta(hours=2)),
    ])

    ascending = await store.query(user.id)
    descending = await store.query(user.id, descending=True)

    assert [s.value for s in ascending] == [1.0, 2.0, 3.0]
    assert [s.value for s in descending] == [3.0, 2.0, 1.0]


@pytest.mark.asyncio
async def test_query_window_is_half_open(db: AsyncSession, user):
    """from_time is inclusive and to_time exclusive."""
    store = SampleStore(db)
    start = NOW - timedelta(days=1)
    await store.insert_many([
        make_sample(user.id, value=1.0, timestamp=start - timedelta(seconds=1)),
        make_sample(user.id, value=2.0, timestamp=start),
        make_sample(user.id, value=3.0, timestamp=NOW - timedelta(seconds=1)),
        make_sample(user.id, value=4.0, timestamp=NOW),
    ])

    window = await store.query(user.id, from_time=start, to_time=NOW)

    assert [s.value for s in window] == [2.0, 3.0]


@pytest.mark.asyncio
async def test_query_filters_provider_and_types(db: AsyncSession, user):
    store = SampleStore(db)
    await store.insert_many([
        make_sample(user.id, provider="aws", metric_type="cpu"),
        make_sample(user.id, provider="aws", metric_type="memory"),
        make_sample(user.id, provider="aws", metric_type="latency"),
        make_sample(user.id, provider="gcp", metric_type="cpu"),
    ])

    resources = await store.query(user.id, provider="aws", metric_types=["cpu", "memory", "storage"])
    cpu_only = await store.query(user.id, metric_type="cpu")

    assert sorted(s.metric_type for s in resources) == ["cpu", "memory"]
    assert sorted(s.provider for s in cpu_only) == ["aws", "gcp"]


@pytest.mark.asyncio
async def test_timestamps_survive_round_trip(db: AsyncSession, user):
    store = SampleStore(db)
    ts = NOW - timedelta(days=3, minutes=17)
    await store.insert_many([make_sample(user.id, timestamp=ts)])
    db.expunge_all()

    [sample] = await store.query(user.id, from_time=ts, to_time=ts + timedelta(seconds=1))
    assert sample.timestamp.replace(tzinfo=None) == ts.replace(tzinfo=None)
    assert isinstance(sample.id, UUID)


@pytest.mark.asyncio
async def test_delete_all_only_touches_owner(db: AsyncSession, user, other_user):
    store = SampleStore(db)
    await store.insert_many([
        make_sample(user.id),
        make_sample(user.id),
        make_sample(other_user.id),
    ])

    removed = await store.delete_all(user.id)

    assert removed == 2
    assert await store.count(user.id) == 0
    assert await store.count(other_user.id) == 1
