"""Tests for the database-backed services."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from fitclub.activities.models import Activity
from fitclub.activities.service import DEFAULT_ACTIVITY_TYPES, activity_service
from fitclub.athletes.models import AthleteStats
from fitclub.athletes.service import athlete_service
from fitclub.scoring.service import scoring_service
from fitclub.stats.service import stats_service
from fitclub.strava.schemas import ActivitySchema, AthleteSchema, AthleteStatsSchema
from fitclub.sync.models import SyncLog, SyncStatus, SyncType
from fitclub.sync.service import SyncResult, sync_service
from scripts.resync_athletes import resync_athletes

NOW = datetime(2024, 3, 15, 12, 0)


def strava_activity(activity_id: int, athlete_id: int = 1, **overrides) -> ActivitySchema:
    data = {
        "id": activity_id,
        "name": "Morning Run",
        "type": "Run",
        "distance": 5000.0,
        "moving_time": 1800,
        "elapsed_time": 1900,
        "total_elevation_gain": 20.0,
        "start_date": "2024-03-14T06:00:00Z",
        "start_date_local": "2024-03-14T07:00:00Z",
        "athlete": {"id": athlete_id, "resource_state": 1},
        "map": {"summary_polyline": "abc"},
    }
    data.update(overrides)
    return ActivitySchema.model_validate(data)


async def count_rows(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


# =========================================================================
# Activities
# =========================================================================


@pytest.mark.asyncio
async def test_upsert_creates_then_updates(async_session, add_athlete):
    await add_athlete(1)

    created, updated = await activity_service.upsert_activities(
        async_session, [strava_activity(10), strava_activity(11)]
    )
    assert (created, updated) == (2, 0)

    created, updated = await activity_service.upsert_activities(
        async_session, [strava_activity(10, name="Renamed"), strava_activity(12)]
    )
    assert (created, updated) == (1, 1)
    assert await count_rows(async_session, Activity) == 3

    activity = await activity_service.get_activity(async_session, 10)
    assert activity.name == "Renamed"
    assert activity.start_date_local == datetime(2024, 3, 14, 7, 0)
    assert activity.summary_polyline == "abc"
    assert activity.raw_data["id"] == 10


@pytest.mark.asyncio
async def test_upsert_nothing(async_session):
    assert await activity_service.upsert_activities(async_session, []) == (0, 0)


@pytest.mark.asyncio
async def test_athlete_activities_filters(async_session, activity_factory, add_activities):
    await add_activities(
        activity_factory(1, datetime(2024, 3, 1, 7, 0), "Run"),
        activity_factory(1, datetime(2024, 3, 5, 7, 0), "Ride"),
        activity_factory(1, datetime(2024, 3, 9, 7, 0), "Run"),
        activity_factory(2, datetime(2024, 3, 9, 8, 0), "Run"),
    )

    runs = await activity_service.get_athlete_activities(async_session, 1, activity_type="Run")
    assert [a.start_date_local.day for a in runs] == [9, 1]

    march_window = await activity_service.get_athlete_activities(
        async_session, 1, after=datetime(2024, 3, 2), before=datetime(2024, 3, 9)
    )
    assert [a.type for a in march_window] == ["Ride"]

    paged = await activity_service.get_athlete_activities(async_session, 1, limit=1, offset=1)
    assert [a.start_date_local.day for a in paged] == [5]


@pytest.mark.asyncio
async def test_activity_types_fallback_and_distinct(async_session, activity_factory, add_activities):
    assert await activity_service.get_activity_types(async_session) == DEFAULT_ACTIVITY_TYPES

    await add_activities(
        activity_factory(activity_type="Walk"),
        activity_factory(activity_type="Run"),
        activity_factory(activity_type="Walk"),
    )

    assert await activity_service.get_activity_types(async_session) == ["Run", "Walk"]


@pytest.mark.asyncio
async def test_records_grouped_by_athlete(async_session, activity_factory, add_activities):
    await add_activities(
        activity_factory(1, datetime(2024, 3, 1, 7, 0)),
        activity_factory(2, datetime(2024, 3, 2, 7, 0)),
        activity_factory(1, datetime(2024, 3, 10, 7, 0)),
    )

    grouped = await activity_service.get_records_by_athlete(async_session, after=datetime(2024, 3, 2))

    assert set(grouped) == {1, 2}
    assert [r.start_date_local.day for r in grouped[1]] == [10]


# =========================================================================
# Athletes
# =========================================================================


@pytest.mark.asyncio
async def test_upsert_athlete_keeps_known_weight(async_session):
    profile = AthleteSchema(id=7, firstname="Ana", lastname="Silva", weight=61.5)
    athlete, created = await athlete_service.upsert_athlete(async_session, profile, "a", "r", 100)
    assert created
    assert athlete.weight == 61.5

    profile = AthleteSchema(id=7, firstname="Ana", lastname="Souza", weight=None)
    athlete, created = await athlete_service.upsert_athlete(async_session, profile, "a2", "r2", 200)
    assert not created
    assert athlete.lastname == "Souza"
    assert athlete.weight == 61.5
    assert athlete.access_token == "a2"


@pytest.mark.asyncio
async def test_stats_snapshot_replaced(async_session, add_athlete):
    await add_athlete(1)
    stats = AthleteStatsSchema.model_validate(
        {"biggest_ride_distance": 1000.0, "all_run_totals": {"count": 4, "distance": 20000.0}}
    )

    await athlete_service.save_stats_snapshot(async_session, 1, stats)
    stats = AthleteStatsSchema.model_validate({"all_run_totals": {"count": 5, "distance": 25000.0}})
    snapshot = await athlete_service.save_stats_snapshot(async_session, 1, stats)

    assert await count_rows(async_session, AthleteStats) == 1
    assert snapshot.total_activities == 5
    assert snapshot.total_distance == 25000.0


@pytest.mark.asyncio
async def test_delete_athlete_removes_related_rows(
    async_session, add_athlete, activity_factory, add_activities
):
    await add_athlete(1)
    await add_athlete(2)
    await add_activities(activity_factory(1), activity_factory(1), activity_factory(2))
    await athlete_service.save_stats_snapshot(async_session, 1, AthleteStatsSchema())
    await sync_service.start_log(async_session, 1, SyncType.FULL)

    deleted = await athlete_service.delete_athlete(async_session, 1)

    assert deleted.id == 1
    assert await athlete_service.get_athlete(async_session, 1) is None
    assert await count_rows(async_session, Activity) == 1
    assert await count_rows(async_session, AthleteStats) == 0
    assert await count_rows(async_session, SyncLog) == 0
    assert await athlete_service.delete_athlete(async_session, 1) is None


# =========================================================================
# Sync log
# =========================================================================


@pytest.mark.asyncio
async def test_sync_log_lifecycle(async_session):
    started = await sync_service.start_log(async_session, 1, SyncType.INCREMENTAL)
    assert started.status == SyncStatus.STARTED.value

    completed = await sync_service.complete_log(
        async_session, started.id, SyncResult(athlete_id=1, new_activities=3, updated_activities=2)
    )
    assert completed.status == SyncStatus.COMPLETED.value
    assert completed.activities_synced == 5

    failed_start = await sync_service.start_log(async_session, 1, SyncType.FULL)
    failed = await sync_service.fail_log(async_session, failed_start.id, "Rate limit exceeded")
    assert failed.status == SyncStatus.FAILED.value
    assert failed.error_message == "Rate limit exceeded"

    latest = await sync_service.get_latest_log(async_session, 1)
    assert latest.id == failed_start.id
    history = await sync_service.get_history(async_session, 1)
    assert [log.id for log in history] == [failed_start.id, started.id]


@pytest.mark.asyncio
async def test_has_running_sync_follows_latest_log(async_session):
    assert await sync_service.has_running_sync(async_session, 1) is False

    started = await sync_service.start_log(async_session, 1, SyncType.FULL)
    assert await sync_service.has_running_sync(async_session, 1) is True
    assert await sync_service.has_running_sync(async_session, 2) is False

    await sync_service.fail_log(async_session, started.id, "boom")
    assert await sync_service.has_running_sync(async_session, 1) is False


@pytest.mark.asyncio
async def test_resync_skips_athlete_with_running_sync(async_session, session_maker, add_athlete):
    await add_athlete(1)
    await add_athlete(2)
    running = await sync_service.start_log(async_session, 1, SyncType.INCREMENTAL)
    result = SyncResult(athlete_id=2, new_activities=1, updated_activities=0)

    with patch.object(sync_service, "sync_athlete", AsyncMock(return_value=result)) as sync_athlete:
        errors = await resync_athletes(session_maker, SyncType.INCREMENTAL)

    assert errors == []
    sync_athlete.assert_awaited_once()
    assert sync_athlete.await_args.args[1] == 2

    latest = await sync_service.get_latest_log(async_session, 1)
    assert latest.id == running.id
    assert latest.status == SyncStatus.STARTED.value
    assert (await sync_service.get_latest_log(async_session, 2)).status == SyncStatus.COMPLETED.value


# =========================================================================
# Stats and leaderboard
# =========================================================================


@pytest.mark.asyncio
async def test_leaderboard_service(async_session, add_athlete, activity_factory, add_activities):
    for athlete_id in (1, 2, 3, 4):
        await add_athlete(athlete_id)
    await add_activities(
        activity_factory(1, datetime(2024, 3, 14, 7, 0), distance=3000),
        activity_factory(2, datetime(2024, 3, 14, 7, 0), distance=12000),
        activity_factory(3, datetime(2024, 3, 13, 7, 0), distance=9000),
        activity_factory(3, datetime(2023, 1, 1, 7, 0), distance=90000),
    )

    board = await scoring_service.get_leaderboard(async_session, "week", None, now=NOW)

    assert board.total_participants == 4
    assert board.activity_type == "all"
    assert board.period.label == "Last 1 Week"
    assert board.period.start_date == datetime(2024, 3, 8)
    assert [e.athlete_id for e in board.top3] == [2, 3, 1]
    assert [e.athlete_id for e in board.others] == [4]

    all_time = await scoring_service.get_athlete_rank(async_session, 3, "all", None, now=NOW)
    assert all_time.rank == 1
    assert all_time.period == "all"
    assert all_time.total_participants == 4


@pytest.mark.asyncio
async def test_leaderboard_rank_not_found(async_session, add_athlete):
    await add_athlete(1)

    assert await scoring_service.get_athlete_rank(async_session, 404, "week", None, now=NOW) is None


@pytest.mark.asyncio
async def test_leaderboard_without_athletes(async_session):
    board = await scoring_service.get_leaderboard(async_session, "month", "Run", now=NOW)

    assert board.total_participants == 0
    assert board.top3 == []
    assert board.activity_type == "Run"


@pytest.mark.asyncio
async def test_weekly_stats_service(async_session, add_athlete, activity_factory, add_activities):
    await add_athlete(1)
    await add_activities(
        activity_factory(1, datetime(2024, 3, 11, 7, 0)),
        activity_factory(1, datetime(2024, 3, 4, 7, 0)),
        activity_factory(1, datetime(2024, 1, 4, 7, 0)),
    )

    weekly = await stats_service.get_weekly_stats(async_session, 1, weeks=4, now=NOW)

    assert weekly.weeks_requested == 4
    assert [b.stats.total_activities for b in weekly.data] == [1, 1, 0, 0]


@pytest.mark.asyncio
async def test_monthly_stats_service(async_session, add_athlete, activity_factory, add_activities):
    await add_athlete(1)
    await add_activities(
        activity_factory(1, datetime(2024, 3, 11, 7, 0)),
        activity_factory(1, datetime(2024, 1, 31, 23, 0)),
        activity_factory(1, datetime(2023, 12, 31, 7, 0)),
    )

    monthly = await stats_service.get_monthly_stats(async_session, 1, months=3, now=NOW)

    assert [b.month for b in monthly.data] == ["March", "February", "January"]
    assert [b.stats.total_activities for b in monthly.data] == [1, 0, 1]


@pytest.mark.asyncio
async def test_stats_for_unknown_athlete_raise(async_session):
    with pytest.raises(ValueError):
        await stats_service.get_weekly_stats(async_session, 99, now=NOW)
    with pytest.raises(ValueError):
        await stats_service.get_profile(async_session, 99)


@pytest.mark.asyncio
async def test_home_view(async_session, add_athlete, activity_factory, add_activities):
    await add_athlete(1, firstname="Ana", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    await add_activities(
        activity_factory(1, datetime(2024, 3, 14, 7, 0), activity_type="Walk", distance=3000),
        activity_factory(1, datetime(2024, 2, 1, 7, 0)),
    )

    home = await stats_service.get_home(async_session, 1, now=NOW)

    assert home.user.full_name == "Ana #1"
    assert home.calendar.formatted == "Friday, March 15, 2024"
    assert home.your_stats.total_activities == 2
    assert home.your_stats.total_km == 8.0
    assert home.recent_activities.count == 1
    assert home.recent_activities.activities[0].category == "Morning Walk"
