"""API endpoint tests."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fitclub.dependencies import get_session, get_session_maker, get_sync_worker
from fitclub.main import app
from fitclub.strava.exceptions import AccessUnauthorized
from fitclub.strava.schemas import AthleteSchema
from fitclub.sync.service import SyncResult, SyncService
from fitclub.sync.worker import SyncWorker

ADMIN_HEADERS = {"X-API-Key": "test-admin-key"}


class InstantSyncService(SyncService):
    async def sync_athlete(self, db, athlete_id, sync_type=None):
        return SyncResult(athlete_id=athlete_id, new_activities=0, updated_activities=0)


@pytest_asyncio.fixture
async def worker():
    worker = SyncWorker(service=InstantSyncService())
    yield worker
    await worker.drain()


@pytest_asyncio.fixture
async def client(session_maker, worker):
    """Test client wired to the in-memory database."""

    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_session_maker] = lambda: session_maker
    app.dependency_overrides[get_sync_worker] = lambda: worker

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_leaderboard(client, add_athlete, activity_factory, add_activities):
    await add_athlete(1, firstname="Ana")
    await add_athlete(2, firstname="Ben")
    yesterday = datetime.now() - timedelta(days=1)
    await add_activities(
        activity_factory(1, yesterday, distance=3000),
        activity_factory(2, yesterday, distance=9000),
    )

    response = await client.get("/leaderboard", params={"period": "week"})

    assert response.status_code == 200
    data = response.json()
    assert data["total_participants"] == 2
    assert data["activity_type"] == "all"
    assert [e["display_name"] for e in data["top3"]] == ["Ben #2", "Ana #1"]
    assert [e["rank"] for e in data["top3"]] == [1, 2]
    assert data["others"] == []


@pytest.mark.asyncio
async def test_leaderboard_invalid_period(client):
    response = await client.get("/leaderboard", params={"period": "decade"})

    assert response.status_code == 400
    assert "Invalid period" in response.json()["detail"]


@pytest.mark.asyncio
async def test_athlete_rank(client, add_athlete):
    await add_athlete(1)
    await add_athlete(2)

    response = await client.get("/leaderboard/2/rank", params={"period": "all"})
    assert response.status_code == 200
    assert response.json()["rank"] == 2
    assert response.json()["total_participants"] == 2

    response = await client.get("/leaderboard/99/rank")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_weekly_stats_never_fail_on_empty_data(client, add_athlete):
    await add_athlete(1)

    response = await client.get("/stats/1/weekly", params={"weeks": 2})

    assert response.status_code == 200
    buckets = response.json()["data"]
    assert len(buckets) == 2
    assert buckets[0]["stats"]["total_moving_time_formatted"] == "0h 0m"
    assert buckets[0]["stats"]["average_heartrate"] is None


@pytest.mark.asyncio
async def test_stats_unknown_athlete(client):
    assert (await client.get("/stats/5/monthly")).status_code == 404
    assert (await client.get("/app/home/5")).status_code == 404


@pytest.mark.asyncio
async def test_weekly_stats_validates_range(client, add_athlete):
    await add_athlete(1)

    assert (await client.get("/stats/1/weekly", params={"weeks": 0})).status_code == 422
    assert (await client.get("/stats/1/weekly", params={"weeks": 53})).status_code == 422


@pytest.mark.asyncio
async def test_app_screens(client, add_athlete, activity_factory, add_activities):
    await add_athlete(1, firstname="Ana")
    await add_activities(activity_factory(1, datetime(2024, 2, 10, 18, 30), activity_type="Walk"))

    home = await client.get("/app/home/1")
    assert home.status_code == 200
    assert home.json()["user"]["full_name"] == "Ana #1"

    profile = await client.get("/app/profile/1")
    assert profile.json()["stats"]["total_activities"] == 1

    month = await client.get("/app/activities/1", params={"month": 2, "year": 2024})
    assert month.status_code == 200
    assert month.json()["activities"][0]["category"] == "Evening Walk"


@pytest.mark.asyncio
async def test_activity_types_default(client):
    response = await client.get("/activities/types")

    assert response.status_code == 200
    assert "Run" in response.json()["activity_types"]


@pytest.mark.asyncio
async def test_activity_not_found(client):
    assert (await client.get("/activities/123456")).status_code == 404


@pytest.mark.asyncio
async def test_admin_routes_require_api_key(client):
    missing = await client.get("/athletes")
    wrong = await client.get("/athletes", headers={"X-API-Key": "nope"})
    ok = await client.get("/athletes", headers=ADMIN_HEADERS)

    assert missing.status_code in (401, 403)
    assert wrong.status_code == 403
    assert ok.status_code == 200
    assert ok.json() == []


@pytest.mark.asyncio
async def test_start_sync_and_poll_status(client, add_athlete, worker):
    await add_athlete(1)

    response = await client.post("/sync/1", params={"sync_type": "full"}, headers=ADMIN_HEADERS)
    assert response.status_code == 202
    data = response.json()
    assert data["sync_type"] == "full"
    assert data["message"] == "Sync started"

    await worker.drain()

    status = await client.get("/sync/1/status")
    assert status.status_code == 200
    assert status.json()["in_progress"] is False
    assert status.json()["latest"]["id"] == data["sync_log_id"]
    assert status.json()["latest"]["status"] == "completed"

    history = await client.get("/sync/1/history")
    assert [log["id"] for log in history.json()] == [data["sync_log_id"]]


@pytest.mark.asyncio
async def test_start_sync_unknown_athlete(client):
    response = await client.post("/sync/8", headers=ADMIN_HEADERS)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_oauth_callback_creates_athlete_and_starts_sync(client, worker):
    tokens = {"access_token": "a", "refresh_token": "r", "expires_at": 9999999999}

    with (
        patch("fitclub.auth.router.auth_service.exchange_code", return_value=tokens),
        patch(
            "fitclub.auth.router.AsyncStravaClient.get_athlete",
            AsyncMock(return_value=AthleteSchema(id=77, firstname="Cai", lastname="Lopes")),
        ),
    ):
        response = await client.get("/auth/callback", params={"code": "xyz"})

    assert response.status_code == 200
    data = response.json()
    assert data["is_new"] is True
    assert data["athlete"]["id"] == 77
    assert data["message"] == "Welcome, Cai!"

    await worker.drain()
    status = await client.get("/sync/77/status")
    assert status.json()["latest"]["sync_type"] == "full"


@pytest.mark.asyncio
async def test_oauth_callback_failure_is_400(client):
    with patch(
        "fitclub.auth.router.auth_service.exchange_code",
        side_effect=AccessUnauthorized("Unauthorized: bad code"),
    ):
        response = await client.get("/auth/callback", params={"code": "bad"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deauthorize_removes_athlete(client, add_athlete, activity_factory, add_activities):
    await add_athlete(1, firstname="Ana")
    await add_activities(activity_factory(1))

    with patch(
        "fitclub.auth.service.AsyncStravaClient.deauthorize",
        AsyncMock(side_effect=AccessUnauthorized("Unauthorized: token revoked")),
    ):
        response = await client.delete("/auth/deauthorize/1", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["athlete_id"] == 1
    assert (await client.get("/athletes/1")).status_code == 404
    assert (await client.get("/activities/athlete/1")).json() == []

    again = await client.delete("/auth/deauthorize/1", headers=ADMIN_HEADERS)
    assert again.status_code == 404


class GatedSyncService(SyncService):
    def __init__(self):
        self.release = asyncio.Event()

    async def sync_athlete(self, db, athlete_id, sync_type=None):
        await self.release.wait()
        return SyncResult(athlete_id=athlete_id, new_activities=0, updated_activities=0)


@pytest.mark.asyncio
async def test_deauthorize_lets_running_sync_finish_first(client, add_athlete):
    await add_athlete(1)
    service = GatedSyncService()
    gated = SyncWorker(service=service)
    app.dependency_overrides[get_sync_worker] = lambda: gated

    started = await client.post("/sync/1", headers=ADMIN_HEADERS)
    assert started.status_code == 202

    with patch(
        "fitclub.auth.service.AsyncStravaClient.deauthorize",
        AsyncMock(return_value=None),
    ):
        request = asyncio.create_task(client.delete("/auth/deauthorize/1", headers=ADMIN_HEADERS))
        await asyncio.sleep(0.05)
        assert not request.done()
        assert (await client.get("/athletes/1")).status_code == 200

        service.release.set()
        response = await request

    assert response.status_code == 200
    assert gated.in_flight(1) is None
    assert (await client.get("/athletes/1")).status_code == 404
    assert (await client.get("/sync/1/status")).status_code == 404


@pytest.mark.asyncio
async def test_top_performers_today(client, add_athlete, activity_factory, add_activities):
    await add_athlete(1, firstname="Ana", profile_medium="https://img/ana.jpg")
    await add_athlete(2, firstname="Ben")
    await add_athlete(3, firstname="Cai")
    today = datetime.now().replace(hour=0, minute=0, second=1, microsecond=0)
    await add_activities(
        activity_factory(1, today, distance=4000),
        activity_factory(2, today, distance=9000),
        activity_factory(3, today - timedelta(days=1), distance=20000),
    )

    response = await client.get("/leaderboard/top-performers")

    assert response.status_code == 200
    data = response.json()
    assert data["date"] == today.date().isoformat()
    assert [p["name"] for p in data["performers"]] == ["Ben #2", "Ana #1"]
    assert [p["badge"] for p in data["performers"]] == ["Today's Leader", "2nd Place"]
    assert data["performers"][1]["avatar"] == "https://img/ana.jpg"
    assert data["performers"][0]["total_distance_km"] == 9.0
