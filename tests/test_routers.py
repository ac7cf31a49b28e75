from uuid import uuid4

from conftest import CRON_TOKEN

AUTH = {"Authorization": f"Bearer {CRON_TOKEN}"}


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scheduler_rejects_missing_or_wrong_token(client) -> None:
    assert client.post("/schedule/run").status_code == 401
    assert client.post("/schedule/run", headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.post("/schedule/run", headers={"Authorization": CRON_TOKEN}).status_code == 401
    assert client.post("/schedule/backfill", json={"dates": ["2025-01-01"]}).status_code == 401
    assert client.get("/levels/").json() == []


def test_scheduler_rejects_everything_without_configured_secret(client, monkeypatch) -> None:
    from rumb.core.config import settings

    monkeypatch.setattr(settings, "CRON_SECRET", None)
    assert client.post("/schedule/run", headers=AUTH).status_code == 401


def test_forced_run_publishes_todays_level(client) -> None:
    response = client.post("/schedule/run", params={"mode": "daily", "force": "true"}, headers=AUTH)
    assert response.status_code == 200
    body = response.json()
    assert body["ran"] is True
    assert body["daily"]["current"]["created"] is True
    assert body["daily"]["total"] == 2
    assert body["weekly"]["total"] == 1

    today = body["daily"]["created_keys"][-1]
    level = client.get(f"/levels/daily/{today}")
    assert level.status_code == 200
    assert level.json()["date"] == today
    assert level.json()["id"] == body["daily"]["current"]["level_id"]


def test_run_rejects_backfill_modes(client) -> None:
    response = client.post("/schedule/run", params={"mode": "backfill-range"}, headers=AUTH)
    assert response.status_code == 422


def test_backfill_dates_and_range(client) -> None:
    response = client.post("/schedule/backfill", json={"dates": ["2025-01-01", "garbage"]}, headers=AUTH)
    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "backfill-dates"
    assert body["daily"]["created_keys"] == ["2025-01-01"]

    response = client.post(
        "/schedule/backfill",
        json={"start": "2025-01-06", "end": "2025-01-07", "include_weekly": True},
        headers=AUTH,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "backfill-range"
    assert body["daily"]["total"] == 2
    assert body["weekly"]["created_keys"] == ["2025-W02"]

    weekly = client.get("/levels/weekly/2025-W02")
    assert weekly.status_code == 200
    assert weekly.json()["level_type"] == "weekly"

    listed = client.get("/levels/", params={"level_type": "daily"}).json()
    assert sorted(level["date"] for level in listed) == ["2025-01-01", "2025-01-06", "2025-01-07"]

    one = client.get(f"/levels/{listed[0]['id']}")
    assert one.status_code == 200
    assert one.json()["shortest_path"][0] == one.json()["start_id"]


def test_backfill_validation(client) -> None:
    assert client.post("/schedule/backfill", json={}, headers=AUTH).status_code == 422
    assert client.post(
        "/schedule/backfill", json={"start": "2025-01-10", "end": "2025-01-01"}, headers=AUTH
    ).status_code == 422
    assert client.post("/schedule/backfill", json={"dates": ["garbage"]}, headers=AUTH).status_code == 422


def test_level_lookups(client) -> None:
    assert client.get("/levels/daily/not-a-date").status_code == 422
    assert client.get("/levels/daily/2030-01-01").status_code == 404
    assert client.get("/levels/weekly/2030-01").status_code == 422
    assert client.get("/levels/weekly/2030-W01").status_code == 404
    assert client.get(f"/levels/{uuid4()}").status_code == 404
