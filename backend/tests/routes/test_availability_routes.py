def test_availability_grid_shape(client, courts):
    r = client.get("/api/v1/availability", params={"date": "2026-10-20"})

    assert r.status_code == 200
    data = r.json()
    assert data["date"] == "2026-10-20"
    assert data["utc_offset"] == "-06:00"
    assert [c["court_name"] for c in data["courts"]] == ["Cancha 1", "Cancha 2"]

    slots = data["courts"][0]["slots"]
    assert len(slots) == 30
    assert slots[0]["start_at"].startswith("2026-10-20T07:00:00")
    assert slots[0]["start_at"].endswith("-06:00")
    assert slots[0] == {**slots[0], "status": "AVAILABLE", "available": True, "can_start": True}
    assert slots[-1]["can_start"] is False


def test_hold_shows_up_in_availability(client, courts):
    client.post(
        "/api/v1/holds",
        json={
            "court_id": courts["two"].id,
            "start_at": "2026-10-20T10:00:00-06:00",
            "end_at": "2026-10-20T11:00:00-06:00",
        },
    )

    data = client.get("/api/v1/availability", params={"date": "2026-10-20"}).json()
    court_two = data["courts"][1]["slots"]
    statuses = {slot["start_at"][11:16]: slot["status"] for slot in court_two}

    assert statuses["10:00"] == "HOLD"
    assert statuses["10:30"] == "HOLD"
    assert statuses["11:00"] == "AVAILABLE"


def test_date_is_required(client, courts):
    r = client.get("/api/v1/availability")
    assert r.status_code == 422


def test_health_and_metrics(client):
    health = client.get("/api/v1/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"

    client.get("/api/v1/availability", params={"date": "2026-10-20"})
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "service_operations_total" in metrics.text
