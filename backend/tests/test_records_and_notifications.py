"""Ввод данных за смену, журнал, дашборд и уведомления."""
import pytest

import app.api.records as records_api
import app.services.notification_service as notification_service


def _post(client, headers, **fields):
    body = {"date": "2024-05-01", "shift_id": "1", "product_count": 100, "defect_count": 0, "downtime_minutes": 0}
    body.update(fields)
    r = client.post("/records", json=body, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture
def sent_alerts(monkeypatch):
    calls = []

    async def _fake_notify(record, settings):
        calls.append((record, settings))
        return True

    monkeypatch.setattr(records_api, "notify_threshold_exceeded", _fake_notify)
    return calls


def test_shifts_seeded(client, operator_headers):
    r = client.get("/shifts", headers=operator_headers)
    assert r.status_code == 200
    assert [(s["id"], s["name"]) for s in r.json()] == [
        ("1", "Дневная смена"),
        ("2", "Вечерняя смена"),
        ("3", "Ночная смена"),
    ]


def test_record_snapshots_operator(client, operator_headers, sent_alerts):
    data = _post(client, operator_headers, comments="  ")
    assert data["operator_name"] == "Петров Пётр"
    assert data["comments"] is None
    assert data["alert_scheduled"] is False
    assert data["created_at"]
    assert sent_alerts == []


def test_record_requires_auth(client):
    r = client.post("/records", json={"date": "2024-05-01", "shift_id": "1", "product_count": 1})
    assert r.status_code == 401


def test_negative_counts_rejected(client, operator_headers):
    r = client.post(
        "/records",
        json={"date": "2024-05-01", "shift_id": "1", "product_count": 10, "defect_count": -1},
        headers=operator_headers,
    )
    assert r.status_code == 422


def test_unknown_shift_rejected(client, operator_headers):
    r = client.post(
        "/records",
        json={"date": "2024-05-01", "shift_id": "42", "product_count": 10},
        headers=operator_headers,
    )
    assert r.status_code == 400


def test_alert_scheduled_when_threshold_exceeded(client, operator_headers, sent_alerts):
    data = _post(client, operator_headers, defect_count=6, downtime_minutes=10)
    assert data["alert_scheduled"] is True
    assert len(sent_alerts) == 1
    record, settings = sent_alerts[0]
    assert record.id == data["id"]
    assert settings.max_defects == 5


def test_alert_failure_does_not_block_submission(client, operator_headers):
    # токен Telegram не задан: оповещение не уходит, запись сохраняется
    data = _post(client, operator_headers, downtime_minutes=120)
    assert data["alert_scheduled"] is True
    r = client.get("/records", headers=operator_headers)
    assert [x["id"] for x in r.json()] == [data["id"]]


def test_journal_filters(client, operator_headers, sent_alerts):
    _post(client, operator_headers, date="2024-05-01", shift_id="1")
    _post(client, operator_headers, date="2024-05-03", shift_id="2")
    r = client.get("/records", headers=operator_headers)
    assert [x["date"] for x in r.json()] == ["2024-05-03", "2024-05-01"]
    r = client.get("/records", params={"shift_id": "2"}, headers=operator_headers)
    assert [x["date"] for x in r.json()] == ["2024-05-03"]
    r = client.get("/records", params={"search": "петров"}, headers=operator_headers)
    assert len(r.json()) == 2
    r = client.get("/records", params={"search": "сидоров"}, headers=operator_headers)
    assert r.json() == []


def test_dashboard(client, operator_headers, sent_alerts):
    _post(client, operator_headers, shift_id="1", product_count=150, defect_count=6)
    _post(client, operator_headers, shift_id="3", product_count=50, defect_count=9, downtime_minutes=30)
    r = client.get("/dashboard", headers=operator_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["stats"]["total_production"] == 200
    assert data["stats"]["total_downtime"] == 30
    assert float(data["stats"]["defect_rate"]) == 7.5
    assert data["stats"]["needs_attention"] is True
    assert [(s["shift_id"], s["production"]) for s in data["shifts"]] == [("1", 150), ("2", 0), ("3", 50)]
    assert len(data["trend"]) == 2


def test_dashboard_empty(client, operator_headers):
    r = client.get("/dashboard", headers=operator_headers)
    assert r.status_code == 200
    assert r.json()["stats"]["total_production"] == 0
    assert r.json()["trend"] == []


def test_notifications_newest_first(client, operator_headers, sent_alerts):
    first = _post(client, operator_headers, defect_count=10)
    _post(client, operator_headers, defect_count=2)
    last = _post(client, operator_headers, defect_count=7, downtime_minutes=60)
    r = client.get("/notifications", headers=operator_headers)
    assert r.status_code == 200
    data = r.json()
    assert [n["id"] for n in data["items"]] == [
        f"def-{last['id']}",
        f"down-{last['id']}",
        f"def-{first['id']}",
    ]
    assert data["unread"] == 3
    assert data["items"][1]["type"] == "warning"
    assert data["items"][2]["message"] == "Смена 2024-05-01: 10 шт. (Норма: 5)"


def test_read_state_survives_refresh(client, operator_headers, sent_alerts):
    rec = _post(client, operator_headers, defect_count=10)
    r = client.post("/notifications/read-all", headers=operator_headers)
    assert r.json() == {"ok": True, "count": 1}
    data = client.get("/notifications", headers=operator_headers).json()
    assert data["unread"] == 0
    assert data["items"][0]["read"] is True

    newer = _post(client, operator_headers, downtime_minutes=50)
    data = client.get("/notifications", headers=operator_headers).json()
    assert data["unread"] == 1
    assert data["items"][0]["id"] == f"down-{newer['id']}"
    assert data["items"][1]["id"] == f"def-{rec['id']}"


def test_dismiss_notification(client, operator_headers, sent_alerts):
    rec = _post(client, operator_headers, defect_count=10, downtime_minutes=50)
    r = client.post(f"/notifications/def-{rec['id']}/dismiss", headers=operator_headers)
    assert r.status_code == 200
    ids = [n["id"] for n in client.get("/notifications", headers=operator_headers).json()["items"]]
    assert ids == [f"down-{rec['id']}"]


def test_dismiss_unknown_format(client, operator_headers):
    r = client.post("/notifications/something/dismiss", headers=operator_headers)
    assert r.status_code == 404


def test_dismiss_before_record_exists(client, operator_headers, sent_alerts):
    r = client.post("/notifications/def-1/dismiss", headers=operator_headers)
    assert r.status_code == 404
    rec = _post(client, operator_headers, defect_count=9)
    assert rec["id"] == 1
    ids = [n["id"] for n in client.get("/notifications", headers=operator_headers).json()["items"]]
    assert ids == ["def-1"]


def test_dismiss_record_under_threshold(client, operator_headers, sent_alerts):
    rec = _post(client, operator_headers, defect_count=2)
    r = client.post(f"/notifications/def-{rec['id']}/dismiss", headers=operator_headers)
    assert r.status_code == 404


def test_read_all_over_many_states(client, operator_headers, sent_alerts, monkeypatch):
    monkeypatch.setattr(notification_service, "STATES_CHUNK", 2)
    for _ in range(5):
        _post(client, operator_headers, defect_count=9)
    assert client.post("/notifications/read-all", headers=operator_headers).json()["count"] == 5
    data = client.get("/notifications", headers=operator_headers).json()
    assert len(data["items"]) == 5
    assert data["unread"] == 0


def test_notification_timestamp_is_utc(client, operator_headers, sent_alerts):
    _post(client, operator_headers, defect_count=9)
    item = client.get("/notifications", headers=operator_headers).json()["items"][0]
    assert item["timestamp"].endswith("+00:00")
