"""Финансовые потери за период, AI-отчёт и экспорт в Word."""
from decimal import Decimal
from io import BytesIO

import httpx
import pytest
from docx import Document

import app.api.records as records_api
from app.config import settings
from app.services import ai_service


@pytest.fixture(autouse=True)
def _no_alerts(monkeypatch):
    async def _skip(record, settings):
        return False

    monkeypatch.setattr(records_api, "notify_threshold_exceeded", _skip)


def _post(client, headers, **fields):
    body = {"date": "2024-05-01", "shift_id": "1", "product_count": 100, "defect_count": 0, "downtime_minutes": 0}
    body.update(fields)
    r = client.post("/records", json=body, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_financials_scenario(client, admin_headers):
    _post(client, admin_headers, defect_count=6, downtime_minutes=10)
    r = client.get("/analytics/financials", headers=admin_headers)
    assert r.status_code == 200
    data = r.json()
    assert Decimal(str(data["total_defect_cost"])) == 9000
    assert Decimal(str(data["total_downtime_cost"])) == 50000
    assert Decimal(str(data["total_losses"])) == 59000
    assert data["records_count"] == 1


def test_financials_range_inclusive(client, admin_headers):
    for day in ("2024-04-30", "2024-05-01", "2024-05-07", "2024-05-08"):
        _post(client, admin_headers, date=day, defect_count=1)
    r = client.get(
        "/analytics/financials",
        params={"start_date": "2024-05-01", "end_date": "2024-05-07"},
        headers=admin_headers,
    )
    data = r.json()
    assert data["records_count"] == 2
    assert Decimal(str(data["total_defect_cost"])) == 3000


def test_financials_empty(client, admin_headers):
    data = client.get("/analytics/financials", headers=admin_headers).json()
    assert data["records_count"] == 0
    assert Decimal(str(data["total_losses"])) == 0


def test_analytics_admin_only(client, operator_headers):
    assert client.get("/analytics/financials", headers=operator_headers).status_code == 403
    assert client.post("/analytics/ai-report", json={}, headers=operator_headers).status_code == 403


def test_ai_report_unavailable_without_key(client, admin_headers):
    _post(client, admin_headers, defect_count=6)
    r = client.post("/analytics/ai-report", json={}, headers=admin_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["available"] is False
    assert data["analysis"] == ai_service.UNAVAILABLE_MESSAGE
    assert Decimal(str(data["financials"]["total_defect_cost"])) == 9000


def test_ai_report_malformed_model_answer(client, admin_headers, monkeypatch):
    real_summarize = ai_service.summarize
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"candidates": ["oops"]}))

    async def _summarize_via_mock(payload):
        return await real_summarize(payload, transport=transport)

    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(ai_service, "summarize", _summarize_via_mock)
    _post(client, admin_headers, defect_count=6)
    r = client.post("/analytics/ai-report", json={}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["available"] is False
    assert r.json()["analysis"] == ai_service.UNAVAILABLE_MESSAGE


def test_ai_report_with_model(client, admin_headers, monkeypatch):
    seen = []

    async def _fake_summarize(payload):
        seen.append(payload)
        return "## Ключевые выводы\n- Брак выше нормы"

    monkeypatch.setattr(ai_service, "summarize", _fake_summarize)
    _post(client, admin_headers, date="2024-05-02", defect_count=6, downtime_minutes=50)
    _post(client, admin_headers, date="2024-06-01", defect_count=1)
    r = client.post(
        "/analytics/ai-report",
        json={"start_date": "2024-05-01", "end_date": "2024-05-31"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    data = r.json()
    assert data["available"] is True
    assert data["analysis"].startswith("## Ключевые выводы")
    assert data["start_date"] == "2024-05-01"
    assert data["financials"]["records_count"] == 1
    assert '"operator": "Иванов Иван"' in seen[0]
    assert '"totalLosses": 259000' in seen[0]


def test_ai_report_rejects_reversed_period(client, admin_headers):
    r = client.post(
        "/analytics/ai-report",
        json={"start_date": "2024-05-31", "end_date": "2024-05-01"},
        headers=admin_headers,
    )
    assert r.status_code == 422


def test_report_docx_export(client, admin_headers):
    _post(client, admin_headers, defect_count=6, downtime_minutes=10)
    r = client.post(
        "/analytics/report.docx",
        json={"start_date": "2024-05-01", "end_date": "2024-05-01", "analysis": "## Итог\n- **Брак** выше нормы"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert 'filename="SSK_Report_' in r.headers["content-disposition"]
    doc = Document(BytesIO(r.content))
    text = "\n".join(p.text for p in doc.paragraphs)
    assert "АНАЛИТИЧЕСКИЙ ОТЧЕТ" in text
    assert "с 2024-05-01 по 2024-05-01" in text
    cells = [c.text for row in doc.tables[0].rows for c in row.cells]
    assert "59 000 ₽" in cells
