"""
Integration Tests for the FastAPI service

Assessment, reading classification, report export and health checks.
Uses async httpx for ASGI app testing.
"""
import inspect
import logging
from collections import OrderedDict

import pytest
import httpx

from gdm_assist import main
from gdm_assist.main import app


@pytest.fixture
async def async_client():
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.mark.asyncio
class TestHealthEndpoints:

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["uptime_seconds"] >= 0

    async def test_list_guidelines(self, async_client):
        response = await async_client.get("/api/v1/guidelines")
        assert response.status_code == 200

        rows = {row["guideline"]: row for row in response.json()}
        assert set(rows) == {"WHO", "NICE"}
        assert rows["WHO"]["one_hour"] == 10.0
        assert rows["NICE"]["one_hour"] is None


@pytest.mark.asyncio
class TestAssessmentEndpoint:

    async def test_who_example(self, async_client, example_payload):
        response = await async_client.post("/api/v1/gdm/assess", json=example_payload)
        assert response.status_code == 200

        data = response.json()
        assert data["guideline"] == "WHO"
        assert data["diagnostic"] == "GDM"
        assert data["risk_level"] == "HIGH"
        assert data["criteria"] == {"fasting": True, "ogtt_1h": True, "ogtt_2h": True}
        assert data["bmi"] == 28.7
        assert data["summary"]["criteria_met"] == ["fasting", "ogtt_1h", "ogtt_2h"]
        assert data["disclaimer"]

    async def test_nice_example(self, async_client, example_payload):
        response = await async_client.post(
            "/api/v1/gdm/assess", json={**example_payload, "guideline": "NICE"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["diagnostic"] == "GDM"
        assert data["criteria"] == {"fasting": False, "ogtt_1h": None, "ogtt_2h": True}

    async def test_no_labs_indeterminate(self, async_client):
        response = await async_client.post("/api/v1/gdm/assess", json={"age": 27})
        assert response.status_code == 200

        data = response.json()
        assert data["diagnostic"] == "INDETERMINATE"
        assert data["risk_level"] == "LOW"
        assert data["bmi"] is None

    async def test_form_strings_accepted(self, async_client):
        payload = {"age": "29", "fasting_glucose": "5,1", "ogtt_2h": "", "guideline": "who"}
        response = await async_client.post("/api/v1/gdm/assess", json=payload)
        assert response.status_code == 200
        assert response.json()["diagnostic"] == "GDM"

    async def test_out_of_range_rejected(self, async_client):
        response = await async_client.post("/api/v1/gdm/assess", json={"age": 10})
        assert response.status_code == 422

    async def test_unknown_guideline_rejected(self, async_client):
        response = await async_client.post(
            "/api/v1/gdm/assess", json={"age": 30, "guideline": "ADA"}
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestReadingEndpoint:

    async def test_classify_high_fasting(self, async_client):
        response = await async_client.post(
            "/api/v1/readings/classify",
            json={"glucose_mmol": 6.9, "context": "fasting"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["traffic"] == "high"
        assert data["context"] == "fasting"
        assert data["actions"][0]["kind"] == "destructive"

    async def test_classify_default_context(self, async_client):
        response = await async_client.post(
            "/api/v1/readings/classify", json={"glucose_mmol": 6.0}
        )
        assert response.status_code == 200
        assert response.json()["context"] == "unknown"
        assert response.json()["traffic"] == "ok"


@pytest.mark.asyncio
class TestReportEndpoints:

    async def test_generate_and_download(self, async_client, example_payload):
        response = await async_client.post(
            "/api/v1/gdm/report", json={**example_payload, "patient_id": "TEST-001"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data["report_id"].startswith("GDM-")
        assert data["assessment"]["diagnostic"] == "GDM"

        download = await async_client.get(data["download_url"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert download.content.startswith(b"%PDF-")

    async def test_download_unknown_report(self, async_client):
        response = await async_client.get("/api/v1/reports/GDM-missing/download")
        assert response.status_code == 404

    async def test_report_failure_returns_error_body(self, async_client, example_payload, monkeypatch, caplog):
        def _fail(*args, **kwargs):
            raise OSError("read-only file system")

        monkeypatch.setattr(main._report_gen, "_generate_pdf", _fail)

        response = await async_client.post("/api/v1/gdm/report", json=example_payload)
        assert response.status_code == 500

        data = response.json()
        assert data["error"] == "REPORT_ERROR"
        assert "read-only" in data["message"]

        handler_records = [
            r for r in caplog.records
            if r.name == "gdm_assist.main" and "/api/v1/gdm/report failed" in r.getMessage()
        ]
        assert [r.levelno for r in handler_records] == [logging.ERROR]

    async def test_client_error_logged_as_warning(self, async_client, monkeypatch, caplog):
        from gdm_assist.utils import UnknownGuidelineError

        def _reject(*args, **kwargs):
            raise UnknownGuidelineError("ADA")

        monkeypatch.setattr(main._engine, "assess", _reject)

        response = await async_client.post("/api/v1/gdm/assess", json={"age": 30})
        assert response.status_code == 400
        assert response.json()["error"] == "UNKNOWN_GUIDELINE"

        levels = [
            r.levelno for r in caplog.records
            if r.name == "gdm_assist.main" and "failed" in r.getMessage()
        ]
        assert levels == [logging.WARNING]

    async def test_report_route_runs_in_threadpool(self):
        assert not inspect.iscoroutinefunction(main.generate_report)


@pytest.mark.asyncio
class TestRequestLogging:

    async def test_assessment_request_logged(self, async_client, example_payload, caplog):
        caplog.set_level(logging.INFO)

        response = await async_client.post("/api/v1/gdm/assess", json=example_payload)
        assert response.status_code == 200

        requested = [r for r in caplog.records if r.getMessage() == "Assessment requested"]
        assert len(requested) == 1
        assert requested[0].levelno == logging.INFO
        assert requested[0].guideline == "WHO"

    async def test_reading_request_logged(self, async_client, caplog):
        caplog.set_level(logging.INFO)

        await async_client.post(
            "/api/v1/readings/classify", json={"glucose_mmol": 5.0, "context": "fasting"}
        )
        assert any(
            r.levelno == logging.INFO and "5 mmol/L (fasting): ok" in r.getMessage()
            for r in caplog.records
        )


class TestReportRegistry:

    def test_oldest_reports_evicted(self, tmp_path, monkeypatch):
        monkeypatch.setattr(main.config, "REPORTS_MAX", 2)
        monkeypatch.setattr(main, "_reports", OrderedDict())

        paths = {}
        for report_id in ("GDM-a", "GDM-b", "GDM-c"):
            path = tmp_path / f"{report_id}.pdf"
            path.write_bytes(b"%PDF-")
            paths[report_id] = path
            main._remember_report(report_id, str(path))

        assert list(main._reports) == ["GDM-b", "GDM-c"]
        assert not paths["GDM-a"].exists()
        assert paths["GDM-c"].exists()

    def test_missing_file_does_not_block_eviction(self, tmp_path, monkeypatch):
        monkeypatch.setattr(main.config, "REPORTS_MAX", 1)
        monkeypatch.setattr(main, "_reports", OrderedDict())

        main._remember_report("GDM-gone", str(tmp_path / "gone.pdf"))
        main._remember_report("GDM-new", str(tmp_path / "new.pdf"))

        assert list(main._reports) == ["GDM-new"]


@pytest.mark.asyncio
class TestReportEviction:

    async def test_evicted_report_not_downloadable(self, async_client, example_payload, monkeypatch):
        monkeypatch.setattr(main.config, "REPORTS_MAX", 1)
        monkeypatch.setattr(main, "_reports", OrderedDict())

        first = (await async_client.post("/api/v1/gdm/report", json=example_payload)).json()
        second = (await async_client.post("/api/v1/gdm/report", json=example_payload)).json()

        assert (await async_client.get(first["download_url"])).status_code == 404
        assert (await async_client.get(second["download_url"])).status_code == 200
