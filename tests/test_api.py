"""Tests for the HTTP trigger endpoint and job search API."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from job_alerts.api import CORS_HEADERS, create_app
from job_alerts.persistence import close_database, init_database
from job_alerts.pipeline import AlertRunResult
from tests.helpers import FIXED_NOW, make_company, make_job, seed


@pytest.fixture
def runner():
    runner = Mock()
    runner.run_once.return_value = AlertRunResult(
        run_started_at=FIXED_NOW,
        run_finished_at=FIXED_NOW + timedelta(seconds=2),
        processed=3,
    )
    return runner


@pytest.fixture
def client(runner):
    return TestClient(create_app(lambda: runner))


class TestTriggerEndpoint:
    def test_options_preflight(self, client, runner):
        response = client.options("/process-job-alerts")

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == (
            CORS_HEADERS["Access-Control-Allow-Headers"]
        )
        runner.run_once.assert_not_called()

    @pytest.mark.parametrize("method", ["get", "post", "put", "patch", "delete"])
    def test_any_method_runs_alerts(self, client, runner, method):
        response = client.request(method.upper(), "/process-job-alerts")

        assert response.status_code == 200
        assert response.json() == {"success": True, "processed": 3}
        assert response.headers["access-control-allow-origin"] == "*"
        runner.run_once.assert_called_once_with()

    def test_head_runs_alerts(self, client, runner):
        response = client.head("/process-job-alerts")

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        runner.run_once.assert_called_once_with()

    def test_runner_error_returns_500(self, runner):
        runner.run_once.side_effect = RuntimeError("database unavailable")
        client = TestClient(create_app(lambda: runner))

        response = client.post("/process-job-alerts")

        assert response.status_code == 500
        assert response.json() == {"error": "database unavailable"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_runner_factory_error_returns_500(self):
        def broken_factory():
            raise ValueError("missing RESEND_API_KEY")

        response = TestClient(create_app(broken_factory)).post("/process-job-alerts")

        assert response.status_code == 500
        assert response.json() == {"error": "missing RESEND_API_KEY"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.fixture
def search_client(client):
    init_database("sqlite:///:memory:")
    seed(
        companies=[make_company()],
        jobs=[
            make_job("designer", title="UX Designer", onsite_type="remote", salary_max=70000),
            make_job(
                "engineer",
                title="Platform Engineer",
                created_at=FIXED_NOW - timedelta(hours=5),
                salary_max=120000,
            ),
        ],
    )
    yield client
    close_database()


class TestSearchEndpoint:
    def test_returns_page_and_suggestion(self, search_client):
        response = search_client.get("/jobs/search", params={"q": "desinger"})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 0
        assert body["jobs"] == []
        assert body["suggestion"] == "designer"

    def test_matching_query(self, search_client):
        body = search_client.get("/jobs/search", params={"q": "designer"}).json()

        assert [job["id"] for job in body["jobs"]] == ["designer"]
        assert body["jobs"][0]["company"]["name"] == "Acme"
        assert body["suggestion"] is None
        assert body["total_pages"] == 1

    def test_facets_and_sort(self, search_client):
        remote = search_client.get("/jobs/search", params={"onsite_type": ["remote"]}).json()
        by_salary = search_client.get("/jobs/search", params={"sort": "salary"}).json()

        assert [job["id"] for job in remote["jobs"]] == ["designer"]
        assert [job["id"] for job in by_salary["jobs"]] == ["engineer", "designer"]

    def test_pagination(self, search_client):
        body = search_client.get("/jobs/search", params={"per_page": 1, "page": 2}).json()

        assert body["total"] == 2
        assert body["page"] == 2
        assert [job["id"] for job in body["jobs"]] == ["engineer"]

    def test_invalid_salary_range(self, search_client):
        response = search_client.get(
            "/jobs/search", params={"salary_min": 90000, "salary_max": 10000}
        )

        assert response.status_code == 422

    def test_invalid_page(self, search_client):
        assert search_client.get("/jobs/search", params={"page": 0}).status_code == 422
