"""Tests for the console HTTP API."""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from spvm.core.console_service import ConsoleService
from spvm.main import create_app
from spvm.platform.connectors import ConnectorResponse

TENANT = "https://contoso.sharepoint.com"
SITES = [f"{TENANT}/sites/finance", f"{TENANT}/sites/hr"]


@pytest.fixture
def connector():
    """Mock connector where every site has two libraries, one of them read-only."""
    mock = MagicMock()
    mock.get_site_metadata = AsyncMock(
        return_value=ConnectorResponse(status_ok=True, status_code=200, body={"Title": "Site"})
    )
    mock.list_document_libraries = AsyncMock(
        return_value=ConnectorResponse(
            status_ok=True,
            status_code=200,
            body={"value": [{"Id": "g1", "Title": "Documents"}, {"Id": "g2", "Title": "Locked"}]},
        )
    )

    async def update(site, token, library_id, policy):
        if library_id == "g2":
            return ConnectorResponse(status_ok=False, status_code=403)
        return ConnectorResponse(status_ok=True, status_code=204)

    mock.update_library_versioning = AsyncMock(side_effect=update)
    return mock


@pytest.fixture
def client(storage_backend, static_provider, connector):
    """Test client serving a console on a per-test directory."""
    console = ConsoleService(
        backend=storage_backend,
        provider=static_provider,
        connector=connector,
        inter_site_delay=0,
    )
    with TestClient(create_app(console=console)) as test_client:
        yield test_client


def _sign_in(client: TestClient) -> None:
    assert client.put("/api/v1/config", json={"tenant_address": TENANT}).status_code == 200
    assert client.post("/api/v1/auth/login").json()["authenticated"] is True


def _wait_until_idle(client: TestClient) -> dict:
    for _ in range(200):
        status = client.get("/api/v1/processing/status").json()
        if not status["is_processing"]:
            return status
        time.sleep(0.01)
    raise AssertionError("processing did not finish")


def test_config_round_trip(client):
    """Test reading and saving the configuration."""
    assert client.get("/api/v1/config").json()["major_version_limit"] == 3

    response = client.put(
        "/api/v1/config/", json={"major_version_limit": 5, "minor_version_limit": 0}
    )

    assert response.status_code == 200
    assert response.json()["major_version_limit"] == 5
    assert client.get("/api/v1/config").json()["minor_version_limit"] == 0


def test_config_rejects_negative_limits(client):
    """Test request validation."""
    assert client.put("/api/v1/config", json={"major_version_limit": -1}).status_code == 422


def test_login_without_tenant(client):
    """Test that sign-in redirects to the configuration first."""
    response = client.post("/api/v1/auth/login")

    assert response.status_code == 400
    assert response.json()["redirect_to"] == "config"


def test_login_and_logout(client):
    """Test the authentication endpoints."""
    _sign_in(client)
    assert client.get("/api/v1/auth/status").json()["account"]["username"] == "admin@contoso"

    assert client.post("/api/v1/auth/logout").json()["authenticated"] is False


def test_sites_endpoints(client):
    """Test replacing, validating, exporting and clearing the site list."""
    response = client.put("/api/v1/sites", json={"text": f"{SITES[0]}\n\n  {SITES[1]}  \nbad"})
    assert response.json() == {"sites": [SITES[0], SITES[1], "bad"]}

    validation = client.post("/api/v1/sites/validate").json()
    assert validation["is_valid"] is False
    assert validation["invalid_sites"] == ["bad"]

    export = client.get("/api/v1/sites/export")
    assert "sharepoint-sites-list.txt" in export.headers["content-disposition"]
    assert export.text == f"{SITES[0]}\n{SITES[1]}\nbad"

    assert client.delete("/api/v1/sites").status_code == 400
    assert client.delete("/api/v1/sites", params={"confirm": "true"}).json() == {"sites": []}


def test_sample_sites(client):
    """Test loading the sample sites for the tenant."""
    client.put("/api/v1/config", json={"tenant_address": TENANT})

    sites = client.post("/api/v1/sites/sample").json()["sites"]

    assert sites[0] == f"{TENANT}/sites/exemplo-site-1"
    assert len(sites) == 3


def test_start_requires_sign_in(client):
    """Test that processing redirects to sign-in first."""
    client.put("/api/v1/sites", json={"sites": SITES})

    response = client.post("/api/v1/processing/start")

    assert response.status_code == 400
    assert response.json()["redirect_to"] == "auth"


def test_start_requires_sites(client):
    """Test that processing redirects to the site list when it is empty."""
    _sign_in(client)

    response = client.post("/api/v1/processing/start")

    assert response.status_code == 400
    assert response.json()["redirect_to"] == "sites"


def test_processing_run_and_reports(client):
    """Test a full run through the API down to the CSV export."""
    _sign_in(client)
    client.put("/api/v1/sites", json={"sites": SITES})
    client.get("/api/v1/notifications")

    response = client.post("/api/v1/processing/start")
    assert response.status_code == 202

    status = _wait_until_idle(client)
    assert status["status"] == "completed"
    assert (status["can_start"], status["can_stop"]) == (True, False)

    reports = client.get("/api/v1/reports").json()
    assert len(reports) == 1
    assert reports[0]["summary"] == {
        "total_sites": 2,
        "successful_sites": 2,
        "failed_sites": 0,
        "total_libraries_configured": 2,
    }
    assert reports[0]["results"][0]["libraries_failed"] == 1

    assert client.get("/api/v1/reports/0").json() == reports[0]
    assert client.get("/api/v1/reports/1").status_code == 404

    export = client.get("/api/v1/reports/0/export")
    assert export.headers["content-type"].startswith("text/csv")
    lines = export.text.splitlines()
    assert lines[0] == "Site URL,Status,Bibliotecas OK,Bibliotecas Erro,Erro"
    assert lines[1] == f'"{SITES[0]}","Sucesso",1,1,""'

    notifications = client.get("/api/v1/notifications").json()
    assert "Processing complete!" in [n["message"] for n in notifications]
    assert client.get("/api/v1/notifications").json() == []


def test_stop_requires_confirmation(client):
    """Test that stop is confirm-gated and rejected when idle."""
    assert client.post("/api/v1/processing/stop").status_code == 400
    assert client.post("/api/v1/processing/stop", params={"confirm": "true"}).status_code == 400


def test_log_endpoints(client):
    """Test reading and clearing the operator log."""
    entries = client.get("/api/v1/log").json()
    assert entries[-1]["message"] == "System started"
    assert entries[-1]["level"] == "INFO"

    cleared = client.delete("/api/v1/log").json()
    assert [entry["message"] for entry in cleared] == ["Log cleared"]
