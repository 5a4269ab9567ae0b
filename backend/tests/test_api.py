"""
API tests for the HTTP endpoints.
"""
import pytest
import uuid
from io import BytesIO
from fastapi.testclient import TestClient
from main import app


@pytest.fixture
def client(upload_store):
    return TestClient(app)


@pytest.mark.integration
def test_health_check(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["version"] == "1.0.0"
    assert "timestamp" in data


@pytest.mark.integration
def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.integration
def test_analyze_csv_file(client):
    csv_content = b"name,age,score\nAlice,25,85.5\nBob,30,90.0\nCharlie,35,88.5"

    response = client.post(
        "/api/analyze",
        files={"file": ("test.csv", BytesIO(csv_content), "text/csv")}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    data = body["data"]
    assert data["file_name"] == "test.csv"
    assert data["row_count"] == 3
    assert data["column_count"] == 3

    analysis = data["analysis"]
    assert analysis["summary"]["age"]["mean"] == 30.0
    assert analysis["summary"]["name"]["unique_values"] == 3
    assert analysis["charts"]["score"]["type"] == "histogram"
    assert analysis["charts"]["name"]["type"] == "pie"
    assert isinstance(analysis["insights"], list)


@pytest.mark.integration
def test_analyze_stores_upload(client, upload_store):
    client.post(
        "/api/analyze",
        files={"file": ("sales.csv", BytesIO(b"region\nNorth"), "text/csv")}
    )

    stored = upload_store.list_files()
    assert len(stored) == 1
    assert stored[0].file_name.endswith("-sales.csv")


@pytest.mark.integration
def test_analyze_invalid_file_type(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("notes.txt", BytesIO(b"some content"), "text/plain")}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_FILE_TYPE"


@pytest.mark.integration
def test_analyze_empty_file(client):
    response = client.post(
        "/api/analyze",
        files={"file": ("empty.csv", BytesIO(b""), "text/csv")}
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "FILE_EMPTY"


@pytest.mark.integration
def test_analyze_without_file(client):
    response = client.post("/api/analyze")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "FILE_MISSING"


@pytest.mark.integration
def test_analyze_file_too_large(client, monkeypatch):
    from app.core import config
    monkeypatch.setattr(config, "_settings", config.Settings(max_file_size_mb=1, rate_limit_per_minute=1000))

    csv_content = b"value\n" + b"1\n" * (600 * 1024)
    response = client.post(
        "/api/analyze",
        files={"file": ("big.csv", BytesIO(csv_content), "text/csv")}
    )

    assert response.status_code == 413
    assert response.json()["detail"]["code"] == "FILE_TOO_LARGE"


@pytest.mark.integration
def test_workflow_analyze(client):
    payload = {
        "data": [
            {"age": 10, "city": "NY"},
            {"age": 10, "city": "NY"},
            {"age": 10, "city": "NY"},
            {"age": 100, "city": "NY"},
        ]
    }

    response = client.post("/api/workflow/analyze", json=payload)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["row_count"] == 4
    assert data["column_count"] == 2
    assert data["request_id"]
    assert len(data["analysis"]["insights"]) == 3
    assert data["analysis"]["summary"]["age"]["std"] == pytest.approx(38.971, rel=1e-3)


@pytest.mark.integration
def test_workflow_analyze_options(client):
    payload = {
        "data": [{"x": 1}, {"x": 2}],
        "options": {"includeCharts": False, "includeInsights": False},
    }

    response = client.post("/api/workflow/analyze", json=payload)

    assert response.status_code == 200
    assert set(response.json()["data"]["analysis"]) == {"summary"}


@pytest.mark.integration
def test_workflow_analyze_values_near_float_limit(client):
    payload = {"data": [{"v": 1e308}, {"v": 1e308}, {"v": 1.0}]}

    response = client.post("/api/workflow/analyze", json=payload)

    assert response.status_code == 200
    summary = response.json()["data"]["analysis"]["summary"]["v"]
    assert summary["sum"] is None
    assert summary["mean"] == pytest.approx(6.666666666666667e307, rel=1e-9)
    assert summary["max"] == 1e308


@pytest.mark.integration
def test_workflow_analyze_empty_data(client):
    response = client.post("/api/workflow/analyze", json={"data": []})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["row_count"] == 0
    assert data["column_count"] == 0
    assert data["analysis"] == {"summary": {}, "charts": {}, "insights": []}


@pytest.mark.integration
@pytest.mark.parametrize("payload", [{}, {"data": "rows"}, {"data": [1, 2]}, None])
def test_workflow_analyze_invalid_payload(client, payload):
    response = client.post("/api/workflow/analyze", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_PAYLOAD"


@pytest.mark.integration
def test_history_empty(client):
    response = client.get("/api/history")

    assert response.status_code == 200
    assert response.json()["data"] == []


@pytest.mark.integration
def test_delete_missing_file(client):
    response = client.delete("/api/file/nope.csv")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "FILE_NOT_FOUND"


@pytest.mark.integration
def test_correlation_id_echoed(client):
    correlation_id = str(uuid.uuid4())

    response = client.get("/api/health", headers={"X-Correlation-ID": correlation_id})

    assert response.headers["X-Correlation-ID"] == correlation_id


@pytest.mark.integration
def test_correlation_id_generated(client):
    response = client.get("/api/health")

    uuid.UUID(response.headers["X-Correlation-ID"])


@pytest.mark.integration
def test_error_includes_correlation_id(client):
    correlation_id = str(uuid.uuid4())
    response = client.post(
        "/api/analyze",
        files={"file": ("test.txt", BytesIO(b"invalid"), "text/plain")},
        headers={"X-Correlation-ID": correlation_id}
    )

    assert response.status_code == 400
    assert response.headers["X-Correlation-ID"] == correlation_id
    assert response.json()["detail"]["correlation_id"] == correlation_id


@pytest.mark.integration
def test_security_headers(client):
    response = client.get("/api/health")

    assert "Content-Security-Policy" in response.headers
    assert "script-src 'self';" in response.headers["Content-Security-Policy"]
    assert response.headers["X-Frame-Options"] == "DENY"


@pytest.mark.integration
def test_metrics(client):
    client.post("/api/workflow/analyze", json={"data": [{"x": 1}]})

    response = client.get("/api/metrics")

    assert response.status_code == 200
    assert "analyze_dataset" in response.json()["performance"]
