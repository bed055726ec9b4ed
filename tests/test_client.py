"""Tests for quality_report/client.py"""

import pytest
import requests

from quality_report.client import (
    AuthenticationError,
    NetworkError,
    NotFoundError,
    ScoringClient,
    ScoringClientError,
)

URL = "https://scoring.example.com/api/setQuality"


@pytest.fixture
def client() -> ScoringClient:
    return ScoringClient(url=URL, client_public="pub123", client_secret="sec456")


# ---------------------------------------------------------------------------
# build_payload()
# ---------------------------------------------------------------------------

def test_payload_duplicates_score_into_quality_and_coverage(client):
    payload = client.build_payload("acme", "JAVA1080", -20.0, record_time=1733275263647)
    assert payload == {
        "userid":       "acme",
        "clientpublic": "pub123",
        "clientsecret": "sec456",
        "projectid":    "JAVA1080",
        "recordtime":   "1733275263647",
        "quality":      "-20.00",
        "coverage":     "-20.00",
    }


def test_payload_record_time_defaults_to_now_in_millis(client, monkeypatch):
    monkeypatch.setattr("quality_report.client.time.time", lambda: 1700000000.5)
    payload = client.build_payload("acme", "JAVA1080", 0.0)
    assert payload["recordtime"] == "1700000000500"


def test_payload_score_always_has_two_decimals(client):
    assert client.build_payload("acme", "P", 0.0, record_time=1)["quality"] == "0.00"
    assert client.build_payload("acme", "P", -13.333, record_time=1)["coverage"] == "-13.33"


# ---------------------------------------------------------------------------
# submit_quality() - happy path
# ---------------------------------------------------------------------------

def test_submit_posts_json_body(client, requests_mock):
    adapter = requests_mock.post(URL, json={"status": "ok"})
    data = client.submit_quality("acme", "JAVA1080", 7.5, record_time=1)

    assert data == {"status": "ok"}
    body = adapter.last_request.json()
    assert body["quality"] == "7.50"
    assert body["coverage"] == "7.50"
    assert body["projectid"] == "JAVA1080"


def test_submit_sends_credentials_as_query_params(client, requests_mock):
    adapter = requests_mock.post(URL, json={})
    client.submit_quality("acme", "JAVA1080", 1.0)

    qs = adapter.last_request.qs
    assert qs["clientpublic"] == ["pub123"]
    assert qs["clientsecret"] == ["sec456"]


def test_submit_non_json_response_returns_empty_dict(client, requests_mock):
    requests_mock.post(URL, text="inserted")
    assert client.submit_quality("acme", "JAVA1080", 1.0) == {}


# ---------------------------------------------------------------------------
# submit_quality() - HTTP error codes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [401, 403])
def test_submit_auth_failure_raises_authentication_error(client, requests_mock, status):
    requests_mock.post(URL, status_code=status)
    with pytest.raises(AuthenticationError):
        client.submit_quality("acme", "JAVA1080", 1.0)


def test_submit_404_raises_not_found_error(client, requests_mock):
    requests_mock.post(URL, status_code=404)
    with pytest.raises(NotFoundError):
        client.submit_quality("acme", "JAVA1080", 1.0)


def test_submit_500_raises_scoring_client_error(client, requests_mock):
    requests_mock.post(URL, status_code=500, text="Internal Server Error")
    with pytest.raises(ScoringClientError, match="500"):
        client.submit_quality("acme", "JAVA1080", 1.0)


def test_error_message_does_not_leak_secret(client, requests_mock):
    requests_mock.post(URL, status_code=500, text="boom")
    with pytest.raises(ScoringClientError) as excinfo:
        client.submit_quality("acme", "JAVA1080", 1.0)
    assert "sec456" not in str(excinfo.value)


# ---------------------------------------------------------------------------
# submit_quality() - network errors
# ---------------------------------------------------------------------------

def test_submit_timeout_raises_network_error(client, requests_mock):
    requests_mock.post(URL, exc=requests.exceptions.Timeout)
    with pytest.raises(NetworkError, match="timed out"):
        client.submit_quality("acme", "JAVA1080", 1.0)


def test_submit_connection_error_raises_network_error(client, requests_mock):
    requests_mock.post(URL, exc=requests.exceptions.ConnectionError)
    with pytest.raises(NetworkError, match="Unable to reach"):
        client.submit_quality("acme", "JAVA1080", 1.0)
