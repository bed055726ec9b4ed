"""Scoring API client.

Usage:
    client = ScoringClient(url="https://scoring.example.com/api/setQuality",
                           client_public="pub", client_secret="secret")
    client.submit_quality(user_id="me", project_id="JAVA1080", quality_score=7.5)
"""

import time
from typing import Any

import requests


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ScoringClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(ScoringClientError):
    """Raised on HTTP 401/403 - invalid client credentials."""


class NotFoundError(ScoringClientError):
    """Raised on HTTP 404 - wrong endpoint URL."""


class NetworkError(ScoringClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def _now_millis() -> int:
    return int(time.time() * 1000)


class ScoringClient:
    """Thin wrapper around the external quality-scoring endpoint."""

    def __init__(
        self,
        url: str,
        client_public: str,
        client_secret: str,
        timeout: int = 30,
    ) -> None:
        self.url = url
        self._client_public = client_public
        self._client_secret = client_secret
        self._timeout = timeout
        self._session = requests.Session()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def build_payload(
        self,
        user_id: str,
        project_id: str,
        quality_score: float,
        record_time: int | None = None,
    ) -> dict[str, str]:
        """Return the JSON body sent for a score submission.

        The endpoint expects every value as a string, the score with two
        decimals. ``quality`` and ``coverage`` both carry the quality score.
        """
        if record_time is None:
            record_time = _now_millis()
        score = f"{quality_score:.2f}"
        return {
            "userid":       user_id,
            "clientpublic": self._client_public,
            "clientsecret": self._client_secret,
            "projectid":    project_id,
            "recordtime":   str(record_time),
            "quality":      score,
            "coverage":     score,
        }

    def submit_quality(
        self,
        user_id: str,
        project_id: str,
        quality_score: float,
        record_time: int | None = None,
    ) -> dict:
        """POST *quality_score* for *project_id* and return the parsed response.

        A response body that is not JSON yields an empty dict.

        Raises:
            AuthenticationError: HTTP 401 / 403
            NotFoundError:       HTTP 404
            ScoringClientError:  Any other non-2xx response
            NetworkError:        Timeout or connection failure
        """
        payload = self.build_payload(user_id, project_id, quality_score, record_time)
        params = {"clientpublic": self._client_public, "clientsecret": self._client_secret}
        return self._request(payload, params)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, payload: dict[str, Any], params: dict[str, Any]) -> dict:
        try:
            response = self._session.post(
                self.url, json=payload, params=params, timeout=self._timeout
            )
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{self.url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach scoring API at '{self.url}'"
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed - check the client public/secret pair."
            )
        if response.status_code == 404:
            raise NotFoundError(
                f"Endpoint not found: {self.url}"
            )
        if not response.ok:
            raise ScoringClientError(
                f"Unexpected response {response.status_code} from {self.url}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"result": data}
