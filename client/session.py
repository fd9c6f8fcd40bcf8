"""
HTTP session for the Exam Portal API.

The bearer token is held by the session object itself; callers pass the
session around instead of reading from any global store.
"""

import logging
from typing import Any, Optional

import httpx

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class ApiError(Exception):
    """Error envelope returned by the API, or a transport failure (status 0)."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class ApiSession:
    def __init__(self, base_url: str, token: Optional[str] = None, http: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = http or httpx.Client(timeout=DEFAULT_TIMEOUT)

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def logout(self) -> None:
        self.token = None

    def close(self) -> None:
        self.http.close()

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def request(self, method: str, path: str, json: Any = None) -> Any:
        """Send a request and return the decoded JSON body, or raise ApiError."""
        try:
            response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=self._headers())
        except httpx.HTTPError as e:
            log.warning(f"[CLIENT] {method} {path} transport error: {e}")
            raise ApiError(0, str(e)) from e

        if response.status_code == 401:
            # expired or revoked; the caller has to log in again
            self.token = None

        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        if not response.content:
            return None
        return response.json()

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or response.reason_phrase)
    return response.reason_phrase
