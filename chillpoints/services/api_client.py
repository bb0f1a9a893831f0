from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from chillpoints.config import ApiSettings


logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 10.0


@dataclass(frozen=True)
class UserSession:
    token: str
    email: Optional[str] = None
    user_id: Optional[int] = None


class ApiError(Exception):
    """
    A failed call to the rewards backend.
    status_code is None when the request never got an HTTP answer.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)

    text = (response.text or "").strip() or (response.reason or "")
    return f"{response.status_code}: {text}"


class RewardsApiClient:
    """
    JSON client for the rewards REST backend.

    - One requests.Session per client (connection reuse)
    - Bearer token taken from the current UserSession on every call
    - Non-2xx answers and transport failures both surface as ApiError
    - Optional retries with capped exponential backoff
    """

    def __init__(
        self,
        settings: ApiSettings,
        *,
        session_provider: Callable[[], Optional[UserSession]] = lambda: None,
        http: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.base_url = settings.base_url
        self._session_provider = session_provider
        self._http = http or requests.Session()
        self._sleep = sleep

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if has_body:
            headers["Content-Type"] = "application/json"

        session = self._session_provider()
        if session and session.token:
            headers["Authorization"] = f"Bearer {session.token}"
        return headers

    def _send(self, method: str, path: str, payload: Optional[dict]) -> Any:
        url = f"{self.base_url}{path}"
        started = time.monotonic()

        try:
            response = self._http.request(
                method=method,
                url=url,
                headers=self._headers(payload is not None),
                json=payload,
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ApiError(f"Network error: {e}") from e

        duration_ms = int((time.monotonic() - started) * 1000)
        if duration_ms > self.settings.slow_request_ms:
            logger.warning(
                "slow rewards api request",
                extra={"method": method, "path": path, "duration_ms": duration_ms},
            )

        if not response.ok:
            raise ApiError(_error_message(response), status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{response.status_code}: invalid JSON response", status_code=response.status_code) from e

    def request(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        method = method.upper()
        attempts = self.settings.retries + 1

        for attempt in range(attempts):
            try:
                return self._send(method, path, payload)
            except ApiError as e:
                if attempt + 1 >= attempts:
                    logger.error(
                        "rewards api request failed",
                        extra={"method": method, "path": path, "status_code": e.status_code, "attempts": attempt + 1},
                    )
                    raise
                delay = min(self.settings.retry_backoff_seconds * 2 ** attempt, MAX_BACKOFF_SECONDS)
                logger.info(
                    "retrying rewards api request",
                    extra={"method": method, "path": path, "attempt": attempt + 1, "delay": delay},
                )
                self._sleep(delay)

    def get_json(self, path: str) -> Any:
        return self.request("GET", path)

    def post_json(self, path: str, payload: dict) -> Any:
        return self.request("POST", path, payload)

    def close(self):
        self._http.close()
