"""
Secret-store API client -- the only code that touches the network.

Every GET is classified into a tagged result (Found / NotFound / Failed)
so callers branch on meaning instead of raw status codes. Transient
failures (connection errors, timeouts, 429 and 5xx gateway errors) are
retried with exponential backoff (tenacity) before the client gives up.
Any other requests exception is not retried; like an exhausted retry it
surfaces as TransportError.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ..config import EnvsealConfig
from ..models import TRANSPORT_FAILURE_STATUS

logger = logging.getLogger("envseal.sync.client")

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRY_EXCEPTIONS = (requests.ConnectionError, requests.Timeout)
ACCEPT_HEADER = "application/vnd.github+json"


@dataclass(frozen=True)
class Found:
    """The resource exists; ``data`` is the decoded JSON body."""

    status: int
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotFound:
    """The store answered 404."""

    status: int = 404


@dataclass(frozen=True)
class Failed:
    """Any other outcome. ``status`` is 0 when no response was received."""

    status: int
    reason: str
    body: Optional[str] = None


ApiResult = Union[Found, NotFound, Failed]


class TransportError(Exception):
    """No response could be obtained, even after retries."""


def _is_transient(resp: requests.Response) -> bool:
    return resp.status_code in RETRY_STATUSES


def _log_retry(retry_state: RetryCallState) -> None:
    method, endpoint = retry_state.args[:2]
    outcome = retry_state.outcome
    if outcome.failed:
        logger.warning(
            "%s %s failed (%s), retrying", method, endpoint, outcome.exception(),
        )
    else:
        logger.warning(
            "%s %s returned %d, retrying",
            method, endpoint, outcome.result().status_code,
        )


def _give_up(retry_state: RetryCallState) -> requests.Response:
    # Last response, or re-raise the last transport exception.
    return retry_state.outcome.result()


def split_repo(repo: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    Raises:
        ValueError: If the identifier is not exactly two non-empty segments.
    """
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Expected OWNER/NAME, got {repo!r}")
    return parts[0], parts[1]


class SecretStoreClient:
    """Authenticated client for the secret store REST API.

    Args:
        token: Bearer credential. Read-only for the client's lifetime.
        config: Timeout/retry/base-URL settings.
        session: Optional pre-built session (tests inject fakes here).
        sleep: Backoff sleep function.
    """

    def __init__(
        self,
        token: str,
        config: Optional[EnvsealConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._token = token
        self.config = config or EnvsealConfig()
        self._session = session or requests.Session()
        self._sleep = sleep

    @property
    def base_url(self) -> str:
        return self.config.api_url.rstrip("/")

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": ACCEPT_HEADER,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _send(
        self, method: str, endpoint: str, data: Optional[Dict[str, Any]],
    ) -> requests.Response:
        return self._session.request(
            method,
            f"{self.base_url}{endpoint}",
            headers=self._headers(with_body=data is not None),
            json=data,
            timeout=self.config.timeout_seconds,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=wait_exponential(multiplier=self.config.backoff_seconds),
            retry=(
                retry_if_exception_type(RETRY_EXCEPTIONS)
                | retry_if_result(_is_transient)
            ),
            before_sleep=_log_retry,
            retry_error_callback=_give_up,
            sleep=self._sleep,
        )

    def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Issue one logical request, retrying transient failures.

        Args:
            method: HTTP method.
            endpoint: Path below the API base URL.
            data: JSON body.

        Returns:
            The final response, which may still be a non-2xx status.

        Raises:
            TransportError: If no response could be obtained.
        """
        try:
            return self._retrying()(self._send, method, endpoint, data)
        except requests.RequestException as exc:
            raise TransportError(f"{method} {endpoint}: {exc}") from exc

    def get(self, endpoint: str) -> ApiResult:
        """GET an endpoint and classify the answer."""
        try:
            resp = self.request("GET", endpoint)
        except TransportError as exc:
            return Failed(status=TRANSPORT_FAILURE_STATUS, reason=str(exc))

        if resp.status_code == 404:
            return NotFound(status=404)
        if not resp.ok:
            return Failed(
                status=resp.status_code, reason=resp.reason or "", body=resp.text,
            )
        try:
            payload = resp.json()
        except ValueError:
            return Failed(
                status=resp.status_code,
                reason="Response body is not JSON",
                body=resp.text,
            )
        if not isinstance(payload, dict):
            payload = {}
        return Found(status=resp.status_code, data=payload)

    def get_repository(self, repo: str) -> ApiResult:
        return self.get(f"/repos/{repo}")

    def get_repository_public_key(self, repo: str) -> ApiResult:
        return self.get(f"/repos/{repo}/actions/secrets/public-key")

    def get_organization_public_key(self, org: str) -> ApiResult:
        return self.get(f"/orgs/{org}/actions/secrets/public-key")

    def put_repository_secret(
        self, repo: str, key: str, payload: Dict[str, Any],
    ) -> requests.Response:
        return self.request(
            "PUT", f"/repos/{repo}/actions/secrets/{key}", data=payload,
        )

    def put_organization_secret(
        self, org: str, key: str, payload: Dict[str, Any],
    ) -> requests.Response:
        return self.request(
            "PUT", f"/orgs/{org}/actions/secrets/{key}", data=payload,
        )

    def close(self) -> None:
        self._session.close()
