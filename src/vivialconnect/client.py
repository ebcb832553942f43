from __future__ import annotations

import logging
import random
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin

import requests

from vivialconnect.auth import HmacAuth
from vivialconnect.body import dumps
from vivialconnect.config import DEFAULT_BASE_URL, ClientConfig, load_config
from vivialconnect.errors import (
    ApiConnectionError,
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NoContentError,
    NotFoundError,
)

log = logging.getLogger(__name__)

SDK_VERSION = "0.1.0"

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": f"vivialconnect-python/{SDK_VERSION}",
    "Accept": "application/json",
    "Content-Type": "application/json",
}

TRANSIENT_STATUSES = (429, 500, 502, 503, 504)
IDEMPOTENT_METHODS = ("GET", "PUT", "DELETE")


def _should_retry_status(method: str, status: int) -> bool:
    if status == 429:
        return True
    # a 5xx on POST may still have created the resource
    return status in TRANSIENT_STATUSES and method in IDEMPOTENT_METHODS


def _should_retry_error(method: str, err: requests.RequestException) -> bool:
    if method in IDEMPOTENT_METHODS:
        return isinstance(err, (requests.ConnectionError, requests.Timeout))
    return isinstance(err, requests.ConnectTimeout)


def _error_message(resp: requests.Response, payload: Any) -> str:
    if isinstance(payload, dict):
        for key in ("message", "error", "error_message"):
            if payload.get(key):
                return str(payload[key])
    text = (resp.text or "").strip()
    return text[:200] if text else (resp.reason or "unknown error")


class ApiClient:
    """
    Thin HTTP+JSON helper shared by every resource model.

    Paths are relative to ``base_url`` and account scoped; bodies are dicts
    serialized with :func:`vivialconnect.body.dumps`.
    """

    def __init__(
            self,
            account_id: int,
            api_key: str,
            api_secret: str,
            base_url: str = DEFAULT_BASE_URL,
            timeout: float = 20.0,
            max_retries: int = 3,
            backoff: float = 0.5,
            max_backoff: float = 8.0,
            session: Optional[requests.Session] = None,
    ):
        if not (account_id and api_key and api_secret):
            raise ConfigurationError("account_id, api_key and api_secret are required")
        self.account_id = int(account_id)
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff
        self.max_backoff = max_backoff
        self.auth = HmacAuth(api_key, api_secret)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: ClientConfig) -> "ApiClient":
        if not cfg.has_credentials:
            raise ConfigurationError(
                "missing credentials: set VIVIALCONNECT_ACCOUNT_ID, "
                "VIVIALCONNECT_API_KEY and VIVIALCONNECT_API_SECRET"
            )
        return cls(
            cfg.account_id,  # type: ignore[arg-type]
            cfg.api_key,  # type: ignore[arg-type]
            cfg.api_secret,  # type: ignore[arg-type]
            base_url=cfg.api_base_url,
            timeout=cfg.timeout_seconds,
            max_retries=cfg.max_retries,
            backoff=cfg.backoff_seconds,
            max_backoff=cfg.max_backoff_seconds,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------- paths ----------

    def account_url(self) -> str:
        return f"accounts/{self.account_id}.json"

    def class_url(self, collection: str, suffix: Optional[str] = None) -> str:
        base = f"accounts/{self.account_id}/{collection}"
        if suffix:
            base = f"{base}/{str(suffix).strip('/')}"
        return base + ".json"

    # ---------- transport ----------

    def request(
            self,
            method: str,
            path: str,
            body: Optional[Mapping[str, Any]] = None,
            params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one API call and return the decoded JSON object.

        Raises NoContentError on 204, ApiError on 4xx/5xx and
        ApiConnectionError when the API cannot be reached.
        """
        method = method.upper()
        url = urljoin(self.base_url, path)
        data = dumps(body)
        attempts = max(1, self.max_retries)
        delay = min(self.max_backoff, self.backoff)

        for attempt in range(1, attempts + 1):
            try:
                t0 = time.time()
                resp = self.session.request(
                    method,
                    url,
                    data=data,
                    params=dict(params) if params else None,
                    headers=DEFAULT_HEADERS,
                    auth=self.auth,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                if attempt >= attempts or not _should_retry_error(method, e):
                    log.warning("api_request_failed", extra={"method": method, "path": path, "attempt": attempt, "err": str(e)})
                    raise ApiConnectionError(f"{method} {path} failed: {e}") from e
                log.debug("api_request_retry", extra={"method": method, "path": path, "attempt": attempt, "err": str(e)})
                time.sleep(delay)
                delay = min(self.max_backoff, delay * (1.5 + random.random() * 0.5))
                continue

            dt_ms = int((time.time() - t0) * 1000)
            log.debug("api_request_done", extra={"method": method, "path": path, "status": resp.status_code, "ms": dt_ms})

            if attempt < attempts and _should_retry_status(method, resp.status_code):
                log.debug("api_request_retry", extra={"method": method, "path": path, "attempt": attempt, "status": resp.status_code})
                time.sleep(delay)
                delay = min(self.max_backoff, delay * (1.5 + random.random() * 0.5))
                continue

            return self._handle_response(method, path, resp)

        # unreachable: the loop either returns or raises
        raise ApiConnectionError(f"{method} {path} failed")

    def _handle_response(self, method: str, path: str, resp: requests.Response) -> Dict[str, Any]:
        if resp.status_code == 204:
            raise NoContentError(method, path)

        payload: Any = None
        if resp.content:
            try:
                payload = resp.json()
            except ValueError:
                payload = None

        if resp.status_code >= 400:
            message = _error_message(resp, payload)
            log.info("api_error", extra={"method": method, "path": path, "status": resp.status_code, "err": message})
            if resp.status_code in (401, 403):
                raise AuthenticationError(resp.status_code, message, payload)
            if resp.status_code == 404:
                raise NotFoundError(resp.status_code, message, payload)
            raise ApiError(resp.status_code, message, payload)

        if not resp.content:
            return {}
        if not isinstance(payload, dict):
            raise ApiError(resp.status_code, "response is not a JSON object", resp.text)
        return payload


# ---------- default client ----------

_default_client: Optional[ApiClient] = None


def init(account_id: int, api_key: str, api_secret: str, **kwargs: Any) -> ApiClient:
    """Install the client used by model methods when no ``client=`` is given."""
    global _default_client
    _default_client = ApiClient(account_id, api_key, api_secret, **kwargs)
    return _default_client


def set_default_client(client: Optional[ApiClient]) -> None:
    global _default_client
    _default_client = client


def get_default_client() -> ApiClient:
    """
    Return the installed client, building one from the environment /
    YAML config on first use.
    """
    global _default_client
    if _default_client is None:
        _default_client = ApiClient.from_config(load_config())
    return _default_client


def resolve(client: Optional[ApiClient]) -> ApiClient:
    return client if client is not None else get_default_client()
