from __future__ import annotations
import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, Optional
from urllib.parse import parse_qsl, quote, urlsplit

from requests import PreparedRequest
from requests.auth import AuthBase

SIGNED_HEADERS = ("accept", "date", "host")


def canonical_query(query: str) -> str:
    pairs = sorted(parse_qsl(query, keep_blank_values=True))
    return "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in pairs)


def body_digest(body) -> str:
    if body is None:
        body = b""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.sha256(body).hexdigest()


class HmacAuth(AuthBase):
    """
    Signs each request with the account's API secret.

    The canonical request is the newline-joined sequence:
      method, X-Auth-Date timestamp, path, sorted query string,
      "name:value" lines for the signed headers, the signed header list,
      sha256 hex digest of the body.
    """

    def __init__(self, api_key: str, api_secret: str, clock: Optional[Callable[[], datetime]] = None):
        self.api_key = api_key
        self.api_secret = api_secret
        self.clock = clock or (lambda: datetime.now(tz=timezone.utc))

    def canonical_request(self, r: PreparedRequest, timestamp: str) -> str:
        parts = urlsplit(r.url or "")
        headers = "\n".join(f"{h}:{(r.headers.get(h) or '').strip()}" for h in SIGNED_HEADERS)
        return "\n".join([
            (r.method or "GET").upper(),
            timestamp,
            parts.path,
            canonical_query(parts.query),
            headers,
            ";".join(SIGNED_HEADERS),
            body_digest(r.body),
        ])

    def __call__(self, r: PreparedRequest) -> PreparedRequest:
        now = self.clock()
        timestamp = now.strftime("%Y%m%dT%H%M%SZ")
        r.headers.setdefault("Accept", "application/json")
        r.headers["Date"] = format_datetime(now, usegmt=True)
        r.headers["Host"] = urlsplit(r.url or "").netloc

        signature = hmac.new(
            self.api_secret.encode("utf-8"),
            self.canonical_request(r, timestamp).encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

        r.headers["Authorization"] = f"HMAC {self.api_key}:{signature}"
        r.headers["X-Auth-Date"] = timestamp
        r.headers["X-Auth-SignedHeaders"] = ";".join(SIGNED_HEADERS)
        return r
