import json
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from requests import Response

from vivialconnect import client as client_mod
from vivialconnect.client import ApiClient

BASE = "https://api.test/api/v1.0/"
ACCOUNT = 12345


def make_response(status: int = 200, payload=None, text: str = "") -> Response:
    resp = Response()
    resp.status_code = status
    resp.reason = "Reason"
    if payload is not None:
        resp._content = json.dumps(payload).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = text.encode("utf-8")
    return resp


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.close = Mock()

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, data=None, params=None, **kwargs):
        self.calls.append(SimpleNamespace(
            method=method,
            url=url,
            path=url[len(BASE):],
            raw=data,
            body=json.loads(data) if data else None,
            params=params,
            kwargs=kwargs,
        ))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def api(session):
    return ApiClient(ACCOUNT, "key", "secret", base_url=BASE, backoff=0, session=session)


@pytest.fixture(autouse=True)
def no_default_client(monkeypatch):
    monkeypatch.setattr(client_mod, "_default_client", None)
