import hashlib
import hmac
from datetime import datetime, timezone

import pytest
import requests

from vivialconnect import client as client_mod
from vivialconnect.auth import HmacAuth, canonical_query
from vivialconnect.client import ApiClient, DEFAULT_HEADERS
from vivialconnect.errors import (
    ApiConnectionError,
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NoContentError,
    NotFoundError,
)

from conftest import ACCOUNT, BASE, FakeSession, make_response


def test_paths_are_account_scoped(api):
    assert api.account_url() == f"accounts/{ACCOUNT}.json"
    assert api.class_url("messages") == f"accounts/{ACCOUNT}/messages.json"
    assert api.class_url("numbers", "local/7") == f"accounts/{ACCOUNT}/numbers/local/7.json"


def test_request_returns_json_and_sends_body(api, session):
    session.queue(make_response(200, {"message": {"id": 1}}))

    out = api.request("post", "accounts/1/messages.json", body={"message": {"body": "hi"}}, params={"a": "1"})

    assert out == {"message": {"id": 1}}
    call = session.last
    assert call.method == "POST"
    assert call.url == BASE + "accounts/1/messages.json"
    assert call.body == {"message": {"body": "hi"}}
    assert call.params == {"a": "1"}
    assert isinstance(call.kwargs["auth"], HmacAuth)
    assert call.kwargs["timeout"] == api.timeout


def test_no_content_raises(api, session):
    session.queue(make_response(204))
    with pytest.raises(NoContentError):
        api.request("DELETE", "accounts/1/numbers/3.json")


def test_error_status_mapping(api, session):
    session.queue(
        make_response(404, {"message": "Number not found"}),
        make_response(401, {"error": "bad signature"}),
        make_response(400, text="plain failure"),
    )

    with pytest.raises(NotFoundError) as e404:
        api.request("GET", "x.json")
    assert e404.value.status == 404
    assert e404.value.message == "Number not found"

    with pytest.raises(AuthenticationError) as e401:
        api.request("GET", "x.json")
    assert "bad signature" in str(e401.value)

    with pytest.raises(ApiError) as e400:
        api.request("GET", "x.json")
    assert e400.value.message == "plain failure"


def test_transient_status_is_retried_for_get(api, session):
    session.queue(make_response(503, text="busy"), make_response(200, {"count": 3}))
    assert api.request("GET", "c.json") == {"count": 3}
    assert len(session.calls) == 2


def test_post_is_not_retried_on_server_error(api, session):
    session.queue(make_response(502, text="bad gateway"), make_response(200, {}))
    with pytest.raises(ApiError) as err:
        api.request("POST", "m.json", body={"message": {}})
    assert err.value.status == 502
    assert len(session.calls) == 1


def test_connection_errors_exhaust_retries(api, session):
    session.queue(*[requests.ConnectionError("refused")] * api.max_retries)
    with pytest.raises(ApiConnectionError):
        api.request("GET", "c.json")
    assert len(session.calls) == api.max_retries


def test_client_requires_credentials():
    with pytest.raises(ConfigurationError):
        ApiClient(0, "key", "secret")
    with pytest.raises(ConfigurationError):
        ApiClient(1, "", "secret")


def test_context_manager_closes_session():
    session = FakeSession()
    with ApiClient(1, "k", "s", session=session):
        pass
    session.close.assert_called_once()


def test_default_client_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VIVIALCONNECT_ACCOUNT_ID", "777")
    monkeypatch.setenv("VIVIALCONNECT_API_KEY", "k")
    monkeypatch.setenv("VIVIALCONNECT_API_SECRET", "s")

    c = client_mod.get_default_client()
    assert c.account_id == 777
    assert client_mod.get_default_client() is c


def test_default_client_without_credentials(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ("VIVIALCONNECT_ACCOUNT_ID", "VIVIALCONNECT_API_KEY", "VIVIALCONNECT_API_SECRET"):
        monkeypatch.delenv(var, raising=False)
    with pytest.raises(ConfigurationError):
        client_mod.get_default_client()


def test_init_installs_default_client():
    c = client_mod.init(5, "k", "s")
    assert client_mod.get_default_client() is c


def test_canonical_query_is_sorted():
    assert canonical_query("b=2&a=1&a=0") == "a=0&a=1&b=2"
    assert canonical_query("") == ""


def test_hmac_auth_signs_request():
    fixed = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    auth = HmacAuth("key", "secret", clock=lambda: fixed)
    prepared = requests.Request(
        "POST",
        BASE + "accounts/1/messages.json",
        params={"z": "1", "a": "2"},
        data='{"message":{}}',
        headers=DEFAULT_HEADERS,
    ).prepare()

    auth(prepared)

    assert prepared.headers["X-Auth-Date"] == "20240102T030405Z"
    assert prepared.headers["X-Auth-SignedHeaders"] == "accept;date;host"
    assert prepared.headers["Host"] == "api.test"
    canonical = auth.canonical_request(prepared, "20240102T030405Z")
    assert canonical.split("\n")[:4] == ["POST", "20240102T030405Z", "/api/v1.0/accounts/1/messages.json", "a=2&z=1"]
    expected = hmac.new(b"secret", canonical.encode("utf-8"), hashlib.sha256).hexdigest()
    assert prepared.headers["Authorization"] == f"HMAC key:{expected}"


def test_rate_limited_post_is_retried(api, session):
    session.queue(make_response(429, text="slow down"), make_response(200, {"message": {"id": 1}}))
    assert api.request("POST", "m.json", body={"message": {}}) == {"message": {"id": 1}}
    assert len(session.calls) == 2


def test_persistent_server_error_surfaces_last_status(api, session):
    session.queue(*[make_response(503, text="busy")] * api.max_retries)
    with pytest.raises(ApiError) as err:
        api.request("GET", "c.json")
    assert err.value.status == 503
    assert len(session.calls) == api.max_retries


def test_post_retries_connect_timeout_only(api, session):
    session.queue(requests.ConnectTimeout("connect"), make_response(200, {"count": 1}))
    assert api.request("POST", "m.json", body={"message": {}}) == {"count": 1}
    assert len(session.calls) == 2

    # the request may have reached the server
    session.queue(requests.ReadTimeout("read"), make_response(200, {}))
    with pytest.raises(ApiConnectionError):
        api.request("POST", "m.json", body={"message": {}})
    assert len(session.calls) == 3


def test_backoff_is_capped(monkeypatch):
    delays = []
    monkeypatch.setattr(client_mod.time, "sleep", delays.append)
    session = FakeSession(*[make_response(503, text="busy")] * 6)
    api = ApiClient(ACCOUNT, "k", "s", base_url=BASE, max_retries=6, backoff=1.0, max_backoff=1.5, session=session)

    with pytest.raises(ApiError):
        api.request("GET", "c.json")

    assert len(delays) == 5
    assert delays[0] == 1.0
    assert all(d <= 1.5 for d in delays)
    assert delays[-1] == 1.5


def test_default_client_with_malformed_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VIVIALCONNECT_CONFIG_FILE", raising=False)
    monkeypatch.setenv("VIVIALCONNECT_ACCOUNT_ID", "abc")
    with pytest.raises(ConfigurationError):
        client_mod.get_default_client()
