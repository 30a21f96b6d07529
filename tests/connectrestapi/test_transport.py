"""Tests for the authenticated HTTP transport."""

import base64
import json
import threading

import httpx
import pytest

from kafka_connect_client.connectrestapi import transport


class RecordingHandler:
    """MockTransport handler answering 200 and recording requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=[])


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


def _transport(handler: RecordingHandler, **kwargs) -> transport.Transport:
    return transport.Transport(
        base_url="http://connect:8083/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_empty_base_url_raises():
    with pytest.raises(ValueError, match="base_url"):
        transport.Transport(base_url="")


def test_non_positive_timeout_raises():
    with pytest.raises(ValueError, match="timeout"):
        transport.Transport(base_url="http://connect:8083", timeout=0)


def test_trailing_slash_is_stripped(handler: RecordingHandler):
    assert _transport(handler).base_url == "http://connect:8083"


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def test_basic_auth_header_encodes_credentials():
    expected = base64.b64encode(b"user:password").decode()
    assert transport.basic_auth_header("user", "password") == f"Basic {expected}"


def test_basic_auth_header_without_password():
    """A missing password is encoded as the empty string."""
    assert transport.basic_auth_header("user") == "Basic dXNlcjo="


def test_requests_carry_authorization(handler: RecordingHandler):
    """Every request is sent with the configured credentials."""
    connect = _transport(handler, username="user", password="password")
    connect.execute("GET", "/connectors")
    connect.execute("DELETE", "/connectors/a")

    expected = transport.basic_auth_header("user", "password")
    assert [r.headers["Authorization"] for r in handler.requests] == [expected] * 2


def test_no_username_sends_no_authorization(handler: RecordingHandler):
    connect = _transport(handler, password="ignored")
    connect.execute("GET", "/")
    assert "Authorization" not in handler.requests[0].headers


# ---------------------------------------------------------------------------
# execute
# ---------------------------------------------------------------------------


def test_execute_returns_raw_response_for_any_status():
    """Status codes are not interpreted by the transport."""
    connect = transport.Transport(
        base_url="http://connect:8083",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    assert connect.execute("GET", "/").status_code == 503


def test_execute_sends_json_body_and_repeated_params(handler: RecordingHandler):
    connect = _transport(handler)
    connect.execute(
        "POST",
        "/connectors",
        params=[("expand", "status"), ("expand", "info")],
        json={"name": "a", "config": {}},
    )

    request = handler.requests[0]
    assert request.url.params.get_list("expand") == ["status", "info"]
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.read()) == {"name": "a", "config": {}}


def test_execute_propagates_network_errors():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    connect = transport.Transport(
        base_url="http://connect:8083",
        transport=httpx.MockTransport(refuse),
    )
    with pytest.raises(httpx.ConnectError):
        connect.execute("GET", "/")


def test_each_thread_gets_its_own_client(handler: RecordingHandler):
    connect = _transport(handler)
    clients = []
    thread = threading.Thread(target=lambda: clients.append(connect.client))
    thread.start()
    thread.join()

    assert clients[0] is not connect.client


def test_close_closes_client(handler: RecordingHandler):
    with _transport(handler) as connect:
        client = connect.client
    assert client.is_closed
