"""Tests for the HTTP daemon client (requests is mocked)."""

from unittest import mock

import pytest
import requests

from opsh_lib.client import HttpClient
from opsh_lib.errors import ClientConnectionError, ClientError, DaemonValidationError


def response(status=200, data=None, text=None):
    resp = mock.Mock()
    resp.status_code = status
    if data is not None:
        resp.json.return_value = data
        resp.content = b"{...}"
        resp.text = ""
    else:
        resp.json.side_effect = ValueError("no json")
        resp.content = (text or "").encode()
        resp.text = text or ""
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture
def client():
    http_client = HttpClient("[::1]:50051", timeout=5)
    http_client.http = mock.Mock()
    return http_client


def test_address_gets_scheme():
    assert HttpClient("[::1]:50051").address == "http://[::1]:50051"
    assert HttpClient("https://router/").address == "https://router"


def test_get_capabilities(client):
    client.http.request.return_value = response(data={"modules": [{"name": "m"}]})
    assert client.get_capabilities() == [{"name": "m"}]
    client.http.request.assert_called_once_with(
        "GET", "http://[::1]:50051/capabilities", timeout=5
    )


def test_get_schema_with_revision(client):
    client.http.request.return_value = response(data={"data": "module m {}"})
    assert client.get_schema("m", "2024-05-01") == "module m {}"
    client.http.request.assert_called_once_with(
        "GET", "http://[::1]:50051/schema/m", timeout=5,
        params={"format": "yang", "revision": "2024-05-01"},
    )


def test_get_state_with_path(client):
    client.http.request.return_value = response(data={"interface": []})
    assert client.get_state("/interface") == {"interface": []}
    _, kwargs = client.http.request.call_args
    assert kwargs["params"] == {"type": "state", "path": "/interface"}


def test_commit(client):
    client.http.request.return_value = response(data={"transaction_id": 42})
    changes = [{"operation": "delete", "path": "/shutdown"}]
    assert client.commit(changes, "cleanup") == 42
    args, kwargs = client.http.request.call_args
    assert args == ("POST", "http://[::1]:50051/commit")
    assert kwargs["json"] == {"operation": "change", "changes": changes, "comment": "cleanup"}


def test_execute_rpc(client):
    client.http.request.return_value = response(data={"output": {"cleared": 3}})
    assert client.execute_rpc("/clear-counters", {"interface": "eth0"}) == {"cleared": 3}


def test_empty_body(client):
    client.http.request.return_value = response(text="")
    assert client.validate({"system": {}}) is None


def test_validation_error_carries_daemon_detail(client):
    client.http.request.return_value = response(
        status=422, data={"error": "mtu must be set before enabling the interface"}
    )
    with pytest.raises(DaemonValidationError) as exc:
        client.commit([])
    assert str(exc.value) == "mtu must be set before enabling the interface"


def test_server_error(client):
    client.http.request.return_value = response(status=500, text="internal error")
    with pytest.raises(ClientError) as exc:
        client.get_running_config()
    assert "internal error" in str(exc.value)
    assert not isinstance(exc.value, DaemonValidationError)


def test_transport_error(client):
    client.http.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ClientError):
        client.get_running_config()


def test_connect_failure():
    with mock.patch("requests.Session.request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ClientConnectionError):
            HttpClient.connect("http://127.0.0.1:1")
