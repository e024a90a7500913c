"""WebSocket echo tests.

Learn: Starlette's TestClient drives WebSocket connections synchronously.
It is used without a `with` block so the lifespan (DB check) is skipped.
"""

import pytest
from starlette.testclient import TestClient

from pathix.main import create_app


@pytest.fixture()
def ws_client(settings):
    return TestClient(create_app(settings))


def test_echo(ws_client):
    with ws_client.websocket_connect("/ws") as ws:
        ws.send_text("hello")
        assert ws.receive_text() == "Echo: hello"


def test_echo_is_verbatim(ws_client):
    with ws_client.websocket_connect("/ws") as ws:
        for text in ("", "  spaced  ", '{"type": "ping"}', "ünïcødé 🗺"):
            ws.send_text(text)
            assert ws.receive_text() == f"Echo: {text}"


def test_connections_are_independent(ws_client):
    with ws_client.websocket_connect("/ws") as a, ws_client.websocket_connect("/ws") as b:
        a.send_text("from a")
        b.send_text("from b")
        assert b.receive_text() == "Echo: from b"
        assert a.receive_text() == "Echo: from a"
