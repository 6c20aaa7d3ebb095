import pytest
from fastapi.testclient import TestClient

from coordinator.config import CoordinatorSettings
from coordinator.main import create_app

ARRANGED = {"event": "display_arrangement_changed", "data": "horizontal"}


@pytest.fixture
def app():
    return create_app(CoordinatorSettings())


@pytest.fixture
def client(app):
    # One portal for every channel so all sockets share the service's event loop
    with TestClient(app) as c:
        yield c


def _join(ws, display_id, arrangement="horizontal"):
    """
    Register and wait for our own arrangement broadcast, which proves the
    registration was handled (frames on one channel are handled in order).
    """
    ws.send_json({"event": "register_display", "data": display_id})
    ws.send_json({"event": "set_display_arrangement", "data": arrangement})
    assert ws.receive_json() == {"event": "display_arrangement_changed", "data": arrangement}


def _face(display_id, edge, x=12.5, y=40.0):
    return {
        "event": "face_at_edge",
        "data": {"displayId": display_id, "edge": edge, "position": {"x": x, "y": y}},
    }


def test_face_at_edge_is_routed_to_neighbour(client):
    with client.websocket_connect("/ws") as ws1:
        _join(ws1, "display1")
        with client.websocket_connect("/ws") as ws2:
            _join(ws2, "display2")
            assert ws1.receive_json() == ARRANGED  # ws2's broadcast

            ws1.send_json(_face("display1", "right"))

            assert ws2.receive_json() == {
                "event": "face_approaching",
                "data": {"from": "display1", "edge": "left", "position": {"x": 12.5, "y": 40.0}},
            }


def test_event_without_neighbour_sends_nothing(client):
    with client.websocket_connect("/ws") as ws1:
        _join(ws1, "display1")
        with client.websocket_connect("/ws") as ws2:
            _join(ws2, "display2")
            assert ws1.receive_json() == ARRANGED

            # display1 has nothing to its left; the next frame ws2 sees must be
            # the arrangement broadcast that follows, not a notification.
            ws1.send_json(_face("display1", "left"))
            ws1.send_json({"event": "set_display_arrangement", "data": "vertical"})

            assert ws2.receive_json() == {"event": "display_arrangement_changed", "data": "vertical"}
            assert ws1.receive_json() == {"event": "display_arrangement_changed", "data": "vertical"}


def test_malformed_frames_are_ignored(client, app):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        ws.send_json({"event": "teleport", "data": {}})
        ws.send_json(_face("display1", "sideways"))

        # channel still works
        _join(ws, "display1")

    assert app.state.service.registry.count() == 0


def test_disconnect_unregisters_display(client, app):
    service = app.state.service

    with client.websocket_connect("/ws") as ws:
        _join(ws, "display7")
        assert service.snapshot().displays == ["display7"]

    assert service.registry.resolve("display7") is None
    assert service.snapshot().count == 0


def test_status_api_reflects_registry(client):
    with client.websocket_connect("/ws") as ws:
        _join(ws, "display2", arrangement="grid")

        response = client.get("/api/displays")
        assert response.status_code == 200
        assert response.json() == {"arrangement": "grid", "count": 1, "displays": ["display2"]}


def test_put_arrangement_broadcasts(client, app):
    with client.websocket_connect("/ws") as ws:
        _join(ws, "display1")

        response = client.put("/api/arrangement", json={"arrangement": "vertical"})
        assert response.status_code == 200
        assert response.json()["arrangement"] == "vertical"

        assert ws.receive_json() == {"event": "display_arrangement_changed", "data": "vertical"}

    assert app.state.service.arrangement == "vertical"


def test_put_arrangement_requires_body(client):
    response = client.put("/api/arrangement", json={})
    assert response.status_code == 422


def test_binary_frames_keep_the_channel_open(client, app):
    with client.websocket_connect("/ws") as ws:
        _join(ws, "display1")

        ws.send_bytes(b'{"event":"set_display_arrangement","data":"grid"}')
        assert ws.receive_json() == {"event": "display_arrangement_changed", "data": "grid"}

        ws.send_bytes(b"\xff\xfe not json")
        ws.send_json({"event": "set_display_arrangement", "data": "vertical"})
        assert ws.receive_json() == {"event": "display_arrangement_changed", "data": "vertical"}

        assert app.state.service.registry.resolve("display1") is not None


def test_display_page_sees_approach_for_watched_id(client, app):
    approach = {
        "event": "face_approaching",
        "data": {"from": "display1", "edge": "left", "position": {"x": 12.5, "y": 40.0}},
    }

    with client.websocket_connect("/ws") as ws1:
        _join(ws1, "display1")
        with client.websocket_connect("/ws") as ws2:
            _join(ws2, "display2")
            assert ws1.receive_json() == ARRANGED

            with client.websocket_connect("/ws") as page:
                page.send_json({"event": "watch_display", "data": "display2"})
                page.send_json({"event": "set_display_arrangement", "data": "horizontal"})
                assert page.receive_json() == ARRANGED
                assert ws1.receive_json() == ARRANGED
                assert ws2.receive_json() == ARRANGED

                ws1.send_json(_face("display1", "right"))

                assert page.receive_json() == approach
                assert ws2.receive_json() == approach

            # the page never took over the id
            assert app.state.service.snapshot().displays == ["display1", "display2"]
