import asyncio

import pytest

from coordinator.schemas import Edge, FaceApproaching, Position
from display_agent.errors import CameraPermissionError, ModelNotFoundError
from display_agent.faces import FaceBox
from display_agent.session import DisplaySession, SessionState


def _session(cfg, detector, camera_factory, reporter, devices=(0, 1, 2)):
    return DisplaySession(
        cfg,
        detector=detector,
        camera_factory=camera_factory,
        report_edge=reporter,
        device_probe=lambda: list(devices),
    )


@pytest.mark.asyncio
async def test_start_reaches_detecting_and_stop_releases_camera(cfg, reporter, fake_detector, fake_camera):
    detector = fake_detector()
    session = _session(cfg, detector, fake_camera, reporter)
    assert session.state == SessionState.IDLE

    assert await session.start() is True
    assert session.state == SessionState.DETECTING
    assert detector.loaded

    (camera,) = fake_camera.instances
    assert camera.index == 1  # display2 -> camera 1
    assert camera.opened

    await session.stop()
    assert session.state == SessionState.IDLE
    assert camera.released
    assert not session.loop.running


@pytest.mark.asyncio
async def test_explicit_camera_index(cfg, reporter, fake_detector, fake_camera):
    cfg.camera_index = 0
    session = _session(cfg, fake_detector(), fake_camera, reporter)

    assert await session.start()
    assert fake_camera.instances[0].index == 0
    await session.stop()


@pytest.mark.asyncio
async def test_missing_model_fails_session(cfg, reporter, fake_detector, fake_camera):
    detector = fake_detector(load_error=ModelNotFoundError("Model file missing: models/face.onnx"))
    session = _session(cfg, detector, fake_camera, reporter)

    assert await session.start() is False
    assert session.state == SessionState.FAILED
    assert "Model file missing" in session.status_text
    assert fake_camera.instances == []
    assert not session.loop.running


@pytest.mark.asyncio
async def test_no_camera_fails_session(cfg, reporter, fake_detector, fake_camera):
    session = _session(cfg, fake_detector(), fake_camera, reporter, devices=())

    assert await session.start() is False
    assert session.state == SessionState.FAILED
    assert session.status_text == "Error: No video devices found"


@pytest.mark.asyncio
async def test_camera_permission_denied_fails_session(cfg, reporter, fake_detector, fake_camera):
    def refusing_camera(index, width, height):
        return fake_camera(index, width, height, open_error=CameraPermissionError("access denied"))

    session = _session(cfg, fake_detector(), refusing_camera, reporter)

    assert await session.start() is False
    assert session.state == SessionState.FAILED
    assert "access denied" in session.status_text

    # stays failed after teardown
    await session.stop()
    assert session.state == SessionState.FAILED


@pytest.mark.asyncio
async def test_detect_once_reports_edge(cfg, reporter, reported, fake_detector, fake_camera):
    detector = fake_detector(results=[[FaceBox(x=580, y=60, width=50, height=50)]])
    session = _session(cfg, detector, fake_camera, reporter)
    session.camera = fake_camera(0, 640, 480)

    event = await session.detect_once()

    assert event is not None
    assert reported == [event]
    assert event.display_id == "display2"
    assert event.edge == Edge.LEFT
    assert event.position == Position(x=10, y=60)
    assert session.status_text == "Faces detected: 1 | Edge: LEFT"


@pytest.mark.asyncio
async def test_detect_once_without_edge_face(cfg, reporter, reported, fake_detector, fake_camera):
    detector = fake_detector(results=[[FaceBox(x=300, y=60, width=40, height=40)], []])
    session = _session(cfg, detector, fake_camera, reporter)
    session.camera = fake_camera(0, 640, 480)

    assert await session.detect_once() is None
    assert await session.detect_once() is None
    assert reported == []
    assert session.status_text == "Faces detected: 0"


@pytest.mark.asyncio
async def test_detect_once_scales_to_display_size(cfg, reporter, reported, fake_detector, fake_camera):
    cfg.display_width = 1280
    cfg.display_height = 960
    # 20px from the raw right edge of the frame = 40px on the display (< 50)
    detector = fake_detector(results=[[FaceBox(x=580, y=0, width=40, height=40)]])
    session = _session(cfg, detector, fake_camera, reporter)
    session.camera = fake_camera(0, 640, 480)

    event = await session.detect_once()

    assert event.edge == Edge.LEFT
    assert event.position.x == 40


@pytest.mark.asyncio
async def test_detection_error_does_not_stop_loop(cfg, reporter, reported, fake_detector, fake_camera):
    detector = fake_detector(results=[RuntimeError("boom"), [FaceBox(x=0, y=0, width=30, height=30)]])
    session = _session(cfg, detector, fake_camera, reporter)

    assert await session.start()

    async def wait_for_report():
        while not reported:
            await asyncio.sleep(0.001)

    await asyncio.wait_for(wait_for_report(), timeout=2)
    await session.stop()

    assert detector.calls >= 2
    # mirrored: 640 - (0 + 30) = 610 -> right edge
    assert reported[0].edge == Edge.RIGHT


@pytest.mark.asyncio
async def test_detect_once_error_is_surfaced(cfg, reporter, fake_detector, fake_camera):
    session = _session(cfg, fake_detector(results=[RuntimeError("boom")]), fake_camera, reporter)
    session.camera = fake_camera(0, 640, 480)

    assert await session.detect_once() is None
    assert session.status_text == "Error: boom"


def test_notifications_are_recorded(cfg, reporter, fake_detector, fake_camera):
    session = _session(cfg, fake_detector(), fake_camera, reporter)
    approach = FaceApproaching(from_="display1", edge=Edge.LEFT, position=Position(x=1, y=2))

    session.on_face_approaching(approach)
    session.on_arrangement_changed("grid")

    assert session.last_approach is approach
    assert session.arrangement == "grid"
