import numpy as np
import pytest

from display_agent.config import AgentSettings


class FakeDetector:
    """Returns queued results; each entry is a list of boxes or an exception."""

    def __init__(self, results=None, load_error=None):
        self.results = list(results or [])
        self.load_error = load_error
        self.loaded = False
        self.calls = 0

    async def load(self):
        if self.load_error:
            raise self.load_error
        self.loaded = True

    async def detect(self, frame):
        self.calls += 1
        result = self.results.pop(0) if self.results else []
        if isinstance(result, Exception):
            raise result
        return result


class FakeCamera:
    instances = []

    def __init__(self, index, width, height, open_error=None):
        self.index = index
        self.frame_size = (width, height)
        self.open_error = open_error
        self.opened = False
        self.released = False
        FakeCamera.instances.append(self)

    async def open(self):
        if self.open_error:
            raise self.open_error
        self.opened = True

    async def read(self):
        width, height = self.frame_size
        return np.zeros((height, width, 3), dtype=np.uint8)

    def release(self):
        self.released = True


@pytest.fixture
def cfg():
    return AgentSettings(
        _env_file=None,
        display_id="display2",
        camera_index=None,
        frame_width=640,
        frame_height=480,
        edge_threshold=50,
        detection_interval_ms=1,
        mirror=True,
    )


@pytest.fixture
def reported():
    return []


@pytest.fixture
def reporter(reported):
    async def report(event):
        reported.append(event)

    return report


@pytest.fixture(autouse=True)
def _reset_cameras():
    FakeCamera.instances.clear()
    yield
    FakeCamera.instances.clear()


@pytest.fixture
def fake_detector():
    return FakeDetector


@pytest.fixture
def fake_camera():
    return FakeCamera
