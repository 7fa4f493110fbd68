import os

# Qt must not try to open a display during tests
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import numpy as np
import pytest

from thumbwheel.view.backend import RenderBackend, RenderInitError


class RecordingBackend(RenderBackend):
    """Fake backend that records every call and returns a tiny black frame."""

    def __init__(self, fail_on_open: bool = False) -> None:
        self.fail_on_open = fail_on_open
        self.calls: list[str] = []
        self.matrices: list[np.ndarray] = []
        self.size: tuple[int, int] | None = None
        self.mesh = None
        self.materials = None
        self.closed = False

    def open(self, width, height, mesh, materials):
        self.calls.append("open")
        if self.fail_on_open:
            raise RenderInitError("no display")
        self.size = (width, height)
        self.mesh = mesh
        self.materials = materials

    def resize(self, width, height):
        self.calls.append("resize")
        self.size = (width, height)

    def draw(self, model_matrix):
        self.calls.append("draw")
        self.matrices.append(np.array(model_matrix))
        w, h = self.size
        return np.zeros((h, w, 3), dtype=np.uint8)

    def close(self):
        self.calls.append("close")
        self.closed = True


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
