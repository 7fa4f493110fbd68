"""
Demo Application
================
Two wheels side by side, each with a label showing its current value.

Why is this file needed?
------------------------
It is the smallest host that exercises the whole widget: a horizontal
wrap-around wheel and a vertical clamped wheel. The labels are updated
through the widget's ``value_changed`` signal, which Qt delivers on the GUI
thread; the render-thread listener is only used for logging.
"""
import logging
import sys
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from thumbwheel.logging_config import setup_logging
from thumbwheel.model.enums import BoundaryMode, Orientation
from thumbwheel.model.materials import BLUE_RED, GRAYSCALE
from thumbwheel.model.wheel import WheelConfiguration
from thumbwheel.view.wheel_widget import ThumbWheel

logger = logging.getLogger(__name__)

APP_NAME = "ThumbWheel Demo"


class DemoWindow(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(APP_NAME)

        # 1. Horizontal wrap-around wheel, 0..100
        self.wheel_1 = ThumbWheel(
            wheel=WheelConfiguration(orientation=Orientation.HORIZONTAL, boundary_mode=BoundaryMode.REPEAT),
            materials=GRAYSCALE,
        )
        self.wheel_1.setMinimumSize(300, 75)
        self.value_1 = QLabel()

        # 2. Vertical clamped wheel, -50..50 in steps of 0.5
        self.wheel_2 = ThumbWheel(
            wheel=WheelConfiguration(orientation=Orientation.VERTICAL, boundary_mode=BoundaryMode.CLAMP),
            materials=BLUE_RED,
        )
        self.wheel_2.set_ratio(0.5)
        self.wheel_2.set_range(-50.0, 50.0)
        self.wheel_2.setMinimumSize(75, 300)
        self.value_2 = QLabel()

        for wheel, label in ((self.wheel_1, self.value_1), (self.wheel_2, self.value_2)):
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            label.setText(f"{int(wheel.value())}")
            wheel.value_changed.connect(lambda v, lbl=label: lbl.setText(f"{int(v)}"))
            wheel.set_on_value_changed_listener(self._log_value)

        left = QVBoxLayout()
        left.addWidget(self.wheel_1)
        left.addWidget(self.value_1)

        right = QVBoxLayout()
        right.addWidget(self.wheel_2)
        right.addWidget(self.value_2)

        layout = QHBoxLayout(self)
        layout.addLayout(left, 1)
        layout.addLayout(right, 0)

    @staticmethod
    def _log_value(source: Any, value: float) -> None:
        # Called on the render thread: log only, never touch widgets here
        logger.debug(f"{type(source).__name__} value -> {value:.2f}")


def main() -> int:
    # 1. Setup Logging (Console + Optional File)
    # THUMBWHEEL_LOG_LEVEL=DEBUG shows every throttled value update
    setup_logging()

    # 2. Create the Qt Application
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    # 3. Show the window and start the event loop
    window = DemoWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
