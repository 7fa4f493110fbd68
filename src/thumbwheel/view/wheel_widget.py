"""
ThumbWheel Widget (Qt Shell)
============================
The widget a host application places in its layout.

Why is this file needed?
------------------------
1. Configuration: It exposes value, range, ratio, orientation and boundary
   mode to the host, validated by ``WheelConfiguration``.
2. Wiring: Pointer events are forwarded to the input state machine, and the
   widget's show/resize/hide lifecycle drives the render loop.
3. Presentation: Frames rendered in the background thread arrive through a
   queued signal and are painted here, on the GUI thread.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

import numpy as np
from PySide6.QtCore import QEvent, QPointF, QSize, Qt, Signal, Slot
from PySide6.QtGui import QCloseEvent, QHideEvent, QImage, QMouseEvent, QPainter, QPaintEvent, QResizeEvent, QShowEvent
from PySide6.QtWidgets import QWidget

from thumbwheel import config
from thumbwheel.controller.channel import MotionChannel, PublishedValue, ValueRequest
from thumbwheel.controller.input import InputStateMachine, PointerAction
from thumbwheel.controller.render_loop import RenderLoop, ValueListener
from thumbwheel.model.enums import Orientation
from thumbwheel.model.geometry import shared_mesh
from thumbwheel.model.materials import ALL_SCHEMES, DEFAULT_SCHEME, MaterialScheme
from thumbwheel.model.motion import MotionModel
from thumbwheel.model.wheel import WheelConfiguration
from thumbwheel.view.backend import BackendFactory, RenderInitError
from thumbwheel.view.pyvista_backend import PyVistaBackend

logger = logging.getLogger(__name__)


def frame_to_image(frame: Any) -> Optional[QImage]:
    """Convert an (H, W, 3) uint8 RGB array into a detached QImage."""
    if frame is None:
        return None
    arr = np.ascontiguousarray(frame, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"Expected frame of shape (H, W, 3), got {arr.shape}.")
    h, w = arr.shape[:2]
    # copy() detaches the image from the numpy buffer
    return QImage(arr.data, w, h, 3 * w, QImage.Format.Format_RGB888).copy()


class ThumbWheel(QWidget):
    """
    A 3D thumbwheel. Drag it to change the value; released, it keeps spinning
    and slows down.

    Listeners registered with ``set_on_value_changed_listener`` are called
    from the render thread; they must not touch widgets directly. Connect to
    the ``value_changed`` signal instead to be called on the GUI thread.
    """
    value_changed = Signal(float)
    error_occurred = Signal(str)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        wheel: Optional[WheelConfiguration] = None,
        materials: Union[MaterialScheme, str] = DEFAULT_SCHEME,
        backend_factory: BackendFactory = PyVistaBackend,
    ) -> None:
        super().__init__(parent)
        self.wheel = wheel if wheel is not None else WheelConfiguration()
        self.materials = ALL_SCHEMES[materials] if isinstance(materials, str) else materials
        self.backend_factory = backend_factory

        self.mesh = shared_mesh()
        self.channel = MotionChannel(published=PublishedValue(self.wheel.min_value, self.wheel.limits))
        self.input = InputStateMachine(self.channel, self.wheel)

        self._listener: Optional[ValueListener] = None
        self._render_loop: Optional[RenderLoop] = None
        self._init_error: Optional[RenderInitError] = None
        self._image: Optional[QImage] = None
        self._last_pos = QPointF(0.0, 0.0)

        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def value(self) -> float:
        """The last value published by the render loop, ratio applied."""
        return self.channel.published.external

    def set_value(self, value: float) -> None:
        limits = self.wheel.limits
        internal = limits.to_internal(value)
        if self.is_rendering():
            self.channel.value.post(ValueRequest(value=float(value)))
        else:
            self.channel.published = PublishedValue(MotionModel.bound(internal, limits), limits)

    def set_range(self, minimum: float, maximum: float) -> None:
        self.wheel.set_range(minimum, maximum)
        self._settle_idle_value()

    def set_ratio(self, ratio: float) -> None:
        """Change the display ratio. The external range and value are kept."""
        self.wheel.set_ratio(ratio)
        self._settle_idle_value()

    def set_orientation(self, orientation: Any) -> None:
        self.wheel.set_orientation(orientation)
        self.updateGeometry()

    def set_boundary_mode(self, mode: Any) -> None:
        self.wheel.set_boundary_mode(mode)
        self._settle_idle_value()

    def set_on_value_changed_listener(self, listener: Optional[ValueListener]) -> None:
        self._listener = listener
        if self._render_loop is not None:
            self._render_loop.listener = listener

    def is_rendering(self) -> bool:
        return self._render_loop is not None and self._render_loop.isRunning()

    def render_error(self) -> Optional[RenderInitError]:
        """The error graphics initialization failed with, if it did."""
        return self._init_error

    # ------------------------------------------------------------------------------
    # Surface lifecycle
    # ------------------------------------------------------------------------------

    def surface_available(self, width: int, height: int) -> None:
        """
        Start rendering on a surface of the given size.

        A failed initialization is final for this widget: later surfaces are
        ignored and the wheel stays blank.

        Raises:
            RenderInitError: If the graphics context could not be created.
        """
        if self._render_loop is not None:
            return
        if self._init_error is not None:
            logger.debug("Graphics initialization failed earlier, not retrying.")
            return
        logger.info(f"Surface available ({width}x{height}), starting render loop.")

        loop = RenderLoop(
            wheel=self.wheel,
            channel=self.channel,
            backend_factory=self.backend_factory,
            materials=self.materials,
            listener=self._listener,
            source=self,
            mesh=self.mesh,
        )
        loop.frame_ready.connect(self._on_frame_ready)
        loop.value_changed.connect(self.value_changed)
        loop.error_occurred.connect(self._on_render_error)

        self._render_loop = loop
        try:
            loop.start_rendering(width, height)
        except RenderInitError as e:
            self._render_loop = None
            self._init_error = e
            raise
        except Exception:
            self._render_loop = None
            raise

    def surface_size_changed(self, width: int, height: int) -> None:
        logger.debug(f"Surface size changed ({width}x{height}).")
        if self._render_loop is not None:
            self._render_loop.resize(width, height)

    def surface_destroyed(self) -> None:
        if self._render_loop is None:
            return
        logger.info("Surface destroyed, stopping render loop.")
        loop = self._render_loop
        self._render_loop = None
        loop.stop_rendering()

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def sizeHint(self) -> QSize:
        long_side = config.DEFAULT_WHEEL_DIAMETER
        short_side = int(config.WHEEL_THICKNESS_RATIO * long_side)
        if self.wheel.orientation == Orientation.HORIZONTAL:
            return QSize(long_side, short_side)
        return QSize(short_side, long_side)

    def showEvent(self, event: QShowEvent) -> None:
        super().showEvent(event)
        if self.width() > 0 and self.height() > 0:
            self._open_surface(self.width(), self.height())

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        size = event.size()
        if self._render_loop is None:
            if self.isVisible() and size.width() > 0 and size.height() > 0:
                self._open_surface(size.width(), size.height())
        else:
            self.surface_size_changed(size.width(), size.height())

    def hideEvent(self, event: QHideEvent) -> None:
        self.surface_destroyed()
        super().hideEvent(event)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.surface_destroyed()
        super().closeEvent(event)

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        if self._image is None:
            painter.fillRect(self.rect(), Qt.GlobalColor.black)
        else:
            painter.drawImage(self.rect(), self._image)
        painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        self._pointer(PointerAction.DOWN, event.position())
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() & Qt.MouseButton.LeftButton:
            self._pointer(PointerAction.MOVE, event.position())
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._pointer(PointerAction.UP, event.position())
        event.accept()

    def event(self, event: QEvent) -> bool:
        if event.type() == QEvent.Type.TouchCancel:
            self._pointer(PointerAction.CANCEL, self._last_pos)
            return True
        return super().event(event)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _open_surface(self, width: int, height: int) -> None:
        """surface_available() for Qt event handlers, which must not raise."""
        if self._init_error is not None:
            return
        try:
            self.surface_available(width, height)
        except RenderInitError as e:
            # Already logged and reported through error_occurred by the loop
            logger.debug(f"Rendering disabled for this wheel: {e}")

    def _settle_idle_value(self) -> None:
        """
        Re-bound the published value after a limits change. A running loop
        does this itself on its next iteration.
        """
        if self.is_rendering():
            return
        published = self.channel.published
        limits = self.wheel.limits
        value = MotionModel.bound(limits.rebase(published.value, published.limits), limits)
        self.channel.published = PublishedValue(value, limits)

    def _pointer(self, action: PointerAction, pos: QPointF) -> None:
        self._last_pos = QPointF(pos)
        if self._render_loop is None:
            return
        self.input.on_pointer(action, pos.x(), pos.y())

    @Slot(object)
    def _on_frame_ready(self, frame: Any) -> None:
        self._image = frame_to_image(frame)
        self.update()

    @Slot(str)
    def _on_render_error(self, message: str) -> None:
        logger.error(f"Render loop reported an error: {message}")
        self.error_occurred.emit(message)
