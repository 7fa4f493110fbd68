"""
Background Render Loop (Threading)
==================================
This module contains the QThread that animates and draws one wheel.

Why is this file needed?
------------------------
1. Responsiveness: The wheel keeps spinning after release. Running physics
   and rendering on the GUI thread would stall every other widget, so both
   are pushed to a background thread ticking at 60 FPS.
2. Ownership: Graphics contexts are not safely shared across threads. The
   loop creates its backend inside ``run()`` and releases it there, even if
   it is stopped mid-spin.
3. Signals: Frames and (throttled) values are handed to the GUI thread with
   Qt Signals, which are queued across threads.

Classes:
    FrameThrottle: Countdown that fires once every N frames.
    RenderLoop: The render thread.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from PySide6.QtCore import QThread, Signal

from thumbwheel import config
from thumbwheel.controller.channel import MotionChannel, PublishedValue, SizeRequest
from thumbwheel.controller.input import InputStateMachine
from thumbwheel.model.geometry import WheelMesh, shared_mesh, wheel_transform
from thumbwheel.model.materials import DEFAULT_SCHEME, MaterialScheme
from thumbwheel.model.motion import MotionModel, MotionState, Phase
from thumbwheel.model.wheel import WheelConfiguration, WheelLimits
from thumbwheel.view.backend import BackendFactory, RenderBackend, RenderInitError

logger = logging.getLogger(__name__)

ValueListener = Callable[[Any, float], None]

# Requests that must be followed immediately by the next iteration
_EDGE_PHASES = (Phase.TOUCHED, Phase.DRAGGED, Phase.RELEASED)

# Loops whose start timed out, held until their thread finishes
_abandoned: set[RenderLoop] = set()


class FrameThrottle:
    """Fires on every ``period``-th call to ``tick()``."""

    def __init__(self, period: int = config.NOTIFY_EVERY_N_FRAMES) -> None:
        if period < 1:
            raise ValueError(f"Throttle period must be >= 1, got {period}.")
        self.period = period
        self._countdown = period

    def tick(self) -> bool:
        self._countdown -= 1
        if self._countdown <= 0:
            self._countdown = self.period
            return True
        return False


class RenderLoop(QThread):
    # Signals to update the UI from the background
    frame_ready = Signal(object)  # presented frame, as returned by the backend
    value_changed = Signal(float)  # ratio * internal value, throttled
    error_occurred = Signal(str)

    def __init__(
        self,
        wheel: WheelConfiguration,
        channel: MotionChannel,
        backend_factory: BackendFactory,
        materials: MaterialScheme = DEFAULT_SCHEME,
        listener: Optional[ValueListener] = None,
        source: Any = None,
        mesh: Optional[WheelMesh] = None,
    ) -> None:
        super().__init__()
        self.wheel = wheel
        self.channel = channel
        self.backend_factory = backend_factory
        self.materials = materials
        # Rebound by the widget at any time; read once per notification
        self.listener = listener
        self.source = source
        self.mesh = mesh if mesh is not None else shared_mesh()

        # Owned by the render thread once started. ``limits`` is the snapshot
        # of wheel.limits that state.value is expressed in.
        self.limits: WheelLimits = channel.published.limits
        self.state = MotionState(value=channel.published.value)
        self.throttle = FrameThrottle()
        self.backend: Optional[RenderBackend] = None
        self.width = 0
        self.height = 0

        self.error: Optional[BaseException] = None
        self.is_running = False
        self._stop_event = threading.Event()
        self._ready = threading.Event()

    # ------------------------------------------------------------------------------
    # GUI thread API
    # ------------------------------------------------------------------------------

    def start_rendering(self, width: int, height: int, timeout: float = config.STARTUP_TIMEOUT_S) -> None:
        """
        Start the thread on a surface of the given size.

        Blocks until the backend is open, so that an initialization failure
        reaches the caller instead of leaving a blank surface.

        Raises:
            RenderInitError: If the backend could not be opened.
        """
        self.width, self.height = int(width), int(height)
        self.is_running = True
        self._ready.clear()
        self.start()

        if not self._ready.wait(timeout):
            if not self.stop_rendering(timeout=timeout):
                # Keep the QThread alive until run() returns on its own
                _abandoned.add(self)
                self.finished.connect(lambda: _abandoned.discard(self))
            raise RenderInitError(f"Render thread did not start within {timeout:.1f} s.")
        if self.error is not None:
            self.wait()
            raise self.error

    def stop_rendering(self, timeout: Optional[float] = None) -> bool:
        """
        Signal the loop to stop, interrupt its frame wait and join it.

        Returns False if the thread was still running after ``timeout``
        seconds (None waits indefinitely).
        """
        self.is_running = False
        self.requestInterruption()
        self._stop_event.set()
        if not self.isRunning():
            return True
        if timeout is None:
            return self.wait()
        joined = self.wait(max(0, int(timeout * 1000)))
        if not joined:
            logger.warning(f"Render thread did not stop within {timeout:.1f} s.")
        return joined

    def resize(self, width: int, height: int) -> None:
        self.channel.size.post(SizeRequest(width=int(width), height=int(height)))

    # ------------------------------------------------------------------------------
    # Render thread
    # ------------------------------------------------------------------------------

    def run(self) -> None:
        logger.info("Starting render loop in background thread...")
        try:
            self.backend = self.backend_factory()
            self.backend.open(self.width, self.height, self.mesh, self.materials)
        except Exception as e:
            error = e
            if not isinstance(error, RenderInitError):
                error = RenderInitError(f"Render backend failed to open: {e}")
                error.__cause__ = e
            logger.error(f"Graphics initialization failed: {error}")
            self.error = error
            self.is_running = False
            self._release_backend()
            self.error_occurred.emit(str(error))
            self._ready.set()
            return

        self._ready.set()

        try:
            self._present()
            while self.is_running and not self.isInterruptionRequested():
                if not self.step():
                    # Interrupted by stop_rendering(); the flag is re-checked above
                    self._stop_event.wait(config.FRAME_INTERVAL_S)
        except Exception as e:
            logger.error(f"Error in render loop: {e}")
            self.error = e
            self.error_occurred.emit(str(e))
        finally:
            self.is_running = False
            self._release_backend()
            logger.info("Render loop stopped.")

    def step(self) -> bool:
        """
        One loop iteration: apply pending size/value requests, execute the
        pointer transition and draw if required.

        Returns True when an edge request (touch, drag, release) was consumed,
        in which case the next iteration runs without waiting.
        """
        size = self.channel.size.take()
        if size is not None:
            self._apply_size(size.width, size.height)

        self._sync_limits()

        value = self.channel.value.take()
        if value is not None:
            self.state.value = MotionModel.bound(self.limits.to_internal(value.value), self.limits)
            self._present()
            self._notify()

        request = self.channel.pointer.take()
        was_coasting = self.state.phase == Phase.IN_MOTION
        extent = InputStateMachine.active_extent(self.wheel.orientation, self.width, self.height)

        if InputStateMachine.advance(self.state, request, extent):
            self.draw_frame()

        if was_coasting and self.state.phase == Phase.IDLE:
            # The wheel came to rest: deliver the settled value now
            self._notify()

        return request is not None and request.phase in _EDGE_PHASES

    def draw_frame(self) -> None:
        """Advance the physics by one frame, draw and present."""
        MotionModel.advance(self.state, self.limits)
        self._present()

        if self.throttle.tick():
            self._notify()

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _apply_size(self, width: int, height: int) -> None:
        logger.debug(f"Surface size changed to {width}x{height}.")
        self.width, self.height = width, height
        self.backend.resize(width, height)
        self._present()

    def _sync_limits(self) -> None:
        """
        Pick up a range, ratio or boundary mode change made by the GUI
        thread: keep the external value, bound it, redraw and notify.
        """
        limits = self.wheel.limits
        if limits is self.limits:
            return
        previous, self.limits = self.limits, limits
        self.state.value = MotionModel.bound(limits.rebase(self.state.value, previous), limits)
        logger.debug(f"Limits changed to {limits}, value now {self.state.value:.2f}.")
        self._present()
        self._notify()

    def _present(self) -> None:
        """Draw the current state without advancing the physics."""
        aspect = self.width / self.height if self.height > 0 else 1.0
        matrix = wheel_transform(self.state.rotation, self.wheel.orientation, aspect)
        frame = self.backend.draw(matrix)

        self.channel.published = PublishedValue(value=self.state.value, limits=self.limits)
        self.frame_ready.emit(frame)

    def _notify(self) -> None:
        value = self.limits.to_external(self.state.value)
        listener = self.listener
        if listener is not None:
            listener(self.source, value)
        self.value_changed.emit(value)

    def _release_backend(self) -> None:
        if self.backend is not None:
            self.backend.close()
            self.backend = None
