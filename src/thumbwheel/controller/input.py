"""
Input State Machine
===================
Turns pointer down/move/up/cancel events into motion-model drive signals.

The machine is split across the two threads:

* ``on_pointer`` runs on the GUI thread. It projects the pointer onto the
  active axis and posts a ``PointerRequest``; it never touches the state.
* ``advance`` runs on the render thread at the top of every iteration. It
  executes the requested transition on the ``MotionState`` and reports
  whether a frame must be drawn.

Transitions::

    DOWN   -> TOUCHED  -> IDLE       (remember drag start)
    MOVE   -> DRAGGED  -> IDLE       (delta from last sample, redraw)
    UP     -> RELEASED -> IN_MOTION  (clamp delta into launch velocity)
    CANCEL -> IDLE
    IN_MOTION -> IN_MOTION (decay, redraw) | IDLE (below threshold)
"""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Optional

from thumbwheel.controller.channel import MotionChannel, PointerRequest
from thumbwheel.model.enums import Orientation
from thumbwheel.model.motion import MotionModel, MotionState, Phase
from thumbwheel.model.wheel import WheelConfiguration

logger = logging.getLogger(__name__)


class PointerAction(StrEnum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


_ACTION_TO_PHASE = {
    PointerAction.DOWN: Phase.TOUCHED,
    PointerAction.MOVE: Phase.DRAGGED,
    PointerAction.UP: Phase.RELEASED,
    PointerAction.CANCEL: Phase.IDLE,
}


class InputStateMachine:
    def __init__(self, channel: MotionChannel, wheel: WheelConfiguration) -> None:
        self.channel = channel
        self.wheel = wheel

    # ------------------------------------------------------------------------------
    # GUI thread
    # ------------------------------------------------------------------------------

    def on_pointer(self, action: PointerAction, x: float, y: float) -> PointerRequest:
        """Post the transition requested by a pointer event."""
        phase = _ACTION_TO_PHASE.get(PointerAction(action), Phase.IDLE)
        coordinate = MotionModel.axis_coordinate(x, y, self.wheel.orientation)
        request = PointerRequest(phase=phase, coordinate=coordinate)
        self.channel.pointer.post(request)
        return request

    # ------------------------------------------------------------------------------
    # Render thread
    # ------------------------------------------------------------------------------

    @staticmethod
    def advance(
        state: MotionState,
        request: Optional[PointerRequest],
        extent: float
    ) -> bool:
        """
        Execute one transition. ``request`` is the pointer request taken from
        the channel this iteration (None if there was none); ``extent`` is the
        widget size along the active axis in pixels.

        Returns True when the caller must draw a frame.
        """
        if request is not None:
            state.phase = request.phase

            if request.phase == Phase.TOUCHED:
                state.last = request.coordinate
                state.phase = Phase.IDLE
                return False

            if request.phase == Phase.DRAGGED:
                state.delta = MotionModel.drag_delta(state.last, request.coordinate, extent)
                state.last = request.coordinate
                state.phase = Phase.IDLE
                return True

            if request.phase == Phase.RELEASED:
                state.delta = MotionModel.launch_velocity(state.delta)
                state.phase = Phase.IN_MOTION
                logger.debug(
                    f"Wheel released at {state.delta:.2f} deg/frame "
                    f"({MotionModel.frames_to_rest(state.delta)} frames to rest)."
                )
                return False

            state.phase = Phase.IDLE
            return False

        if state.phase == Phase.IN_MOTION:
            if MotionModel.is_coasting(state.delta):
                state.delta = MotionModel.decay(state.delta)
                return True
            state.phase = Phase.IDLE

        return False

    @staticmethod
    def active_extent(orientation: Orientation, width: int, height: int) -> int:
        return width if orientation == Orientation.HORIZONTAL else height
