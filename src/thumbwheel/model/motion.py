"""
Motion Model (Wheel Physics)
============================
Converts pointer displacement into angular velocity, applies inertial decay
and maps the accumulated rotation onto a bounded value.

Why is this file needed?
------------------------
1. Physics: Drag speed, launch clamp and decay are pure arithmetic and are
   kept free of threading and rendering so they can be tested in isolation.
2. Ownership: ``MotionState`` is the render loop's private state. Only the
   render thread mutates it; the GUI thread talks to it through
   ``thumbwheel.controller.channel``.

Classes:
    Phase: Interaction phase of the wheel.
    MotionState: Rotation, value and velocity of one wheel.
    MotionModel: Stateless functions operating on a MotionState.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import IntEnum

from thumbwheel import config
from thumbwheel.model.enums import BoundaryMode, Orientation
from thumbwheel.model.wheel import WheelLimits

logger = logging.getLogger(__name__)


class Phase(IntEnum):
    """Interaction phase. TOUCHED, DRAGGED and RELEASED are transient."""
    IDLE = 0
    TOUCHED = 1
    DRAGGED = 2
    RELEASED = 3
    IN_MOTION = 4


@dataclass
class MotionState:
    """Mutable wheel state, owned by the render thread."""
    rotation: float = 0.0  # degrees, unbounded
    value: float = 0.0  # internal units
    last: float = 0.0  # last pointer coordinate along the active axis
    delta: float = 0.0  # degrees per frame
    phase: Phase = Phase.IDLE


def repeat_value(x: float, minimum: float, maximum: float) -> float:
    """
    Snap ``x`` to the opposite end of [minimum, maximum) once it leaves the
    range. The overshoot is discarded, however large it was.
    """
    if maximum <= minimum:
        return minimum
    if x >= maximum:
        return minimum
    if x < minimum:
        # Largest value still inside the half-open range
        return math.nextafter(maximum, minimum)
    return x


def clamp_value(x: float, minimum: float, maximum: float) -> float:
    return maximum if x > maximum else minimum if x < minimum else x


class MotionModel:
    """
    The wheel's physics. All methods are static: the state they operate on
    is passed in explicitly, so one model serves every wheel.
    """

    @staticmethod
    def axis_coordinate(x: float, y: float, orientation: Orientation) -> float:
        """
        Project a pointer position onto the active axis. Horizontal drags are
        sign-flipped so that dragging right spins the front face right.
        """
        if orientation == Orientation.HORIZONTAL:
            return -float(x)
        return float(y)

    @staticmethod
    def drag_delta(previous: float, current: float, extent: float) -> float:
        """Per-frame delta for a pointer displacement over ``extent`` pixels."""
        if extent <= 0:
            return 0.0
        return config.DRAG_GAIN * (previous - current) / extent

    @staticmethod
    def launch_velocity(delta: float) -> float:
        """Clamp the last drag delta into the free-spin speed limit."""
        limit = config.MAX_LAUNCH_DELTA
        return min(max(delta, -limit), limit)

    @staticmethod
    def is_coasting(delta: float) -> bool:
        return abs(delta) > config.STOP_THRESHOLD

    @staticmethod
    def decay(delta: float) -> float:
        return delta * config.DECAY_FACTOR

    @staticmethod
    def bound(value: float, limits: WheelLimits) -> float:
        """Map an arbitrary value into range with the boundary policy of ``limits``."""
        if limits.boundary_mode == BoundaryMode.REPEAT:
            return repeat_value(value, limits.min_value, limits.max_value)
        return clamp_value(value, limits.min_value, limits.max_value)

    @staticmethod
    def advance(state: MotionState, limits: WheelLimits) -> None:
        """
        Apply one frame of ``state.delta`` to the value and rotation.

        REPEAT wraps the value and keeps accumulating rotation.
        CLAMP stops at the bounds and bounces: touching a bound inverts
        the delta instead of rotating further.
        """
        minimum, maximum = limits.min_value, limits.max_value
        target = state.value + config.VALUE_RESOLUTION_FACTOR * state.delta

        if limits.boundary_mode == BoundaryMode.REPEAT:
            state.value = repeat_value(target, minimum, maximum)
            state.rotation += state.delta
        else:
            state.value = clamp_value(target, minimum, maximum)
            if state.value == maximum or state.value == minimum:
                state.delta = -state.delta
            else:
                state.rotation += state.delta

    @staticmethod
    def frames_to_rest(delta: float) -> int:
        """Number of decay frames a launch of ``delta`` coasts for."""
        frames = 0
        while MotionModel.is_coasting(delta):
            delta = MotionModel.decay(delta)
            frames += 1
        return frames
