"""
Wheel Configuration (Data Model)
================================
This module defines the configuration a wheel is operated with.

Why is this file needed?
------------------------
1. Validation: Range, ratio, orientation and boundary mode arrive from the
   host application. Malformed values are rejected here, at the boundary, so
   the render loop never has to second-guess them.
2. Units: The wheel works internally in "internal" units; the host sees
   ``ratio * internal``. This class does the conversion in one place.
3. Consistency: Everything the physics reads (range, ratio, boundary mode)
   lives in one immutable ``WheelLimits`` record. The GUI thread replaces it
   as a whole, so the render thread never sees a new minimum with an old
   maximum.

Classes:
    WheelLimits: Immutable range, ratio and boundary mode.
    WheelConfiguration: Orientation plus the current limits.
"""
from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Any

from thumbwheel import config
from thumbwheel.model.enums import BoundaryMode, Orientation

logger = logging.getLogger(__name__)


def _finite(name: str, value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}.")
    return number


def _checked_ratio(ratio: Any) -> float:
    r = _finite("ratio", ratio)
    if r == 0.0:
        raise ValueError("ratio must be non-zero.")
    return r


@dataclass(frozen=True)
class WheelLimits:
    """
    Range (internal units), display ratio and boundary policy.

    Instances are never mutated: a configuration change builds a new one.
    """
    min_value: float = config.DEFAULT_MIN_VALUE
    max_value: float = config.DEFAULT_MAX_VALUE
    ratio: float = config.DEFAULT_RATIO
    boundary_mode: BoundaryMode = config.DEFAULT_BOUNDARY_MODE

    def __post_init__(self) -> None:
        lo = _finite("min_value", self.min_value)
        hi = _finite("max_value", self.max_value)
        if lo > hi:
            raise ValueError(f"min_value ({lo}) must not exceed max_value ({hi}).")
        object.__setattr__(self, "min_value", lo)
        object.__setattr__(self, "max_value", hi)
        object.__setattr__(self, "ratio", _checked_ratio(self.ratio))
        object.__setattr__(self, "boundary_mode", BoundaryMode.from_any(self.boundary_mode))

    @classmethod
    def from_external(
        cls,
        minimum: float,
        maximum: float,
        ratio: float,
        boundary_mode: BoundaryMode,
    ) -> WheelLimits:
        """Build limits from a range the host sees (``ratio`` applied)."""
        lo = _finite("minimum", minimum)
        hi = _finite("maximum", maximum)
        if lo > hi:
            raise ValueError(f"Range minimum ({lo}) must not exceed maximum ({hi}).")
        r = _checked_ratio(ratio)
        a, b = lo / r, hi / r
        # A negative ratio swaps the internal bounds
        return cls(min(a, b), max(a, b), r, boundary_mode)

    @property
    def external_range(self) -> tuple[float, float]:
        a = self.ratio * self.min_value
        b = self.ratio * self.max_value
        return (a, b) if a <= b else (b, a)

    def to_external(self, value: float) -> float:
        return self.ratio * value

    def to_internal(self, value: float) -> float:
        return _finite("value", value) / self.ratio

    def rebase(self, value: float, previous: WheelLimits) -> float:
        """Convert an internal value of ``previous`` so its external value is kept."""
        if previous.ratio == self.ratio:
            return value
        return previous.ratio * value / self.ratio


class WheelConfiguration:
    """
    Configuration shared between the widget (writer) and the render loop
    (reader). ``orientation`` and ``limits`` are each rebound as a whole;
    the render loop takes one snapshot of ``limits`` per frame.
    """

    def __init__(
        self,
        orientation: Any = config.DEFAULT_ORIENTATION,
        boundary_mode: Any = config.DEFAULT_BOUNDARY_MODE,
        min_value: float = config.DEFAULT_MIN_VALUE,
        max_value: float = config.DEFAULT_MAX_VALUE,
        ratio: float = config.DEFAULT_RATIO,
    ) -> None:
        self.orientation: Orientation = Orientation.from_any(orientation)
        self.limits = WheelLimits(min_value, max_value, ratio, boundary_mode)

    def __repr__(self) -> str:
        return f"WheelConfiguration(orientation={self.orientation!s}, limits={self.limits!r})"

    # ------------------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------------------

    @property
    def min_value(self) -> float:
        return self.limits.min_value

    @property
    def max_value(self) -> float:
        return self.limits.max_value

    @property
    def ratio(self) -> float:
        return self.limits.ratio

    @property
    def boundary_mode(self) -> BoundaryMode:
        return self.limits.boundary_mode

    @property
    def external_range(self) -> tuple[float, float]:
        """The range as the host sees it (``ratio`` applied)."""
        return self.limits.external_range

    def to_external(self, value: float) -> float:
        return self.limits.to_external(value)

    def to_internal(self, value: float) -> float:
        return self.limits.to_internal(value)

    # ------------------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------------------

    def set_range(self, minimum: float, maximum: float) -> None:
        """Set the external range; it is stored divided by the current ratio."""
        current = self.limits
        self.limits = WheelLimits.from_external(minimum, maximum, current.ratio, current.boundary_mode)
        logger.debug(
            f"Range set to [{minimum}, {maximum}] "
            f"(internal [{self.limits.min_value}, {self.limits.max_value}])."
        )

    def set_ratio(self, ratio: float) -> None:
        """Change the display ratio while keeping the external range stable."""
        current = self.limits
        lo, hi = current.external_range
        self.limits = WheelLimits.from_external(lo, hi, ratio, current.boundary_mode)

    def set_orientation(self, orientation: Any) -> None:
        self.orientation = Orientation.from_any(orientation)

    def set_boundary_mode(self, mode: Any) -> None:
        self.limits = dataclasses.replace(self.limits, boundary_mode=BoundaryMode.from_any(mode))
