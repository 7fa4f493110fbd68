"""Wheel orientation and boundary policy enums."""
from __future__ import annotations

from enum import StrEnum
from typing import Any


class _WheelEnum(StrEnum):
    """
    StrEnum that also accepts the legacy integer codes (0/1) and
    case-insensitive names when parsing host-supplied settings.
    """

    @classmethod
    def from_any(cls, value: Any):
        if isinstance(value, cls):
            return value
        members = list(cls)
        # bool is an int subclass but never a valid code here
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < len(members):
                return members[value]
        elif isinstance(value, str):
            key = value.strip().lower()
            for member in members:
                if key in (member.value, member.name.lower()):
                    return member
        raise ValueError(f"Unsupported {cls.__name__} value: {value!r}")


class Orientation(_WheelEnum):
    """Axis along which the wheel is dragged."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class BoundaryMode(_WheelEnum):
    """What happens when the value reaches the end of its range."""
    REPEAT = "repeat"
    CLAMP = "clamp"
