"""
Cross-Thread Handoff
====================
Lock-free communication between the GUI thread and the render thread.

Why is this file needed?
------------------------
1. Safety: The render thread owns the motion state and the graphics context.
   The GUI thread must never touch either, and neither side may block the
   other. Everything that crosses the boundary goes through this module.
2. Atomicity: Each request is an immutable object published by rebinding a
   single attribute. A reader therefore sees either the old request or the
   new one, never a mix of both (e.g. a new phase with a stale coordinate).

Classes:
    Mailbox: Latest-value slot for one producer and one consumer.
    PointerRequest / ValueRequest / SizeRequest: Immutable messages.
    PublishedValue: The last presented value with the limits it is in.
    MotionChannel: The set of mailboxes shared by one widget and its loop.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from thumbwheel.model.motion import Phase
from thumbwheel.model.wheel import WheelLimits

T = TypeVar("T")


class Mailbox(Generic[T]):
    """
    Single-producer / single-consumer slot holding the most recent item.

    The producer only rebinds ``_item``; the consumer only rebinds ``_seen``.
    ``take()`` returns an item at most once; an item superseded before the
    consumer looked at it is dropped.
    """

    def __init__(self) -> None:
        self._item: Optional[T] = None
        self._seen: Optional[T] = None

    def post(self, item: T) -> None:
        self._item = item

    def take(self) -> Optional[T]:
        item = self._item
        if item is None or item is self._seen:
            return None
        self._seen = item
        return item

    def pending(self) -> bool:
        item = self._item
        return item is not None and item is not self._seen


@dataclass(frozen=True, eq=False)
class PointerRequest:
    """A phase transition requested by a pointer event."""
    phase: Phase
    coordinate: float


@dataclass(frozen=True, eq=False)
class ValueRequest:
    """A value set by the host, in external units (ratio applied)."""
    value: float


@dataclass(frozen=True, eq=False)
class SizeRequest:
    width: int
    height: int


@dataclass(frozen=True)
class PublishedValue:
    """An internal value together with the limits it is expressed in."""
    value: float = 0.0
    limits: WheelLimits = field(default_factory=WheelLimits)

    @property
    def external(self) -> float:
        return self.limits.to_external(self.value)


@dataclass
class MotionChannel:
    """
    Everything shared between a widget (GUI thread) and its render loop.

    ``published`` is written by the render thread while it runs, and by the
    widget only while no loop is running. It is replaced as a whole, so a
    reader never pairs a value with the wrong ratio.
    """
    pointer: Mailbox[PointerRequest] = field(default_factory=Mailbox)
    value: Mailbox[ValueRequest] = field(default_factory=Mailbox)
    size: Mailbox[SizeRequest] = field(default_factory=Mailbox)
    published: PublishedValue = field(default_factory=PublishedValue)

    @property
    def published_value(self) -> float:
        return self.published.value
