import threading
import time

import numpy as np
import pytest

from conftest import RecordingBackend
from thumbwheel.controller.channel import MotionChannel, PointerRequest, PublishedValue, SizeRequest, ValueRequest
from thumbwheel.controller.render_loop import FrameThrottle, RenderLoop
from thumbwheel.model.enums import BoundaryMode
from thumbwheel.model.motion import MotionModel, Phase
from thumbwheel.model.wheel import WheelConfiguration
from thumbwheel.view.backend import RenderInitError


@pytest.fixture
def wheel():
    return WheelConfiguration(min_value=0.0, max_value=100.0)


@pytest.fixture
def loop(qapp, wheel, recording_backend):
    """A loop driven synchronously through step(), without its thread."""
    channel = MotionChannel(published=PublishedValue(50.0, wheel.limits))
    notified = []
    loop = RenderLoop(
        wheel=wheel,
        channel=channel,
        backend_factory=lambda: recording_backend,
        listener=lambda source, value: notified.append((source, value)),
        source="wheel",
    )
    recording_backend.open(200, 50, loop.mesh, loop.materials)
    loop.backend = recording_backend
    loop.width, loop.height = 200, 50
    loop.notified = notified
    return loop


def post(loop, phase, coordinate=0.0):
    loop.channel.pointer.post(PointerRequest(phase=phase, coordinate=coordinate))


def run_until_idle(loop, limit=200):
    for _ in range(limit):
        loop.step()
        if loop.state.phase == Phase.IDLE:
            return
    raise AssertionError("wheel never came to rest")


# ------------------------------------------------------------------------------
# Throttle
# ------------------------------------------------------------------------------

def test_throttle_fires_every_fifth_tick():
    throttle = FrameThrottle(5)
    fired = [throttle.tick() for _ in range(15)]
    assert [i for i, f in enumerate(fired) if f] == [4, 9, 14]


def test_throttle_rejects_zero_period():
    with pytest.raises(ValueError):
        FrameThrottle(0)


# ------------------------------------------------------------------------------
# Synchronous iterations
# ------------------------------------------------------------------------------

def test_loop_starts_from_published_value(loop):
    assert loop.state.value == 50.0
    assert loop.state.phase == Phase.IDLE


def test_idle_step_draws_nothing(loop, recording_backend):
    assert loop.step() is False
    assert "draw" not in recording_backend.calls


def test_touch_then_drag_draws_one_frame(loop, recording_backend):
    post(loop, Phase.TOUCHED, -50.0)
    assert loop.step() is True
    assert "draw" not in recording_backend.calls

    post(loop, Phase.DRAGGED, -30.0)
    assert loop.step() is True
    assert recording_backend.calls.count("draw") == 1
    assert loop.state.delta == pytest.approx(-10.0)
    assert loop.state.rotation == pytest.approx(-10.0)
    assert loop.channel.published_value == pytest.approx(46.0)


def test_drag_publishes_frames(loop):
    frames = []
    loop.frame_ready.connect(frames.append)
    post(loop, Phase.TOUCHED, 0.0)
    loop.step()
    post(loop, Phase.DRAGGED, 10.0)
    loop.step()
    assert len(frames) == 1
    assert frames[0].shape == (50, 200, 3)


def test_release_coasts_and_flushes_settled_value(loop, recording_backend):
    post(loop, Phase.TOUCHED, 0.0)
    loop.step()
    post(loop, Phase.DRAGGED, 20.0)
    loop.step()
    post(loop, Phase.RELEASED, 20.0)
    assert loop.step() is True
    assert loop.state.phase == Phase.IN_MOTION
    draws_before = recording_backend.calls.count("draw")

    run_until_idle(loop)

    coasted = recording_backend.calls.count("draw") - draws_before
    assert coasted == MotionModel.frames_to_rest(-10.0)
    # Last notification carries the value the wheel came to rest at
    assert loop.notified[-1] == ("wheel", pytest.approx(loop.channel.published_value))
    assert abs(loop.state.delta) <= 0.1


def test_value_notifications_are_throttled(loop):
    loop.state.phase = Phase.IN_MOTION
    loop.state.delta = 80.0
    for _ in range(12):
        loop.step()
    assert loop.state.phase == Phase.IN_MOTION
    assert len(loop.notified) == 2


def test_value_request_is_bounded_and_notified(loop, wheel):
    wheel.set_boundary_mode(BoundaryMode.CLAMP)
    wheel.set_ratio(2.0)
    values = []
    loop.value_changed.connect(values.append)

    # External units: 260 is internal 130, internal range is now [0, 50]
    loop.channel.value.post(ValueRequest(value=260.0))
    loop.step()

    assert loop.state.value == 50.0
    assert loop.channel.published_value == 50.0
    # The ratio change is reported first, with the external value kept
    assert loop.notified == [("wheel", 50.0), ("wheel", 100.0)]
    assert values == [50.0, 100.0]


def test_range_change_rebounds_an_idle_wheel(loop, wheel, recording_backend):
    wheel.set_boundary_mode(BoundaryMode.CLAMP)
    wheel.set_range(0.0, 40.0)
    loop.step()

    assert loop.state.value == 40.0
    assert loop.channel.published.external == 40.0
    assert loop.notified == [("wheel", 40.0)]
    assert recording_backend.calls.count("draw") == 1


def test_boundary_mode_change_rebounds_the_value(loop, wheel):
    wheel.set_boundary_mode(BoundaryMode.CLAMP)
    loop.channel.value.post(ValueRequest(value=500.0))
    loop.step()
    assert loop.state.value == 100.0

    # 100 is the excluded end of a REPEAT range
    wheel.set_boundary_mode(BoundaryMode.REPEAT)
    loop.step()
    assert loop.state.value == 0.0


def test_ratio_change_is_applied_together_with_the_value(loop, wheel):
    wheel.set_ratio(0.5)
    loop.step()

    assert loop.state.value == 100.0
    published = loop.channel.published
    assert published.limits is wheel.limits
    assert published.external == 50.0
    assert loop.notified == [("wheel", 50.0)]


def test_coasting_uses_the_limits_of_the_current_frame(loop, wheel):
    loop.state.phase = Phase.IN_MOTION
    loop.state.delta = 80.0
    wheel.set_boundary_mode(BoundaryMode.CLAMP)
    wheel.set_range(0.0, 60.0)
    loop.step()
    # 50 is still in range; one decayed frame of 0.4 * 68 then clamps at 60
    assert loop.state.value == 60.0
    assert loop.state.delta < 0.0


def test_value_request_does_not_spin_the_wheel(loop):
    loop.state.delta = 5.0
    loop.channel.value.post(ValueRequest(value=10.0))
    loop.step()
    assert loop.state.rotation == 0.0
    assert loop.state.value == 10.0


def test_size_request_resizes_backend_and_redraws(loop, recording_backend):
    loop.channel.size.post(SizeRequest(width=400, height=100))
    loop.step()
    assert recording_backend.calls[-2:] == ["resize", "draw"]
    assert recording_backend.size == (400, 100)
    assert (loop.width, loop.height) == (400, 100)
    assert np.allclose(np.diag(recording_backend.matrices[-1]), [4.0, 1.0, 1.0, 1.0])


def test_listener_can_be_rebound_between_frames(loop):
    seen = []
    loop.listener = lambda source, value: seen.append(value)
    loop.channel.value.post(ValueRequest(value=25.0))
    loop.step()
    assert seen == [25.0]


# ------------------------------------------------------------------------------
# Thread lifecycle
# ------------------------------------------------------------------------------

def test_start_and_stop_releases_backend(qapp, wheel):
    backend = RecordingBackend()
    loop = RenderLoop(wheel=wheel, channel=MotionChannel(), backend_factory=lambda: backend)

    loop.start_rendering(120, 30)
    assert loop.isRunning()
    assert backend.size == (120, 30)

    loop.stop_rendering()
    assert not loop.isRunning()
    assert backend.closed
    assert backend.calls[0] == "open"
    assert "draw" in backend.calls
    assert loop.backend is None


def test_stop_interrupts_a_spinning_wheel(qapp, wheel):
    backend = RecordingBackend()
    channel = MotionChannel()
    loop = RenderLoop(wheel=wheel, channel=channel, backend_factory=lambda: backend)
    loop.start_rendering(120, 30)

    channel.pointer.post(PointerRequest(phase=Phase.TOUCHED, coordinate=0.0))
    channel.pointer.post(PointerRequest(phase=Phase.RELEASED, coordinate=0.0))
    loop.stop_rendering()

    assert not loop.isRunning()
    assert backend.closed


def test_failed_initialization_reaches_the_caller(qapp, wheel):
    backend = RecordingBackend(fail_on_open=True)
    loop = RenderLoop(wheel=wheel, channel=MotionChannel(), backend_factory=lambda: backend)

    with pytest.raises(RenderInitError):
        loop.start_rendering(120, 30)
    assert not loop.isRunning()
    assert backend.closed


def test_unexpected_open_error_is_wrapped(qapp, wheel):
    def broken_factory():
        raise OSError("GPU went away")

    loop = RenderLoop(wheel=wheel, channel=MotionChannel(), backend_factory=broken_factory)
    with pytest.raises(RenderInitError) as excinfo:
        loop.start_rendering(120, 30)
    assert isinstance(excinfo.value.__cause__, OSError)


class HangingBackend(RecordingBackend):
    """Backend whose open() blocks until released."""

    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def open(self, width, height, mesh, materials):
        self.release.wait(5.0)
        super().open(width, height, mesh, materials)


def test_start_timeout_does_not_block_the_caller(qapp, wheel):
    backend = HangingBackend()
    loop = RenderLoop(wheel=wheel, channel=MotionChannel(), backend_factory=lambda: backend)

    started = time.monotonic()
    with pytest.raises(RenderInitError):
        loop.start_rendering(120, 30, timeout=0.1)
    assert time.monotonic() - started < 2.0

    # Once open() returns, the abandoned thread stops by itself
    backend.release.set()
    assert loop.wait(5000)
    assert backend.closed
