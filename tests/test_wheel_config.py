import math
import threading

import pytest

from thumbwheel.model.enums import BoundaryMode, Orientation
from thumbwheel.model.wheel import WheelConfiguration, WheelLimits


def test_defaults():
    wheel = WheelConfiguration()
    assert wheel.orientation == Orientation.HORIZONTAL
    assert wheel.boundary_mode == BoundaryMode.REPEAT
    assert (wheel.min_value, wheel.max_value, wheel.ratio) == (0.0, 100.0, 1.0)


@pytest.mark.parametrize("raw, expected", [
    (0, Orientation.HORIZONTAL),
    (1, Orientation.VERTICAL),
    ("vertical", Orientation.VERTICAL),
    ("HORIZONTAL", Orientation.HORIZONTAL),
    (Orientation.VERTICAL, Orientation.VERTICAL),
])
def test_orientation_parsing(raw, expected):
    assert Orientation.from_any(raw) is expected


@pytest.mark.parametrize("raw", [2, -1, "diagonal", None, True, 1.0])
def test_unsupported_orientation_is_rejected(raw):
    with pytest.raises(ValueError):
        Orientation.from_any(raw)


def test_boundary_mode_parsing():
    assert BoundaryMode.from_any(1) is BoundaryMode.CLAMP
    assert BoundaryMode.from_any("Repeat") is BoundaryMode.REPEAT
    with pytest.raises(ValueError):
        BoundaryMode.from_any("bounce")


def test_construction_normalizes_and_validates():
    wheel = WheelConfiguration(orientation=1, boundary_mode="clamp")
    assert wheel.orientation is Orientation.VERTICAL
    assert wheel.boundary_mode is BoundaryMode.CLAMP

    with pytest.raises(ValueError):
        WheelConfiguration(min_value=10.0, max_value=0.0)
    with pytest.raises(ValueError):
        WheelConfiguration(ratio=0.0)
    with pytest.raises(ValueError):
        WheelConfiguration(max_value=math.inf)


def test_set_range_divides_by_ratio():
    wheel = WheelConfiguration(ratio=2.0)
    wheel.set_range(-10.0, 30.0)
    assert (wheel.min_value, wheel.max_value) == (-5.0, 15.0)
    assert wheel.external_range == (-10.0, 30.0)


def test_set_range_rejects_inverted_bounds():
    wheel = WheelConfiguration()
    with pytest.raises(ValueError):
        wheel.set_range(5.0, 1.0)
    assert (wheel.min_value, wheel.max_value) == (0.0, 100.0)


def test_set_ratio_keeps_external_range_stable():
    wheel = WheelConfiguration()
    wheel.set_range(0.0, 50.0)
    wheel.set_ratio(0.5)
    assert wheel.external_range == pytest.approx((0.0, 50.0))
    assert wheel.max_value == pytest.approx(100.0)
    wheel.set_ratio(4.0)
    assert wheel.external_range == pytest.approx((0.0, 50.0))
    assert wheel.max_value == pytest.approx(12.5)


def test_negative_ratio_keeps_internal_bounds_ordered():
    wheel = WheelConfiguration()
    wheel.set_ratio(-1.0)
    assert wheel.min_value <= wheel.max_value
    assert wheel.external_range == pytest.approx((0.0, 100.0))


def test_value_conversion():
    wheel = WheelConfiguration(ratio=0.5)
    assert wheel.to_external(10.0) == 5.0
    assert wheel.to_internal(5.0) == 10.0
    with pytest.raises(ValueError):
        wheel.to_internal(float("nan"))


def test_limits_are_replaced_as_a_whole():
    wheel = WheelConfiguration()
    before = wheel.limits
    wheel.set_range(10.0, 20.0)
    wheel.set_boundary_mode(BoundaryMode.CLAMP)
    assert wheel.limits is not before
    assert (before.min_value, before.max_value, before.boundary_mode) == (0.0, 100.0, BoundaryMode.REPEAT)
    assert wheel.limits == WheelLimits(10.0, 20.0, 1.0, BoundaryMode.CLAMP)


def test_limits_reject_invalid_values():
    with pytest.raises(ValueError):
        WheelLimits(min_value=1.0, max_value=0.0)
    with pytest.raises(ValueError):
        WheelLimits(ratio=0.0)
    with pytest.raises(ValueError):
        WheelLimits(boundary_mode="bounce")


def test_rebase_keeps_external_value():
    old = WheelLimits(ratio=1.0)
    new = WheelLimits(max_value=200.0, ratio=0.5)
    assert new.rebase(30.0, old) == 60.0
    assert new.to_external(new.rebase(30.0, old)) == old.to_external(30.0)


def test_concurrent_reader_never_sees_a_mixed_range():
    wheel = WheelConfiguration()
    allowed = {(0.0, 10.0), (50.0, 100.0)}
    wheel.set_range(0.0, 10.0)
    done = threading.Event()

    def writer():
        for i in range(20000):
            wheel.set_range(*((0.0, 10.0) if i % 2 else (50.0, 100.0)))
            wheel.set_ratio(4.0 if i % 3 else 1.0)
        done.set()

    thread = threading.Thread(target=writer)
    thread.start()
    reads = 0
    while not done.is_set() or reads == 0:
        limits = wheel.limits
        assert limits.min_value <= limits.max_value
        assert limits.external_range in allowed
        reads += 1
    thread.join()
