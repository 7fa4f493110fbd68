"""
Wheel Geometry (Procedural Mesh)
================================
Generates the vertex + normal mesh of the thumbwheel and the model transform
applied to it every frame.

The wheel is a ring of 16 bevelled teeth. Each segment contributes one quad
to the inner ring (the tooth face) and six quads to the outer ring (two rims,
two horizontal bevels and two side bevels). Every triangle has its own three
vertices, so per-face normals can be stored per vertex.

Layout (rows of 6 float32 values: x, y, z, nx, ny, nz):
    [0, 96)    inner ring, 6 rows per segment
    [96, 672)  outer ring, 36 rows per segment
"""
from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from thumbwheel.model.enums import Orientation

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------------------
SEGMENTS: int = 16
SEGMENT_ANGLE: float = math.pi / 8.0  # 16 segments around the full circle

BEVEL_DEPTH: float = 0.15  # d
INNER_RADIUS_RATIO: float = 0.97  # r
OUTER_RADIUS_RATIO: float = 0.95  # t
SCALE: float = 0.97  # f

SIDE_BEVEL_TILT: float = 0.5  # radians

INNER_VERTICES_PER_SEGMENT: int = 6
OUTER_VERTICES_PER_SEGMENT: int = 36
INNER_VERTEX_COUNT: int = SEGMENTS * INNER_VERTICES_PER_SEGMENT  # 96
OUTER_VERTEX_COUNT: int = SEGMENTS * OUTER_VERTICES_PER_SEGMENT  # 576
VERTEX_COUNT: int = INNER_VERTEX_COUNT + OUTER_VERTEX_COUNT  # 672
STRIDE: int = 6

INNER_RING: slice = slice(0, INNER_VERTEX_COUNT)
OUTER_RING: slice = slice(INNER_VERTEX_COUNT, VERTEX_COUNT)


# ------------------------------------------------------------------------------
# Data Structures
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class WheelMesh:
    """
    Immutable interleaved vertex/normal buffer.
    ``data`` has shape (672, 6) and dtype float32; it is flagged read-only.
    """
    data: npt.NDArray[np.float32]

    @property
    def vertex_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def positions(self) -> npt.NDArray[np.float32]:
        return self.data[:, :3]

    @property
    def normals(self) -> npt.NDArray[np.float32]:
        return self.data[:, 3:]

    @property
    def inner(self) -> npt.NDArray[np.float32]:
        """Rows of the inner ring, drawn second."""
        return self.data[INNER_RING]

    @property
    def outer(self) -> npt.NDArray[np.float32]:
        """Rows of the outer ring, drawn first."""
        return self.data[OUTER_RING]

    def as_buffer(self) -> bytes:
        """Flat native-endian float32 bytes, stride 6 floats per vertex."""
        return np.ascontiguousarray(self.data, dtype=np.float32).tobytes()


# ------------------------------------------------------------------------------
# Mesh generation
# ------------------------------------------------------------------------------
def build_mesh() -> WheelMesh:
    """
    Compute the wheel geometry including vertex normals.

    Pure and deterministic. Normals are left at their designed (non-unit)
    length; the renderer normalizes them.
    """
    buf = np.zeros((VERTEX_COUNT, STRIDE), dtype=np.float32)

    d, r, t, f = BEVEL_DEPTH, INNER_RADIUS_RATIO, OUTER_RADIUS_RATIO, SCALE
    y1 = t - d
    y11 = y1 - d

    for n in range(SEGMENTS):
        x1 = f * math.cos(n * SEGMENT_ANGLE)
        z1 = f * math.sin(n * SEGMENT_ANGLE)
        x2 = f * math.cos((n + 1) * SEGMENT_ANGLE)
        z2 = f * math.sin((n + 1) * SEGMENT_ANGLE)
        x11 = f * r * math.cos((n + d) * SEGMENT_ANGLE)
        z11 = f * r * math.sin((n + d) * SEGMENT_ANGLE)
        x22 = f * r * math.cos((n + t - d) * SEGMENT_ANGLE)
        z22 = f * r * math.sin((n + t - d) * SEGMENT_ANGLE)

        # --- Inner ring: tooth face ---
        n11 = (x11, 0.0, z11)
        n22 = (x22, 0.0, z22)
        inner = [
            ((x11, -y11, z11), n11),
            ((x11, y11, z11), n11),
            ((x22, -y11, z22), n22),
            ((x11, y11, z11), n11),
            ((x22, y11, z22), n22),
            ((x22, -y11, z22), n22),
        ]

        # --- Outer ring ---
        lower = (x1, 1.0, z1)
        upper = (x1, -1.0, z1)
        lead = (math.cos(n * SEGMENT_ANGLE + SIDE_BEVEL_TILT), 0.0, math.sin(n * SEGMENT_ANGLE + SIDE_BEVEL_TILT))
        trail = (math.cos(n * SEGMENT_ANGLE - SIDE_BEVEL_TILT), 0.0, math.sin(n * SEGMENT_ANGLE - SIDE_BEVEL_TILT))
        rim1 = (x1, 0.0, z1)
        rim2 = (x2, 0.0, z2)

        outer = [
            # Lower bevel
            ((x1, -y1, z1), lower),
            ((x11, -y11, z11), lower),
            ((x2, -y1, z2), lower),
            ((x11, -y11, z11), lower),
            ((x22, -y11, z22), lower),
            ((x2, -y1, z2), lower),
            # Upper bevel
            ((x11, y11, z11), upper),
            ((x1, y1, z1), upper),
            ((x22, y11, z22), upper),
            ((x1, y1, z1), upper),
            ((x2, y1, z2), upper),
            ((x22, y11, z22), upper),
            # Leading side bevel
            ((x1, -y1, z1), lead),
            ((x1, y1, z1), lead),
            ((x11, -y11, z11), lead),
            ((x1, y1, z1), lead),
            ((x11, y11, z11), lead),
            ((x11, -y11, z11), lead),
            # Trailing side bevel
            ((x2, -y1, z2), trail),
            ((x22, -y11, z22), trail),
            ((x2, y1, z2), trail),
            ((x22, -y11, z22), trail),
            ((x22, y11, z22), trail),
            ((x2, y1, z2), trail),
            # Upper rim
            ((x1, y1, z1), rim1),
            ((x1, t, z1), rim1),
            ((x2, y1, z2), rim2),
            ((x1, t, z1), rim1),
            ((x2, t, z2), rim2),
            ((x2, y1, z2), rim2),
            # Lower rim
            ((x1, -t, z1), rim1),
            ((x1, -y1, z1), rim1),
            ((x2, -t, z2), rim2),
            ((x1, -y1, z1), rim1),
            ((x2, -y1, z2), rim2),
            ((x2, -t, z2), rim2),
        ]

        i0 = n * INNER_VERTICES_PER_SEGMENT
        buf[i0:i0 + INNER_VERTICES_PER_SEGMENT] = [p + nrm for p, nrm in inner]
        o0 = INNER_VERTEX_COUNT + n * OUTER_VERTICES_PER_SEGMENT
        buf[o0:o0 + OUTER_VERTICES_PER_SEGMENT] = [p + nrm for p, nrm in outer]

    buf.flags.writeable = False
    return WheelMesh(data=buf)


@functools.cache
def shared_mesh() -> WheelMesh:
    """The process-wide mesh. Built on first use and shared by every wheel."""
    mesh = build_mesh()
    logger.debug(f"Wheel mesh built: {mesh.vertex_count} vertices.")
    return mesh


# ------------------------------------------------------------------------------
# Transforms
# ------------------------------------------------------------------------------
def rotation_y(angle_deg: float) -> npt.NDArray[np.float64]:
    """4x4 rotation about the vertical (Y) axis."""
    a = math.radians(angle_deg)
    c, s = math.cos(a), math.sin(a)
    return np.array([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rotation_z(angle_deg: float) -> npt.NDArray[np.float64]:
    """4x4 rotation about the view (Z) axis."""
    a = math.radians(angle_deg)
    c, s = math.cos(a), math.sin(a)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def wheel_transform(
    rotation_deg: float,
    orientation: Orientation,
    aspect: float = 1.0
) -> npt.NDArray[np.float64]:
    """
    Model matrix for one frame.

    The wheel spins about Y by the accumulated rotation. A vertical wheel is
    additionally turned 90 degrees about Z, applied after the spin. ``aspect``
    (width / height) stretches X so the [-1, 1] box fills the viewport.
    """
    m = rotation_y(rotation_deg)
    if orientation == Orientation.VERTICAL:
        m = rotation_z(90.0) @ m
    scale = np.diag([float(aspect), 1.0, 1.0, 1.0])
    return scale @ m
