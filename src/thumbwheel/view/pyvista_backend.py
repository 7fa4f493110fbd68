"""
PyVista Render Backend
======================
Off-screen VTK rendering of the wheel, driven from the render thread.

Why is this file needed?
------------------------
The render loop owns its graphics context exclusively. An off-screen
``pv.Plotter`` created inside the render thread gives us exactly that: the
VTK render window lives and dies in that thread, and every presented frame is
handed over to the GUI thread as a plain RGB array.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import numpy.typing as npt
import pyvista as pv

from thumbwheel import config
from thumbwheel.model.geometry import WheelMesh
from thumbwheel.model.materials import Material, MaterialScheme
from thumbwheel.view.backend import RenderBackend, RenderInitError

logger = logging.getLogger(__name__)

CAMERA_DISTANCE: float = 5.0


def _ring_polydata(rows: npt.NDArray[np.float32]) -> pv.PolyData:
    """
    Build a triangle soup from interleaved (position, normal) rows.
    Normals are normalized here; the mesh keeps its designed lengths.
    """
    points = np.asarray(rows[:, :3], dtype=np.float32)
    normals = np.asarray(rows[:, 3:], dtype=np.float32)
    normals = normals / np.linalg.norm(normals, axis=1, keepdims=True)

    n_tri = points.shape[0] // 3
    faces = np.column_stack([
        np.full(n_tri, 3, dtype=np.int64),
        np.arange(points.shape[0], dtype=np.int64).reshape(n_tri, 3),
    ]).ravel()

    poly = pv.PolyData(points, faces)
    poly.point_data.active_normals = normals
    return poly


class PyVistaBackend(RenderBackend):
    def __init__(self) -> None:
        self.plotter: Optional[pv.Plotter] = None
        self._outer_actor: Optional[pv.Actor] = None
        self._inner_actor: Optional[pv.Actor] = None

    # ------------------------------------------------------------------------------
    # RenderBackend
    # ------------------------------------------------------------------------------

    def open(self, width: int, height: int, mesh: WheelMesh, materials: MaterialScheme) -> None:
        try:
            self.plotter = pv.Plotter(off_screen=True, window_size=[max(1, width), max(1, height)])
            self.plotter.set_background(config.BACKGROUND_COLOR)
            self._init_camera()
            self._init_light()

            # Draw order follows insertion order: outer ring first
            self._outer_actor = self._add_ring(mesh.outer, materials.outer)
            self._inner_actor = self._add_ring(mesh.inner, materials.inner)
        except Exception as e:
            self.close()
            raise RenderInitError(f"Failed to initialize the PyVista render context: {e}") from e

        logger.info(f"PyVista context opened ({width}x{height}).")

    def resize(self, width: int, height: int) -> None:
        if self.plotter is None:
            return
        self.plotter.window_size = [max(1, width), max(1, height)]

    def draw(self, model_matrix: npt.NDArray[np.float64]) -> npt.NDArray[np.uint8]:
        if self.plotter is None:
            raise RuntimeError("Backend is not open.")
        self._outer_actor.user_matrix = model_matrix
        self._inner_actor.user_matrix = model_matrix
        self.plotter.render()
        return self.plotter.screenshot(return_img=True)

    def close(self) -> None:
        if self.plotter is not None:
            self.plotter.close()
            logger.info("PyVista context closed.")
        self.plotter = None
        self._outer_actor = None
        self._inner_actor = None

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _init_camera(self) -> None:
        """Orthographic view of the [-1, 1] box, looking down -Z."""
        self.plotter.enable_parallel_projection()
        self.plotter.camera_position = [
            (0.0, 0.0, CAMERA_DISTANCE),
            (0.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
        ]
        self.plotter.camera.parallel_scale = 1.0

    def _init_light(self) -> None:
        """Single directional light shining along -Z."""
        self.plotter.remove_all_lights()
        light = pv.Light(
            position=config.LIGHT_POSITION,
            focal_point=(0.0, 0.0, 0.0),
            light_type="scene light",
        )
        light.positional = False
        light.diffuse_color = config.LIGHT_DIFFUSE
        light.specular_color = config.LIGHT_SPECULAR
        self.plotter.add_light(light)

    def _add_ring(self, rows: npt.NDArray[np.float32], material: Material) -> pv.Actor:
        actor = self.plotter.add_mesh(
            _ring_polydata(rows),
            color=material.diffuse,
            ambient=0.0,
            diffuse=1.0,
            specular=1.0,
            specular_power=config.MATERIAL_SHININESS,
            culling="back",
            show_scalar_bar=False,
        )
        actor.prop.specular_color = material.specular
        # Use the supplied per-vertex normals instead of flat face normals
        actor.prop.interpolation = "Gouraud"
        return actor
