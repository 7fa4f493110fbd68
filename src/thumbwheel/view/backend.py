"""
Render Backend Interface
========================
What the render loop needs from a 3D API, and nothing more.

Why is this file needed?
------------------------
The render loop is agnostic to the graphics library. A backend must be able
to load the vertex+normal buffer, set one light, draw the two ring batches
with their own materials and present the frame. All methods are called from
the render thread only: a backend instance, and the graphics context it
owns, never crosses threads.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, TYPE_CHECKING

from thumbwheel.model.geometry import WheelMesh
from thumbwheel.model.materials import MaterialScheme

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt


class RenderInitError(RuntimeError):
    """The graphics context or surface could not be created."""


class RenderBackend(ABC):

    @abstractmethod
    def open(self, width: int, height: int, mesh: WheelMesh, materials: MaterialScheme) -> None:
        """
        Acquire the context and surface, upload the mesh, configure the light,
        the materials, depth test, back-face culling and smooth shading.

        Raises:
            RenderInitError: If any of the above fails.
        """

    @abstractmethod
    def resize(self, width: int, height: int) -> None:
        """Viewport/projection change. The mesh is kept."""

    @abstractmethod
    def draw(self, model_matrix: npt.NDArray[np.float64]) -> Any:
        """
        Clear, draw the outer ring then the inner ring transformed by
        ``model_matrix`` and present. Returns the presented frame.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the context and surface. Safe to call more than once."""


BackendFactory = Callable[[], RenderBackend]
