"""
Surface Materials
=================
Diffuse/specular pairs for the two rings of the wheel.
"""
from __future__ import annotations

from dataclasses import dataclass

RGB = tuple[float, float, float]


@dataclass(frozen=True)
class Material:
    diffuse: RGB
    specular: RGB


@dataclass(frozen=True)
class MaterialScheme:
    """Materials of the inner ring (tooth faces) and the outer ring (rim)."""
    name: str
    inner: Material
    outer: Material


GRAYSCALE = MaterialScheme(
    name="grayscale",
    inner=Material(diffuse=(0.3, 0.3, 0.3), specular=(0.8, 0.8, 0.8)),
    outer=Material(diffuse=(0.5, 0.5, 0.5), specular=(0.1, 0.1, 0.1)),
)

BLUE_RED = MaterialScheme(
    name="blue-red",
    inner=Material(diffuse=(0.4, 0.0, 0.0), specular=(0.6, 0.0, 0.0)),
    outer=Material(diffuse=(0.0, 0.2, 0.8), specular=(0.0, 0.0, 0.2)),
)

ALL_SCHEMES: dict[str, MaterialScheme] = {s.name: s for s in (GRAYSCALE, BLUE_RED)}
DEFAULT_SCHEME: MaterialScheme = GRAYSCALE
