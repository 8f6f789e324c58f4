"""Mesh loading, capsule polydata and serialization helpers."""

import logging
from typing import Dict, List, Sequence, Union

import numpy as np
import pyvista as pv

from .capsule import Capsule
from .config import GEOMETRY_EPS
from .hull import convex_hull_from_points
from .schemas import ValidationError, validate_points

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def load_points(path: str) -> np.ndarray:
    """
    Load the vertices of a mesh file.

    Args:
        path: Any mesh format readable by pyvista (STL, OBJ, PLY, VTK, ...).

    Returns:
        (N, 3) float64 array of mesh vertices.
    """
    mesh = pv.read(str(path))
    points = validate_points(mesh.points, name=f"points of {path}")
    logger.debug(f"Loaded {len(points)} points from {path}")
    return points


def load_polyhedrons(paths: Sequence[str]) -> List[np.ndarray]:
    """
    Load one convex hull polyhedron per mesh file (e.g. one per robot link).

    Args:
        paths: Mesh file paths.

    Returns:
        List of (M_i, 3) hull vertex arrays, in the order of `paths`.
    """
    polyhedrons = []
    for path in paths:
        polyhedrons.append(convex_hull_from_points(load_points(path)))
        logger.info(f"{path}: {len(polyhedrons[-1])} hull vertices")
    return polyhedrons


def create_capsule_polydata(capsule: Capsule, resolution: int = 32) -> pv.PolyData:
    """
    Create a PyVista PolyData capsule.

    The surface is a capped-off cylinder around [P0, P1] merged with a sphere
    at each end point. A capsule with coincident end points is a single sphere.

    Args:
        capsule: Capsule to draw.
        resolution: Angular resolution of the cylinder and spheres.

    Returns:
        PyVista capsule surface mesh
    """
    p0, p1, radius = capsule
    axis = p1 - p0
    length = float(np.linalg.norm(axis))

    cap0 = pv.Sphere(radius=radius, center=p0, theta_resolution=resolution, phi_resolution=resolution)
    if length <= GEOMETRY_EPS:
        return cap0

    cap1 = pv.Sphere(radius=radius, center=p1, theta_resolution=resolution, phi_resolution=resolution)
    cylinder = pv.Cylinder(
        center=0.5 * (p0 + p1),
        direction=axis / length,
        radius=radius,
        height=length,
        resolution=resolution,
        capping=False,
    )
    return cylinder.merge([cap0, cap1])


def capsule_to_dict(capsule: Capsule) -> Dict[str, Union[List[float], float]]:
    """JSON-friendly representation: {'p0': [x, y, z], 'p1': [x, y, z], 'radius': r}."""
    return {
        "p0": capsule.P0.tolist(),
        "p1": capsule.P1.tolist(),
        "radius": float(capsule.radius),
    }


def capsule_from_dict(data: Dict) -> Capsule:
    """Inverse of `capsule_to_dict`."""
    missing = {"p0", "p1", "radius"} - set(data.keys())
    if missing:
        raise ValidationError(f"Capsule dict missing keys: {sorted(missing)}")
    return Capsule(data["p0"], data["p1"], data["radius"])
