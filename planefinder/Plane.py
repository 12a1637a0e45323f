# -*- coding: utf-8 -*-
"""
Plane through three points: unit normal and point-to-plane distance.
"""
import numpy as np

from planefinder.Config import DEGENERATE_EPS
from planefinder.Errors import DegeneratePlaneSample


def normal_from_triple(p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, eps: float = DEGENERATE_EPS) -> np.ndarray:
    """
    Unit normal of the plane through p1, p2, p3: normalize((p3 - p1) x (p2 - p1)).
    Raises DegeneratePlaneSample when the points are collinear or coincident.
    """
    p1 = np.asarray(p1, dtype=np.float64)
    nrm = np.cross(np.asarray(p3, dtype=np.float64) - p1, np.asarray(p2, dtype=np.float64) - p1)
    norm_n = np.linalg.norm(nrm)
    if not norm_n >= eps:
        raise DegeneratePlaneSample(f"cross product norm {norm_n:.3e} below {eps:.1e}")
    return nrm / norm_n


def distance_from_plane(normal: np.ndarray, point_on_plane: np.ndarray, other_point: np.ndarray) -> float:
    # exact distance only because normal is unit length and point_on_plane lies on the plane
    return float(abs(np.dot(normal, np.asarray(point_on_plane, dtype=np.float64) - other_point)))


def distances_from_plane(normal: np.ndarray, point_on_plane: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Vectorized distance_from_plane over an (N,3) array."""
    return np.abs((np.asarray(point_on_plane, dtype=np.float64)[None, :] - points) @ normal)
