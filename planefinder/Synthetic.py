# -*- coding: utf-8 -*-
"""
Synthetic plane clouds with ground-truth labels.

Each patch is a rectangle (size_u x size_v) centred on `center` and spanned by
an orthonormal basis (t1, t2) of the plane with normal `normal`. With
noise_sigma == 0 the points lie on the plane up to float rounding.
"""
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from planefinder.PointCloud import PlanePointCloud


def Normalize(vec: np.ndarray) -> np.ndarray:
    n = np.linalg.norm(vec)
    if n < 1e-12:
        return vec
    return vec / n


def OrthonormalBasis(n: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Tangent basis (t1, t2) and unit normal of n."""
    n = Normalize(np.asarray(n, dtype=np.float64))
    helper = np.array([1.0, 0.0, 0.0])
    if abs(np.dot(helper, n)) > 0.9:
        helper = np.array([0.0, 1.0, 0.0])
    t1 = Normalize(np.cross(n, helper))
    t2 = Normalize(np.cross(n, t1))
    return t1, t2, n


@dataclass
class PatchSpec:
    center: Sequence[float]
    normal: Sequence[float]
    size_u: float
    size_v: float
    n_points: int
    noise_sigma: float = 0.0


def sample_plane_patch(spec: PatchSpec, rng: np.random.Generator) -> np.ndarray:
    t1, t2, n = OrthonormalBasis(spec.normal)
    u = rng.uniform(-spec.size_u / 2, spec.size_u / 2, spec.n_points)
    v = rng.uniform(-spec.size_v / 2, spec.size_v / 2, spec.n_points)
    pts = np.asarray(spec.center, dtype=np.float64)[None, :] + u[:, None] * t1[None, :] + v[:, None] * t2[None, :]
    if spec.noise_sigma > 0:
        pts += rng.normal(0, spec.noise_sigma, spec.n_points)[:, None] * n[None, :]
    return pts


def planes_cloud(patches: List[PatchSpec], rng: np.random.Generator,
                 n_outliers: int = 0, outlier_box: Tuple[float, float] = (0.0, 1.0)) -> Tuple[PlanePointCloud, np.ndarray]:
    """
    :return: cloud (all colors 0) and labels (N,) with the patch index per point, -1 for outliers
    """
    all_pts = []
    all_lbl = []
    for i, spec in enumerate(patches):
        all_pts.append(sample_plane_patch(spec, rng))
        all_lbl.append(np.full(spec.n_points, i, dtype=int))
    if n_outliers:
        all_pts.append(rng.uniform(outlier_box[0], outlier_box[1], (n_outliers, 3)))
        all_lbl.append(np.full(n_outliers, -1, dtype=int))
    points = np.vstack(all_pts) if all_pts else np.empty((0, 3))
    labels = np.concatenate(all_lbl) if all_lbl else np.empty(0, dtype=int)
    return PlanePointCloud(points), labels
