# -*- coding: utf-8 -*-
"""
Sequential multi-plane RANSAC with per-plane coloring.

For each plane index:
 1) stop if the remaining cloud is down to stop_fraction of the input
 2) sample three points (with replacement) -> candidate plane
 3) count inliers (distance <= threshold) over the whole remaining cloud
 4) keep the largest inlier set; repeat until the trial target is reached
    - adaptive: target recomputed from the best inlier ratio after every trial
    - fixed:    target = n_trials
 5) color the best set, move it to the output cloud, remove it from the input

Degenerate triples (collinear/coincident) are resampled and do not count as
trials. At most `cloud.number` of them are tolerated per plane search.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from planefinder.Config import RansacParams
from planefinder.Errors import DegeneratePlaneSample
from planefinder.Palette import color_for
from planefinder.Plane import normal_from_triple, distances_from_plane
from planefinder.PointCloud import PlanePointCloud
from planefinder.Trials import required_trials

logger = logging.getLogger(__name__)


@dataclass
class PlaneRecord:
    plane_index: int
    color: np.ndarray  # (3,) uint8
    n_inliers: int
    normal: Optional[np.ndarray]  # (3,) unit normal, None if no valid sample was drawn
    reference: Optional[np.ndarray]  # (3,) point on the plane
    n_trials: int
    n_degenerate: int
    n_remaining: int

    def as_row(self) -> dict:
        nx, ny, nz = self.normal if self.normal is not None else (np.nan,) * 3
        rx, ry, rz = self.reference if self.reference is not None else (np.nan,) * 3
        return {
            "plane": self.plane_index,
            "red": int(self.color[0]), "green": int(self.color[1]), "blue": int(self.color[2]),
            "inliers": self.n_inliers,
            "nx": nx, "ny": ny, "nz": nz,
            "ref_x": rx, "ref_y": ry, "ref_z": rz,
            # plane offset d in n.x + d = 0
            "d": -float(np.dot(self.normal, self.reference)) if self.normal is not None else np.nan,
            "trials": self.n_trials,
            "degenerate": self.n_degenerate,
            "remaining": self.n_remaining,
        }


class PlaneSegmenter:
    def __init__(self, params: RansacParams, rng=None):
        self.params = params.validate()
        # anything with numpy Generator's integers(low, high, size=...) works
        self.rng = rng if rng is not None else np.random.default_rng(params.seed)
        self.planes: List[PlaneRecord] = []

    def _target_trials(self, best_count: int, n_points: int) -> int:
        p = self.params
        if p.trial_mode == "fixed":
            return p.n_trials
        return required_trials(p.confidence, best_count, n_points, cap=p.max_trials)

    def find_plane(self, cloud: PlanePointCloud):
        """
        One plane search over the current cloud.
        :return: best inlier indices (int64, ascending), normal, reference point, trials, degenerate samples
        """
        p = self.params
        pts = cloud.coords
        n = cloud.number

        best_idx = np.empty(0, dtype=np.int64)
        best_normal, best_ref = None, None
        curr_trial = 0
        n_degenerate = 0
        while True:
            i1, i2, i3 = self.rng.integers(0, n, size=3)
            try:
                normal = normal_from_triple(pts[i1], pts[i2], pts[i3])
            except DegeneratePlaneSample:
                n_degenerate += 1
                if n_degenerate > n:
                    logger.warning("Gave up after %d degenerate samples (%d trials done, best plane has %d points)",
                                   n_degenerate, curr_trial, best_idx.size)
                    break
                continue

            ref = pts[i1]
            inliers = np.flatnonzero(distances_from_plane(normal, ref, pts) <= p.threshold)
            if inliers.size > best_idx.size:
                best_idx = inliers
                best_normal, best_ref = normal, ref.copy()
            curr_trial += 1

            target = self._target_trials(best_idx.size, n)
            logger.debug("RANSAC trial %d: %d inliers (best %d), target %d trials",
                         curr_trial, inliers.size, best_idx.size, target)
            if curr_trial >= target:
                break
        return best_idx, best_normal, best_ref, curr_trial, n_degenerate

    def _move_to_output(self, cloud: PlanePointCloud, indices: np.ndarray, color: np.ndarray,
                        output: PlanePointCloud):
        if self.params.removal == "swap":
            moved = cloud.swap_remove_many(indices)
        else:
            moved = cloud.compact_remove(indices)
        moved.colors[:] = color
        output.extend(moved.coords, moved.colors)

    def run(self, cloud: PlanePointCloud) -> PlanePointCloud:
        """
        Segment up to n_planes planes. Inliers are moved (not copied) from `cloud`
        into the returned output cloud; `cloud` keeps the unassigned points.
        """
        p = self.params
        n_points_in_set = cloud.number
        output = PlanePointCloud()
        self.planes = []
        starttime = time.perf_counter()

        logger.info("Starting RANSAC: %d points, up to %d planes, threshold %g, %s trials",
                    n_points_in_set, p.n_planes, p.threshold,
                    f"{p.n_trials} fixed" if p.trial_mode == "fixed" else f"adaptive (cap {p.max_trials})")
        for n_planes_found in tqdm(range(p.n_planes), desc="RANSAC planes", disable=not p.progress):
            if cloud.number <= n_points_in_set * p.stop_fraction:
                logger.info("Stopping early: %d of %d points left (<= %.0f%%)",
                            cloud.number, n_points_in_set, p.stop_fraction * 100)
                break

            best_idx, normal, ref, n_trials, n_degenerate = self.find_plane(cloud)
            color = color_for(n_planes_found)
            self._move_to_output(cloud, best_idx, color, output)

            record = PlaneRecord(n_planes_found, color, int(best_idx.size), normal, ref,
                                 n_trials, n_degenerate, cloud.number)
            self.planes.append(record)
            logger.info("Plane %d: %d points after %d trials (%d degenerate samples), %d points left",
                        n_planes_found + 1, record.n_inliers, n_trials, n_degenerate, cloud.number)

        logger.info("Finished RANSAC with %d points left (%.2fs)", cloud.number, time.perf_counter() - starttime)
        return output


def ransac_and_color(cloud: PlanePointCloud, n_planes: int, threshold: float, n_trials: int = 0,
                     rng=None, **options) -> PlanePointCloud:
    """Shortcut for PlaneSegmenter(RansacParams(...), rng).run(cloud)."""
    params = RansacParams(n_planes=n_planes, threshold=threshold, n_trials=n_trials, **options)
    return PlaneSegmenter(params, rng=rng).run(cloud)
