# -*- coding: utf-8 -*-
"""
Load -> segment -> write, with timing and an optional per-plane CSV summary.
"""
from __future__ import annotations

import logging
import os
import time
from typing import List, Optional

import pandas as pd

from planefinder.Config import RansacParams
from planefinder.Errors import OutputWriteError
from planefinder.PointCloud import read_point_cloud, write_point_cloud
from planefinder.Ransac import PlaneSegmenter, PlaneRecord

logger = logging.getLogger(__name__)


def time_cost_hms(seconds: float) -> str:
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    s = seconds % 60
    return f"{h} h {m} min {s:.2f} sec"


def write_summary(path: str, planes: List[PlaneRecord]):
    columns = ["plane", "red", "green", "blue", "inliers", "nx", "ny", "nz",
               "ref_x", "ref_y", "ref_z", "d", "trials", "degenerate", "remaining"]
    df = pd.DataFrame([rec.as_row() for rec in planes], columns=columns)
    try:
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        df.to_csv(path, index=False, float_format="%.10f")
    except OSError as e:
        raise OutputWriteError(path, e) from e
    logger.info("Wrote plane summary: %s", path)


def run_pipeline(input_path: str, output_path: str, params: RansacParams,
                 output_format: Optional[str] = None,
                 remainder_path: Optional[str] = None,
                 summary_path: Optional[str] = None,
                 rng=None) -> List[PlaneRecord]:
    """
    Read `input_path`, find planes, write the colored plane points to `output_path`.
    Nothing is written if reading fails.
    """
    starttime = time.perf_counter()
    segmenter = PlaneSegmenter(params, rng=rng)

    logger.info("Reading point cloud from %s", input_path)
    cloud = read_point_cloud(input_path)
    n_read = cloud.number
    logger.info("Read %d points", n_read)

    output = segmenter.run(cloud)
    assert output.number + cloud.number == n_read

    logger.info("Writing %d plane points to %s", output.number, output_path)
    write_point_cloud(output, output_path, format=output_format)
    if remainder_path:
        logger.info("Writing %d unassigned points to %s", cloud.number, remainder_path)
        write_point_cloud(cloud, remainder_path, format=output_format)
    if summary_path:
        write_summary(summary_path, segmenter.planes)

    logger.info("[time cost] %s for %d planes", time_cost_hms(time.perf_counter() - starttime),
                len(segmenter.planes))
    return segmenter.planes
