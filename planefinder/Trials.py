# -*- coding: utf-8 -*-
"""
Adaptive RANSAC trial count.

    N = log(1 - p) / log(1 - w^s)

p: confidence that at least one trial drew an all-inlier sample,
w: best inlier ratio so far, s: sample size (3 points per plane).
"""
import math
from typing import Optional

from planefinder.Config import SAMPLE_SIZE, TRIAL_CAP
from planefinder.Errors import ZeroInlierDivision


def _log_miss_probability(inlier_ratio: float) -> float:
    """log(1 - w^s); raises ZeroInlierDivision where it vanishes."""
    denom = math.log1p(-(inlier_ratio ** SAMPLE_SIZE))
    if denom == 0.0:
        raise ZeroInlierDivision(f"inlier ratio {inlier_ratio:.3e} gives log(1 - w^{SAMPLE_SIZE}) == 0")
    return denom


def required_trials(confidence: float, inlier_count: int, total_points: int, cap: Optional[int] = None) -> int:
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    if total_points <= 0:
        raise ValueError(f"total_points must be > 0, got {total_points}")
    cap = TRIAL_CAP if cap is None else int(cap)

    ratio = inlier_count / float(total_points)
    if ratio >= 1.0:
        return 0
    try:
        trials = math.log(1.0 - confidence) / _log_miss_probability(ratio)
    except ZeroInlierDivision:
        return cap
    if not math.isfinite(trials):
        return cap
    # the 0.5 is for rounding
    return min(int(0.5 + trials), cap)
