# -*- coding: utf-8 -*-
"""
Run parameters and logging setup.

Module-level constants are the defaults; RansacParams bundles everything the
engine needs for one run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from planefinder.Errors import UsageError

# =========================
# Defaults
# =========================
CONFIDENCE: float = 0.9  # probability that one trial drew an all-inlier triple
STOP_FRACTION: float = 0.1  # stop when remaining <= 10% of the input
TRIAL_CAP: int = 100000  # upper bound of adaptive trials per plane
DEGENERATE_EPS: float = 1e-12  # cross-product norm below which a triple is degenerate
SAMPLE_SIZE: int = 3  # points per minimal sample

TRIAL_MODES = ("adaptive", "fixed")
REMOVAL_MODES = ("swap", "compact")


@dataclass
class RansacParams:
    n_planes: int
    threshold: float
    n_trials: int = 0  # used only when trial_mode == "fixed"
    trial_mode: str = "adaptive"
    max_trials: int = TRIAL_CAP
    confidence: float = CONFIDENCE
    stop_fraction: float = STOP_FRACTION
    removal: str = "swap"
    seed: Optional[int] = None
    progress: bool = False

    def validate(self) -> "RansacParams":
        if self.n_planes < 0:
            raise UsageError(f"number of planes must be >= 0, got {self.n_planes}")
        if not self.threshold >= 0:
            raise UsageError(f"point-plane threshold must be >= 0, got {self.threshold}")
        if self.trial_mode not in TRIAL_MODES:
            raise UsageError(f"trial mode must be one of {TRIAL_MODES}, got {self.trial_mode!r}")
        if self.trial_mode == "fixed" and self.n_trials < 1:
            raise UsageError(f"fixed trial mode needs at least 1 trial, got {self.n_trials}")
        if self.max_trials < 1:
            raise UsageError(f"max trials must be >= 1, got {self.max_trials}")
        if not 0.0 < self.confidence < 1.0:
            raise UsageError(f"confidence must be in (0, 1), got {self.confidence}")
        if not 0.0 <= self.stop_fraction < 1.0:
            raise UsageError(f"stop fraction must be in [0, 1), got {self.stop_fraction}")
        if self.removal not in REMOVAL_MODES:
            raise UsageError(f"removal must be one of {REMOVAL_MODES}, got {self.removal!r}")
        return self


def setup_logger(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(levelname)s] %(message)s'
    )
