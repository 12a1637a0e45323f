# -*- coding: utf-8 -*-
"""
planefinder <input file> <output file> <number of planes> <point-plane threshold> <number of RANSAC trials>

Finds planes with RANSAC, colors each one from a fixed 15-color palette and
writes the colored plane points. Points on no plane are dropped unless
--remainder is given.

Exit codes: 0 ok, 2 usage error, 3 input read failure, 4 output write failure.
"""
from __future__ import annotations

import argparse
import logging
import sys

from planefinder.Config import (RansacParams, setup_logger, CONFIDENCE, STOP_FRACTION, TRIAL_CAP,
                                TRIAL_MODES, REMOVAL_MODES)
from planefinder.Errors import PlaneFinderError, EXIT_OK
from planefinder.PointCloud import EXPORT_FORMATS
from planefinder.Workflow import run_pipeline

logger = logging.getLogger(__name__)


def build_argparser():
    p = argparse.ArgumentParser(
        prog="planefinder",
        description="Sequential RANSAC plane segmentation; each plane gets its own color.",
        epilog="<number of RANSAC trials> is IGNORED in the default adaptive mode, where the trial count "
               "is re-estimated from the best inlier ratio (bounded by --max-trials). "
               "With --trial-mode fixed it is the exact number of trials per plane.")
    p.add_argument('input', help='Input point cloud (.ply, .npz, .xyz/.txt, .las/.laz)')
    p.add_argument('output', help='Output point cloud of the colored plane points')
    p.add_argument('n_planes', type=int, metavar='number_of_planes', help='Maximum number of planes to find')
    p.add_argument('threshold', type=float, metavar='point_plane_threshold',
                   help='Max point-to-plane distance of an inlier (cloud units)')
    p.add_argument('n_trials', type=int, metavar='number_of_RANSAC_trials',
                   help='Trials per plane in fixed mode; ignored in adaptive mode')
    p.add_argument('--trial-mode', choices=TRIAL_MODES, default='adaptive',
                   help='adaptive: estimate trials from the best inlier ratio; fixed: use n_trials '
                        '(default: adaptive)')
    p.add_argument('--max-trials', type=int, default=TRIAL_CAP,
                   help=f'Upper bound of adaptive trials per plane (default: {TRIAL_CAP})')
    p.add_argument('--confidence', type=float, default=CONFIDENCE,
                   help=f'Adaptive mode confidence (default: {CONFIDENCE})')
    p.add_argument('--stop-fraction', type=float, default=STOP_FRACTION,
                   help=f'Stop once remaining points <= this fraction of the input (default: {STOP_FRACTION})')
    p.add_argument('--removal', choices=REMOVAL_MODES, default='swap',
                   help='swap: O(1) swap-remove per point; compact: mark and compact once (default: swap)')
    p.add_argument('--seed', type=int, default=None, help='Random seed (default: nondeterministic)')
    p.add_argument('--format', choices=EXPORT_FORMATS, default=None,
                   help='Format of every written cloud (default: from the file extension)')
    p.add_argument('--remainder', default=None, help='Also write the points assigned to no plane')
    p.add_argument('--summary', default=None, help='Per-plane CSV summary')
    p.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    p.add_argument('-v', '--verbose', action='store_true', help='Debug logging (one line per trial)')
    return p


def main(argv=None) -> int:
    args = build_argparser().parse_args(argv)
    setup_logger(args.verbose)

    logger.info("Searching for %d planes", args.n_planes)
    logger.info("Using a point-plane threshold of %g units", args.threshold)
    if args.trial_mode == 'fixed':
        logger.info("Applying RANSAC with %d trials", args.n_trials)
    else:
        logger.info("Applying adaptive RANSAC (confidence %g, at most %d trials); ignoring n_trials=%d",
                    args.confidence, args.max_trials, args.n_trials)

    try:
        params = RansacParams(
            n_planes=args.n_planes,
            threshold=args.threshold,
            n_trials=args.n_trials,
            trial_mode=args.trial_mode,
            max_trials=args.max_trials,
            confidence=args.confidence,
            stop_fraction=args.stop_fraction,
            removal=args.removal,
            seed=args.seed,
            progress=not args.no_progress,
        )
        run_pipeline(args.input, args.output, params,
                     output_format=args.format,
                     remainder_path=args.remainder,
                     summary_path=args.summary)
    except PlaneFinderError as e:
        logger.error("%s", e)
        return e.exit_code
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
