# -*- coding: utf-8 -*-
"""
Exception types of planefinder.

File errors are fatal for a run and carry the offending path; the CLI maps them
to distinct exit codes. Geometric failures (degenerate triples, zero-inlier
ratios) are recovered inside the engine and never reach the user.
"""

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_INPUT = 3
EXIT_OUTPUT = 4


class PlaneFinderError(Exception):
    exit_code = 1


class UsageError(PlaneFinderError, ValueError):
    """Bad argument values (counts and types are checked by argparse)."""
    exit_code = EXIT_USAGE


class InputReadError(PlaneFinderError, IOError):
    exit_code = EXIT_INPUT

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = str(reason)
        super().__init__(f"Could not read point cloud from {self.path}: {self.reason}")


class OutputWriteError(PlaneFinderError, IOError):
    exit_code = EXIT_OUTPUT

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = str(reason)
        super().__init__(f"Could not write point cloud to {self.path}: {self.reason}")


class DegeneratePlaneSample(PlaneFinderError, ValueError):
    """Three sampled points are collinear or coincident; resample."""


class ZeroInlierDivision(PlaneFinderError, ZeroDivisionError):
    """Inlier ratio of zero makes log(1 - ratio^3) vanish."""
