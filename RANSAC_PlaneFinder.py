# -*- coding: utf-8 -*-
"""
python RANSAC_PlaneFinder.py scan.ply planes.ply 6 0.02 1000 `
--seed 42 --summary planes.csv --remainder leftover.ply
"""
import sys

from planefinder.Cli import main

if __name__ == "__main__":
    sys.exit(main())
