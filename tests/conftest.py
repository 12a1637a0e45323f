import numpy as np
import pytest

from planefinder.Synthetic import PatchSpec, planes_cloud


class ScriptedRng:
    """Stands in for numpy's Generator: integers() returns pre-scripted triples."""

    def __init__(self, triples):
        self.triples = [np.asarray(t, dtype=np.int64) for t in triples]
        self.calls = 0

    def integers(self, low, high, size=None):
        triple = self.triples[self.calls]
        self.calls += 1
        assert size == 3 and low == 0 and triple.max() < high
        return triple


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def two_planes():
    """Floor z=0 over [0,1]^2 (400 pts) and wall x=5 (200 pts): disjoint, non-parallel."""
    rng = np.random.default_rng(7)
    patches = [
        PatchSpec(center=(0.5, 0.5, 0.0), normal=(0, 0, 1), size_u=1.0, size_v=1.0, n_points=400),
        PatchSpec(center=(5.0, 0.5, 1.5), normal=(1, 0, 0), size_u=1.0, size_v=1.0, n_points=200),
    ]
    return planes_cloud(patches, rng)
