import pytest

from planefinder.Config import TRIAL_CAP
from planefinder.Trials import required_trials


def test_known_values():
    # log(0.1) / log(1 - 0.6^3) = 9.46 -> 9
    assert required_trials(0.9, 60, 100) == 9
    # log(0.1) / log(1 - 0.5^3) = 17.24 -> 17
    assert required_trials(0.9, 50, 100) == 17


def test_zero_inliers_returns_cap():
    assert required_trials(0.9, 0, 1000) == TRIAL_CAP
    assert required_trials(0.9, 0, 1000, cap=250) == 250


def test_all_inliers_needs_no_more_trials():
    assert required_trials(0.9, 100, 100) == 0


def test_result_is_clamped_to_cap():
    assert required_trials(0.9, 1, 10 ** 6, cap=5000) == 5000


def test_monotonically_non_increasing_in_inlier_count():
    total = 500
    counts = [required_trials(0.9, k, total, cap=10 ** 9) for k in range(total + 1)]
    assert all(a >= b for a, b in zip(counts, counts[1:]))
    assert counts[0] == 10 ** 9 and counts[-1] == 0


def test_higher_confidence_needs_more_trials():
    assert required_trials(0.99, 30, 100) > required_trials(0.9, 30, 100)


@pytest.mark.parametrize("confidence,total", [(0.0, 10), (1.0, 10), (0.9, 0)])
def test_invalid_arguments(confidence, total):
    with pytest.raises(ValueError):
        required_trials(confidence, 1, total)
