import numpy as np
import pandas as pd
import pytest

from planefinder.Cli import main, build_argparser
from planefinder.Errors import EXIT_OK, EXIT_USAGE, EXIT_INPUT, EXIT_OUTPUT
from planefinder.Palette import color_for
from planefinder.PointCloud import read_point_cloud, write_point_cloud


@pytest.fixture
def input_ply(tmp_path, two_planes):
    cloud, _ = two_planes
    path = tmp_path / "scan.ply"
    write_point_cloud(cloud, path)
    return path


def test_run_writes_colored_planes_summary_and_remainder(tmp_path, input_ply):
    out = tmp_path / "out" / "planes.ply"
    rest = tmp_path / "out" / "rest.npz"
    summary = tmp_path / "out" / "planes.csv"
    code = main([str(input_ply), str(out), "1", "1e-9", "100",
                 "--trial-mode", "fixed", "--seed", "2", "--no-progress",
                 "--remainder", str(rest), "--summary", str(summary)])
    assert code == EXIT_OK

    planes = read_point_cloud(out)
    remainder = read_point_cloud(rest)
    assert planes.number == 400 and remainder.number == 200
    np.testing.assert_array_equal(planes.colors, np.tile(color_for(0), (400, 1)))

    df = pd.read_csv(summary)
    assert list(df["inliers"]) == [400]
    assert list(df["trials"]) == [100]
    assert abs(df.loc[0, "nz"]) == pytest.approx(1.0)


def test_adaptive_mode_ignores_trial_argument(tmp_path, input_ply):
    out = tmp_path / "planes.xyz"
    assert main([str(input_ply), str(out), "2", "1e-9", "0", "--seed", "4", "--no-progress"]) == EXIT_OK
    planes = read_point_cloud(out)
    assert planes.number == 600
    assert len(np.unique(planes.colors, axis=0)) == 2


def test_wrong_argument_count_is_usage_error(tmp_path, input_ply):
    with pytest.raises(SystemExit) as exc:
        main([str(input_ply), str(tmp_path / "o.ply"), "2", "0.1"])
    assert exc.value.code == EXIT_USAGE


def test_non_numeric_argument_is_usage_error(tmp_path, input_ply):
    with pytest.raises(SystemExit) as exc:
        main([str(input_ply), str(tmp_path / "o.ply"), "two", "0.1", "10"])
    assert exc.value.code == EXIT_USAGE


def test_invalid_value_is_usage_error(tmp_path, input_ply):
    out = tmp_path / "o.ply"
    assert main([str(input_ply), str(out), "2", "-0.1", "10"]) == EXIT_USAGE
    assert main([str(input_ply), str(out), "2", "0.1", "0", "--trial-mode", "fixed"]) == EXIT_USAGE
    assert not out.exists()


def test_missing_input_is_read_error_and_writes_nothing(tmp_path):
    out = tmp_path / "o.ply"
    assert main([str(tmp_path / "missing.ply"), str(out), "2", "0.1", "10"]) == EXIT_INPUT
    assert not out.exists()


def test_unwritable_output_is_write_error(tmp_path, input_ply):
    # output path is an existing directory
    code = main([str(input_ply), str(tmp_path), "1", "1e-9", "10", "--trial-mode", "fixed", "--seed", "0",
                 "--format", "ply_bin", "--no-progress"])
    assert code == EXIT_OUTPUT


def test_usage_text_declares_trial_semantics():
    text = " ".join(build_argparser().format_help().split())
    assert "IGNORED in the default adaptive mode" in text
    assert "--trial-mode" in text
