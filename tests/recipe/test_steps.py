import math

import numpy as np
import pandas as pd
import pytest

from tidyflow.exceptions import NotEstimatedError, SchemaMismatchError
from tidyflow.recipe import (
    StepDownsample,
    StepDummy,
    StepInteract,
    StepLog,
    StepNormalize,
    StepOther,
    StepSpline,
    StepZv,
    all_nominal_predictors,
    all_numeric_predictors,
    starts_with,
)


@pytest.fixture
def df():
    return pd.DataFrame(
        {
            "x": [1.0, 10.0, 100.0, 1000.0, 10.0, 1.0],
            "z": [2.0, 4.0, 6.0, 8.0, 10.0, 12.0],
            "color": ["red", "red", "blue", "blue", "red", "green"],
            "const": [1, 1, 1, 1, 1, 1],
            "y": [0.1, 0.2, 0.3, 0.4, 0.5, 0.6],
        }
    )


def test_estimate_returns_new_step_and_freezes_it(df):
    step = StepNormalize(["x"])
    estimated = step.estimate(df, outcomes=["y"])

    assert not step.is_estimated
    assert estimated.is_estimated
    assert estimated is not step
    # 推定済みのステップは変更できない
    with pytest.raises(AttributeError):
        estimated.means_ = {}
    with pytest.raises(ValueError, match="already estimated"):
        estimated.estimate(df)


def test_apply_before_estimate(df):
    with pytest.raises(NotEstimatedError):
        StepLog("x").apply(df)


def test_apply_with_missing_column(df):
    estimated = StepNormalize(["x", "z"]).estimate(df)
    with pytest.raises(SchemaMismatchError):
        estimated.apply(df.drop(columns="z"))


def test_step_log_base_10(df):
    estimated = StepLog("x", base=10).estimate(df)

    result = estimated.apply(df)

    np.testing.assert_allclose(result["x"], [0.0, 1.0, 2.0, 3.0, 1.0, 0.0])
    pd.testing.assert_series_equal(result["z"], df["z"])


def test_step_log_rejects_nominal(df):
    with pytest.raises(ValueError, match="numeric"):
        StepLog("color").estimate(df)


def test_step_normalize_uses_training_statistics(df):
    estimated = StepNormalize(all_numeric_predictors()).estimate(df, outcomes=["y"])
    new_data = pd.DataFrame({"x": [df["x"].mean()], "z": [df["z"].mean() + df["z"].std()], "const": [1], "color": ["red"]})

    result = estimated.apply(new_data)

    assert estimated.columns_ == ["x", "z", "const"]
    assert result["x"].iloc[0] == pytest.approx(0.0)
    assert result["z"].iloc[0] == pytest.approx(1.0)
    # 標準偏差 0 のカラムは中心化のみ
    assert result["const"].iloc[0] == pytest.approx(0.0)


def test_estimate_then_apply_is_idempotent_on_training_data(df):
    estimated = StepNormalize(["x", "z"]).estimate(df)

    pd.testing.assert_frame_equal(estimated.apply(df), estimated.apply(df))


def test_step_other_collapses_rare_levels(df):
    estimated = StepOther("color", threshold=0.2).estimate(df)

    result = estimated.apply(pd.DataFrame({"color": ["red", "green", "purple", None]}))

    assert estimated.retained_["color"] == ["blue", "red"]
    assert result["color"].tolist()[:3] == ["red", "other", "other"]
    assert pd.isna(result["color"].iloc[3])
    assert list(result["color"].cat.categories) == ["blue", "red", "other"]


def test_step_other_count_threshold(df):
    estimated = StepOther("color", threshold=3).estimate(df)

    assert estimated.retained_["color"] == ["red"]


def test_step_other_without_collapse_passes_unseen_levels_through(df):
    estimated = StepOther("color", threshold=0.01).estimate(df)

    result = estimated.apply(pd.DataFrame({"color": ["purple", "red", None]}))

    assert result["color"].tolist()[:2] == ["purple", "red"]
    assert pd.isna(result["color"].iloc[2])
    assert list(result["color"].cat.categories) == ["blue", "green", "red", "purple"]


def test_step_dummy_drops_reference_level(df):
    estimated = StepDummy(all_nominal_predictors()).estimate(df, outcomes=["y"])

    result = estimated.apply(df)

    assert "color" not in result.columns
    assert [column for column in result.columns if column.startswith("color_")] == ["color_green", "color_red"]
    assert result["color_red"].tolist() == [1.0, 1.0, 0.0, 0.0, 1.0, 0.0]


def test_step_dummy_one_hot_and_unseen_level(df):
    estimated = StepDummy("color", one_hot=True).estimate(df)

    result = estimated.apply(pd.DataFrame({"color": ["blue", "purple"]}))

    assert list(result.columns) == ["color_blue", "color_green", "color_red"]
    assert result.iloc[0].tolist() == [1.0, 0.0, 0.0]
    # 推定時に無かった水準はすべて 0 になる
    assert result.iloc[1].tolist() == [0.0, 0.0, 0.0]


def test_step_interact_with_selector(df):
    dummied = StepDummy("color").estimate(df).apply(df)
    estimated = StepInteract([("x", starts_with("color_"))]).estimate(dummied)

    result = estimated.apply(dummied)

    assert estimated.pairs_ == [("x", "color_green"), ("x", "color_red")]
    np.testing.assert_allclose(result["x_x_color_red"], dummied["x"] * dummied["color_red"])


def test_step_spline_replaces_column_with_basis(ames):
    estimated = StepSpline("Latitude", deg_free=6).estimate(ames)

    result = estimated.apply(ames)

    spline_columns = [column for column in result.columns if column.startswith("Latitude_spline_")]
    assert len(spline_columns) == 6
    assert "Latitude" not in result.columns
    # ノットは訓練データの範囲内に置かれる
    knots = estimated.knots("Latitude")
    assert knots[0] == pytest.approx(ames["Latitude"].min())
    assert knots[-1] == pytest.approx(ames["Latitude"].max())


def test_step_spline_rejects_small_deg_free():
    with pytest.raises(ValueError, match="deg_free"):
        StepSpline("x", deg_free=2)


def test_step_zv_removes_constant_columns(df):
    estimated = StepZv().estimate(df, outcomes=["y"])

    assert estimated.removals_ == ["const"]
    assert "const" not in estimated.apply(df).columns


def test_step_downsample_balances_classes(two_class):
    estimated = StepDownsample("Class").estimate(two_class)

    result = estimated.apply(two_class)

    counts = result["Class"].value_counts()
    assert counts["Class1"] == counts["Class2"] == two_class["Class"].value_counts().min()
    assert result.index.is_monotonic_increasing


def test_step_downsample_under_ratio(two_class):
    estimated = StepDownsample("Class", under_ratio=1.5).estimate(two_class)
    minority = two_class["Class"].value_counts().min()

    result = estimated.apply(two_class)

    assert result["Class"].value_counts().max() == math.floor(minority * 1.5)


def test_tidy_lists_learned_parameters(df):
    estimated = StepNormalize(["x", "z"]).estimate(df)

    tidy = estimated.tidy()

    assert tidy["terms"].tolist() == ["x", "z"]
    assert tidy["mean"].iloc[1] == pytest.approx(7.0)
