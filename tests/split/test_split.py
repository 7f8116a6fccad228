import math

import numpy as np
import pandas as pd
import pytest

from tidyflow.exceptions import ColumnNotFoundError, InvalidProportionError
from tidyflow.split import initial_split, initial_time_split, initial_validation_split, make_strata, vfold_cv


@pytest.mark.parametrize("prop", [0.5, 0.75, 0.8], ids=["half", "default", "eighty"])
def test_initial_split_sizes_and_partition(ames, prop):
    split = initial_split(ames, prop=prop)

    assert len(split.train_index) == math.floor(prop * len(ames))
    assert len(split.train_index) + len(split.test_index) == len(ames)
    # 訓練・テストのインデックスは互いに素で、和集合は全行になる
    assert np.intersect1d(split.train_index, split.test_index).size == 0
    assert set(split.train_index) | set(split.test_index) == set(range(len(ames)))


def test_initial_split_keeps_original_row_order(ames):
    split = initial_split(ames)

    assert split.training().index.is_monotonic_increasing
    assert split.testing().index.is_monotonic_increasing
    pd.testing.assert_frame_equal(split.training(), ames.iloc[np.sort(split.train_index)])


def test_initial_split_is_reproducible(ames):
    first = initial_split(ames, seed=10)
    second = initial_split(ames, seed=10)
    third = initial_split(ames, seed=11)

    np.testing.assert_array_equal(first.train_index, second.train_index)
    assert not np.array_equal(first.train_index, third.train_index)


def test_stratified_split_preserves_class_proportions(two_class):
    split = initial_split(two_class, prop=0.75, strata="Class")

    overall = (two_class["Class"] == "Class1").mean()
    train = (split.training()["Class"] == "Class1").mean()
    test = (split.testing()["Class"] == "Class1").mean()
    assert train == pytest.approx(overall, abs=0.02)
    assert test == pytest.approx(overall, abs=0.03)


def test_stratified_split_on_numeric_outcome(ames):
    split = initial_split(ames, strata="Sale_Price")

    assert split.training()["Sale_Price"].median() == pytest.approx(ames["Sale_Price"].median(), abs=0.05)


@pytest.mark.parametrize("prop", [0.9, 0.95, 0.1], ids=["ninety", "ninety_five", "ten"])
def test_stratified_split_on_small_data(prop):
    # テスト側（または訓練側）の件数が層の数より少なくても分割できる
    df = pd.DataFrame({"y": np.arange(20.0), "x": np.arange(20)})

    split = initial_split(df, prop=prop, strata="y")

    assert len(split.train_index) == math.floor(prop * 20)
    assert sorted(np.concatenate([split.train_index, split.test_index])) == list(range(20))


def test_stratified_split_samples_within_each_stratum():
    df = pd.DataFrame({"y": np.arange(40.0)})

    split = initial_split(df, prop=0.5, strata="y")

    # 4つの分位層（10件ずつ）からそれぞれ5件ずつ訓練データに入る
    assert np.bincount(split.train_index // 10).tolist() == [5, 5, 5, 5]


def test_stratified_validation_split_on_small_data():
    df = pd.DataFrame({"y": np.arange(20.0)})

    split = initial_validation_split(df, prop=(0.8, 0.1), strata="y")

    assert (len(split.train_index), len(split.validation_index), len(split.test_index)) == (16, 2, 2)
    indices = np.concatenate([split.train_index, split.validation_index, split.test_index])
    assert sorted(indices) == list(range(20))


@pytest.mark.parametrize("prop", [0, 1, 1.5, -0.1, True], ids=["zero", "one", "above", "negative", "bool"])
def test_initial_split_invalid_proportion(ames, prop):
    with pytest.raises(InvalidProportionError):
        initial_split(ames, prop=prop)


def test_initial_split_unknown_strata(ames):
    with pytest.raises(ColumnNotFoundError) as exc_info:
        initial_split(ames, strata="Price")
    assert exc_info.value.columns == ["Price"]


def test_initial_validation_split_sizes(ames):
    split = initial_validation_split(ames, prop=(0.6, 0.2), strata="Sale_Price")

    n = len(ames)
    assert len(split.train_index) == math.floor(0.6 * n)
    assert len(split.validation_index) == math.floor(0.2 * n)
    assert len(split.train_index) + len(split.validation_index) + len(split.test_index) == n
    indices = np.concatenate([split.train_index, split.validation_index, split.test_index])
    assert len(np.unique(indices)) == n
    assert len(split.validation()) == len(split.validation_index)


@pytest.mark.parametrize("prop", [(0.8, 0.2), (0.7, 0.5), (0.0, 0.2)], ids=["sum_one", "sum_above", "zero"])
def test_initial_validation_split_invalid_proportion(ames, prop):
    with pytest.raises(InvalidProportionError):
        initial_validation_split(ames, prop=prop)


def test_validation_requires_validation_set(ames):
    with pytest.raises(ValueError, match="no validation set"):
        initial_split(ames).validation()


def test_initial_time_split_takes_leading_rows():
    df = pd.DataFrame({"day": [5, 1, 4, 2, 3, 6, 8, 7], "y": range(8)})

    split = initial_time_split(df, prop=0.75)
    np.testing.assert_array_equal(split.train_index, np.arange(6))

    ordered = initial_time_split(df, prop=0.5, order_by="day")
    assert ordered.training()["day"].tolist() == [1, 2, 3, 4]
    assert ordered.testing()["day"].tolist() == [5, 6, 7, 8]


def test_vfold_cv_assessment_covers_every_row_once(ames):
    folds = vfold_cv(ames, v=5, strata="Sale_Price")

    assert [fold.id for fold in folds] == ["Fold01", "Fold02", "Fold03", "Fold04", "Fold05"]
    assessment = np.concatenate([fold.test_index for fold in folds])
    assert np.array_equal(np.sort(assessment), np.arange(len(ames)))
    for fold in folds:
        assert len(fold.analysis()) + len(fold.assessment()) == len(ames)


@pytest.mark.parametrize("v", [1, 10_000], ids=["too_few", "too_many"])
def test_vfold_cv_invalid_v(crickets, v):
    with pytest.raises(ValueError):
        vfold_cv(crickets, v=v)


def test_make_strata_pools_small_buckets():
    x = pd.Series(["a"] * 50 + ["b"] * 45 + ["c"] * 3 + ["d"] * 2, name="x")

    strata = make_strata(x, pool=0.1)

    # 件数の少ない c と d は同じ層にまとめられる
    assert strata[x == "c"][0] == strata[x == "d"][0]
    counts = pd.Series(strata).value_counts()
    assert counts.min() >= 10


def test_make_strata_numeric_quartiles():
    x = pd.Series(np.arange(100, dtype=float), name="x")

    strata = make_strata(x, breaks=4)

    assert pd.Series(strata).value_counts().tolist() == [25, 25, 25, 25]
