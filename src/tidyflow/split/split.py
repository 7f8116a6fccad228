# データセットを訓練・(検証)・テストに分割するモジュール
# 分割結果は行位置のインデックスとして保持し、元データから各部分集合を取り出す
import logging
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import pandas as pd
from sklearn.model_selection import train_test_split

from tidyflow.const import DEFAULT_SEED
from tidyflow.exceptions import ColumnNotFoundError, InvalidProportionError

from .strata import make_strata

logger = logging.getLogger(__name__)


# 1回分の分割結果を保持するデータクラス
# 各インデックスは互いに素で、和集合は元データの全行になる
@dataclass(frozen=True, eq=False)
class Split:
    data: pd.DataFrame
    train_index: npt.NDArray[np.intp]
    test_index: npt.NDArray[np.intp]
    validation_index: npt.NDArray[np.intp] | None = None
    id: str = "Split"

    def __repr__(self) -> str:
        if self.validation_index is None:
            labels = "Training/Testing/Total"
            sizes = [len(self.train_index), len(self.test_index), len(self.data)]
        else:
            labels = "Training/Validation/Testing/Total"
            sizes = [len(self.train_index), len(self.validation_index), len(self.test_index), len(self.data)]
        return f"<{self.id}: {labels}> <{'/'.join(str(size) for size in sizes)}>"

    def training(self) -> pd.DataFrame:
        return self.data.iloc[self.train_index]

    def testing(self) -> pd.DataFrame:
        return self.data.iloc[self.test_index]

    def validation(self) -> pd.DataFrame:
        if self.validation_index is None:
            raise ValueError(f"{self.id} has no validation set")
        return self.data.iloc[self.validation_index]

    # リサンプリングでの呼び方（分析用・評価用）
    analysis = training
    assessment = testing


# 分割比率が (0, 1) の範囲内かを検証する関数
def check_proportion(prop: float) -> None:
    if isinstance(prop, bool) or not isinstance(prop, int | float) or not 0 < prop < 1:
        raise InvalidProportionError(f"Proportion must be in (0, 1), got {prop!r}")


# 層化変数が指定されていれば層ラベルを返し、指定がなければ None を返す関数
def strata_labels(
    data: pd.DataFrame,
    strata: str | None,
    breaks: int = 4,
    pool: float = 0.1,
) -> npt.NDArray[np.str_] | None:
    if strata is None:
        return None
    if strata not in data.columns:
        raise ColumnNotFoundError(strata, context="stratification data")
    return make_strata(data[strata], breaks=breaks, pool=pool)


# positions から n_select 件を選び、(選ばれた位置, 残りの位置) を返す関数
# 層ラベルがあれば各層から floor(n_select / N * 層の件数) 件ずつ抽出し、端数の不足分は残りの行から無作為に補う
def sample_positions(
    positions: npt.NDArray[np.intp],
    n_select: int,
    labels: npt.NDArray[np.str_] | None,
    seed: int,
) -> tuple[npt.NDArray[np.intp], npt.NDArray[np.intp]]:
    if labels is None:
        selected, rest = train_test_split(positions, train_size=n_select, random_state=seed, shuffle=True)
        return np.sort(selected), np.sort(rest)

    rng = np.random.default_rng(seed)
    rate = n_select / len(positions)
    selected = []
    leftover = []
    for label in np.unique(labels):
        bucket = rng.permutation(positions[labels == label])
        n_bucket = math.floor(rate * len(bucket))
        selected.append(bucket[:n_bucket])
        leftover.append(bucket[n_bucket:])

    leftover = rng.permutation(np.concatenate(leftover))
    n_missing = n_select - sum(len(bucket) for bucket in selected)
    selected = np.concatenate([*selected, leftover[:n_missing]])
    return np.sort(selected), np.sort(leftover[n_missing:])


# データを訓練とテストの2つに分割する関数
# 訓練データの件数は floor(prop * N) 件で、残りをテストデータとする
def initial_split(
    data: pd.DataFrame,
    prop: float = 0.75,
    strata: str | None = None,
    breaks: int = 4,
    pool: float = 0.1,
    seed: int = DEFAULT_SEED,
) -> Split:
    check_proportion(prop)
    labels = strata_labels(data, strata, breaks=breaks, pool=pool)
    logger.info(f"Start initial split {len(data)=}, {prop=}, {strata=}, {seed=}")

    train_index, test_index = sample_positions(
        np.arange(len(data)), math.floor(prop * len(data)), labels, seed=seed
    )
    split = Split(data=data, train_index=train_index, test_index=test_index)
    logger.info(f"Finished initial split {split}")
    return split


# データを訓練・検証・テストの3つに分割する関数
# prop は (訓練の割合, 検証の割合) で、残りがテストデータになる
def initial_validation_split(
    data: pd.DataFrame,
    prop: tuple[float, float] = (0.6, 0.2),
    strata: str | None = None,
    breaks: int = 4,
    pool: float = 0.1,
    seed: int = DEFAULT_SEED,
) -> Split:
    train_prop, validation_prop = prop
    check_proportion(train_prop)
    check_proportion(validation_prop)
    if train_prop + validation_prop >= 1:
        raise InvalidProportionError(f"Training and validation proportions must sum to less than 1, got {prop!r}")
    logger.info(f"Start initial validation split {len(data)=}, {prop=}, {strata=}, {seed=}")

    # まず全体を訓練と非訓練に分割する
    train_index, rest_index = sample_positions(
        np.arange(len(data)),
        math.floor(train_prop * len(data)),
        strata_labels(data, strata, breaks=breaks, pool=pool),
        seed=seed,
    )
    # 次に非訓練部分を検証とテストに分割する（層は非訓練部分だけで作り直す）
    validation_index, test_index = sample_positions(
        rest_index,
        math.floor(validation_prop * len(data)),
        strata_labels(data.iloc[rest_index], strata, breaks=breaks, pool=pool),
        seed=seed,
    )
    split = Split(data=data, train_index=train_index, test_index=test_index, validation_index=validation_index)
    logger.info(f"Finished initial validation split {split}")
    return split


# データを時系列順に訓練とテストに分割する関数
# shuffle=False により先頭の floor(prop * N) 行が訓練、残りがテストになる
def initial_time_split(
    data: pd.DataFrame,
    prop: float = 0.75,
    order_by: str | None = None,
) -> Split:
    check_proportion(prop)
    if order_by is None:
        positions = np.arange(len(data))
    else:
        if order_by not in data.columns:
            raise ColumnNotFoundError(order_by, context="time split data")
        positions = np.argsort(data[order_by].to_numpy(), kind="stable")
    logger.info(f"Start initial time split {len(data)=}, {prop=}, {order_by=}")

    train_index, test_index = train_test_split(positions, train_size=prop, shuffle=False)
    return Split(data=data, train_index=train_index, test_index=test_index)
