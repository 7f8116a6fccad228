# 層化抽出のための層（バケット）を作成するモジュール
# 数値カラムは分位点で、カテゴリカラムはカテゴリで層を作り、小さすぎる層は隣接する層とまとめる
import logging
import math

import numpy as np
import numpy.typing as npt
import pandas as pd

from tidyflow.schema import ColumnKind, column_kind

logger = logging.getLogger(__name__)


# 層化変数から各行の層ラベルを作成する関数
# pool はデータ全体に対する層の最小割合で、これに満たない層は統合される
def make_strata(x: pd.Series, breaks: int = 4, pool: float = 0.1) -> npt.NDArray[np.str_]:
    if column_kind(x) == ColumnKind.NUMERIC:
        if x.nunique() < 2:
            codes = pd.Series(0, index=x.index)
        else:
            # 欠損値は -1 の層にまとめる
            codes = pd.qcut(x, q=breaks, labels=False, duplicates="drop").fillna(-1).astype(int)
        counts = codes.value_counts()
        # 数値の層は分位点の順に並べ、隣り合う層同士を統合する
        order = sorted(counts.index)
    else:
        codes = x.astype(str)
        counts = codes.value_counts()
        # カテゴリの層は件数の少ない順に並べ、少数カテゴリ同士を先に統合する
        order = sorted(counts.index, key=lambda key: (counts[key], key))

    min_size = max(2, math.ceil(pool * len(x)))
    mapping = _pool_buckets(counts, order, min_size=min_size)
    n_strata = len(set(mapping.values()))
    if n_strata < len(counts):
        logger.info(f"Pooled {len(counts)} buckets of {x.name} into {n_strata} strata ({min_size=})")
    return codes.map(mapping).to_numpy(dtype=str)


# 並び順に沿って層を順に結合し、どの層も min_size 件以上になるような対応表を返す関数
def _pool_buckets(counts: pd.Series, order: list, min_size: int) -> dict:
    groups: list[list] = []
    current: list = []
    current_size = 0
    for key in order:
        current.append(key)
        current_size += int(counts[key])
        if current_size >= min_size:
            groups.append(current)
            current, current_size = [], 0

    # 最後に残った小さな層は直前の層に含める
    if current:
        if groups:
            groups[-1].extend(current)
        else:
            groups.append(current)

    return {key: f"stratum_{i}" for i, group in enumerate(groups) for key in group}
