# 訓練データの行を間引いてクラスの偏りを補正するステップ
import logging
import math

import numpy as np
import pandas as pd

from tidyflow.const import DEFAULT_SEED
from tidyflow.recipe.selectors import ColumnTerm

from .base_step import BaseStep
from .encoding import check_nominal

logger = logging.getLogger(__name__)


# ダウンサンプリングステップ
# 最小クラスの件数 × under_ratio を上限として、各クラスの行を無作為に間引く
# 予測時のデータには適用しないよう、既定で skip=True としている
class StepDownsample(BaseStep):
    kind = "downsample"

    def __init__(
        self,
        column: ColumnTerm,
        under_ratio: float = 1.0,
        seed: int = DEFAULT_SEED,
        skip: bool = True,
    ) -> None:
        super().__init__(column, skip=skip)
        if under_ratio < 1:
            raise ValueError(f"under_ratio must be at least 1, got {under_ratio}")
        self.under_ratio = under_ratio
        self.seed = seed

    def _estimate(self, df: pd.DataFrame) -> None:
        if len(self.columns_) != 1:
            raise ValueError(f"StepDownsample requires exactly one column, got {self.columns_}")
        check_nominal(self, df, self.columns_)
        counts = df[self.columns_[0]].value_counts(dropna=True)
        counts = counts[counts > 0]
        self.counts_ = {level: int(count) for level, count in counts.items()}
        self.target_ = math.floor(counts.min() * self.under_ratio)
        logger.info(f"Downsampling {self.columns_[0]} to at most {self.target_} rows per class from {self.counts_}")

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        if not self.present_columns(df):
            return df
        rng = np.random.default_rng(self.seed)
        values = df[self.columns_[0]].astype(object).to_numpy()
        keep = [np.flatnonzero(pd.isna(values))]
        for level in self.counts_:
            positions = np.flatnonzero(values == level)
            if len(positions) > self.target_:
                positions = rng.choice(positions, size=self.target_, replace=False)
            keep.append(positions)
        # 元の行の並び順を保つ
        return df.iloc[np.sort(np.concatenate(keep))]

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        return pd.DataFrame(
            {
                "terms": self.columns_[0],
                "level": list(self.counts_),
                "count": list(self.counts_.values()),
                "target": self.target_,
            }
        )
