# 数値カラムを変換するステップ（対数変換・標準化）
import logging
import math
from collections.abc import Sequence

import numpy as np
import pandas as pd

from tidyflow.recipe.selectors import ColumnTerm
from tidyflow.schema import ColumnKind, column_kind

from .base_step import BaseStep

logger = logging.getLogger(__name__)


# 対象カラムがすべて数値型であることを確認する関数
def check_numeric(step: BaseStep, df: pd.DataFrame, columns: Sequence[str]) -> None:
    non_numeric = [column for column in columns if column_kind(df[column]) != ColumnKind.NUMERIC]
    if non_numeric:
        raise ValueError(f"{type(step).__name__} requires numeric columns, got non-numeric: {non_numeric}")


# 対数変換ステップ
# log(x + offset) を底 base で計算する。学習するパラメータはない
class StepLog(BaseStep):
    kind = "log"

    def __init__(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        base: float = math.e,
        offset: float = 0.0,
        skip: bool = False,
    ) -> None:
        super().__init__(columns, skip=skip)
        self.base = base
        self.offset = offset

    def _estimate(self, df: pd.DataFrame) -> None:
        check_numeric(self, df, self.columns_)

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        for column in self.present_columns(df):
            values = df[column].to_numpy(dtype=float) + self.offset
            if (values <= 0).any():
                logger.warning(f"{column} has non-positive values; log transform yields -inf or NaN")
            with np.errstate(divide="ignore", invalid="ignore"):
                df[column] = np.log(values) / np.log(self.base)
        return df

    def tidy(self) -> pd.DataFrame:
        return super().tidy().assign(base=self.base, offset=self.offset)


# 標準化ステップ
# 訓練データの平均と標準偏差を学習し、(x - 平均) / 標準偏差 に変換する
class StepNormalize(BaseStep):
    kind = "normalize"

    def _estimate(self, df: pd.DataFrame) -> None:
        check_numeric(self, df, self.columns_)
        self.means_ = {column: float(df[column].mean()) for column in self.columns_}
        self.sds_ = {column: float(df[column].std()) for column in self.columns_}

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        for column in self.present_columns(df):
            centered = df[column].astype(float) - self.means_[column]
            # 標準偏差が 0 のカラムは中心化のみ行う
            sd = self.sds_[column]
            df[column] = centered / sd if sd > 0 else centered
        return df

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        return pd.DataFrame(
            {
                "terms": self.columns_,
                "mean": [self.means_[column] for column in self.columns_],
                "sd": [self.sds_[column] for column in self.columns_],
            }
        )
