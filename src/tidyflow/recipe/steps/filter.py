# 不要なカラムを取り除くステップ
import logging
from collections.abc import Sequence

import pandas as pd

from tidyflow.recipe.selectors import ColumnTerm, all_predictors

from .base_step import BaseStep

logger = logging.getLogger(__name__)


# 分散ゼロ（訓練データで値が1種類しかない）のカラムを削除するステップ
class StepZv(BaseStep):
    kind = "zv"

    def __init__(self, columns: ColumnTerm | Sequence[ColumnTerm] | None = None, skip: bool = False) -> None:
        super().__init__(all_predictors() if columns is None else columns, skip=skip)

    def _estimate(self, df: pd.DataFrame) -> None:
        self.removals_ = [column for column in self.columns_ if df[column].nunique(dropna=False) <= 1]
        if self.removals_:
            logger.info(f"Removing zero-variance column(s): {self.removals_}")

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.drop(columns=[column for column in self.removals_ if column in df.columns])

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        return pd.DataFrame({"terms": self.removals_})
