# カテゴリカラムを変換するステップ（少数カテゴリの統合・ダミー変数化）
import logging
import re
from collections.abc import Sequence

import numpy as np
import pandas as pd

from tidyflow.recipe.selectors import ColumnTerm
from tidyflow.schema import ColumnKind, column_kind

from .base_step import BaseStep

logger = logging.getLogger(__name__)


# カテゴリカラムの水準を、定義済みのカテゴリ順またはソート順で返す関数
def observed_levels(series: pd.Series) -> list:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return list(series.dtype.categories)
    return sorted(series.dropna().unique())


# 対象カラムがすべてカテゴリ型であることを確認する関数
def check_nominal(step: BaseStep, df: pd.DataFrame, columns: Sequence[str]) -> None:
    numeric = [column for column in columns if column_kind(df[column]) == ColumnKind.NUMERIC]
    if numeric:
        raise ValueError(f"{type(step).__name__} requires nominal columns, got numeric: {numeric}")


# 少数カテゴリを "other" にまとめるステップ
# threshold が 1 未満なら出現割合、1 以上なら出現件数の閾値として扱い、閾値未満の水準を統合する
class StepOther(BaseStep):
    kind = "other"

    def __init__(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        threshold: float = 0.05,
        other: str = "other",
        skip: bool = False,
    ) -> None:
        super().__init__(columns, skip=skip)
        if threshold <= 0:
            raise ValueError(f"threshold must be positive, got {threshold}")
        self.threshold = threshold
        self.other = other

    def _estimate(self, df: pd.DataFrame) -> None:
        check_nominal(self, df, self.columns_)
        self.retained_: dict[str, list] = {}
        self.collapsed_: dict[str, bool] = {}
        for column in self.columns_:
            levels = observed_levels(df[column])
            if self.other in levels:
                raise ValueError(f"{column} already has a level named {self.other!r}")
            counts = df[column].value_counts(dropna=True)
            frequency = counts / counts.sum() if self.threshold < 1 else counts
            retained = [level for level in levels if frequency.get(level, 0) >= self.threshold]
            self.retained_[column] = retained
            self.collapsed_[column] = len(retained) < len(levels)
            logger.info(f"{column}: retained {len(retained)} of {len(levels)} levels")

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        for column in self.present_columns(df):
            retained = self.retained_[column]
            values = df[column].astype(object)
            unseen = values.notna() & ~values.isin(retained)
            if self.collapsed_[column]:
                values[unseen] = self.other
                categories = retained + [self.other]
            else:
                # 推定時に統合が無かった場合、未知の水準はそのまま残す
                categories = retained + sorted(values[unseen].unique(), key=str)
            df[column] = pd.Categorical(values, categories=categories)
        return df

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        rows = [
            {"terms": column, "retained": level}
            for column in self.columns_
            for level in self.retained_[column]
        ]
        return pd.DataFrame(rows, columns=["terms", "retained"])


# ダミー変数化ステップ
# 推定時の水準ごとに 0/1 の指示変数を作る。one_hot=False の場合は先頭の水準を基準として除く
# 推定時に無かった水準はすべての指示変数が 0 になり、欠損値はすべて欠損になる
class StepDummy(BaseStep):
    kind = "dummy"

    def __init__(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        one_hot: bool = False,
        skip: bool = False,
    ) -> None:
        super().__init__(columns, skip=skip)
        self.one_hot = one_hot

    def _estimate(self, df: pd.DataFrame) -> None:
        check_nominal(self, df, self.columns_)
        self.levels_ = {column: observed_levels(df[column]) for column in self.columns_}
        self.dummy_names_ = {
            column: [dummy_name(column, level) for level in self._encoded_levels(column)] for column in self.columns_
        }

    def _encoded_levels(self, column: str) -> list:
        levels = self.levels_[column]
        return levels if self.one_hot else levels[1:]

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        dummies = {}
        for column in self.present_columns(df):
            values = df[column].astype(object)
            unseen = values.notna() & ~values.isin(self.levels_[column])
            if unseen.any():
                logger.warning(f"{column} has {int(unseen.sum())} row(s) with levels unseen at estimation")
            for level, name in zip(self._encoded_levels(column), self.dummy_names_[column]):
                indicator = (values == level).astype(float)
                indicator[values.isna()] = np.nan
                dummies[name] = indicator
        df = df.drop(columns=self.present_columns(df))
        return pd.concat([df, pd.DataFrame(dummies, index=df.index)], axis=1)

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        rows = [
            {"terms": column, "columns": name}
            for column in self.columns_
            for name in self.dummy_names_[column]
        ]
        return pd.DataFrame(rows, columns=["terms", "columns"])


# ダミー変数のカラム名を "<カラム名>_<水準>" の形式で作る関数（英数字以外は "_" に置換する）
def dummy_name(column: str, level: object) -> str:
    return f"{column}_{re.sub(r'[^0-9A-Za-z_]+', '_', str(level)).strip('_')}"
