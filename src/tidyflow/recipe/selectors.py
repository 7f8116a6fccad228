# レシピのステップで対象カラムを選択するセレクタ群
# カラム名の文字列とセレクタを混在させて指定でき、推定時に具体的なカラム名へ解決される
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias

import pandas as pd

from tidyflow.exceptions import ColumnNotFoundError
from tidyflow.schema import ColumnKind, column_kind


# 全セレクタの基底クラス
# pickle で保存できるよう、クロージャではなくデータクラスとして定義する
@dataclass(frozen=True)
class Selector:
    def select(self, df: pd.DataFrame, outcomes: Sequence[str]) -> list[str]:
        raise NotImplementedError


@dataclass(frozen=True)
class _Predictors(Selector):
    kinds: tuple[ColumnKind, ...] | None = None

    def select(self, df: pd.DataFrame, outcomes: Sequence[str]) -> list[str]:
        return [
            column
            for column in df.columns
            if column not in outcomes and (self.kinds is None or column_kind(df[column]) in self.kinds)
        ]


@dataclass(frozen=True)
class _StartsWith(Selector):
    prefix: str

    def select(self, df: pd.DataFrame, outcomes: Sequence[str]) -> list[str]:
        return [column for column in df.columns if str(column).startswith(self.prefix)]


def all_predictors() -> Selector:
    return _Predictors()


def all_numeric_predictors() -> Selector:
    return _Predictors(kinds=(ColumnKind.NUMERIC,))


def all_nominal_predictors() -> Selector:
    return _Predictors(kinds=(ColumnKind.CATEGORICAL, ColumnKind.ORDINAL))


def starts_with(prefix: str) -> Selector:
    return _StartsWith(prefix)


ColumnTerm: TypeAlias = str | Selector


# カラム名とセレクタの列を具体的なカラム名のリストに解決する関数
# 文字列で指定されたカラムが存在しない場合は ColumnNotFoundError を送出し、重複は順序を保って取り除く
def resolve_columns(terms: Sequence[ColumnTerm], df: pd.DataFrame, outcomes: Sequence[str] = ()) -> list[str]:
    missing = [term for term in terms if isinstance(term, str) and term not in df.columns]
    if missing:
        raise ColumnNotFoundError(missing, context="recipe data")

    columns: list[str] = []
    for term in terms:
        selected = [term] if isinstance(term, str) else term.select(df, outcomes)
        columns.extend(column for column in selected if column not in columns)
    return columns
