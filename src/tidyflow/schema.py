# データセットのカラムスキーマ定義モジュール
# レシピの推定時・モデルの学習時に記録したスキーマと、新しいデータのスキーマを照合するために使用する
from dataclasses import dataclass
from enum import StrEnum

import pandas as pd

from .exceptions import SchemaMismatchError


class ColumnKind(StrEnum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    ORDINAL = "ordinal"


# 単一カラムのスキーマ情報を保持するデータクラス
@dataclass(frozen=True)
class ColumnSchema:
    name: str  # カラム名
    kind: ColumnKind  # 数値・カテゴリ・順序カテゴリのいずれか
    levels: tuple[str, ...] | None = None  # カテゴリ型の場合に観測された水準（数値型は None）

    @property
    def is_numeric(self) -> bool:
        return self.kind == ColumnKind.NUMERIC


# Series の dtype からカラム種別を判定する関数
# bool 型は数値ではなくカテゴリとして扱う
def column_kind(series: pd.Series) -> ColumnKind:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return ColumnKind.ORDINAL if series.dtype.ordered else ColumnKind.CATEGORICAL
    if pd.api.types.is_bool_dtype(series) or not pd.api.types.is_numeric_dtype(series):
        return ColumnKind.CATEGORICAL
    return ColumnKind.NUMERIC


# カテゴリ型カラムの水準一覧を返す関数
# Categorical 型であれば定義済みのカテゴリ順、それ以外は値をソートした順を返す
def column_levels(series: pd.Series) -> tuple[str, ...]:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return tuple(str(level) for level in series.dtype.categories)
    return tuple(sorted({str(value) for value in series.dropna().unique()}))


# DataFrame の全カラムについてスキーマを推定する関数
def infer_schema(df: pd.DataFrame) -> list[ColumnSchema]:
    schemas = []
    for name in df.columns:
        kind = column_kind(df[name])
        levels = None if kind == ColumnKind.NUMERIC else column_levels(df[name])
        schemas.append(ColumnSchema(name=str(name), kind=kind, levels=levels))
    return schemas


# 記録済みのスキーマと DataFrame を照合する関数
# カラムの欠落、または数値・非数値の種別の食い違いがあれば SchemaMismatchError を送出する
def check_schema(df: pd.DataFrame, schemas: list[ColumnSchema], context: str = "data") -> None:
    missing = [schema.name for schema in schemas if schema.name not in df.columns]
    if missing:
        raise SchemaMismatchError(f"{context} is missing required column(s): {missing}")

    # カテゴリと順序カテゴリは相互に互換とみなす
    mismatched = [
        f"{schema.name} (expected {schema.kind}, got {column_kind(df[schema.name])})"
        for schema in schemas
        if schema.is_numeric != (column_kind(df[schema.name]) == ColumnKind.NUMERIC)
    ]
    if mismatched:
        raise SchemaMismatchError(f"{context} has column(s) of incompatible kind: {mismatched}")
