# モデル式（"y ~ a + b"）を扱うモジュール
# patsy で説明変数の計画行列を作り、カテゴリ型の予測子は基準水準を除いた指示変数に展開される
# 学習時の計画行列の定義（DesignInfo）を保持しておき、新しいデータにも同じ展開を再現する
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd
from patsy import DesignInfo, NAAction, PatsyError, build_design_matrices, dmatrix

from tidyflow.exceptions import ColumnNotFoundError, SchemaMismatchError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_QUOTED = re.compile(r"Q\(\s*['\"](.+?)['\"]\s*\)")


# 解析済みのモデル式を保持するデータクラス
@dataclass(frozen=True)
class ModelFormula:
    formula: str
    outcome: str
    rhs: str  # patsy に渡す右辺
    predictors: tuple[str, ...]  # 右辺で参照しているカラム名

    # モデル式の文字列を解析する。右辺の "." は目的変数以外の全カラムを表す
    @classmethod
    def parse(cls, formula: str, columns: Sequence[str]) -> "ModelFormula":
        lhs, sep, rhs = formula.partition("~")
        if not sep:
            raise ValueError(f"Formula must contain '~': {formula!r}")
        outcome = lhs.strip()
        if outcome not in columns:
            raise ColumnNotFoundError(outcome, context="model data")

        rhs = rhs.strip()
        if rhs == ".":
            predictors = [column for column in columns if column != outcome]
            rhs = " + ".join(_quote(column) for column in predictors)
        else:
            tokens = _QUOTED.findall(rhs) + _IDENTIFIER.findall(rhs)
            predictors = [token for token in dict.fromkeys(tokens) if token in columns and token != outcome]
        return cls(formula=formula, outcome=outcome, rhs=rhs or "1", predictors=tuple(predictors))

    # 訓練データから計画行列を作るメソッド
    # 予測子または目的変数が欠損している行は除外し、切片列は各エンジンが付け直すため取り除く
    # 戻り値のインデックスは元データの行位置（行ラベルの重複に影響されない）
    def design(self, data: pd.DataFrame) -> tuple[pd.DataFrame, pd.Series, DesignInfo]:
        data = data.reset_index(drop=True)
        data = data.loc[data[self.outcome].notna()]
        X = self._dmatrix(data)
        if len(X) < len(data):
            logger.info(f"Dropping {len(data) - len(X)} row(s) with missing values")
        return X.drop(columns="Intercept", errors="ignore"), data.loc[X.index, self.outcome], X.design_info

    # 計画行列の定義（DesignInfo）だけを作るメソッド
    # DesignInfo は pickle できないため、保存したモデルを読み込んだ後はこのメソッドで作り直す
    def design_info(self, data: pd.DataFrame) -> DesignInfo:
        return self._dmatrix(data).design_info

    def _dmatrix(self, data: pd.DataFrame) -> pd.DataFrame:
        try:
            return dmatrix(self.rhs, data, NA_action="drop", return_type="dataframe")
        except PatsyError as e:
            raise ValueError(f"Invalid formula {self.formula!r}: {e}") from e

    # 学習時の計画行列の定義を使って新しいデータの計画行列を作るメソッド
    # 欠損値は行を落とさずにそのまま残すため、入力と同じ行数・同じ順序になる
    @staticmethod
    def rebuild(design_info: DesignInfo, data: pd.DataFrame) -> pd.DataFrame:
        try:
            (X,) = build_design_matrices([design_info], data, NA_action=NAAction(NA_types=[]), return_type="dataframe")
        except PatsyError as e:
            raise SchemaMismatchError(f"Cannot build the model design for new data: {e}") from e
        X.index = data.index
        return X.drop(columns="Intercept", errors="ignore")


# patsy の式で使えない文字を含むカラム名を Q("...") で囲む関数
def _quote(column: str) -> str:
    return column if column.isidentifier() else f'Q("{column}")'
