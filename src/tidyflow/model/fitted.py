# 学習済みモデル（FittedModel）と学習処理を定義するモジュール
# モデル式による学習（カテゴリ予測子を指示変数に展開する）と、カラムを明示した学習（データをそのまま渡す）の2通りを提供する
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
from patsy import DesignInfo

from tidyflow.const import PREDICTION_CLASS_COLUMN, PREDICTION_COLUMN, PROBABILITY_PREFIX
from tidyflow.schema import ColumnKind, ColumnSchema, check_schema, column_kind, infer_schema

from .engines.base_engine import BaseEngine
from .formula import ModelFormula
from .mode import ModelMode
from .registry import get_engine

if TYPE_CHECKING:
    from .spec import ModelSpec

logger = logging.getLogger(__name__)


# 学習済みモデルを保持するデータクラス
# schema は学習時の予測子のスキーマで、推論時の入力データの検証に使う
@dataclass(frozen=True, eq=False)
class FittedModel:
    spec: "ModelSpec"
    engine: BaseEngine
    schema: list[ColumnSchema]
    outcome: str
    formula: ModelFormula | None = None
    design_info: DesignInfo | None = None
    design_data: pd.DataFrame | None = None  # 計画行列の定義を作り直すための訓練データの予測子
    elapsed: float = 0.0  # 学習にかかった秒数

    def __repr__(self) -> str:
        return f"FittedModel({self.spec.model_type}, engine={self.spec.engine}, outcome={self.outcome!r})"

    # patsy の DesignInfo は pickle できないため、保存時には除外し、読み込み時に訓練データの予測子から作り直す
    def __getstate__(self) -> dict:
        state = self.__dict__.copy()
        state["design_info"] = None
        return state

    def __setstate__(self, state: dict) -> None:
        self.__dict__.update(state)
        if self.formula is not None and self.design_data is not None:
            object.__setattr__(self, "design_info", self.formula.design_info(self.design_data))

    @property
    def mode(self) -> ModelMode:
        return self.spec.mode

    @property
    def predictors(self) -> list[str]:
        return [schema.name for schema in self.schema]

    # 分類モデルのクラスの並び（予測確率カラムの順序）
    @property
    def levels(self) -> list:
        return list(self.engine.classes_)

    # 新しいデータに対する予測を、入力と同じ行数・同じ順序・同じインデックスの DataFrame で返すメソッド
    # type="numeric" は ".pred"、"class" は ".pred_class"、"prob" は水準ごとの ".pred_<水準>" カラムになる
    def predict(self, new_data: pd.DataFrame, type: str | None = None) -> pd.DataFrame:
        if type is None:
            type = "numeric" if self.mode == ModelMode.REGRESSION else "class"
        allowed = ("numeric",) if self.mode == ModelMode.REGRESSION else ("class", "prob")
        if type not in allowed:
            raise ValueError(f"Prediction type {type!r} is not available for {self.mode} models; use one of {allowed}")

        X = self.model_matrix(new_data)
        # 欠損値を扱えないエンジンには欠損のない行だけを渡し、残りの行の予測は欠損とする
        if self.engine.handles_missing:
            positions = np.arange(len(X))
        else:
            positions = np.flatnonzero(X.notna().all(axis=1).to_numpy())
            if len(positions) < len(X):
                logger.info(f"Predicting missing values for {len(X) - len(positions)} row(s) with missing predictors")

        predictions = self._predict_rows(X.iloc[positions], type)
        predictions.index = positions
        predictions = predictions.reindex(np.arange(len(X)))
        predictions.index = new_data.index
        return predictions

    def _predict_rows(self, X: pd.DataFrame, type: str) -> pd.DataFrame:
        if type == "numeric":
            values = self.engine.predict(X) if len(X) else np.array([], dtype=float)
            return pd.DataFrame({PREDICTION_COLUMN: values})
        if type == "class":
            classes = self.engine.predict(X) if len(X) else []
            return pd.DataFrame({PREDICTION_CLASS_COLUMN: pd.Categorical(classes, categories=self.levels)})
        proba = self.engine.predict_proba(X) if len(X) else np.empty((0, len(self.levels)))
        return pd.DataFrame({f"{PROBABILITY_PREFIX}{level}": proba[:, i] for i, level in enumerate(self.levels)})

    # 新しいデータを検証し、エンジンに渡す説明変数に変換するメソッド
    def model_matrix(self, new_data: pd.DataFrame) -> pd.DataFrame:
        check_schema(new_data, self.schema, context="prediction data")
        if self.design_info is not None:
            return ModelFormula.rebuild(self.design_info, new_data)
        return new_data[self.predictors]

    def extract_parameters(self) -> pd.DataFrame:
        return self.engine.extract_parameters()


# モデルのモードと目的変数の型が整合しているかを確認する関数
def check_outcome(mode: ModelMode, y: pd.Series) -> None:
    if mode == ModelMode.UNKNOWN:
        raise ValueError("Please set the mode in the model specification before fitting")
    kind = column_kind(y)
    if mode == ModelMode.REGRESSION and kind != ColumnKind.NUMERIC:
        raise ValueError(f"For a regression model, the outcome {y.name!r} should be numeric")
    if mode == ModelMode.CLASSIFICATION and kind == ColumnKind.NUMERIC:
        raise ValueError(f"For a classification model, the outcome {y.name!r} should be categorical")


# エンジンを生成して学習し、経過時間を記録する関数
def _fit_engine(spec: "ModelSpec", X: pd.DataFrame, y: pd.Series) -> tuple[BaseEngine, float]:
    engine_class = get_engine(spec.model_type, spec.engine, spec.mode)
    engine = engine_class(spec.mode, args=spec.args, engine_args=spec.engine_args)
    start = time.perf_counter()
    engine.fit(X, y)
    elapsed = time.perf_counter() - start
    logger.info(f"Fitted {engine} {X.shape=} in {elapsed:.3f}s")
    return engine, elapsed


# モデル式を使って学習する関数
def fit_formula(spec: "ModelSpec", data: pd.DataFrame, formula: str) -> FittedModel:
    model_formula = ModelFormula.parse(formula, list(data.columns))
    check_outcome(spec.mode, data[model_formula.outcome])
    X, y, design_info = model_formula.design(data)
    engine, elapsed = _fit_engine(spec, X, y)
    return FittedModel(
        spec=spec,
        engine=engine,
        schema=infer_schema(data[list(model_formula.predictors)]),
        outcome=model_formula.outcome,
        formula=model_formula,
        design_info=design_info,
        design_data=data.iloc[y.index][list(model_formula.predictors)],
        elapsed=elapsed,
    )


# 説明変数と目的変数を明示して学習する関数（データは変換せずにそのままエンジンへ渡す）
def fit_xy(spec: "ModelSpec", x: pd.DataFrame, y: pd.Series) -> FittedModel:
    if len(x) != len(y):
        raise ValueError(f"x and y have different numbers of rows: {len(x)} != {len(y)}")
    check_outcome(spec.mode, y)
    if y.isna().any():
        raise ValueError(f"The outcome {y.name!r} contains missing values")
    engine, elapsed = _fit_engine(spec, x, y)
    return FittedModel(
        spec=spec,
        engine=engine,
        schema=infer_schema(x),
        outcome=str(y.name) if y.name is not None else ".outcome",
        elapsed=elapsed,
    )
