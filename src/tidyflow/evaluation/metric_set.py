# 複数の評価指標をまとめて計算するメトリクスセットを定義するモジュール
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from tidyflow.const import PREDICTION_CLASS_COLUMN, PREDICTION_COLUMN, PROBABILITY_PREFIX
from tidyflow.exceptions import ColumnNotFoundError, IncompatibleMetricError
from tidyflow.model.mode import ModelMode
from tidyflow.schema import ColumnKind, column_kind

from .metrics import Metric, MetricKind

logger = logging.getLogger(__name__)


# 1つの評価指標の計算結果
@dataclass(frozen=True)
class MetricResult:
    name: str  # 指標名（rmse, accuracy など）
    estimator: str  # "standard", "binary", "macro", "multiclass", "hand_till" のいずれか
    value: float
    truth_column: str
    estimate_column: str | tuple[str, ...]  # 確率指標の場合は確率カラムの並び


# 同じモード（回帰または分類）の評価指標を順序付きでまとめたクラス
class MetricSet:
    def __init__(self, *metrics: Metric) -> None:
        if not metrics:
            raise ValueError("A metric set needs at least one metric")
        modes = {metric.mode for metric in metrics}
        if len(modes) > 1:
            raise IncompatibleMetricError(
                f"All metrics in a set must share a mode, got {[(metric.name, str(metric.mode)) for metric in metrics]}"
            )
        self.metrics: tuple[Metric, ...] = metrics
        self.mode: ModelMode = modes.pop()

    def __repr__(self) -> str:
        return f"MetricSet({', '.join(self.names)})"

    def __iter__(self) -> Iterator[Metric]:
        return iter(self.metrics)

    def __len__(self) -> int:
        return len(self.metrics)

    @property
    def names(self) -> list[str]:
        return [metric.name for metric in self.metrics]

    # 予測結果の DataFrame から各指標を計算し、指標の並び順どおりに結果を返すメソッド
    # estimate を省略すると回帰は ".pred"、分類は ".pred_class" を使い、
    # probabilities を省略すると目的変数の水準ごとの ".pred_<水準>" カラムを使う
    # 観測値または予測値が欠損している行は除外して計算する
    def evaluate(
        self,
        predictions: pd.DataFrame,
        truth: str,
        estimate: str | None = None,
        probabilities: Sequence[str] | None = None,
    ) -> list[MetricResult]:
        _require_columns(predictions, [truth])
        if self.mode == ModelMode.REGRESSION:
            return self._evaluate_numeric(predictions, truth, estimate or PREDICTION_COLUMN)

        if column_kind(predictions[truth]) == ColumnKind.NUMERIC:
            raise IncompatibleMetricError(f"Classification metrics need a categorical truth column, {truth!r} is numeric")
        kinds = {metric.kind for metric in self.metrics}
        estimate = estimate or PREDICTION_CLASS_COLUMN
        if MetricKind.CLASS in kinds:
            _require_columns(predictions, [estimate])
            if column_kind(predictions[estimate]) == ColumnKind.NUMERIC:
                raise IncompatibleMetricError(
                    f"Class metrics need a categorical estimate column, {estimate!r} is continuous; "
                    "use a probability metric for class probabilities"
                )
        levels = _levels(predictions, truth, estimate if MetricKind.CLASS in kinds else None)

        values: dict[str, MetricResult] = {}
        if MetricKind.CLASS in kinds:
            values |= self._evaluate_class(predictions, truth, estimate, levels)
        if MetricKind.PROB in kinds:
            if probabilities is None:
                probabilities = [f"{PROBABILITY_PREFIX}{level}" for level in levels]
            values |= self._evaluate_prob(predictions, truth, list(probabilities), levels)
        return [values[metric.name] for metric in self.metrics]

    def _evaluate_numeric(self, predictions: pd.DataFrame, truth: str, estimate: str) -> list[MetricResult]:
        _require_columns(predictions, [estimate])
        for column in (truth, estimate):
            if column_kind(predictions[column]) != ColumnKind.NUMERIC:
                raise IncompatibleMetricError(f"Regression metrics need numeric columns, {column!r} is not numeric")
        df = _drop_missing(predictions, [truth, estimate])
        y_true = df[truth].to_numpy(dtype=float)
        y_pred = df[estimate].to_numpy(dtype=float)

        results = []
        for metric in self.metrics:
            value, estimator = metric.fn(y_true, y_pred, [])
            results.append(MetricResult(metric.name, estimator, value, truth, estimate))
        logger.info(f"Evaluated {[(result.name, result.value) for result in results]}")
        return results

    def _evaluate_class(
        self, predictions: pd.DataFrame, truth: str, estimate: str, levels: list
    ) -> dict[str, MetricResult]:
        df = _drop_missing(predictions, [truth, estimate])
        y_true = np.asarray(df[truth], dtype=object)
        y_pred = np.asarray(df[estimate], dtype=object)

        results = {}
        for metric in self.metrics:
            if metric.kind == MetricKind.CLASS:
                value, estimator = metric.fn(y_true, y_pred, levels)
                results[metric.name] = MetricResult(metric.name, estimator, value, truth, estimate)
        logger.info(f"Evaluated {[(result.name, result.value) for result in results.values()]}")
        return results

    def _evaluate_prob(
        self, predictions: pd.DataFrame, truth: str, probabilities: list[str], levels: list
    ) -> dict[str, MetricResult]:
        if len(probabilities) != len(levels):
            raise ValueError(f"Expected {len(levels)} probability columns for levels {levels}, got {probabilities}")
        _require_columns(predictions, probabilities)
        for column in probabilities:
            if column_kind(predictions[column]) != ColumnKind.NUMERIC:
                raise IncompatibleMetricError(f"Probability metrics need numeric columns, {column!r} is not numeric")
        df = _drop_missing(predictions, [truth, *probabilities])
        y_true = np.asarray(df[truth], dtype=object)
        y_proba = df[probabilities].to_numpy(dtype=float)

        results = {}
        for metric in self.metrics:
            if metric.kind == MetricKind.PROB:
                value, estimator = metric.fn(y_true, y_proba, levels)
                results[metric.name] = MetricResult(metric.name, estimator, value, truth, tuple(probabilities))
        logger.info(f"Evaluated {[(result.name, result.value) for result in results.values()]}")
        return results


# 評価結果を ".metric", ".estimator", ".estimate" の3カラムの DataFrame に変換する関数
def to_frame(results: Sequence[MetricResult]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            ".metric": [result.name for result in results],
            ".estimator": [result.estimator for result in results],
            ".estimate": [result.value for result in results],
        }
    )


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise ColumnNotFoundError(missing, context="predictions")


def _drop_missing(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    df = df[columns].dropna()
    if df.empty:
        raise ValueError(f"No complete rows to evaluate in columns {columns}")
    return df


# 分類の水準を決める関数
# 観測値がカテゴリ型であれば定義済みのカテゴリ順、それ以外は観測値と予測クラスの値をソートした順とする
def _levels(predictions: pd.DataFrame, truth: str, estimate: str | None) -> list:
    y_true = predictions[truth]
    if isinstance(y_true.dtype, pd.CategoricalDtype):
        return list(y_true.dtype.categories)
    observed = set(y_true.dropna())
    if estimate is not None and estimate in predictions.columns:
        observed |= set(predictions[estimate].dropna())
    return sorted(observed)
