# 評価指標の定義モジュール
# 回帰（数値予測）・分類（クラス予測）・確率予測の3種類の指標を scikit-learn で計算する
# 二値分類では最初の水準を正例（イベント）として扱う
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import numpy as np
import numpy.typing as npt
from sklearn.metrics import (
    cohen_kappa_score,
    confusion_matrix,
    f1_score,
    log_loss,
    matthews_corrcoef,
    mean_absolute_error,
    mean_squared_error,
    precision_score,
    r2_score,
    recall_score,
    roc_auc_score,
)

from tidyflow.model.mode import ModelMode

logger = logging.getLogger(__name__)


class MetricKind(StrEnum):
    NUMERIC = "numeric"  # 数値の予測値と比較する回帰指標
    CLASS = "class"  # 予測クラスと比較する分類指標
    PROB = "prob"  # 各クラスの予測確率を使う分類指標


class Direction(StrEnum):
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


# 評価指標の名前・種類・最適化の向き・計算関数を保持するデータクラス
# fn は (truth, estimate, levels) を受け取り (値, estimator 名) を返す
@dataclass(frozen=True)
class Metric:
    name: str
    kind: MetricKind
    direction: Direction
    fn: Callable[[npt.NDArray, npt.NDArray, list], tuple[float, str]]

    def __repr__(self) -> str:
        return f"Metric({self.name}, kind={self.kind})"

    @property
    def mode(self) -> ModelMode:
        return ModelMode.REGRESSION if self.kind == MetricKind.NUMERIC else ModelMode.CLASSIFICATION

    # 単一の指標として評価するショートカット
    def __call__(self, predictions: Any, truth: str, estimate: str | None = None, **kwargs: Any) -> Any:
        from .metric_set import MetricSet

        (result,) = MetricSet(self).evaluate(predictions, truth, estimate=estimate, **kwargs)
        return result

    # value が baseline と同等以上に良いかを判定するメソッド
    def is_better_or_equal(self, value: float, baseline: float) -> bool:
        if np.isnan(baseline):
            return not np.isnan(value)
        if self.direction == Direction.MINIMIZE:
            return value <= baseline
        return value >= baseline


def _binary_or(levels: list, multiclass: str) -> str:
    return "binary" if len(levels) == 2 else multiclass


# Regression
def _rmse(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(np.sqrt(mean_squared_error(truth, estimate))), "standard"


def _mae(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(mean_absolute_error(truth, estimate)), "standard"


# 観測値と予測値の相関係数の二乗
# 予測値が定数の場合は相関が定義できないため NaN を返す
def _rsq(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    if np.std(truth) == 0 or np.std(estimate) == 0:
        logger.warning("A correlation computation is required, but the estimate or truth is constant")
        return float("nan"), "standard"
    return float(np.corrcoef(truth, estimate)[0, 1] ** 2), "standard"


# 決定係数（1 - 残差平方和 / 全平方和）
def _rsq_trad(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(r2_score(truth, estimate)), "standard"


# 平均絶対パーセント誤差（%）
def _mape(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.mean(np.abs((truth - estimate) / truth)) * 100), "standard"


# Class
def _accuracy(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(np.mean(truth == estimate)), _binary_or(levels, "multiclass")


def _kap(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(cohen_kappa_score(truth, estimate, labels=levels)), _binary_or(levels, "multiclass")


def _mcc(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    return float(matthews_corrcoef(truth, estimate)), _binary_or(levels, "multiclass")


# precision・recall・F 値は二値なら最初の水準を正例とし、多クラスならマクロ平均を取る
def _averaged(score: Callable) -> Callable[[npt.NDArray, npt.NDArray, list], tuple[float, str]]:
    def fn(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
        if len(levels) == 2:
            value = score(truth, estimate, labels=levels, pos_label=levels[0], average="binary", zero_division=0)
            return float(value), "binary"
        return float(score(truth, estimate, labels=levels, average="macro", zero_division=0)), "macro"

    return fn


# 特異度（負例を負例と判定できた割合）
# 多クラスでは各クラスを正例とみなしたときの特異度のマクロ平均を取る
def _specificity(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    cm = confusion_matrix(truth, estimate, labels=levels)
    total = cm.sum()
    values = []
    for i in range(len(levels)):
        fp = cm[:, i].sum() - cm[i, i]
        tn = total - cm[i, :].sum() - fp
        values.append(tn / (tn + fp) if tn + fp > 0 else 0.0)
    if len(levels) == 2:
        return float(values[0]), "binary"
    return float(np.mean(values)), "macro"


# Probability
# 二値では最初の水準の確率をスコアとし、多クラスでは Hand & Till の一対一 AUC の平均を取る
def _roc_auc(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    if len(levels) == 2:
        return float(roc_auc_score(truth == levels[0], estimate[:, 0])), "binary"
    codes = [levels.index(value) for value in truth]
    return float(roc_auc_score(codes, estimate, multi_class="ovo", labels=list(range(len(levels))))), "hand_till"


def _mn_log_loss(truth: npt.NDArray, estimate: npt.NDArray, levels: list) -> tuple[float, str]:
    codes = [levels.index(value) for value in truth]
    value = log_loss(codes, estimate, labels=list(range(len(levels))))
    return float(value), _binary_or(levels, "multiclass")


rmse = Metric("rmse", MetricKind.NUMERIC, Direction.MINIMIZE, _rmse)
mae = Metric("mae", MetricKind.NUMERIC, Direction.MINIMIZE, _mae)
rsq = Metric("rsq", MetricKind.NUMERIC, Direction.MAXIMIZE, _rsq)
rsq_trad = Metric("rsq_trad", MetricKind.NUMERIC, Direction.MAXIMIZE, _rsq_trad)
mape = Metric("mape", MetricKind.NUMERIC, Direction.MINIMIZE, _mape)

accuracy = Metric("accuracy", MetricKind.CLASS, Direction.MAXIMIZE, _accuracy)
kap = Metric("kap", MetricKind.CLASS, Direction.MAXIMIZE, _kap)
mcc = Metric("mcc", MetricKind.CLASS, Direction.MAXIMIZE, _mcc)
f_meas = Metric("f_meas", MetricKind.CLASS, Direction.MAXIMIZE, _averaged(f1_score))
precision = Metric("precision", MetricKind.CLASS, Direction.MAXIMIZE, _averaged(precision_score))
recall = Metric("recall", MetricKind.CLASS, Direction.MAXIMIZE, _averaged(recall_score))
specificity = Metric("specificity", MetricKind.CLASS, Direction.MAXIMIZE, _specificity)

roc_auc = Metric("roc_auc", MetricKind.PROB, Direction.MAXIMIZE, _roc_auc)
mn_log_loss = Metric("mn_log_loss", MetricKind.PROB, Direction.MINIMIZE, _mn_log_loss)
