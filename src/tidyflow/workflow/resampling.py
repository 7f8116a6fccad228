# リサンプリング（交差検証など）でワークフローの性能を推定するモジュール
# 各リサンプルの分析用データでレシピを推定し直してモデルを学習し、評価用データで指標を計算する
import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from tidyflow.evaluation import MetricSet, to_frame
from tidyflow.split import Split

from .workflow import Workflow

logger = logging.getLogger(__name__)


# リサンプリングの結果を保持するデータクラス
# results はリサンプルごとの指標（id, .metric, .estimator, .estimate）、predictions は評価用データの予測結果
@dataclass(frozen=True, eq=False)
class ResampleResults:
    workflow: Workflow
    metrics: MetricSet
    results: pd.DataFrame
    predictions: pd.DataFrame | None = None

    def __repr__(self) -> str:
        return f"ResampleResults(n_resamples={self.results['id'].nunique()}, metrics={self.metrics.names})"


# リサンプルごとにワークフローを学習・評価する関数
# save_pred=True の場合は評価用データの予測結果（元の行位置 .row とリサンプルの id 付き）も保持する
def fit_resamples(
    workflow: Workflow,
    resamples: Sequence[Split],
    metrics: MetricSet,
    save_pred: bool = False,
) -> ResampleResults:
    workflow.check_complete()
    if not resamples:
        raise ValueError("At least one resample is required")

    results = []
    predictions = []
    for split in resamples:
        fitted = workflow.fit(split.analysis())
        assessment = split.assessment()
        augmented = fitted.augment(assessment)
        frame = to_frame(metrics.evaluate(augmented, truth=fitted.outcome))
        results.append(frame.assign(id=split.id))
        logger.info(f"Evaluated {split.id}: {dict(zip(frame['.metric'], frame['.estimate']))}")
        if save_pred:
            predictions.append(augmented.assign(id=split.id, **{".row": split.test_index}))

    return ResampleResults(
        workflow=workflow,
        metrics=metrics,
        results=pd.concat(results, ignore_index=True)[["id", ".metric", ".estimator", ".estimate"]],
        predictions=pd.concat(predictions, ignore_index=True) if save_pred else None,
    )


# リサンプリングの結果を指標ごとに集計する関数
# mean はリサンプル間の平均、std_err は標準誤差（標本標準偏差 / sqrt(n)）
def collect_metrics(resample_results: ResampleResults, summarize: bool = True) -> pd.DataFrame:
    results = resample_results.results
    if not summarize:
        return results.copy()
    summary = (
        results.groupby([".metric", ".estimator"], sort=False)[".estimate"]
        .agg(mean="mean", n="count", std="std")
        .reset_index()
    )
    summary["std_err"] = summary["std"] / np.sqrt(summary["n"])
    return summary.drop(columns="std")


# 評価用データの予測結果を返す関数
def collect_predictions(resample_results: ResampleResults) -> pd.DataFrame:
    if resample_results.predictions is None:
        raise ValueError("Predictions were not saved; use fit_resamples(..., save_pred=True)")
    return resample_results.predictions.copy()
