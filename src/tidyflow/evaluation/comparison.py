# 新しいワークフローとベースライン（ヌルモデルなど）を比較して、採用すべきかを判定するモジュール
# メトリクスセットの全指標でベースライン以上の性能を示した場合にのみ採用と判定する
import logging

import pandas as pd

from .metric_set import MetricSet

logger = logging.getLogger(__name__)


# 新しいワークフローの予測がベースラインの予測より優れているかを判定する関数
# 全指標で同等以上である場合のみ True を返す（AND 条件）
def is_workflow_better_than_baseline(
    metrics: MetricSet,
    predictions: pd.DataFrame,
    baseline_predictions: pd.DataFrame,
    truth: str,
) -> bool:
    results = metrics.evaluate(predictions, truth)
    baseline_results = metrics.evaluate(baseline_predictions, truth)

    is_better = True
    for metric, result, baseline in zip(metrics, results, baseline_results):
        logger.info(f"{metric.name}: {result.value}, baseline: {baseline.value}")
        # ベースラインの値が NaN（定数予測の相関など）の場合は新しいワークフローの値が求まっていれば良しとする
        is_better &= metric.is_better_or_equal(result.value, baseline.value)
    return is_better
