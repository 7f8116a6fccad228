# Optuna を使ってワークフローのモデル引数をリサンプリング性能で探索するモジュール
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import optuna
import pandas as pd

from tidyflow.const import DEFAULT_SEED
from tidyflow.evaluation import MetricSet
from tidyflow.split import Split

from .resampling import collect_metrics, fit_resamples
from .workflow import Workflow

logger = logging.getLogger(__name__)


# 探索するモデル引数の範囲
# integer=True なら整数、log=True なら対数スケールで探索する
@dataclass(frozen=True)
class ParamRange:
    low: float
    high: float
    log: bool = False
    integer: bool = False

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"low must not exceed high, got {self.low} > {self.high}")

    def suggest(self, trial: optuna.Trial, name: str) -> int | float:
        if self.integer:
            return trial.suggest_int(name, int(self.low), int(self.high), log=self.log)
        return trial.suggest_float(name, self.low, self.high, log=self.log)


# 探索結果を保持するデータクラス
# metric は最適化に使った指標（メトリクスセットの先頭の指標）
@dataclass(frozen=True, eq=False)
class TuneResults:
    workflow: Workflow
    metric: str
    study: optuna.Study

    @property
    def best_params(self) -> dict[str, Any]:
        return self.study.best_params

    @property
    def best_value(self) -> float:
        return self.study.best_value

    # 各トライアルの引数と全指標の平均値を DataFrame で返すメソッド
    def trials(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {"number": trial.number, **trial.params, **trial.user_attrs}
                for trial in self.study.trials
                if trial.state == optuna.trial.TrialState.COMPLETE
            ]
        )


# モデル引数を探索する関数
# 各トライアルで提案された引数をモデル仕様に設定し、リサンプリングで求めた先頭の指標の平均値を最適化する
def tune_workflow(
    workflow: Workflow,
    resamples: Sequence[Split],
    metrics: MetricSet,
    search_space: Mapping[str, ParamRange],
    n_trials: int = 20,
    seed: int = DEFAULT_SEED,
) -> TuneResults:
    workflow.check_complete()
    if not search_space:
        raise ValueError("search_space must contain at least one model argument")
    target = metrics.metrics[0]

    def objective(trial: optuna.Trial) -> float:
        params = {name: param_range.suggest(trial, name) for name, param_range in search_space.items()}
        candidate = workflow.update_model(workflow.spec.set_args(**params))
        summary = collect_metrics(fit_resamples(candidate, resamples, metrics))
        for name, mean in zip(summary[".metric"], summary["mean"]):
            trial.set_user_attr(name, float(mean))
        return float(summary.loc[summary[".metric"] == target.name, "mean"].iloc[0])

    logger.info(f"Started hyper parameter search by optuna. {target.name=}, {n_trials=}")
    study = optuna.create_study(direction=str(target.direction), sampler=optuna.samplers.TPESampler(seed=seed))
    study.optimize(objective, n_trials=n_trials)
    logger.info(f"Finished hyper parameter search by optuna. {study.best_params=}, {study.best_value=}")
    return TuneResults(workflow=workflow, metric=target.name, study=study)


# 探索で選ばれた引数をモデル仕様に固定したワークフローを返す関数
def finalize_workflow(workflow: Workflow, params: Mapping[str, Any]) -> Workflow:
    workflow.check_complete()
    return workflow.update_model(workflow.spec.set_args(**params))
