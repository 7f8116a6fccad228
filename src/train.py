# ワークフロー学習パイプラインのエントリーポイント
# データの読み込み・分割・(交差検証)・学習・評価・ベースライン比較・成果物の保存まで実行する
import argparse
import json
import logging
from datetime import datetime

import matplotlib.pyplot as plt
import pandas as pd

from tidyflow.const import ARTIFACT_ROOT, DEFAULT_SEED, PREDICTION_COLUMN, PROBABILITY_PREFIX
from tidyflow.datasets import load_dataset, read_dataset_csv
from tidyflow.evaluation import (
    is_workflow_better_than_baseline,
    plot_calibration_curve,
    plot_histgram,
    plot_predicted_vs_observed,
    plot_roc_auc_curve,
    to_frame,
)
from tidyflow.middleware import Artifact, set_logger_config
from tidyflow.model import ModelMode
from tidyflow.split import initial_split, vfold_cv
from tidyflow.workflow import MetaData, collect_metrics, fit_resamples, get_workflow_config

logger = logging.getLogger(__name__)


# コマンドライン引数を解析して返す関数
def load_options(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Workflow training pipeline arguments")
    # 使用するワークフロー名（tidyflow.workflow.workflow_config を参照）
    parser.add_argument("-w", "--workflow_name", type=str, default="ames_lm")
    # 生成データの代わりに読み込む CSV ファイル（省略時はデータセットを生成する）
    parser.add_argument("-d", "--data_path", type=str, default=None)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    # 訓練データで交差検証を行うかどうかのフラグ
    parser.add_argument("--resample", action="store_true")
    parser.add_argument("--artifact_root", type=str, default=ARTIFACT_ROOT)

    return parser.parse_args(argv)


# 学習パイプライン全体を実行するメイン関数
def main(argv: list[str] | None = None) -> None:
    args = load_options(argv)

    # -----------------------------
    # Setup
    # -----------------------------
    current_time = datetime.now()
    version = current_time.strftime("%Y%m%d%H%M%S")
    artifact = Artifact(version=version, job_type=f"train/{args.workflow_name}", root=args.artifact_root)
    set_logger_config(log_file_path=artifact.file_path("log.txt"))
    workflow_config = get_workflow_config(workflow_name=args.workflow_name)
    logger.info(f"{artifact=}, {args=}, {workflow_config.workflow=}")

    # -----------------------------
    # Load & Split Data
    # -----------------------------
    if args.data_path is None:
        df = load_dataset(workflow_config.dataset, seed=args.seed)
    else:
        df = read_dataset_csv(args.data_path, name=workflow_config.dataset)
    split = initial_split(df, prop=workflow_config.prop, strata=workflow_config.strata, seed=args.seed)
    df_train, df_test = split.training(), split.testing()
    logger.info(f"{split=}")

    # -----------------------------
    # Resample
    # -----------------------------
    # 訓練データの交差検証で汎化性能を見積もる（各分割でレシピを推定し直す）
    df_resample_metrics = None
    if args.resample:
        folds = vfold_cv(df_train, v=workflow_config.v, strata=workflow_config.strata, seed=args.seed)
        resample_results = fit_resamples(workflow_config.workflow, folds, workflow_config.metrics)
        df_resample_metrics = collect_metrics(resample_results)
        logger.info(f"Resampling metrics:\n{df_resample_metrics}")

    # -----------------------------
    # Train Workflow
    # -----------------------------
    fitted_workflow = workflow_config.workflow.fit(df_train)

    # -----------------------------
    # Evaluate Workflow
    # -----------------------------
    outcome = workflow_config.outcome
    # 訓練データでの評価（過学習チェック用）
    train_results = workflow_config.metrics.evaluate(fitted_workflow.augment(df_train), truth=outcome)
    # テストデータでの評価（汎化性能の計測）
    df_pred = fitted_workflow.augment(df_test)
    test_results = workflow_config.metrics.evaluate(df_pred, truth=outcome)
    metrics = {
        "train": {result.name: result.value for result in train_results},
        "test": {result.name: result.value for result in test_results},
    }

    # 同じ前処理で学習したヌルモデルをベースラインとして比較する
    fitted_baseline = workflow_config.baseline.fit(df_train)
    is_better = is_workflow_better_than_baseline(
        metrics=workflow_config.metrics,
        predictions=df_pred,
        baseline_predictions=fitted_baseline.augment(df_test),
        truth=outcome,
    )
    if not is_better:
        logger.warning(f"{workflow_config.name} does not outperform the null model baseline")

    figures = plot_figures(df_pred, outcome, fitted_workflow.mode, fitted_workflow.model.levels)

    # -----------------------------
    # Store Artifacts
    # -----------------------------
    meta_data = MetaData(
        workflow_config=workflow_config,
        command_line_arguments=args,
        version=version,
        start_time=current_time,
        end_time=datetime.now(),
        artifact_dir=str(artifact.dir_path),
        metrics=metrics["test"],
        is_better_than_baseline=is_better,
    )
    meta_data.save_as_json(artifact.file_path("metadata.json"))

    fitted_workflow.save(artifact.file_path("workflow.pkl"))
    fitted_workflow.extract_parameters().to_csv(artifact.file_path("parameters.csv"), index=False)

    to_frame(test_results).to_csv(artifact.file_path("metrics.csv"), index=False)
    with open(artifact.file_path("metrics.json"), "w") as f:
        json.dump(metrics, f, indent=2)
    if df_resample_metrics is not None:
        df_resample_metrics.to_csv(artifact.file_path("resample_metrics.csv"), index=False)

    df_pred.to_csv(artifact.file_path("df_pred.csv"), index=False)
    for name, fig in figures.items():
        fig.savefig(artifact.file_path(f"{name}.png"))
        plt.close(fig)

    logger.info(f"Finished workflow training pipeline. {meta_data.workflow_name=}, {metrics=}")


# 評価グラフを生成する関数
# 回帰は予測値と観測値の散布図、分類は最初の水準（事象クラス）の予測確率で ROC 曲線・キャリブレーション曲線・分布を描く
def plot_figures(df_pred: pd.DataFrame, outcome: str, mode: ModelMode, levels: list) -> dict[str, plt.Figure]:
    if mode == ModelMode.REGRESSION:
        return {
            "predicted_vs_observed": plot_predicted_vs_observed(
                y_true=df_pred[outcome].to_numpy(dtype=float),
                y_pred=df_pred[PREDICTION_COLUMN].to_numpy(dtype=float),
            )
        }

    event = levels[0]
    y_true = (df_pred[outcome] == event).to_numpy()
    y_pred = df_pred[f"{PROBABILITY_PREFIX}{event}"].to_numpy(dtype=float)
    return {
        "roc_auc_curve": plot_roc_auc_curve(y_true=y_true, y_pred=y_pred, event=str(event)),
        "calibration_curve": plot_calibration_curve(y_true=y_true, y_pred=y_pred, strategy="quantile", event=str(event)),
        "histgram": plot_histgram(y_true=df_pred[outcome].astype(str).to_numpy(), y_pred=y_pred),
    }


if __name__ == "__main__":
    main()
