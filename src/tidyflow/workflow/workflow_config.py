# ワークフロー設定の定義と取得関数を提供するモジュール
# 使用するデータセット・前処理・モデル仕様・評価指標・データ分割の設定を一元管理する
import logging
from dataclasses import dataclass

from tidyflow.evaluation import MetricSet, accuracy, kap, mae, mn_log_loss, rmse, roc_auc, rsq
from tidyflow.model import ModelMode, boost_tree, linear_reg, logistic_reg, null_model, rand_forest
from tidyflow.recipe import Recipe, all_nominal_predictors, starts_with

from .workflow import Workflow

logger = logging.getLogger(__name__)

AMES_FORMULA = "Sale_Price ~ Neighborhood + Gr_Liv_Area + Year_Built + Bldg_Type + Latitude + Longitude"


# ワークフローの学習・評価に必要な全設定を保持するデータクラス
@dataclass
class WorkflowConfig:
    name: str  # ワークフローの識別名（--workflow 引数や成果物の保存先に使用）
    dataset: str  # 使用するデータセット名（tidyflow.datasets.load_dataset のキー）
    outcome: str  # 目的変数のカラム名
    workflow: Workflow  # 前処理とモデル仕様
    metrics: MetricSet  # 評価指標（先頭の指標でベースラインとの比較とチューニングを行う）
    prop: float = 0.75  # 訓練データの割合
    strata: str | None = None  # 層化抽出に使うカラム名
    v: int = 10  # 交差検証の分割数

    @property
    def mode(self) -> ModelMode:
        return self.workflow.spec.mode

    # 同じ前処理でヌルモデルを学習するベースラインのワークフロー
    @property
    def baseline(self) -> Workflow:
        return self.workflow.update_model(null_model(mode=self.mode))


# プロジェクトで使用する全ワークフローの設定リスト
workflow_configs = [
    # 住宅価格（log10 変換済み）の線形回帰
    # 少数の地区をまとめ、建物種別ごとに居住面積の傾きを変え、緯度経度の非線形な効果をスプラインで表す
    WorkflowConfig(
        name="ames_lm",
        dataset="ames",
        outcome="Sale_Price",
        workflow=Workflow()
        .add_recipe(
            Recipe.from_formula(AMES_FORMULA)
            .step_log("Gr_Liv_Area", base=10)
            .step_other("Neighborhood", threshold=0.01)
            .step_dummy(all_nominal_predictors())
            .step_interact([("Gr_Liv_Area", starts_with("Bldg_Type_"))])
            .step_spline(["Latitude", "Longitude"], deg_free=20)
        )
        .add_model(linear_reg()),
        metrics=MetricSet(rmse, rsq, mae),
        strata="Sale_Price",
    ),
    # 住宅価格のランダムフォレスト（カテゴリ予測子は one-hot 展開する）
    WorkflowConfig(
        name="ames_rf",
        dataset="ames",
        outcome="Sale_Price",
        workflow=Workflow()
        .add_recipe(Recipe.from_formula(AMES_FORMULA).step_dummy(all_nominal_predictors(), one_hot=True))
        .add_model(rand_forest(mode=ModelMode.REGRESSION, trees=500)),
        metrics=MetricSet(rmse, rsq, mae),
        strata="Sale_Price",
    ),
    # 気温と種による鳴き声の頻度の線形回帰（モデル式で種を指示変数に展開する）
    WorkflowConfig(
        name="crickets_lm",
        dataset="crickets",
        outcome="rate",
        workflow=Workflow().add_formula("rate ~ temp + species").add_model(linear_reg()),
        metrics=MetricSet(rmse, rsq),
        v=5,
    ),
    # 2クラス分類のロジスティック回帰（Class1 が事象クラス）
    WorkflowConfig(
        name="two_class_glm",
        dataset="two_class",
        outcome="Class",
        workflow=Workflow().add_variables(outcome="Class", predictors=["A", "B"]).add_model(logistic_reg()),
        metrics=MetricSet(roc_auc, mn_log_loss, accuracy, kap),
        strata="Class",
    ),
    # 2クラス分類の LightGBM
    # 訓練データのみ多数派クラスをダウンサンプリングする（推論時はスキップされる）
    WorkflowConfig(
        name="two_class_lgbm",
        dataset="two_class",
        outcome="Class",
        workflow=Workflow()
        .add_recipe(Recipe.from_formula("Class ~ A + B").step_downsample("Class"))
        .add_model(boost_tree(mode=ModelMode.CLASSIFICATION, trees=200, learn_rate=0.05, min_n=10)),
        metrics=MetricSet(roc_auc, mn_log_loss, accuracy, kap),
        strata="Class",
    ),
]


# ワークフロー名から設定を取得する関数
# 存在しない名前が指定された場合は ValueError を発生させる
def get_workflow_config(workflow_name: str) -> WorkflowConfig:
    for workflow_config in workflow_configs:
        if workflow_config.name == workflow_name:
            return workflow_config
    raise ValueError(f"Invalid workflow name: {workflow_name}")
