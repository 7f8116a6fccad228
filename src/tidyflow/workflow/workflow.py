# 前処理とモデル仕様を1つの学習・推論単位にまとめるワークフローを定義するモジュール
# 前処理はレシピ・モデル式・変数指定のいずれか1つで、モデル仕様はちょうど1つ必要になる
import dataclasses
import logging
import pickle
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias
from pathlib import Path

import pandas as pd

from tidyflow.exceptions import ColumnNotFoundError, IncompleteWorkflowError
from tidyflow.model import FittedModel, ModelMode, ModelSpec
from tidyflow.recipe import EstimatedRecipe, Recipe

logger = logging.getLogger(__name__)


# 目的変数と説明変数のカラム名を直接指定する前処理
@dataclass(frozen=True)
class Variables:
    outcome: str
    predictors: tuple[str, ...]


# モデル式（"y ~ a + b"）による前処理
@dataclass(frozen=True)
class Formula:
    formula: str


Preprocessor: TypeAlias = Recipe | Formula | Variables


# 未学習のワークフロー
# add_* / update_* / remove_* メソッドは値を変更した新しいワークフローを返す
@dataclass(frozen=True)
class Workflow:
    spec: ModelSpec | None = None
    preprocessor: Preprocessor | None = None

    def __repr__(self) -> str:
        return f"Workflow(preprocessor={self.preprocessor!r}, spec={self.spec!r})"

    def add_model(self, spec: ModelSpec) -> "Workflow":
        if self.spec is not None:
            raise ValueError("A model specification has already been added; use update_model to replace it")
        return dataclasses.replace(self, spec=spec)

    def update_model(self, spec: ModelSpec) -> "Workflow":
        return dataclasses.replace(self, spec=spec)

    def add_recipe(self, recipe: Recipe) -> "Workflow":
        return self._add_preprocessor(recipe)

    def add_formula(self, formula: str) -> "Workflow":
        return self._add_preprocessor(Formula(formula))

    def add_variables(self, outcome: str, predictors: Sequence[str]) -> "Workflow":
        return self._add_preprocessor(Variables(outcome, tuple(predictors)))

    def remove_preprocessor(self) -> "Workflow":
        return dataclasses.replace(self, preprocessor=None)

    def _add_preprocessor(self, preprocessor: Preprocessor) -> "Workflow":
        if self.preprocessor is not None:
            raise ValueError(
                f"A preprocessor has already been added ({self.preprocessor!r}); remove it before adding another"
            )
        return dataclasses.replace(self, preprocessor=preprocessor)

    # 学習に必要な要素が揃っているかを確認するメソッド
    def check_complete(self) -> None:
        if self.spec is None:
            raise IncompleteWorkflowError("The workflow does not have a model specification")
        if self.preprocessor is None:
            raise IncompleteWorkflowError("The workflow does not have a recipe, formula or variables")

    # ワークフローを学習して FittedWorkflow を返すメソッド
    # レシピがあれば訓練データで推定・適用し、変換後のデータでモデルを学習する
    def fit(self, data: pd.DataFrame) -> "FittedWorkflow":
        self.check_complete()
        logger.info(f"Start fit workflow {self!r} {len(data)=}")

        estimated_recipe = None
        match self.preprocessor:
            case Recipe() as recipe:
                if len(recipe.outcomes) != 1:
                    raise ValueError(f"A workflow recipe needs exactly one outcome, got {recipe.outcomes}")
                estimated_recipe = recipe.estimate(data)
                training = estimated_recipe.training_data
                outcome = estimated_recipe.outcomes[0]
                model = self.spec.fit_xy(training[estimated_recipe.predictors], training[outcome])
            case Formula(formula):
                model = self.spec.fit(data, formula)
            case Variables(outcome, predictors):
                missing = [column for column in (outcome, *predictors) if column not in data.columns]
                if missing:
                    raise ColumnNotFoundError(missing, context="workflow training data")
                df = data.dropna(subset=[outcome])
                model = self.spec.fit_xy(df[list(predictors)], df[outcome])

        logger.info(f"Finished fit workflow in {model.elapsed:.3f}s")
        return FittedWorkflow(workflow=self, model=model, recipe=estimated_recipe)


# ワークフローを段階的に組み立てるビルダー
# build() で不足のない Workflow を返し、モデル仕様または前処理が欠けている場合は IncompleteWorkflowError を送出する
class WorkflowBuilder:
    def __init__(self) -> None:
        self.spec: ModelSpec | None = None
        self.preprocessor: Preprocessor | None = None

    def model(self, spec: ModelSpec) -> "WorkflowBuilder":
        self.spec = spec
        return self

    def recipe(self, recipe: Recipe) -> "WorkflowBuilder":
        self.preprocessor = recipe
        return self

    def formula(self, formula: str) -> "WorkflowBuilder":
        self.preprocessor = Formula(formula)
        return self

    def variables(self, outcome: str, predictors: Sequence[str]) -> "WorkflowBuilder":
        self.preprocessor = Variables(outcome, tuple(predictors))
        return self

    def build(self) -> Workflow:
        workflow = Workflow(spec=self.spec, preprocessor=self.preprocessor)
        workflow.check_complete()
        return workflow


# 学習済みのワークフロー
# recipe はレシピを前処理に使った場合のみ推定済みのレシピを持つ
@dataclass(frozen=True, eq=False)
class FittedWorkflow:
    workflow: Workflow
    model: FittedModel
    recipe: EstimatedRecipe | None = None

    def __repr__(self) -> str:
        return f"FittedWorkflow(preprocessor={self.workflow.preprocessor!r}, model={self.model!r})"

    @property
    def outcome(self) -> str:
        return self.model.outcome

    @property
    def mode(self) -> ModelMode:
        return self.model.mode

    # 新しいデータに対して予測するメソッド
    # レシピがあれば skip=True 以外のステップを適用してから学習済みモデルで予測する
    # 戻り値は入力と同じ行数・同じ順序・同じインデックスの DataFrame になる
    def predict(self, new_data: pd.DataFrame, type: str | None = None) -> pd.DataFrame:
        return self.model.predict(self.prepare(new_data), type=type)

    # 推論用に新しいデータを前処理するメソッド
    def prepare(self, new_data: pd.DataFrame) -> pd.DataFrame:
        if self.recipe is None:
            return new_data
        baked = self.recipe.apply(new_data)
        return baked.drop(columns=list(self.recipe.outcomes), errors="ignore")

    # 新しいデータに予測結果のカラムを付け加えて返すメソッド
    # 分類では予測クラスと各クラスの予測確率の両方を付け加える
    def augment(self, new_data: pd.DataFrame) -> pd.DataFrame:
        prepared = self.prepare(new_data)
        if self.mode == ModelMode.REGRESSION:
            predictions = [self.model.predict(prepared, type="numeric")]
        else:
            predictions = [
                self.model.predict(prepared, type="class"),
                self.model.predict(prepared, type="prob"),
            ]
        return pd.concat([new_data, *predictions], axis=1)

    def extract_fit(self) -> FittedModel:
        return self.model

    def extract_recipe(self) -> EstimatedRecipe:
        if self.recipe is None:
            raise ValueError("The workflow was not fitted with a recipe")
        return self.recipe

    def extract_parameters(self) -> pd.DataFrame:
        return self.model.extract_parameters()

    # 学習済みワークフローを pickle 形式でローカルファイルに保存するメソッド
    def save(self, file_path: Path) -> None:
        logger.info(f"Save fitted workflow at {file_path}.")
        with open(file_path, "wb") as f:
            pickle.dump(self, f)

    @classmethod
    def load(cls, file_path: Path) -> "FittedWorkflow":
        logger.info(f"Loading fitted workflow from {file_path}")
        with open(file_path, "rb") as f:
            fitted_workflow = pickle.load(f)
        if not isinstance(fitted_workflow, cls):
            raise TypeError(f"{file_path} does not contain a {cls.__name__}")
        return fitted_workflow
