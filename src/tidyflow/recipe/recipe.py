# 前処理パイプライン（レシピ）を定義するモジュール
# ステップの並びを訓練データで一度だけ推定し、推定済みのレシピを新しいデータに同じ順序で再適用する
import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from tidyflow.const import DEFAULT_SEED
from tidyflow.exceptions import ColumnNotFoundError
from tidyflow.schema import ColumnSchema, check_schema, infer_schema

from .selectors import ColumnTerm, all_nominal_predictors
from .steps import (
    BaseStep,
    StepDownsample,
    StepDummy,
    StepInteract,
    StepLog,
    StepNormalize,
    StepOther,
    StepSpline,
    StepZv,
)

logger = logging.getLogger(__name__)


# 未推定のレシピ
# 目的変数・予測子の役割とステップの並びだけを持ち、データは参照しない
# step_* メソッドはステップを追加した新しいレシピを返す
class Recipe:
    def __init__(
        self,
        outcomes: str | Sequence[str] = (),
        predictors: Sequence[str] | None = None,
        steps: Sequence[BaseStep] = (),
    ) -> None:
        self.outcomes: tuple[str, ...] = (outcomes,) if isinstance(outcomes, str) else tuple(outcomes)
        self.predictors: tuple[str, ...] | None = None if predictors is None else tuple(predictors)
        self.steps: tuple[BaseStep, ...] = tuple(steps)

    def __repr__(self) -> str:
        predictors = "." if self.predictors is None else " + ".join(self.predictors)
        steps = ", ".join(step.kind for step in self.steps)
        return f"Recipe({' + '.join(self.outcomes)} ~ {predictors}, steps=[{steps}])"

    # "y ~ a + b" 形式の文字列から役割を読み取ってレシピを作るクラスメソッド
    # 右辺の "." は目的変数以外の全カラムを表す。変換や交互作用の記法は扱わない
    @classmethod
    def from_formula(cls, formula: str) -> "Recipe":
        lhs, sep, rhs = formula.partition("~")
        if not sep:
            raise ValueError(f"Formula must contain '~': {formula!r}")
        outcomes = [term.strip() for term in lhs.split("+") if term.strip()]
        predictors = [term.strip() for term in rhs.split("+") if term.strip()]
        if not predictors:
            raise ValueError(f"Formula has no predictors: {formula!r}")
        if "." in predictors:
            if len(predictors) > 1:
                raise ValueError(f"'.' cannot be combined with other predictors: {formula!r}")
            return cls(outcomes=outcomes)
        return cls(outcomes=outcomes, predictors=predictors)

    def add_step(self, step: BaseStep) -> "Recipe":
        if step.is_estimated:
            raise ValueError(f"Cannot add an estimated step to a recipe: {step}")
        return Recipe(self.outcomes, self.predictors, self.steps + (step,))

    def step_log(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        base: float = math.e,
        offset: float = 0.0,
        skip: bool = False,
    ) -> "Recipe":
        return self.add_step(StepLog(columns, base=base, offset=offset, skip=skip))

    def step_normalize(self, columns: ColumnTerm | Sequence[ColumnTerm], skip: bool = False) -> "Recipe":
        return self.add_step(StepNormalize(columns, skip=skip))

    def step_other(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        threshold: float = 0.05,
        other: str = "other",
        skip: bool = False,
    ) -> "Recipe":
        return self.add_step(StepOther(columns, threshold=threshold, other=other, skip=skip))

    def step_dummy(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm] | None = None,
        one_hot: bool = False,
        skip: bool = False,
    ) -> "Recipe":
        columns = all_nominal_predictors() if columns is None else columns
        return self.add_step(StepDummy(columns, one_hot=one_hot, skip=skip))

    def step_interact(
        self,
        terms: Sequence[tuple[ColumnTerm, ColumnTerm]],
        separator: str = "_x_",
        skip: bool = False,
    ) -> "Recipe":
        return self.add_step(StepInteract(terms, separator=separator, skip=skip))

    def step_spline(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        deg_free: int = 5,
        degree: int = 3,
        skip: bool = False,
    ) -> "Recipe":
        return self.add_step(StepSpline(columns, deg_free=deg_free, degree=degree, skip=skip))

    def step_zv(self, columns: ColumnTerm | Sequence[ColumnTerm] | None = None, skip: bool = False) -> "Recipe":
        return self.add_step(StepZv(columns, skip=skip))

    def step_downsample(
        self,
        column: ColumnTerm,
        under_ratio: float = 1.0,
        seed: int = DEFAULT_SEED,
        skip: bool = True,
    ) -> "Recipe":
        return self.add_step(StepDownsample(column, under_ratio=under_ratio, seed=seed, skip=skip))

    # 訓練データでレシピを推定し、EstimatedRecipe を返すメソッド
    # 各ステップは直前のステップを適用した後の訓練データで推定する（skip=True のステップも訓練データには適用する）
    def estimate(self, training: pd.DataFrame) -> "EstimatedRecipe":
        missing = [column for column in self.outcomes + (self.predictors or ()) if column not in training.columns]
        if missing:
            raise ColumnNotFoundError(missing, context="recipe training data")

        if self.predictors is None:
            predictors = [column for column in training.columns if column not in self.outcomes]
        else:
            predictors = list(self.predictors)
        df = training[predictors + list(self.outcomes)].copy()
        input_schema = infer_schema(df)
        logger.info(f"Start estimate recipe {len(df)=}, {len(self.steps)=}")

        estimated_steps = []
        for step in self.steps:
            estimated = step.estimate(df, outcomes=self.outcomes)
            df = estimated.apply(df)
            estimated_steps.append(estimated)

        logger.info(f"Finished estimate recipe {df.shape=}")
        return EstimatedRecipe(
            recipe=self,
            steps=tuple(estimated_steps),
            input_schema=input_schema,
            outcomes=self.outcomes,
            training_data=df,
        )


# 推定済みのレシピ
# training_data は推定時に全ステップ（skip=True を含む）を適用した訓練データ
@dataclass(frozen=True, eq=False)
class EstimatedRecipe:
    recipe: Recipe
    steps: tuple[BaseStep, ...]
    input_schema: list[ColumnSchema]
    outcomes: tuple[str, ...]
    training_data: pd.DataFrame

    @property
    def predictors(self) -> list[str]:
        return [column for column in self.training_data.columns if column not in self.outcomes]

    # 推定済みのステップを新しいデータに順に適用するメソッド
    # skip=True のステップは適用しない。目的変数は新しいデータに無くてもよい
    def apply(self, data: pd.DataFrame) -> pd.DataFrame:
        predictor_schema = [schema for schema in self.input_schema if schema.name not in self.outcomes]
        check_schema(data, predictor_schema, context="recipe input")
        columns = [schema.name for schema in self.input_schema if schema.name in data.columns]
        df = data[columns].copy()
        for step in self.steps:
            if step.skip:
                continue
            df = step.apply(df)
        return df

    # 各ステップの種類・skip・対象カラムを一覧にして返すメソッド
    def tidy(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "number": range(1, len(self.steps) + 1),
                "kind": [step.kind for step in self.steps],
                "skip": [step.skip for step in self.steps],
                "columns": [step.columns_ for step in self.steps],
            }
        )
