# モデル仕様（ModelSpec）の定義と生成関数を提供するモジュール
# モデルの種類・ハイパーパラメータ・エンジン・モードだけを宣言し、データは学習時まで参照しない
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from .fitted import FittedModel, fit_formula, fit_xy
from .mode import ModelMode
from .registry import get_engine

logger = logging.getLogger(__name__)


# モデル仕様を保持するイミュータブルなデータクラス
# set_* メソッドは値を変更した新しいモデル仕様を返す
@dataclass(frozen=True)
class ModelSpec:
    model_type: str  # "linear_reg", "logistic_reg", "rand_forest", "boost_tree", "null_model"
    mode: ModelMode = ModelMode.UNKNOWN
    engine: str = "sklearn"
    args: dict[str, Any] = field(default_factory=dict)  # モデル共通の引数（penalty, trees など）
    engine_args: dict[str, Any] = field(default_factory=dict)  # エンジン固有の引数

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ModelMode(self.mode))
        # 未登録のエンジン、または対応していないモードはこの時点でエラーにする
        get_engine(self.model_type, self.engine, self.mode)

    def __repr__(self) -> str:
        args = {key: value for key, value in self.args.items() if value is not None}
        return f"ModelSpec({self.model_type}, mode={self.mode}, engine={self.engine}, args={args})"

    def set_engine(self, engine: str, **engine_args: Any) -> "ModelSpec":
        return dataclasses.replace(self, engine=engine, engine_args=engine_args)

    def set_mode(self, mode: ModelMode | str) -> "ModelSpec":
        return dataclasses.replace(self, mode=ModelMode(mode))

    def set_args(self, **args: Any) -> "ModelSpec":
        return dataclasses.replace(self, args=self.args | args)

    # モデル式を使って学習するメソッド（カテゴリ予測子は指示変数に展開される）
    def fit(self, data: pd.DataFrame, formula: str) -> FittedModel:
        return fit_formula(self, data, formula)

    # 説明変数と目的変数を明示して学習するメソッド（データはそのままエンジンに渡される）
    def fit_xy(self, x: pd.DataFrame, y: pd.Series) -> FittedModel:
        return fit_xy(self, x, y)


def linear_reg(penalty: float | None = None, mixture: float | None = None, engine: str = "lm") -> ModelSpec:
    return ModelSpec(
        model_type="linear_reg",
        mode=ModelMode.REGRESSION,
        engine=engine,
        args={"penalty": penalty, "mixture": mixture},
    )


def logistic_reg(penalty: float | None = None, mixture: float | None = None, engine: str = "glm") -> ModelSpec:
    return ModelSpec(
        model_type="logistic_reg",
        mode=ModelMode.CLASSIFICATION,
        engine=engine,
        args={"penalty": penalty, "mixture": mixture},
    )


def rand_forest(
    mode: ModelMode | str = ModelMode.UNKNOWN,
    trees: int | None = None,
    min_n: int | None = None,
    mtry: int | float | None = None,
    engine: str = "sklearn",
) -> ModelSpec:
    return ModelSpec(
        model_type="rand_forest",
        mode=ModelMode(mode),
        engine=engine,
        args={"trees": trees, "min_n": min_n, "mtry": mtry},
    )


def boost_tree(
    mode: ModelMode | str = ModelMode.UNKNOWN,
    trees: int | None = None,
    learn_rate: float | None = None,
    tree_depth: int | None = None,
    min_n: int | None = None,
    engine: str = "lightgbm",
) -> ModelSpec:
    return ModelSpec(
        model_type="boost_tree",
        mode=ModelMode(mode),
        engine=engine,
        args={"trees": trees, "learn_rate": learn_rate, "tree_depth": tree_depth, "min_n": min_n},
    )


# 平均値または事前確率を予測するだけのベースラインモデル
def null_model(mode: ModelMode | str = ModelMode.UNKNOWN, engine: str = "sklearn") -> ModelSpec:
    return ModelSpec(model_type="null_model", mode=ModelMode(mode), engine=engine)
