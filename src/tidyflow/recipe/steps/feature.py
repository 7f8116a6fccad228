# 新しい特徴量を作るステップ（交互作用項・スプライン基底展開）
import itertools
import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import SplineTransformer

from tidyflow.recipe.selectors import ColumnTerm, resolve_columns

from .base_step import BaseStep
from .transform import check_numeric

logger = logging.getLogger(__name__)


# 交互作用項を作るステップ
# terms の各組 (a, b) について、a と b で選ばれたカラムの全組み合わせの積を "<a>_x_<b>" として追加する
# ダミー変数化の後に starts_with("Bldg_Type_") のようなセレクタと組み合わせて使う
class StepInteract(BaseStep):
    kind = "interact"

    def __init__(
        self,
        terms: Sequence[tuple[ColumnTerm, ColumnTerm]],
        separator: str = "_x_",
        skip: bool = False,
    ) -> None:
        super().__init__((), skip=skip)
        self.pair_terms = tuple(terms)
        self.separator = separator

    def _estimate(self, df: pd.DataFrame) -> None:
        pairs: list[tuple[str, str]] = []
        for left, right in self.pair_terms:
            left_columns = resolve_columns([left], df, self.outcomes_)
            right_columns = resolve_columns([right], df, self.outcomes_)
            pairs.extend(pair for pair in itertools.product(left_columns, right_columns) if pair not in pairs)
        if not pairs:
            logger.warning(f"No interaction terms were created from {self.pair_terms}")

        self.pairs_ = pairs
        self.columns_ = list(dict.fromkeys(column for pair in pairs for column in pair))
        check_numeric(self, df, self.columns_)

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        interactions = {
            f"{left}{self.separator}{right}": df[left] * df[right]
            for left, right in self.pairs_
        }
        return pd.concat([df, pd.DataFrame(interactions, index=df.index)], axis=1)

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return pd.DataFrame({"terms": [f"{left}:{right}" for left, right in self.pair_terms]})
        return pd.DataFrame({"terms": [f"{left}{self.separator}{right}" for left, right in self.pairs_]})


# スプライン基底展開ステップ
# 訓練データの分位点にノットを置いた3次 B スプライン基底で各カラムを deg_free 本の列に置き換える
# ノットの外側は線形に外挿する
class StepSpline(BaseStep):
    kind = "spline"

    def __init__(
        self,
        columns: ColumnTerm | Sequence[ColumnTerm],
        deg_free: int = 5,
        degree: int = 3,
        skip: bool = False,
    ) -> None:
        super().__init__(columns, skip=skip)
        if deg_free < degree:
            raise ValueError(f"deg_free ({deg_free}) must be at least degree ({degree})")
        self.deg_free = deg_free
        self.degree = degree

    def _estimate(self, df: pd.DataFrame) -> None:
        check_numeric(self, df, self.columns_)
        # include_bias=False の場合、基底の本数は n_knots + degree - 2 になる
        n_knots = self.deg_free - self.degree + 2
        self.splines_ = {
            column: SplineTransformer(
                n_knots=n_knots,
                degree=self.degree,
                knots="quantile",
                extrapolation="linear",
                include_bias=False,
            ).fit(df[[column]].to_numpy(dtype=float))
            for column in self.columns_
        }

    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        expanded = []
        for column in self.present_columns(df):
            basis = self.splines_[column].transform(df[[column]].to_numpy(dtype=float))
            names = [f"{column}_spline_{i:02d}" for i in range(1, basis.shape[1] + 1)]
            expanded.append(pd.DataFrame(basis, columns=names, index=df.index))
        df = df.drop(columns=self.present_columns(df))
        return pd.concat([df, *expanded], axis=1)

    # 各カラムの境界ノットと内部ノットを返す
    def knots(self, column: str) -> np.ndarray:
        knot_vector = self.splines_[column].bsplines_[0].t
        return knot_vector[self.degree : len(knot_vector) - self.degree]

    def tidy(self) -> pd.DataFrame:
        if not self.is_estimated:
            return super().tidy()
        rows = [{"terms": column, "knot": float(knot)} for column in self.columns_ for knot in self.knots(column)]
        return pd.DataFrame(rows, columns=["terms", "knot"])
