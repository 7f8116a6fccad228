# statsmodels を使った線形回帰（lm）・ロジスティック回帰（glm）エンジンの実装
# 係数の標準誤差・検定統計量・p 値まで含めた係数表を返せる
import logging

import numpy as np
import numpy.typing as npt
import pandas as pd
import statsmodels.api as sm

from tidyflow.model.mode import ModelMode
from tidyflow.model.registry import register_engine

from .base_engine import BaseEngine, PdNpType

logger = logging.getLogger(__name__)

INTERCEPT = "(Intercept)"


# 切片列を先頭に追加した float 型の説明変数行列を返す関数
def with_intercept(X: PdNpType) -> pd.DataFrame:
    X = pd.DataFrame(X).astype(float)
    X.insert(0, INTERCEPT, 1.0)
    return X


# statsmodels の学習結果から係数表（term, estimate, std_error, statistic, p_value）を作る関数
def tidy_results(results) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "term": results.params.index,
            "estimate": results.params.to_numpy(),
            "std_error": results.bse.to_numpy(),
            "statistic": results.tvalues.to_numpy(),
            "p_value": results.pvalues.to_numpy(),
        }
    )


# 最小二乗法による線形回帰エンジン
@register_engine("linear_reg", "lm")
class OLSEngine(BaseEngine):
    modes = (ModelMode.REGRESSION,)

    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        if self.args:
            logger.warning(f"The lm engine ignores model arguments {self.args}")
        self.model = sm.OLS(y.astype(float).to_numpy(), with_intercept(X), **self.engine_args).fit()

    def predict(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        return np.asarray(self.model.predict(with_intercept(X)))

    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        return tidy_results(self.model)


# 二項分布の一般化線形モデルによるロジスティック回帰エンジン
# classes_ の2番目の水準が起こる確率をモデル化する
@register_engine("logistic_reg", "glm")
class LogitEngine(BaseEngine):
    modes = (ModelMode.CLASSIFICATION,)

    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        if self.args:
            logger.warning(f"The glm engine ignores model arguments {self.args}")
        codes = self.encode_classes(y)
        if len(self.classes_) != 2:
            raise ValueError(f"The glm engine supports two classes only, got {self.classes_}")
        self.model = sm.GLM(
            codes.astype(float),
            with_intercept(X),
            family=sm.families.Binomial(),
            **self.engine_args,
        ).fit()

    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        prob_second = np.asarray(self.model.predict(with_intercept(X)))
        return np.column_stack([1.0 - prob_second, prob_second])

    def predict(self, X: PdNpType) -> npt.NDArray:
        return self.classes_from_proba(self.predict_proba(X))

    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        return tidy_results(self.model)
