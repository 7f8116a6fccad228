# scikit-learn を使ったエンジンの実装
# 線形回帰（正則化あり・なし）・ロジスティック回帰・ランダムフォレスト・ヌルモデルを提供する
import logging

import numpy as np
import numpy.typing as npt
import pandas as pd
from sklearn.dummy import DummyClassifier, DummyRegressor
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from sklearn.linear_model import ElasticNet, LinearRegression, LogisticRegression, Ridge

from tidyflow.const import DEFAULT_SEED
from tidyflow.model.mode import ModelMode
from tidyflow.model.registry import register_engine

from .base_engine import BaseEngine, PdNpType

logger = logging.getLogger(__name__)


# 切片と係数を係数表（term, estimate）にまとめる関数
def coefficient_table(feature_names: list[str], intercept: float, coefficients: npt.NDArray) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "term": ["(Intercept)", *feature_names],
            "estimate": np.concatenate([[intercept], np.ravel(coefficients)]),
        }
    )


# 線形回帰エンジン
# penalty を指定しない場合は最小二乗法、mixture=0 ならリッジ回帰、それ以外はエラスティックネット（既定は lasso）
@register_engine("linear_reg", "sklearn")
class SklearnLinearEngine(BaseEngine):
    modes = (ModelMode.REGRESSION,)

    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        penalty = self.args.get("penalty")
        mixture = self.args.get("mixture", 1.0)
        if penalty is None:
            model = LinearRegression(**self.engine_args)
        elif mixture == 0:
            model = Ridge(alpha=penalty, **self.engine_args)
        else:
            model = ElasticNet(alpha=penalty, l1_ratio=mixture, **self.engine_args)
        self.feature_names_ = [str(column) for column in X.columns]
        self.model = model.fit(X, y.astype(float))

    def predict(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        return self.model.predict(X)

    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        return coefficient_table(self.feature_names_, float(self.model.intercept_), self.model.coef_)


# ロジスティック回帰エンジン
# penalty は正則化の強さで、scikit-learn の C = 1 / penalty に対応する
@register_engine("logistic_reg", "sklearn")
class SklearnLogisticEngine(BaseEngine):
    modes = (ModelMode.CLASSIFICATION,)

    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        if "mixture" in self.args:
            logger.warning("The sklearn logistic_reg engine uses an L2 penalty and ignores mixture")
        penalty = self.args.get("penalty")
        engine_args = {"max_iter": 1000} | self.engine_args
        if penalty is not None:
            engine_args["C"] = 1.0 / penalty
        codes = self.encode_classes(y)
        self.feature_names_ = [str(column) for column in X.columns]
        self.model = LogisticRegression(**engine_args).fit(X, codes)

    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        return self.model.predict_proba(X)

    def predict(self, X: PdNpType) -> npt.NDArray:
        return self.classes_from_proba(self.predict_proba(X))

    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        if len(self.classes_) == 2:
            return coefficient_table(self.feature_names_, float(self.model.intercept_[0]), self.model.coef_[0])
        # 多クラスの場合はクラスごとの係数表を縦に結合する
        return pd.concat(
            [
                coefficient_table(self.feature_names_, float(intercept), coefficients).assign(
                    **{"class": level}
                )
                for level, intercept, coefficients in zip(self.classes_, self.model.intercept_, self.model.coef_)
            ],
            ignore_index=True,
        )


# ランダムフォレストエンジン
# trees → n_estimators、min_n → min_samples_split、mtry → max_features に対応する
@register_engine("rand_forest", "sklearn")
class SklearnRandomForestEngine(BaseEngine):
    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        params = {
            "n_estimators": self.args.get("trees", 500),
            "min_samples_split": self.args.get("min_n", 2),
            "random_state": DEFAULT_SEED,
        }
        if "mtry" in self.args:
            params["max_features"] = self.args["mtry"]
        params |= self.engine_args
        self.feature_names_ = [str(column) for column in X.columns]
        if self.mode == ModelMode.REGRESSION:
            self.model = RandomForestRegressor(**params).fit(X, y.astype(float))
        else:
            self.model = RandomForestClassifier(**params).fit(X, self.encode_classes(y))

    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode != ModelMode.CLASSIFICATION:
            return super().predict_proba(X)
        return self.model.predict_proba(X)

    def predict(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode == ModelMode.REGRESSION:
            return self.model.predict(X)
        return self.classes_from_proba(self.predict_proba(X))

    # 不純度に基づく特徴量重要度を返す
    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        return pd.DataFrame({"term": self.feature_names_, "estimate": self.model.feature_importances_})


# ヌルモデルエンジン
# 回帰では訓練データの平均、分類では各クラスの事前確率を常に予測するベースライン
@register_engine("null_model", "sklearn")
class SklearnNullEngine(BaseEngine):
    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        if self.mode == ModelMode.REGRESSION:
            self.model = DummyRegressor(strategy="mean").fit(X, y.astype(float))
        else:
            self.model = DummyClassifier(strategy="prior").fit(X, self.encode_classes(y))

    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode != ModelMode.CLASSIFICATION:
            return super().predict_proba(X)
        return self.model.predict_proba(X)

    def predict(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode == ModelMode.REGRESSION:
            return self.model.predict(X)
        return self.classes_from_proba(self.predict_proba(X))

    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        if self.mode == ModelMode.REGRESSION:
            return pd.DataFrame({"term": ["(Intercept)"], "estimate": np.ravel(self.model.constant_)})
        return pd.DataFrame({"term": [str(level) for level in self.classes_], "estimate": self.model.class_prior_})
