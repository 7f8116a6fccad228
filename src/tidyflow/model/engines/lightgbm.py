# LightGBM を使った勾配ブースティング木エンジンの実装
# カテゴリ型カラムは LightGBM のネイティブカテゴリ処理に渡す
import logging
import re

import lightgbm as lgb
import numpy as np
import numpy.typing as npt
import pandas as pd

from tidyflow.const import DEFAULT_SEED
from tidyflow.model.mode import ModelMode
from tidyflow.model.registry import register_engine

from .base_engine import BaseEngine, PdNpType

logger = logging.getLogger(__name__)


# LightGBM モデルのエンジンクラス
# trees → ブースティングの反復回数、learn_rate → learning_rate、tree_depth → max_depth、min_n → min_data_in_leaf に対応する
@register_engine("boost_tree", "lightgbm")
class LightGBMEngine(BaseEngine):
    handles_missing = True

    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        params = {
            "learning_rate": self.args.get("learn_rate", 0.1),
            "max_depth": self.args.get("tree_depth", -1),
            "min_data_in_leaf": self.args.get("min_n", 20),
            "seed": DEFAULT_SEED,
            "verbosity": -1,
        }
        if self.mode == ModelMode.REGRESSION:
            params["objective"] = "regression"
            label = y.astype(float).to_numpy()
        else:
            label = self.encode_classes(y)
            if len(self.classes_) == 2:
                params["objective"] = "binary"
            else:
                params["objective"] = "multiclass"
                params["num_class"] = len(self.classes_)
        params |= self.engine_args

        # 文字列型のカラムは category 型に変換し、推論時にも同じカテゴリを使えるよう保持しておく
        self.categories_ = {
            column: sorted(X[column].dropna().unique())
            for column in X.columns
            if pd.api.types.is_object_dtype(X[column].dtype) or pd.api.types.is_string_dtype(X[column].dtype)
        }
        train_data = lgb.Dataset(self._prepare(X), label=label, categorical_feature="auto")
        self.model = lgb.train(params, train_data, num_boost_round=self.args.get("trees", 100))

    # 推論用に説明変数を整形するメソッド
    # LightGBM が扱えない記号（"[" や ":" など）を含むカラム名は "_" に置き換える
    def _prepare(self, X: PdNpType) -> pd.DataFrame:
        X = pd.DataFrame(X).copy()
        for column, categories in self.categories_.items():
            X[column] = pd.Categorical(X[column], categories=categories)
        X.columns = [re.sub(r"[^0-9A-Za-z_]+", "_", str(column)) for column in X.columns]
        return X

    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode != ModelMode.CLASSIFICATION:
            return super().predict_proba(X)
        # 二値分類の predict は2番目のクラスの確率のみを返すため、2列に展開する
        y_pred = np.asarray(self.model.predict(self._prepare(X)))
        if y_pred.ndim == 1:
            return np.column_stack([1.0 - y_pred, y_pred])
        return y_pred

    def predict(self, X: PdNpType) -> npt.NDArray:
        self.check_fitted()
        if self.mode == ModelMode.REGRESSION:
            return np.asarray(self.model.predict(self._prepare(X)))
        return self.classes_from_proba(self.predict_proba(X))

    # gain に基づく特徴量重要度を返す
    def extract_parameters(self) -> pd.DataFrame:
        self.check_fitted()
        return pd.DataFrame(
            {
                "term": self.model.feature_name(),
                "estimate": self.model.feature_importance(importance_type="gain"),
            }
        )
