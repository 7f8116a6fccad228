# 全エンジン（学習バックエンド）クラスの基底となる抽象クラスを定義するモジュール
# 学習・推論・パラメータ抽出・保存のインターフェースを強制することで、モデル仕様がバックエンドの種類を意識せずに扱えるようにする
import logging
import pickle
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, TypeAlias

import numpy as np
import numpy.typing as npt
import pandas as pd

from tidyflow.model.mode import ModelMode

logger = logging.getLogger(__name__)

# DataFrame または NumPy 配列を受け付けるユニオン型エイリアス
PdNpType: TypeAlias = pd.DataFrame | npt.NDArray


# 全エンジンクラスが継承すべき抽象基底クラス
# args はモデル仕様の共通引数（penalty, trees など）、engine_args はエンジン固有の引数
class BaseEngine(ABC):
    modes: ClassVar[tuple[ModelMode, ...]] = (ModelMode.REGRESSION, ModelMode.CLASSIFICATION)
    # 欠損値を含む行をそのまま予測できるエンジンかどうか（False なら欠損行の予測は欠損になる）
    handles_missing: ClassVar[bool] = False

    def __init__(
        self,
        mode: ModelMode,
        args: dict[str, Any] | None = None,
        engine_args: dict[str, Any] | None = None,
    ) -> None:
        self.mode = mode
        # 値が None の引数はエンジンの既定値に任せる
        self.args = {key: value for key, value in (args or {}).items() if value is not None}
        self.engine_args = dict(engine_args or {})
        self.model: Any = None
        self.classes_: list = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mode={self.mode}, args={self.args}, engine_args={self.engine_args})"

    # モデルを訓練する抽象メソッド
    @abstractmethod
    def fit(self, X: pd.DataFrame, y: pd.Series) -> None:
        raise NotImplementedError

    # 回帰では予測値、分類では予測クラスを返す抽象メソッド
    @abstractmethod
    def predict(self, X: PdNpType) -> npt.NDArray:
        raise NotImplementedError

    # 各クラスの予測確率を classes_ の順に並べた (n, クラス数) の配列で返すメソッド
    def predict_proba(self, X: PdNpType) -> npt.NDArray:
        raise NotImplementedError(f"{type(self).__name__} does not support class probabilities")

    # 学習済みの係数や特徴量重要度を DataFrame（term, estimate, ...）で返す抽象メソッド
    @abstractmethod
    def extract_parameters(self) -> pd.DataFrame:
        raise NotImplementedError

    # エンジンを pickle 形式でローカルファイルに保存するメソッド
    def save(self, file_path: Path) -> None:
        logger.info(f"Save engine file at {file_path}.")
        self.check_fitted()
        with open(file_path, "wb") as f:
            pickle.dump(self, f)

    @classmethod
    def load(cls, file_path: Path) -> "BaseEngine":
        logger.info(f"Loading engine from {file_path}")
        with open(file_path, "rb") as f:
            engine = pickle.load(f)
        if not isinstance(engine, cls):
            raise TypeError(f"{file_path} does not contain a {cls.__name__}")
        return engine

    def check_fitted(self) -> None:
        if self.model is None:
            raise ValueError("Model is not instantiated.")

    # 分類の目的変数を classes_ の位置を表す整数コードに変換するメソッド
    # カテゴリ型であれば定義済みのカテゴリ順（観測された水準のみ）、それ以外はソート順をクラスの並びとする
    def encode_classes(self, y: pd.Series) -> npt.NDArray[np.intp]:
        observed = set(y.dropna())
        if isinstance(y.dtype, pd.CategoricalDtype):
            classes = [level for level in y.dtype.categories if level in observed]
        else:
            classes = sorted(observed)
        if len(classes) < 2:
            raise ValueError(f"A classification outcome needs at least two observed classes, got {classes}")
        self.classes_ = classes
        return np.asarray(pd.Categorical(y, categories=classes).codes, dtype=np.intp)

    # 予測確率が最大となるクラスを返すメソッド
    def classes_from_proba(self, proba: npt.NDArray) -> npt.NDArray:
        return np.asarray(self.classes_, dtype=object)[np.argmax(proba, axis=1)]
