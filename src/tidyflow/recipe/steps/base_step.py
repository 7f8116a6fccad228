# 全前処理ステップの基底となる抽象クラスを定義するモジュール
# 推定（estimate）と適用（apply）のインターフェースを揃えることで、レシピがステップの種類を意識せずに扱えるようにする
import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar, Self

import pandas as pd

from tidyflow.exceptions import NotEstimatedError, SchemaMismatchError
from tidyflow.recipe.selectors import ColumnTerm, Selector, resolve_columns

logger = logging.getLogger(__name__)


# 全ステップクラスが継承すべき抽象基底クラス
# 未推定のステップは estimate で学習済みパラメータを持つ新しいインスタンスを返し、自身は変更しない
# 推定済みのステップは属性の変更を受け付けない
class BaseStep(ABC):
    kind: ClassVar[str]

    def __init__(self, columns: ColumnTerm | Sequence[ColumnTerm] = (), skip: bool = False) -> None:
        if isinstance(columns, str | Selector):
            columns = [columns]
        self.terms: tuple[ColumnTerm, ...] = tuple(columns)
        self.skip = skip  # True の場合、訓練データ以外への適用時にはこのステップを飛ばす
        self.columns_: list[str] = []  # 推定時に解決された対象カラム
        self.outcomes_: tuple[str, ...] = ()
        self._estimated = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_estimated", False):
            raise AttributeError(f"{type(self).__name__} is already estimated and cannot be modified")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        columns = self.columns_ if self._estimated else list(self.terms)
        return f"{type(self).__name__}(columns={columns}, skip={self.skip}, estimated={self._estimated})"

    @property
    def is_estimated(self) -> bool:
        return self._estimated

    # 訓練データからパラメータを学習し、推定済みの新しいステップを返すメソッド
    def estimate(self, df: pd.DataFrame, outcomes: Sequence[str] = ()) -> Self:
        if self._estimated:
            raise ValueError(f"{type(self).__name__} is already estimated")
        step = copy.deepcopy(self)
        step.columns_ = resolve_columns(self.terms, df, outcomes)
        step.outcomes_ = tuple(outcomes)
        step._estimate(df)
        step._estimated = True
        logger.info(f"Estimated step {step}")
        return step

    # 学習済みパラメータを使ってデータを変換するメソッド
    # 目的変数だけは新しいデータに含まれていなくてもよい
    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        if not self._estimated:
            raise NotEstimatedError(f"{type(self).__name__} must be estimated before it is applied")
        missing = [column for column in self.columns_ if column not in df.columns and column not in self.outcomes_]
        if missing:
            raise SchemaMismatchError(f"{type(self).__name__} requires column(s) missing from data: {missing}")
        return self._apply(df.copy())

    # 対象カラムのうちデータに存在するものを返すメソッド
    def present_columns(self, df: pd.DataFrame) -> list[str]:
        return [column for column in self.columns_ if column in df.columns]

    # 学習済みパラメータを DataFrame で返すメソッド（継承クラスで必要に応じて上書きする）
    def tidy(self) -> pd.DataFrame:
        columns = self.columns_ if self._estimated else [str(term) for term in self.terms]
        return pd.DataFrame({"terms": columns})

    @abstractmethod
    def _estimate(self, df: pd.DataFrame) -> None:
        raise NotImplementedError

    @abstractmethod
    def _apply(self, df: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError
