# モデルの種類とエンジン名から学習バックエンド（エンジン）クラスを引くレジストリ
# 新しいエンジンは register_engine デコレータで登録するだけで、既存の呼び出し側を変更せずに使えるようになる
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from tidyflow.exceptions import UnknownEngineError

from .mode import ModelMode

if TYPE_CHECKING:
    from .engines.base_engine import BaseEngine

logger = logging.getLogger(__name__)

_ENGINES: dict[tuple[str, str], type["BaseEngine"]] = {}


# エンジンクラスをモデルの種類・エンジン名で登録するデコレータ
def register_engine(model_type: str, engine: str) -> Callable[[type["BaseEngine"]], type["BaseEngine"]]:
    def decorator(engine_class: type["BaseEngine"]) -> type["BaseEngine"]:
        key = (model_type, engine)
        if key in _ENGINES:
            raise ValueError(f"Engine already registered: {key}")
        _ENGINES[key] = engine_class
        return engine_class

    return decorator


# 登録済みのエンジンクラスを返す関数
# 未登録の組み合わせ、またはエンジンが対応していないモードが指定された場合は UnknownEngineError を送出する
def get_engine(model_type: str, engine: str, mode: ModelMode = ModelMode.UNKNOWN) -> type["BaseEngine"]:
    key = (model_type, engine)
    if key not in _ENGINES:
        raise UnknownEngineError(
            f"No engine {engine!r} registered for {model_type!r}. Available: {available_engines(model_type)}"
        )
    engine_class = _ENGINES[key]
    if mode != ModelMode.UNKNOWN and mode not in engine_class.modes:
        raise UnknownEngineError(f"Engine {engine!r} for {model_type!r} does not support {mode} mode")
    return engine_class


def available_engines(model_type: str) -> list[str]:
    return sorted(engine for registered_type, engine in _ENGINES if registered_type == model_type)
