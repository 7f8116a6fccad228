# エンジンモジュールを読み込むことでレジストリへの登録が行われる
from .base_engine import BaseEngine, PdNpType
from .lightgbm import LightGBMEngine
from .sklearn_models import (
    SklearnLinearEngine,
    SklearnLogisticEngine,
    SklearnNullEngine,
    SklearnRandomForestEngine,
)
from .statsmodels_glm import LogitEngine, OLSEngine

__all__ = [
    "BaseEngine",
    "LightGBMEngine",
    "LogitEngine",
    "OLSEngine",
    "PdNpType",
    "SklearnLinearEngine",
    "SklearnLogisticEngine",
    "SklearnNullEngine",
    "SklearnRandomForestEngine",
]
