# モデルのモード（回帰・分類）の定義
from enum import StrEnum


class ModelMode(StrEnum):
    REGRESSION = "regression"
    CLASSIFICATION = "classification"
    UNKNOWN = "unknown"
