# 推論エンドポイントへのリクエスト・レスポンスのスキーマ定義
# 予測子のカラム名と値の辞書を行ごとに受け取り、予測結果を行ごとに返す
from typing import Any

from pydantic import BaseModel, Field


# /predict エンドポイントが受け取るリクエストのデータモデル
# 各行は学習時の予測子のカラム名をキーとする辞書（不足カラムがあれば 422 を返す）
class PredictRequest(BaseModel):
    rows: list[dict[str, Any]] = Field(min_length=1)
    type: str | None = None  # "numeric", "class", "prob" のいずれか（省略時はモードの既定値）


class PredictResponse(BaseModel):
    model: str  # "<モデルの種類>:<エンジン名>"
    predictions: list[dict[str, Any]]
