# FastAPI を使ったオンライン推論サーバーのエントリーポイント
# 起動時に学習済みワークフローをロードし、/predict エンドポイントで予測結果を返す
import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime

import pandas as pd
import uvicorn
from fastapi import FastAPI, HTTPException, Request

from tidyflow.exceptions import TidyflowError
from tidyflow.middleware import Artifact, set_logger_config
from tidyflow.predictor import PredictRequest, PredictResponse
from tidyflow.workflow import FittedWorkflow

logger = logging.getLogger(__name__)


# FastAPI アプリケーションの起動・終了時の処理を管理するライフスパンコンテキストマネージャ
# アプリ起動時に学習済みワークフローをロードし、各リクエストから参照できるよう yield で渡す
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    version = datetime.now().strftime("%Y%m%d%H%M%S")
    if os.getenv("PREDICTOR_LOG_FILE", "true") == "true":
        artifact = Artifact(version=version, job_type="predictor")
        set_logger_config(log_file_path=artifact.file_path("log.txt"))
    else:
        set_logger_config()

    # 環境変数から学習済みワークフローのパスを取得する（train.py が保存した workflow.pkl）
    workflow_path = os.getenv("WORKFLOW_PATH")
    if workflow_path is None:
        raise ValueError("WORKFLOW_PATH is not set")
    fitted_workflow = FittedWorkflow.load(workflow_path)
    spec = fitted_workflow.model.spec
    logger.info(f"Loaded {fitted_workflow=} from {workflow_path=}")

    yield {
        "fitted_workflow": fitted_workflow,
        "model_name": f"{spec.model_type}:{spec.engine}",
    }


app = FastAPI(lifespan=lifespan)


# 予測エンドポイント
# 入力データが学習時のスキーマと合わない場合や予測タイプが不正な場合は 422 を返す
@app.post("/predict")
async def predict(predict_request: PredictRequest, request: Request) -> PredictResponse:
    df = pd.DataFrame(predict_request.rows)
    try:
        df_pred = request.state.fitted_workflow.predict(df, type=predict_request.type)
    except (TidyflowError, ValueError) as e:
        logger.info(f"Rejected prediction request: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e

    # JSON に変換できるよう、カテゴリ型は文字列に、欠損値は None にする
    df_pred = df_pred.astype(object).where(df_pred.notna(), None)
    predictions = [{str(key): _to_json(value) for key, value in row.items()} for row in df_pred.to_dict("records")]
    logger.info(f"Predicted {len(predictions)} row(s)")
    return PredictResponse(model=request.state.model_name, predictions=predictions)


def _to_json(value: object) -> object:
    if value is None or isinstance(value, int | float | bool):
        return value
    if hasattr(value, "item"):
        return value.item()
    return str(value)


# ヘルスチェックエンドポイント（ロードバランサーやコンテナオーケストレーターからの死活監視用）
@app.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"health": "ok"}


# uvicorn でサーバーを起動するエントリーポイント関数
def main() -> None:
    uvicorn.run("predictor:app", host="0.0.0.0", port=8080, reload=True)


if __name__ == "__main__":
    main()
