# ロギング設定を行うミドルウェアモジュール
# 学習・推論・チューニングのログを1つのルートロガーに集め、UTC タイムスタンプ付きで標準出力と（指定があれば）ファイルに出力する
import logging
import time
from pathlib import Path

import optuna

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

# 試行ごとの詳細や描画・学習ライブラリの内部ログは WARNING 以上のみ出力する
QUIET_LOGGERS = ("matplotlib", "lightgbm", "optuna", "PIL")


# ルートロガーに標準出力ハンドラとファイルハンドラを設定する関数
# 既存のハンドラをすべてクリアしてから再設定する
def set_logger_config(log_file_path: Path | None = None, level: int = logging.INFO) -> None:
    logging_formatter = logging.Formatter(LOG_FORMAT)
    logging_formatter.converter = time.gmtime

    logger = logging.getLogger()
    logger.setLevel(level)

    if len(logger.handlers):
        logger.handlers.clear()
        logger.root.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging_formatter)
    logger.addHandler(stream_handler)

    # ノートブックや推論サーバーからの利用ではファイル出力しない
    if log_file_path is not None:
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging_formatter)
        logger.addHandler(file_handler)

    # optuna は独自のハンドラで出力するため、ルートロガーに流して同じログファイルに残す
    optuna.logging.disable_default_handler()
    optuna.logging.enable_propagation()
    # statsmodels の収束警告などを "py.warnings" ロガー経由でログに残す
    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
