# 学習ジョブのメタデータを収集・保存するモジュール
# ワークフロー設定・コマンドライン引数・評価結果・実行環境（Git・依存パッケージ・計算リソース）を一括管理する
import argparse
import json
import logging
import os
import platform
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import Any

import psutil

from .workflow_config import WorkflowConfig

logger = logging.getLogger(__name__)


# 学習ジョブの全メタデータを保持するデータクラス
@dataclass
class MetaData:
    workflow_config: WorkflowConfig  # 使用したワークフローの設定
    command_line_arguments: argparse.Namespace  # 実行時のコマンドライン引数
    version: str  # ジョブのバージョン（タイムスタンプ文字列）
    start_time: datetime  # 学習開始時刻
    end_time: datetime  # 学習終了時刻
    artifact_dir: str  # 成果物の保存先ディレクトリ
    metrics: dict[str, float] = field(default_factory=dict)  # テストデータでの評価結果
    is_better_than_baseline: bool | None = None  # ヌルモデルとの比較結果

    @property
    def workflow_name(self) -> str:
        return self.workflow_config.name

    # 実行時の Git コミットハッシュ（短縮形）を取得するプロパティ
    # git コマンドが存在しない環境では None を返す
    @property
    def git_commit_hash(self) -> str | None:
        return _run_git(["rev-parse", "--short", "HEAD"])

    @property
    def git_branch(self) -> str | None:
        return _run_git(["branch", "--show-current"])

    # 実行環境の依存パッケージ一覧と Python 実行情報を返すプロパティ
    @property
    def dependencies(self) -> dict[str, str | dict[str, str]]:
        return {
            # Python
            "python_version": sys.version,
            "python_implementation": platform.python_implementation(),
            "python_path": sys.executable,
            # Packages
            "installed_packages": {dist.metadata["Name"]: dist.version for dist in metadata.distributions()},
        }

    # 実行環境の計算リソース情報（OS・CPU・メモリ）を返すプロパティ
    @property
    def compute_resource(self) -> dict[str, str | int | None]:
        return {
            # OS
            "os": platform.system(),
            "os_release": platform.release(),
            "os_version": platform.version(),
            "machine": platform.machine(),
            # CPU
            "cpu_count": os.cpu_count(),
            "cpu_info": platform.processor(),
            # Memory
            "memory_total": psutil.virtual_memory().total,
            "memory_available": psutil.virtual_memory().available,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow_name": self.workflow_name,
            # ワークフロー設定は JSON にできない値（レシピ・モデル仕様）を含むため文字列化する
            "workflow_config": {
                "dataset": self.workflow_config.dataset,
                "outcome": self.workflow_config.outcome,
                "workflow": repr(self.workflow_config.workflow),
                "metrics": self.workflow_config.metrics.names,
                "prop": self.workflow_config.prop,
                "strata": self.workflow_config.strata,
                "v": self.workflow_config.v,
            },
            "command_line_arguments": vars(self.command_line_arguments),
            "version": self.version,
            "start_time": self.start_time.strftime("%Y-%m-%d %H:%M:%S"),
            "end_time": self.end_time.strftime("%Y-%m-%d %H:%M:%S"),
            "artifact_dir": self.artifact_dir,
            "metrics": self.metrics,
            "is_better_than_baseline": self.is_better_than_baseline,
            "git_commit_hash": self.git_commit_hash,
            "git_branch": self.git_branch,
            "dependencies": self.dependencies,
            "compute_resource": self.compute_resource,
        }

    # メタデータを JSON ファイルとして保存するメソッド
    def save_as_json(self, output_path: Path) -> None:
        metadata_dict = self.to_dict()
        with open(output_path, "w") as f:
            json.dump(metadata_dict, f, indent=2, default=str)

        logger.info(f"Saved metadata at {output_path}. {self.workflow_name=}, {self.metrics=}")


# git コマンドを実行して標準出力を返す関数
# git コマンドが存在しない、またはリポジトリ外で実行された場合は None を返す
def _run_git(args: list[str]) -> str | None:
    try:
        result = subprocess.run(["git", *args], capture_output=True, text=True)
    except FileNotFoundError:
        logger.info("git command is not installed")
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()
