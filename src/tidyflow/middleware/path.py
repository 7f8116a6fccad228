# アーティファクト（成果物）の保存パスを管理するミドルウェアモジュール
# ジョブタイプとバージョンから保存先ディレクトリを一元管理する
from pathlib import Path

from tidyflow.const import ARTIFACT_ROOT


# アーティファクトのパス管理クラス
# 例: "./artifact/train/ames_lm/20240101120000"
class Artifact:
    def __init__(self, version: str, job_type: str, root: Path | str = ARTIFACT_ROOT) -> None:
        self.key_prefix = f"{job_type}/{version}"
        self.dir_path = Path(root) / self.key_prefix
        self.dir_path.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"Artifact(dir_path={str(self.dir_path)!r})"

    # アーティファクトディレクトリ内の指定ファイル名の完全パスを返すメソッド
    def file_path(self, file_name: str) -> Path:
        return self.dir_path / file_name
