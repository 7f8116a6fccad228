# プロジェクト全体で共通利用する定数定義
# 乱数シード・予測結果のカラム名・アーティファクトの保存先をここで一元管理する
from typing import Final

# 分割・リサンプリング・モデル学習で使う既定の乱数シード
DEFAULT_SEED: Final = 42

# 回帰モデルの予測値カラム名
PREDICTION_COLUMN: Final = ".pred"

# 分類モデルの予測クラスカラム名
PREDICTION_CLASS_COLUMN: Final = ".pred_class"

# 分類モデルの予測確率カラムの接頭辞（例: ".pred_Class1"）
PROBABILITY_PREFIX: Final = ".pred_"

# 学習結果などの成果物を保存するローカルディレクトリ
ARTIFACT_ROOT: Final = "./artifact"
