# ライブラリ全体で送出する例外クラスの定義
# 呼び出し側が組み込み例外（ValueError など）としても捕捉できるよう多重継承している


class TidyflowError(Exception):
    pass


# 分割比率が (0, 1) の範囲外の場合
class InvalidProportionError(TidyflowError, ValueError):
    pass


# 指定したカラムがデータに存在しない場合
class ColumnNotFoundError(TidyflowError, ValueError):
    def __init__(self, columns: list[str] | str, context: str = "data") -> None:
        if isinstance(columns, str):
            columns = [columns]
        self.columns = list(columns)
        super().__init__(f"Column(s) not found in {context}: {self.columns}")


# 推定時・学習時のスキーマと新しいデータのスキーマが一致しない場合
class SchemaMismatchError(TidyflowError, ValueError):
    pass


# モデル仕様や前処理が揃っていないワークフローを学習しようとした場合
class IncompleteWorkflowError(TidyflowError, ValueError):
    pass


# 評価指標とモード（回帰・分類）の組み合わせが不正な場合
class IncompatibleMetricError(TidyflowError, ValueError):
    pass


# 未推定のステップやレシピを適用しようとした場合
class NotEstimatedError(TidyflowError, RuntimeError):
    pass


# 登録されていないエンジンが指定された場合
class UnknownEngineError(TidyflowError, ValueError):
    pass
