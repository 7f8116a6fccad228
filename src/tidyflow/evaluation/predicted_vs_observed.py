# 回帰モデルの予測値と観測値の散布図を描画するモジュール
import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
import seaborn as sns
from matplotlib.figure import Figure


# 観測値を横軸、予測値を縦軸にした散布図を描画して Figure オブジェクトを返す関数
# 予測が完全であれば全ての点が対角線上に並ぶ
def plot_predicted_vs_observed(y_true: npt.NDArray, y_pred: npt.NDArray) -> Figure:
    fig = plt.figure(figsize=(6, 6))
    sns.scatterplot(x=y_true, y=y_pred, alpha=0.5)

    lower = float(np.nanmin([np.nanmin(y_true), np.nanmin(y_pred)]))
    upper = float(np.nanmax([np.nanmax(y_true), np.nanmax(y_pred)]))
    plt.plot([lower, upper], [lower, upper], "k--", label="Ideal")
    plt.xlabel("Observed")
    plt.ylabel("Predicted")
    plt.title("Predicted vs Observed")
    # 軸の縮尺を揃えて対角線からのずれを見やすくする
    plt.gca().set_aspect("equal", adjustable="box")
    plt.legend()

    plt.tight_layout()

    return fig
