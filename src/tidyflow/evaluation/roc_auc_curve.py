# ROC 曲線を描画するモジュール
# 事象クラス（最初の水準）の予測確率について、閾値ごとの感度と 1 - 特異度の関係を可視化する
import matplotlib.pyplot as plt
import numpy.typing as npt
from matplotlib.figure import Figure
from sklearn.metrics import roc_auc_score, roc_curve


# ROC 曲線を描画して Figure オブジェクトを返す関数
# y_true は事象クラスかどうかの真偽値、y_pred は事象クラスの予測確率。凡例に AUC を表示する
def plot_roc_auc_curve(y_true: npt.NDArray, y_pred: npt.NDArray, event: str | None = None) -> Figure:
    [fpr, tpr, _] = roc_curve(y_true, y_pred)
    auc = roc_auc_score(y_true, y_pred)

    fig, ax = plt.subplots(figsize=(6, 6))
    ax.plot(fpr, tpr, label=f"Model (AUC = {auc:.3f})")
    ax.plot([0, 1], [0, 1], "k--", label="Random")
    ax.set_xlabel("1 - specificity")
    ax.set_ylabel("Sensitivity")
    ax.set_title("ROC Curve" if event is None else f"ROC Curve (event: {event})")
    ax.set_aspect("equal")
    ax.legend(loc="lower right")

    return fig
