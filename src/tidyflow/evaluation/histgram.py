# 予測確率の分布ヒストグラムを描画するモジュール
# 観測クラスごとに予測確率の分布を可視化し、識別能力を確認する
import matplotlib.pyplot as plt
import numpy.typing as npt
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure


# 観測クラスごとの予測確率の分布をヒストグラムで描画して Figure オブジェクトを返す関数
def plot_histgram(y_true: npt.NDArray, y_pred: npt.NDArray, bins: int = 50) -> Figure:
    fig = plt.figure(figsize=(10, 6))
    df_hist = pd.DataFrame({"y_pred": y_pred, "y_true": y_true})
    sns.histplot(data=df_hist, x="y_pred", hue="y_true", bins=bins)
    plt.title("Distribution of prediction value")

    return fig
