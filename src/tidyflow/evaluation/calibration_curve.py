# キャリブレーション曲線（信頼度曲線）を描画するモジュール
# 事象クラスの予測確率が実際の事象の発生割合と一致しているかを、ビンごとの件数とあわせて視覚化する
import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
from matplotlib.figure import Figure
from sklearn.calibration import calibration_curve


# 予測確率と実際のラベルからキャリブレーション曲線を描画して Figure オブジェクトを返す関数
# strategy は "uniform"（等幅のビン）または "quantile"（件数が等しいビン）
def plot_calibration_curve(
    y_true: npt.NDArray,
    y_pred: npt.NDArray,
    n_bins: int = 10,
    strategy: str = "uniform",
    event: str | None = None,
) -> Figure:
    prob_true, prob_pred = calibration_curve(y_true, y_pred, n_bins=n_bins, strategy=strategy)

    fig, (ax_curve, ax_count) = plt.subplots(
        2, 1, figsize=(6, 8), sharex=True, gridspec_kw={"height_ratios": [3, 1]}
    )
    ax_curve.plot([0, 1], [0, 1], "k:", label="Ideal")
    ax_curve.plot(prob_pred, prob_true, "s-", label="Model")
    ax_curve.set_ylabel("Observed event rate")
    ax_curve.set_ylim(0, 1)
    ax_curve.set_title("Calibration Curve" if event is None else f"Calibration Curve (event: {event})")
    ax_curve.legend(loc="upper left")

    # 予測確率の分布（どの確率帯に予測が集まっているか）
    ax_count.hist(np.asarray(y_pred, dtype=float), bins=n_bins, range=(0, 1), color="gray")
    ax_count.set_xlabel("Mean predicted probability")
    ax_count.set_ylabel("Count")
    ax_count.set_xlim(0, 1)

    fig.tight_layout()

    return fig
