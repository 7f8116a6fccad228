import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib.figure import Figure

from tidyflow.evaluation import (
    plot_calibration_curve,
    plot_histgram,
    plot_predicted_vs_observed,
    plot_roc_auc_curve,
)

rng = np.random.default_rng(0)
Y_TRUE = rng.integers(0, 2, size=200).astype(bool)
Y_PROB = np.clip(0.3 * Y_TRUE + rng.uniform(0.0, 0.7, size=200), 0.0, 1.0)


@pytest.mark.parametrize(
    "plot, kwargs",
    [
        (plot_roc_auc_curve, {"y_true": Y_TRUE, "y_pred": Y_PROB}),
        (plot_calibration_curve, {"y_true": Y_TRUE, "y_pred": Y_PROB, "n_bins": 5}),
        (plot_histgram, {"y_true": np.where(Y_TRUE, "Class1", "Class2"), "y_pred": Y_PROB}),
        (plot_predicted_vs_observed, {"y_true": rng.normal(size=50), "y_pred": rng.normal(size=50)}),
    ],
    ids=["roc_auc_curve", "calibration_curve", "histgram", "predicted_vs_observed"],
)
def test_plots_return_figure(plot, kwargs):
    fig = plot(**kwargs)

    assert isinstance(fig, Figure)
    assert len(fig.axes) >= 1
    plt.close(fig)


def test_roc_auc_curve_shows_event_and_auc():
    y_true = np.array([True, True, False, False])
    y_pred = np.array([0.9, 0.8, 0.3, 0.1])

    fig = plot_roc_auc_curve(y_true=y_true, y_pred=y_pred, event="Class1")

    ax = fig.axes[0]
    assert ax.get_title() == "ROC Curve (event: Class1)"
    assert ax.get_legend_handles_labels()[1] == ["Model (AUC = 1.000)", "Random"]
    plt.close(fig)


@pytest.mark.parametrize("strategy", ["uniform", "quantile"], ids=["uniform", "quantile"])
def test_calibration_curve_has_count_panel(strategy):
    fig = plot_calibration_curve(y_true=Y_TRUE, y_pred=Y_PROB, n_bins=5, strategy=strategy, event="Class1")

    ax_curve, ax_count = fig.axes
    assert ax_curve.get_title() == "Calibration Curve (event: Class1)"
    # 予測確率の分布は n_bins 本の棒で描かれ、件数の合計は全行数になる
    assert len(ax_count.patches) == 5
    assert sum(patch.get_height() for patch in ax_count.patches) == len(Y_PROB)
    plt.close(fig)
