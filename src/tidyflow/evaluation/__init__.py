from .calibration_curve import plot_calibration_curve
from .comparison import is_workflow_better_than_baseline
from .histgram import plot_histgram
from .metric_set import MetricResult, MetricSet, to_frame
from .metrics import (
    Direction,
    Metric,
    MetricKind,
    accuracy,
    f_meas,
    kap,
    mae,
    mape,
    mcc,
    mn_log_loss,
    precision,
    recall,
    rmse,
    roc_auc,
    rsq,
    rsq_trad,
    specificity,
)
from .predicted_vs_observed import plot_predicted_vs_observed
from .roc_auc_curve import plot_roc_auc_curve

__all__ = [
    "Direction",
    "Metric",
    "MetricKind",
    "MetricResult",
    "MetricSet",
    "accuracy",
    "f_meas",
    "is_workflow_better_than_baseline",
    "kap",
    "mae",
    "mape",
    "mcc",
    "mn_log_loss",
    "plot_calibration_curve",
    "plot_histgram",
    "plot_predicted_vs_observed",
    "plot_roc_auc_curve",
    "precision",
    "recall",
    "rmse",
    "roc_auc",
    "rsq",
    "rsq_trad",
    "specificity",
    "to_frame",
]
