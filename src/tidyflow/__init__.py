from .evaluation import MetricSet, to_frame
from .exceptions import (
    ColumnNotFoundError,
    IncompatibleMetricError,
    IncompleteWorkflowError,
    InvalidProportionError,
    NotEstimatedError,
    SchemaMismatchError,
    TidyflowError,
    UnknownEngineError,
)
from .model import boost_tree, linear_reg, logistic_reg, null_model, rand_forest
from .recipe import Recipe
from .split import initial_split, initial_time_split, initial_validation_split, vfold_cv
from .workflow import Workflow, WorkflowBuilder, collect_metrics, fit_resamples

__version__ = "0.1.0"

__all__ = [
    "ColumnNotFoundError",
    "IncompatibleMetricError",
    "IncompleteWorkflowError",
    "InvalidProportionError",
    "MetricSet",
    "NotEstimatedError",
    "Recipe",
    "SchemaMismatchError",
    "TidyflowError",
    "UnknownEngineError",
    "Workflow",
    "WorkflowBuilder",
    "boost_tree",
    "collect_metrics",
    "fit_resamples",
    "initial_split",
    "initial_time_split",
    "initial_validation_split",
    "linear_reg",
    "logistic_reg",
    "null_model",
    "rand_forest",
    "to_frame",
    "vfold_cv",
]
