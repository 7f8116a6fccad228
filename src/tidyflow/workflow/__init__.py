from .metadata import MetaData
from .resampling import ResampleResults, collect_metrics, collect_predictions, fit_resamples
from .tuning import ParamRange, TuneResults, finalize_workflow, tune_workflow
from .workflow import FittedWorkflow, Formula, Variables, Workflow, WorkflowBuilder
from .workflow_config import WorkflowConfig, get_workflow_config, workflow_configs

__all__ = [
    "FittedWorkflow",
    "Formula",
    "MetaData",
    "ParamRange",
    "ResampleResults",
    "TuneResults",
    "Variables",
    "Workflow",
    "WorkflowBuilder",
    "WorkflowConfig",
    "collect_metrics",
    "collect_predictions",
    "finalize_workflow",
    "fit_resamples",
    "get_workflow_config",
    "tune_workflow",
    "workflow_configs",
]
