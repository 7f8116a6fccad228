from .base_step import BaseStep
from .encoding import StepDummy, StepOther
from .feature import StepInteract, StepSpline
from .filter import StepZv
from .sampling import StepDownsample
from .transform import StepLog, StepNormalize

__all__ = [
    "BaseStep",
    "StepDownsample",
    "StepDummy",
    "StepInteract",
    "StepLog",
    "StepNormalize",
    "StepOther",
    "StepSpline",
    "StepZv",
]
