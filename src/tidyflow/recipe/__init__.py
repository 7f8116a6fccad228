from .recipe import EstimatedRecipe, Recipe
from .selectors import all_nominal_predictors, all_numeric_predictors, all_predictors, starts_with
from .steps import (
    BaseStep,
    StepDownsample,
    StepDummy,
    StepInteract,
    StepLog,
    StepNormalize,
    StepOther,
    StepSpline,
    StepZv,
)

__all__ = [
    "BaseStep",
    "EstimatedRecipe",
    "Recipe",
    "StepDownsample",
    "StepDummy",
    "StepInteract",
    "StepLog",
    "StepNormalize",
    "StepOther",
    "StepSpline",
    "StepZv",
    "all_nominal_predictors",
    "all_numeric_predictors",
    "all_predictors",
    "starts_with",
]
