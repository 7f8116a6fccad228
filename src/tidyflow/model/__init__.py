from .mode import ModelMode
from .registry import available_engines, get_engine, register_engine
from .engines import BaseEngine
from .formula import ModelFormula
from .fitted import FittedModel
from .spec import ModelSpec, boost_tree, linear_reg, logistic_reg, null_model, rand_forest

__all__ = [
    "BaseEngine",
    "FittedModel",
    "ModelFormula",
    "ModelMode",
    "ModelSpec",
    "available_engines",
    "boost_tree",
    "get_engine",
    "linear_reg",
    "logistic_reg",
    "null_model",
    "rand_forest",
    "register_engine",
]
