from .resample import vfold_cv
from .split import Split, initial_split, initial_time_split, initial_validation_split
from .strata import make_strata

__all__ = ["Split", "initial_split", "initial_time_split", "initial_validation_split", "make_strata", "vfold_cv"]
