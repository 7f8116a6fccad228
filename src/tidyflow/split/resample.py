# 交差検証（V-fold）用のリサンプルを作成するモジュール
import logging

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold

from tidyflow.const import DEFAULT_SEED

from .split import Split, strata_labels

logger = logging.getLogger(__name__)


# データを v 個の fold に分割し、各 fold を評価用とする Split のリストを返す関数
# 評価用（assessment）の行は全 fold を通して元データの全行をちょうど1回ずつ覆う
def vfold_cv(
    data: pd.DataFrame,
    v: int = 10,
    strata: str | None = None,
    breaks: int = 4,
    pool: float = 0.1,
    seed: int = DEFAULT_SEED,
) -> list[Split]:
    if not 2 <= v <= len(data):
        raise ValueError(f"v must be between 2 and the number of rows ({len(data)}), got {v}")

    stratify = strata_labels(data, strata, breaks=breaks, pool=pool)
    placeholder = np.zeros(len(data))
    if stratify is None:
        folds = KFold(n_splits=v, shuffle=True, random_state=seed).split(placeholder)
    else:
        folds = StratifiedKFold(n_splits=v, shuffle=True, random_state=seed).split(placeholder, stratify)

    resamples = [
        Split(data=data, train_index=np.sort(analysis), test_index=np.sort(assessment), id=f"Fold{i:02d}")
        for i, (analysis, assessment) in enumerate(folds, start=1)
    ]
    logger.info(f"Created {v}-fold cross-validation {len(data)=}, {strata=}, {seed=}")
    return resamples
