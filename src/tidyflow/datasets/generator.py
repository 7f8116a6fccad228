# 学習用のサンプルデータセットを生成するモジュール
# 住宅価格・コオロギの鳴き声・2クラス分類の3種類のデータを乱数シードから再現可能な形で生成する
import logging
from pathlib import Path

import numpy as np
import pandas as pd
from scipy.special import expit

from tidyflow.const import DEFAULT_SEED
from tidyflow.data_validator import (
    AMES_SCHEMA,
    BUILDING_TYPES,
    CRICKET_SPECIES,
    CRICKETS_SCHEMA,
    DATASET_SCHEMAS,
    NEIGHBORHOODS,
    TWO_CLASS_LEVELS,
    TWO_CLASS_SCHEMA,
)

logger = logging.getLogger(__name__)

# 地区ごとの出現確率（NEIGHBORHOODS と同じ順序）。末尾の地区ほど稀になる
_NEIGHBORHOOD_WEIGHTS = np.array(
    [
        0.150, 0.100, 0.080, 0.070, 0.060, 0.060, 0.060, 0.050, 0.050, 0.040,
        0.040, 0.040, 0.040, 0.030, 0.030, 0.030, 0.020, 0.020, 0.015, 0.010,
        0.008, 0.007, 0.006, 0.004, 0.003, 0.002, 0.001, 0.0005,
    ]
)  # fmt: skip

_BUILDING_WEIGHTS = np.array([0.83, 0.02, 0.04, 0.03, 0.08])
_BUILDING_EFFECTS = np.array([0.0, -0.08, -0.10, -0.06, -0.02])


# 住宅価格データを生成する関数
# 販売価格は居住面積・建築年・地区・建物種別から決まる log10 スケールの値に誤差を加えて作る
def make_ames(n: int = 2000, seed: int = DEFAULT_SEED) -> pd.DataFrame:
    rng = np.random.default_rng(seed)

    neighborhood_idx = rng.choice(len(NEIGHBORHOODS), size=n, p=_NEIGHBORHOOD_WEIGHTS / _NEIGHBORHOOD_WEIGHTS.sum())
    building_idx = rng.choice(len(BUILDING_TYPES), size=n, p=_BUILDING_WEIGHTS)

    # 地区ごとの中心座標と価格効果を決める
    centroid_longitude = rng.uniform(-93.69, -93.58, size=len(NEIGHBORHOODS))
    centroid_latitude = rng.uniform(41.99, 42.06, size=len(NEIGHBORHOODS))
    neighborhood_effect = rng.normal(0.0, 0.08, size=len(NEIGHBORHOODS))

    gr_liv_area = np.round(rng.lognormal(mean=np.log(1500), sigma=0.33, size=n)).astype(int)
    year_built = rng.integers(1900, 2011, size=n)

    sale_price = (
        5.22
        + 0.6 * (np.log10(gr_liv_area) - np.log10(1500))
        + 0.004 * (year_built - 1970)
        + neighborhood_effect[neighborhood_idx]
        + _BUILDING_EFFECTS[building_idx]
        + rng.normal(0.0, 0.07, size=n)
    )

    df = pd.DataFrame(
        {
            "Sale_Price": sale_price,
            "Gr_Liv_Area": gr_liv_area,
            "Year_Built": year_built,
            "Neighborhood": pd.Categorical.from_codes(neighborhood_idx, categories=NEIGHBORHOODS),
            "Bldg_Type": pd.Categorical.from_codes(building_idx, categories=BUILDING_TYPES),
            "Longitude": centroid_longitude[neighborhood_idx] + rng.normal(0.0, 0.005, size=n),
            "Latitude": centroid_latitude[neighborhood_idx] + rng.normal(0.0, 0.005, size=n),
        }
    )
    logger.info(f"Generated ames dataset {len(df)=}, {seed=}")
    return AMES_SCHEMA.validate(df)


# コオロギの鳴き声データを生成する関数
# 鳴き声の回数は気温にほぼ比例し、O. niveus の方が同じ気温で鳴く回数が少ない
def make_crickets(n_exclamationis: int = 14, n_niveus: int = 17, seed: int = DEFAULT_SEED) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    frames = []
    for species, n, intercept in [
        (CRICKET_SPECIES[0], n_exclamationis, -11.0),
        (CRICKET_SPECIES[1], n_niveus, -21.0),
    ]:
        temp = np.round(rng.uniform(17.0, 31.0, size=n), 1)
        rate = np.round(intercept + 3.6 * temp + rng.normal(0.0, 2.0, size=n), 1)
        frames.append(pd.DataFrame({"species": species, "temp": temp, "rate": rate}))

    df = pd.concat(frames, ignore_index=True)
    df["species"] = pd.Categorical(df["species"], categories=CRICKET_SPECIES)
    logger.info(f"Generated crickets dataset {len(df)=}, {seed=}")
    return CRICKETS_SCHEMA.validate(df)


# 2つの数値予測子 A, B と2クラスの目的変数 Class を持つ合成データを生成する関数
# Class1 がおよそ3割になる不均衡なデータになる
def make_two_class(n: int = 800, seed: int = DEFAULT_SEED) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    a = rng.normal(2.0, 0.7, size=n)
    b = rng.normal(1.5, 0.6, size=n)
    prob_class1 = expit(-1.0 + 2.5 * (a - 2.0) - 2.0 * (b - 1.5))
    is_class1 = rng.uniform(size=n) < prob_class1

    df = pd.DataFrame(
        {
            "A": a,
            "B": b,
            "Class": pd.Categorical.from_codes(np.where(is_class1, 0, 1), categories=TWO_CLASS_LEVELS),
        }
    )
    logger.info(f"Generated two_class dataset {len(df)=}, {seed=}, {is_class1.mean()=:.3f}")
    return TWO_CLASS_SCHEMA.validate(df)


_GENERATORS = {
    "ames": make_ames,
    "crickets": make_crickets,
    "two_class": make_two_class,
}


# データセット名からサンプルデータを生成して返す関数
# 存在しないデータセット名が指定された場合は ValueError を発生させる
def load_dataset(name: str, **kwargs) -> pd.DataFrame:
    if name not in _GENERATORS:
        raise ValueError(f"Invalid dataset name: {name}")
    return _GENERATORS[name](**kwargs)


# CSV ファイルを読み込み、データセット名に対応するスキーマで検証して返す関数
def read_dataset_csv(file_path: Path | str, name: str) -> pd.DataFrame:
    if name not in DATASET_SCHEMAS:
        raise ValueError(f"Invalid dataset name: {name}")
    df = pd.read_csv(file_path)
    logger.info(f"Loaded {file_path} {len(df)=}")
    return DATASET_SCHEMAS[name].validate(df)
