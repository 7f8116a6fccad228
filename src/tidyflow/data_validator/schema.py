# 各サンプルデータセットのスキーマ定義（pandera を使ったデータバリデーション）
# 生成・読み込みしたデータのカラム構成・データ型・値域を検証するための定義を提供する
from pandera import Check, Column, DataFrameSchema, Index

# 住宅価格データの地区名（出現頻度の高い順）
NEIGHBORHOODS = [
    "North_Ames",
    "College_Creek",
    "Old_Town",
    "Edwards",
    "Somerset",
    "Northridge_Heights",
    "Gilbert",
    "Sawyer",
    "Northwest_Ames",
    "Sawyer_West",
    "Mitchell",
    "Brookside",
    "Crawford",
    "Iowa_DOT_and_Rail_Road",
    "Timberland",
    "Northridge",
    "Stone_Brook",
    "South_and_West_of_Iowa_State_University",
    "Clear_Creek",
    "Meadow_Village",
    "Briardale",
    "Bloomington_Heights",
    "Veenker",
    "Northpark_Villa",
    "Blueste",
    "Greens",
    "Green_Hills",
    "Landmark",
]

# 住宅の建物種別
BUILDING_TYPES = ["OneFam", "TwoFmCon", "Duplex", "Twnhs", "TwnhsE"]

CRICKET_SPECIES = ["O. exclamationis", "O. niveus"]

TWO_CLASS_LEVELS = ["Class1", "Class2"]

# 住宅価格データのスキーマ定義
# Sale_Price は常用対数（log10）変換済みの販売価格
AMES_SCHEMA = DataFrameSchema(
    name="ames",
    columns={
        "Sale_Price": Column(float, checks=Check.in_range(3.0, 7.0)),  # log10 変換済み販売価格
        "Gr_Liv_Area": Column(int, checks=Check.greater_than(0)),  # 地上居住面積（平方フィート）
        "Year_Built": Column(int, checks=Check.in_range(1800, 2025)),  # 建築年
        "Neighborhood": Column("category", checks=Check.isin(NEIGHBORHOODS)),  # 地区名
        "Bldg_Type": Column("category", checks=Check.isin(BUILDING_TYPES)),  # 建物種別
        "Longitude": Column(float, checks=Check.in_range(-94.0, -93.0)),  # 経度
        "Latitude": Column(float, checks=Check.in_range(41.5, 42.5)),  # 緯度
    },
    index=Index(int),
    strict=True,
    coerce=True,
)

# コオロギの鳴き声データのスキーマ定義
# 気温と1分あたりの鳴き声の回数（rate）を種ごとに記録したデータ
CRICKETS_SCHEMA = DataFrameSchema(
    name="crickets",
    columns={
        "species": Column("category", checks=Check.isin(CRICKET_SPECIES)),  # コオロギの種
        "temp": Column(float, checks=Check.in_range(10.0, 40.0)),  # 気温（摂氏）
        "rate": Column(float, checks=Check.greater_than(0)),  # 1分あたりの鳴き声の回数
    },
    index=Index(int),
    strict=True,
    coerce=True,
)

# 2クラス分類用の合成データのスキーマ定義
TWO_CLASS_SCHEMA = DataFrameSchema(
    name="two_class",
    columns={
        "A": Column(float),
        "B": Column(float),
        "Class": Column("category", checks=Check.isin(TWO_CLASS_LEVELS)),  # 目的変数（Class1 が事象クラス）
    },
    index=Index(int),
    strict=True,
    coerce=True,
)

DATASET_SCHEMAS = {
    "ames": AMES_SCHEMA,
    "crickets": CRICKETS_SCHEMA,
    "two_class": TWO_CLASS_SCHEMA,
}
