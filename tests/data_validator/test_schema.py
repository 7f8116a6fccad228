import pandas as pd
import pytest
from pandera.errors import SchemaError

from tidyflow.data_validator import AMES_SCHEMA, CRICKETS_SCHEMA, DATASET_SCHEMAS, TWO_CLASS_SCHEMA
from tidyflow.datasets import load_dataset, read_dataset_csv


@pytest.mark.parametrize(
    "name, schema",
    [("ames", AMES_SCHEMA), ("crickets", CRICKETS_SCHEMA), ("two_class", TWO_CLASS_SCHEMA)],
    ids=["ames", "crickets", "two_class"],
)
def test_schema_validation(name, schema):
    df = load_dataset(name)

    assert len(df) > 0, "No data generated"
    validated_df = schema.validate(df)
    assert len(validated_df) == len(df), "Row count changed after validation"
    assert list(validated_df.columns) == list(schema.columns)


@pytest.mark.parametrize("name", list(DATASET_SCHEMAS), ids=list(DATASET_SCHEMAS))
def test_generation_is_reproducible(name):
    pd.testing.assert_frame_equal(load_dataset(name, seed=1), load_dataset(name, seed=1))


def test_read_dataset_csv_restores_categories(tmp_path, crickets):
    file_path = tmp_path / "crickets.csv"
    crickets.to_csv(file_path, index=False)

    df = read_dataset_csv(file_path, name="crickets")

    assert isinstance(df["species"].dtype, pd.CategoricalDtype)
    assert len(df) == len(crickets)


def test_schema_rejects_unknown_level(two_class):
    df = two_class.assign(Class=two_class["Class"].astype(str).replace({"Class2": "Class3"}))
    with pytest.raises(SchemaError):
        TWO_CLASS_SCHEMA.validate(df)


def test_schema_rejects_extra_column(crickets):
    # strict=True のため、定義にないカラムは許可しない
    with pytest.raises(SchemaError):
        CRICKETS_SCHEMA.validate(crickets.assign(extra=1.0))


def test_load_dataset_invalid_name():
    with pytest.raises(ValueError, match="Invalid dataset name"):
        load_dataset("iris")
