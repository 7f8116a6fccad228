import pandas as pd
import pytest

from tidyflow.exceptions import ColumnNotFoundError, SchemaMismatchError
from tidyflow.model import ModelFormula


@pytest.mark.parametrize(
    "formula, outcome, predictors",
    [
        ("rate ~ temp + species", "rate", ("temp", "species")),
        ("rate ~ .", "rate", ("species", "temp")),
        ("rate ~ temp * species", "rate", ("temp", "species")),
        ("rate ~ np.log(temp)", "rate", ("temp",)),
        ("rate ~ 1", "rate", ()),
    ],
    ids=["additive", "dot", "interaction", "transform", "intercept_only"],
)
def test_parse(crickets, formula, outcome, predictors):
    model_formula = ModelFormula.parse(formula, list(crickets.columns))

    assert model_formula.outcome == outcome
    assert model_formula.predictors == predictors


def test_parse_errors(crickets):
    with pytest.raises(ValueError, match="~"):
        ModelFormula.parse("rate temp", list(crickets.columns))
    with pytest.raises(ColumnNotFoundError):
        ModelFormula.parse("chirps ~ temp", list(crickets.columns))


def test_design_drops_intercept_and_missing_rows(crickets):
    data = crickets.copy()
    data.loc[0, "rate"] = None
    data.loc[1, "temp"] = None
    model_formula = ModelFormula.parse("rate ~ temp + species", list(data.columns))

    X, y, design_info = model_formula.design(data)

    assert list(X.columns) == ["species[T.O. niveus]", "temp"]
    assert len(X) == len(crickets) - 2
    pd.testing.assert_index_equal(X.index, y.index)
    assert design_info.column_names[0] == "Intercept"


def test_rebuild_keeps_rows_and_index(crickets):
    model_formula = ModelFormula.parse("rate ~ temp + species", list(crickets.columns))
    X, _, design_info = model_formula.design(crickets)
    new_data = crickets.iloc[::-1]

    rebuilt = ModelFormula.rebuild(design_info, new_data)

    pd.testing.assert_frame_equal(rebuilt, X.loc[new_data.index])


def test_rebuild_rejects_unseen_level(crickets):
    model_formula = ModelFormula.parse("rate ~ temp + species", list(crickets.columns))
    _, _, design_info = model_formula.design(crickets)
    new_data = pd.DataFrame({"temp": [20.0], "species": ["G. bimaculatus"]})

    with pytest.raises(SchemaMismatchError):
        ModelFormula.rebuild(design_info, new_data)
