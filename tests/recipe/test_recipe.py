import pandas as pd
import pytest

from tidyflow.exceptions import ColumnNotFoundError, SchemaMismatchError
from tidyflow.recipe import Recipe, StepLog, all_nominal_predictors, starts_with
from tidyflow.split import initial_split

AMES_FORMULA = "Sale_Price ~ Neighborhood + Gr_Liv_Area + Year_Built + Bldg_Type + Latitude + Longitude"


@pytest.fixture
def ames_recipe():
    return (
        Recipe.from_formula(AMES_FORMULA)
        .step_log("Gr_Liv_Area", base=10)
        .step_other("Neighborhood", threshold=0.01)
        .step_dummy(all_nominal_predictors())
        .step_interact([("Gr_Liv_Area", starts_with("Bldg_Type_"))])
        .step_spline(["Latitude", "Longitude"], deg_free=20)
    )


def test_from_formula_roles():
    recipe = Recipe.from_formula("y ~ a + b")
    assert recipe.outcomes == ("y",)
    assert recipe.predictors == ("a", "b")

    everything = Recipe.from_formula("y ~ .")
    assert everything.predictors is None


@pytest.mark.parametrize("formula", ["y a + b", "y ~ ", "y ~ . + a"], ids=["no_tilde", "no_rhs", "dot_and_terms"])
def test_from_formula_invalid(formula):
    with pytest.raises(ValueError):
        Recipe.from_formula(formula)


def test_step_methods_return_new_recipe():
    recipe = Recipe.from_formula("y ~ .")
    extended = recipe.step_log("a")

    assert len(recipe.steps) == 0
    assert len(extended.steps) == 1


def test_add_step_rejects_estimated_step():
    df = pd.DataFrame({"a": [1.0, 2.0], "y": [1.0, 2.0]})
    estimated = StepLog("a").estimate(df)
    with pytest.raises(ValueError, match="estimated"):
        Recipe.from_formula("y ~ a").add_step(estimated)


def test_estimate_missing_column(ames):
    with pytest.raises(ColumnNotFoundError):
        Recipe.from_formula("Sale_Price ~ Lot_Area").estimate(ames)


def test_ames_recipe_columns(ames, ames_recipe):
    estimated = ames_recipe.estimate(ames)

    training = estimated.training_data
    assert "Sale_Price" in training.columns
    assert "Neighborhood" not in training.columns
    assert any(column.startswith("Gr_Liv_Area_x_Bldg_Type_") for column in training.columns)
    assert sum(column.startswith("Latitude_spline_") for column in training.columns) == 20
    # ダミー変数化の後は全ての予測子が数値になる
    assert all(pd.api.types.is_numeric_dtype(training[column]) for column in estimated.predictors)


def test_apply_reproduces_training_data(ames, ames_recipe):
    estimated = ames_recipe.estimate(ames)

    applied = estimated.apply(ames)

    pd.testing.assert_frame_equal(applied, estimated.training_data)


def test_apply_preserves_rows_and_order(ames, ames_recipe):
    split = initial_split(ames, strata="Sale_Price")
    estimated = ames_recipe.estimate(split.training())
    testing = split.testing().iloc[::-1]

    applied = estimated.apply(testing.drop(columns="Sale_Price"))

    assert len(applied) == len(testing)
    pd.testing.assert_index_equal(applied.index, testing.index)
    assert "Sale_Price" not in applied.columns


def test_apply_rejects_missing_predictor(ames, ames_recipe):
    estimated = ames_recipe.estimate(ames)
    with pytest.raises(SchemaMismatchError):
        estimated.apply(ames.drop(columns="Latitude"))


def test_apply_rejects_incompatible_kind(ames, ames_recipe):
    estimated = ames_recipe.estimate(ames)
    with pytest.raises(SchemaMismatchError):
        estimated.apply(ames.assign(Gr_Liv_Area=ames["Gr_Liv_Area"].astype(str)))


def test_skip_step_only_applies_to_training(two_class):
    recipe = Recipe.from_formula("Class ~ A + B").step_downsample("Class")

    estimated = recipe.estimate(two_class)

    minority = two_class["Class"].value_counts().min()
    assert len(estimated.training_data) == 2 * minority
    assert len(estimated.apply(two_class)) == len(two_class)


def test_tidy_lists_steps(ames, ames_recipe):
    tidy = ames_recipe.estimate(ames).tidy()

    assert tidy["kind"].tolist() == ["log", "other", "dummy", "interact", "spline"]
    assert tidy["number"].tolist() == [1, 2, 3, 4, 5]


def test_step_zv_drops_constant_dummy_columns():
    levels = ["a", "b", "c"]
    df = pd.DataFrame(
        {
            "y": [1.0, 2.0, 3.0, 4.0],
            "x": [0.5, 0.1, 0.3, 0.2],
            "g": pd.Categorical(["a", "b", "a", "b"], categories=levels),
            "constant": [7.0, 7.0, 7.0, 7.0],
        }
    )
    recipe = Recipe.from_formula("y ~ .").step_dummy(all_nominal_predictors()).step_zv()

    estimated = recipe.estimate(df)

    # 観測されなかった水準 "c" の指示変数と定数カラムが取り除かれる
    assert estimated.predictors == ["x", "g_b"]
    assert list(estimated.apply(df.drop(columns="y")).columns) == ["x", "g_b"]
