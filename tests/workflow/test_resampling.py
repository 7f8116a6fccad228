import numpy as np
import pytest

from tidyflow.evaluation import MetricSet, accuracy, roc_auc, rmse, rsq
from tidyflow.model import linear_reg, logistic_reg
from tidyflow.recipe import Recipe
from tidyflow.split import vfold_cv
from tidyflow.workflow import Workflow, collect_metrics, collect_predictions, fit_resamples


@pytest.fixture(scope="module")
def crickets_results(crickets):
    workflow = Workflow().add_formula("rate ~ temp + species").add_model(linear_reg())
    folds = vfold_cv(crickets, v=5, seed=1)
    return fit_resamples(workflow, folds, MetricSet(rmse, rsq), save_pred=True)


def test_fit_resamples_results(crickets_results):
    results = crickets_results.results

    assert list(results.columns) == ["id", ".metric", ".estimator", ".estimate"]
    assert results["id"].unique().tolist() == ["Fold01", "Fold02", "Fold03", "Fold04", "Fold05"]
    assert len(results) == 10


def test_collect_metrics(crickets_results):
    summary = collect_metrics(crickets_results)
    results = crickets_results.results

    assert list(summary.columns) == [".metric", ".estimator", "mean", "n", "std_err"]
    assert summary[".metric"].tolist() == ["rmse", "rsq"]
    assert summary["n"].tolist() == [5, 5]
    rmse_values = results.loc[results[".metric"] == "rmse", ".estimate"]
    assert summary.loc[0, "mean"] == pytest.approx(rmse_values.mean())
    assert summary.loc[0, "std_err"] == pytest.approx(rmse_values.std() / np.sqrt(5))
    assert len(collect_metrics(crickets_results, summarize=False)) == len(results)


def test_collect_predictions_cover_every_row_once(crickets, crickets_results):
    predictions = collect_predictions(crickets_results)

    assert sorted(predictions[".row"]) == list(range(len(crickets)))
    assert {"id", ".pred", "rate"} <= set(predictions.columns)


def test_collect_predictions_requires_save_pred(crickets):
    workflow = Workflow().add_formula("rate ~ temp").add_model(linear_reg())
    results = fit_resamples(workflow, vfold_cv(crickets, v=3), MetricSet(rmse))

    with pytest.raises(ValueError, match="save_pred"):
        collect_predictions(results)


def test_recipe_is_estimated_on_each_analysis_set(two_class):
    recipe = Recipe.from_formula("Class ~ A + B").step_normalize(["A", "B"])
    workflow = Workflow().add_recipe(recipe).add_model(logistic_reg())
    folds = vfold_cv(two_class, v=4, strata="Class")

    results = fit_resamples(workflow, folds, MetricSet(roc_auc, accuracy))

    summary = collect_metrics(results)
    assert summary[".estimator"].tolist() == ["binary", "binary"]
    assert (summary["mean"] > 0.5).all()


def test_fit_resamples_requires_resamples(crickets):
    workflow = Workflow().add_formula("rate ~ temp").add_model(linear_reg())

    with pytest.raises(ValueError, match="resample"):
        fit_resamples(workflow, [], MetricSet(rmse))
