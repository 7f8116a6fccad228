import argparse
import json
from datetime import datetime

import pytest

from tidyflow.datasets import load_dataset
from tidyflow.model import ModelMode
from tidyflow.split import initial_split
from tidyflow.workflow import MetaData, get_workflow_config, workflow_configs


def test_workflow_names_are_unique():
    names = [workflow_config.name for workflow_config in workflow_configs]

    assert len(names) == len(set(names))


def test_get_workflow_config():
    workflow_config = get_workflow_config("two_class_glm")

    assert workflow_config.outcome == "Class"
    assert workflow_config.mode == ModelMode.CLASSIFICATION
    assert workflow_config.baseline.spec.model_type == "null_model"
    assert workflow_config.baseline.preprocessor == workflow_config.workflow.preprocessor
    with pytest.raises(ValueError, match="Invalid workflow name"):
        get_workflow_config("unknown")


@pytest.mark.integration
@pytest.mark.parametrize("workflow_config", workflow_configs, ids=lambda workflow_config: workflow_config.name)
def test_workflow_configs_fit_and_predict(workflow_config):
    kwargs = {} if workflow_config.dataset == "crickets" else {"n": 500}
    df = load_dataset(workflow_config.dataset, **kwargs)
    split = initial_split(df, prop=workflow_config.prop, strata=workflow_config.strata)

    fitted = workflow_config.workflow.fit(split.training())
    results = workflow_config.metrics.evaluate(fitted.augment(split.testing()), truth=workflow_config.outcome)

    assert [result.name for result in results] == workflow_config.metrics.names
    assert fitted.mode == workflow_config.mode


def test_metadata_save_as_json(tmp_path):
    workflow_config = get_workflow_config("crickets_lm")
    meta_data = MetaData(
        workflow_config=workflow_config,
        command_line_arguments=argparse.Namespace(workflow_name="crickets_lm", seed=42),
        version="20240101000000",
        start_time=datetime(2024, 1, 1, 0, 0, 0),
        end_time=datetime(2024, 1, 1, 0, 1, 0),
        artifact_dir=str(tmp_path),
        metrics={"rmse": 1.5},
        is_better_than_baseline=True,
    )
    output_path = tmp_path / "metadata.json"

    meta_data.save_as_json(output_path)

    with open(output_path) as f:
        saved = json.load(f)
    assert saved["workflow_name"] == "crickets_lm"
    assert saved["workflow_config"]["metrics"] == ["rmse", "rsq"]
    assert saved["command_line_arguments"] == {"workflow_name": "crickets_lm", "seed": 42}
    assert saved["start_time"] == "2024-01-01 00:00:00"
    assert saved["is_better_than_baseline"] is True
    assert saved["compute_resource"]["memory_total"] > 0
    assert "python_version" in saved["dependencies"]
