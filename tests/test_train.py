import json

import pandas as pd
import pytest

from train import main


@pytest.mark.integration
@pytest.mark.parametrize(
    "workflow_name, metric",
    [("crickets_lm", "rmse"), ("two_class_glm", "roc_auc")],
    ids=["regression", "classification"],
)
def test_train_main_writes_artifacts(tmp_path, workflow_name, metric):
    main(["-w", workflow_name, "--resample", "--artifact_root", str(tmp_path)])

    (artifact_dir,) = (tmp_path / "train" / workflow_name).iterdir()
    files = {path.name for path in artifact_dir.iterdir()}
    assert {"metadata.json", "workflow.pkl", "parameters.csv", "metrics.csv", "metrics.json", "df_pred.csv"} <= files
    assert "resample_metrics.csv" in files
    assert any(name.endswith(".png") for name in files)

    with open(artifact_dir / "metrics.json") as f:
        metrics = json.load(f)
    assert metric in metrics["train"] and metric in metrics["test"]
    with open(artifact_dir / "metadata.json") as f:
        assert json.load(f)["workflow_name"] == workflow_name
    assert pd.read_csv(artifact_dir / "metrics.csv").loc[0, ".metric"] == metric


@pytest.mark.integration
def test_train_main_reads_csv(tmp_path, crickets):
    data_path = tmp_path / "crickets.csv"
    crickets.to_csv(data_path, index=False)

    main(["-w", "crickets_lm", "-d", str(data_path), "--artifact_root", str(tmp_path / "artifact")])

    (artifact_dir,) = (tmp_path / "artifact" / "train" / "crickets_lm").iterdir()
    assert (artifact_dir / "workflow.pkl").exists()
