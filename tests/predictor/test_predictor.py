import pytest
from fastapi.testclient import TestClient

from tidyflow.model import linear_reg, logistic_reg
from tidyflow.workflow import Workflow


@pytest.fixture
def client_factory(tmp_path, monkeypatch):
    import predictor

    def factory(fitted_workflow):
        file_path = tmp_path / "workflow.pkl"
        fitted_workflow.save(file_path)
        monkeypatch.setenv("WORKFLOW_PATH", str(file_path))
        monkeypatch.setenv("PREDICTOR_LOG_FILE", "false")
        return TestClient(predictor.app)

    return factory


@pytest.fixture
def crickets_client(client_factory, crickets):
    fitted = Workflow().add_formula("rate ~ temp + species").add_model(linear_reg()).fit(crickets)
    with client_factory(fitted) as client:
        yield client


@pytest.fixture
def two_class_client(client_factory, two_class):
    fitted = Workflow().add_variables(outcome="Class", predictors=["A", "B"]).add_model(logistic_reg()).fit(two_class)
    with client_factory(fitted) as client:
        yield client


def test_healthcheck(crickets_client):
    response = crickets_client.get("/healthcheck")

    assert response.status_code == 200
    assert response.json() == {"health": "ok"}


def test_predict_regression(crickets_client):
    rows = [{"temp": 20.0, "species": "O. niveus"}, {"temp": 25.0, "species": "O. exclamationis"}]

    response = crickets_client.post("/predict", json={"rows": rows})

    body = response.json()
    assert response.status_code == 200
    assert body["model"] == "linear_reg:lm"
    assert len(body["predictions"]) == 2
    assert isinstance(body["predictions"][0][".pred"], float)


@pytest.mark.parametrize(
    "type, columns",
    [(None, [".pred_class"]), ("prob", [".pred_Class1", ".pred_Class2"])],
    ids=["class", "prob"],
)
def test_predict_classification(two_class_client, type, columns):
    response = two_class_client.post("/predict", json={"rows": [{"A": 2.5, "B": 1.0}], "type": type})

    assert response.status_code == 200
    (prediction,) = response.json()["predictions"]
    assert list(prediction) == columns


def test_predict_class_is_a_level(two_class_client):
    response = two_class_client.post("/predict", json={"rows": [{"A": 3.5, "B": 0.5}]})

    assert response.json()["predictions"][0][".pred_class"] in ("Class1", "Class2")


@pytest.mark.parametrize(
    "payload",
    [
        {"rows": [{"temp": 20.0}]},
        {"rows": [{"temp": "warm", "species": "O. niveus"}]},
        {"rows": [{"temp": 20.0, "species": "O. niveus"}], "type": "prob"},
        {"rows": []},
    ],
    ids=["missing_column", "wrong_kind", "wrong_type", "empty_rows"],
)
def test_predict_rejects_invalid_requests(crickets_client, payload):
    response = crickets_client.post("/predict", json=payload)

    assert response.status_code == 422
