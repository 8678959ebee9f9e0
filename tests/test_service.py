from __future__ import annotations

import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from user_cf.config import UserCFConfig  # noqa: E402
from user_cf.service.app import create_app, serve  # noqa: E402


@pytest.fixture
def client(example_dataset):
    app = create_app(UserCFConfig(dataset_path=example_dataset))
    with TestClient(app) as c:
        yield c


def test_recommend_endpoint(client: TestClient) -> None:
    resp = client.post("/recommend", json={"user_id": 2, "top_n": 3})

    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == 2
    assert 0 < len(body["results"]) <= 3
    scores = [r["score"] for r in body["results"]]
    assert scores == sorted(scores, reverse=True)


def test_recommend_unknown_user_is_404(client: TestClient) -> None:
    resp = client.post("/recommend", json={"user_id": 999, "top_n": 3})

    assert resp.status_code == 404
    assert "999" in resp.json()["detail"]


def test_recommend_validates_top_n(client: TestClient) -> None:
    assert client.post("/recommend", json={"user_id": 2, "top_n": 0}).status_code == 422


def test_similar_users_endpoint(client: TestClient) -> None:
    resp = client.post("/similar_users", json={"user_id": 2, "top_n": 2})

    assert resp.status_code == 200
    results = resp.json()["results"]
    assert len(results) <= 2
    assert all(r["user_id"] != 2 for r in results)


def test_evaluate_endpoint_is_reproducible_with_seed(client: TestClient) -> None:
    payload = {"train_fraction": 0.8, "test_fraction": 1.0, "seed": 3}

    first = client.post("/evaluate", json=payload)
    second = client.post("/evaluate", json=payload)

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["n_train"] + first.json()["n_test"] == 32


def test_evaluate_undefined_score_is_null(client: TestClient) -> None:
    resp = client.post("/evaluate", json={"train_fraction": 0.0, "test_fraction": 1.0, "seed": 0})

    assert resp.status_code == 200
    assert resp.json()["mae"] is None


def test_serve_runs_uvicorn_with_configured_app(tmp_path, example_dataset, monkeypatch) -> None:
    uvicorn = pytest.importorskip("uvicorn")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(f"dataset:\n  path: {example_dataset}\n")
    calls = {}

    def fake_run(app, host, port):
        calls.update(app=app, host=host, port=port)

    monkeypatch.setattr(uvicorn, "run", fake_run)
    serve(["--config", str(cfg_path), "--port", "8123"])

    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 8123
    assert calls["app"].title == "User-based CF Recommender"
