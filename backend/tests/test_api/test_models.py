"""Model listing API behavior tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pictoria.database import SessionLocal
from pictoria.models.trained_model import TrainedModel


def _add(model_id: str, user_id: str, created_at: datetime, **overrides) -> None:
    with SessionLocal() as db:
        db.add(
            TrainedModel(
                model_id=model_id,
                user_id=user_id,
                model_name=overrides.get("model_name", model_id),
                gender="man",
                trigger_word="ohwx",
                training_status=overrides.get("training_status", "queued"),
                training_steps=1000,
                training_id=f"trn_{model_id}",
                version=overrides.get("version"),
                created_at=created_at,
            )
        )
        db.commit()


def test_list_models_requires_session(client) -> None:
    response = client.get("/api/models")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorised"}


def test_list_models_returns_only_callers_models_newest_first(client, identity) -> None:
    identity.add_user()
    now = datetime.now(timezone.utc)
    _add("older", "user-1", now - timedelta(hours=2))
    _add("newer", "user-1", now, training_status="succeeded", version="v1")
    _add("foreign", "user-2", now)

    response = client.get("/api/models", headers={"Authorization": "Bearer token-1"})

    assert response.status_code == 200
    payload = response.json()
    assert [item["model_id"] for item in payload] == ["newer", "older"]
    assert payload[0]["training_status"] == "succeeded"
    assert payload[0]["version"] == "v1"
    assert payload[1]["version"] is None
