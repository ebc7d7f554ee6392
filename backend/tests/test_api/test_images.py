"""Image generation and gallery API behavior tests."""

from __future__ import annotations

from sqlalchemy import select

from pictoria.database import SessionLocal
from pictoria.models.generated_image import GeneratedImage
from pictoria.models.trained_model import TrainedModel

AUTH = {"Authorization": "Bearer token-1"}


def _add_trained_model(status: str = "succeeded", version: str | None = "ver123") -> None:
    with SessionLocal() as db:
        db.add(
            TrainedModel(
                model_id="user-1_1700000000000_me",
                user_id="user-1",
                model_name="me",
                gender="woman",
                trigger_word="ohwx",
                training_status=status,
                training_steps=1000,
                training_id="trn_1",
                version=version,
            )
        )
        db.commit()


def test_generate_with_base_model_stores_outputs(client, identity, replicate, storage) -> None:
    identity.add_user()
    replicate.prediction_output = ["https://replicate.delivery/a.jpg", "https://replicate.delivery/b.jpg"]

    response = client.post(
        "/api/images/generate",
        json={"model": "black-forest-labs/flux-schnell", "prompt": "a lighthouse at dawn", "num_outputs": 2},
        headers=AUTH,
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert len(payload["images"]) == 2
    assert all(image["url"].startswith("file://") for image in payload["images"])

    [(args, _)] = replicate.called("create_prediction")
    model, provider_input = args
    assert model == "black-forest-labs/flux-schnell"
    assert provider_input["prompt"] == "a lighthouse at dawn"
    assert provider_input["num_outputs"] == 2
    assert provider_input["aspect_ratio"] == "1:1"
    assert len(replicate.called("download")) == 2

    with SessionLocal() as db:
        images = db.scalars(select(GeneratedImage)).all()
    assert len(images) == 2
    for image in images:
        assert image.user_id == "user-1"
        assert image.image_name.startswith("user-1/")
        assert image.image_name.endswith(".jpg")
        assert storage.object_exists(image.image_name, "generated_images")


def test_generate_with_trained_model_uses_version_and_trigger_word(client, identity, replicate) -> None:
    identity.add_user()
    _add_trained_model()

    response = client.post(
        "/api/images/generate",
        json={"model": "user-1_1700000000000_me", "prompt": "portrait in a garden", "output_format": "png"},
        headers=AUTH,
    )

    assert response.status_code == 201
    [(args, _)] = replicate.called("create_prediction")
    assert args[0] == "gabaal/user-1_1700000000000_me:ver123"
    assert args[1]["prompt"] == "ohwx portrait in a garden"
    assert response.json()["images"][0]["image_name"].endswith(".png")


def test_generate_rejects_unfinished_model(client, identity, replicate) -> None:
    identity.add_user()
    _add_trained_model(status="processing", version=None)

    response = client.post(
        "/api/images/generate",
        json={"model": "user-1_1700000000000_me", "prompt": "portrait"},
        headers=AUTH,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Model is not available for generation"}
    assert replicate.calls == []


def test_generate_validates_settings(client, identity) -> None:
    identity.add_user()

    too_many = client.post("/api/images/generate", json={"prompt": "x", "num_outputs": 5}, headers=AUTH)
    bad_ratio = client.post("/api/images/generate", json={"prompt": "x", "aspect_ratio": "7:3"}, headers=AUTH)

    assert too_many.status_code == 422
    assert bad_ratio.status_code == 422


def test_generate_requires_session(client, replicate) -> None:
    response = client.post("/api/images/generate", json={"prompt": "x"})

    assert response.status_code == 401
    assert replicate.calls == []


def test_list_and_delete_images(client, identity, storage) -> None:
    identity.add_user()
    generated = client.post("/api/images/generate", json={"prompt": "a cat"}, headers=AUTH).json()["images"]
    [image] = generated

    listing = client.get("/api/images", headers=AUTH)
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [image["id"]]

    deleted = client.delete(f"/api/images/{image['id']}", headers=AUTH)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    assert storage.deleted == [(image["image_name"], "generated_images")]
    assert client.get("/api/images", headers=AUTH).json() == []


def test_delete_foreign_image_is_not_found(client, identity) -> None:
    identity.add_user()
    identity.add_user("user-2", token="token-2", email="grace@example.com")
    [image] = client.post("/api/images/generate", json={"prompt": "a cat"}, headers=AUTH).json()["images"]

    response = client.delete(f"/api/images/{image['id']}", headers={"Authorization": "Bearer token-2"})

    assert response.status_code == 404
    assert response.json() == {"error": "Image not found"}


def test_generate_storage_calls_run_off_event_loop(client, identity, storage) -> None:
    identity.add_user()

    response = client.post("/api/images/generate", json={"prompt": "a heron"}, headers=AUTH)

    assert response.status_code == 201
    assert storage.presigned
    assert storage.calls_on_event_loop == []
