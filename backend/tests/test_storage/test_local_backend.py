"""Local storage backend tests."""

from __future__ import annotations

import pytest

from pictoria.storage.local_backend import LocalStorageBackend


def test_upload_presign_delete(tmp_path) -> None:
    storage = LocalStorageBackend(tmp_path)

    storage.upload_bytes(b"data", "u1/a.zip", "training_data")

    assert storage.object_exists("u1/a.zip", "training_data")
    assert (tmp_path / "training_data" / "u1" / "a.zip").read_bytes() == b"data"
    assert storage.get_presigned_url("u1/a.zip", "training_data").startswith("file://")

    storage.delete_object("u1/a.zip", "training_data")
    assert not storage.object_exists("u1/a.zip", "training_data")
    assert storage.get_presigned_url("u1/a.zip", "training_data") is None


def test_delete_missing_object_is_silent(tmp_path) -> None:
    LocalStorageBackend(tmp_path).delete_object("nope.zip", "training_data")


def test_object_key_cannot_escape_bucket(tmp_path) -> None:
    storage = LocalStorageBackend(tmp_path)

    with pytest.raises(ValueError):
        storage.upload_bytes(b"x", "../outside.txt", "training_data")
