import pytest
from sqlalchemy.exc import SQLAlchemyError

from sortie.services import gallery_service
from sortie.services.errors import NotFound, PersistenceError
from sortie.services.storage_service import StorageError


def stored_image(db, storage, title="Dunes", key="1/dunes.jpg"):
    storage.upload(key, b"jpeg-bytes")
    return gallery_service.add_image(db, title, storage.public_url(key))


def test_list_newest_first_with_limit(db, storage):
    first = stored_image(db, storage, "First", "1/a.jpg")
    second = stored_image(db, storage, "Second", "1/b.jpg")
    third = stored_image(db, storage, "Third", "1/c.jpg")

    assert [i.id for i in gallery_service.list_images(db)] == [third.id, second.id, first.id]
    assert [i.id for i in gallery_service.list_images(db, limit=2)] == [third.id, second.id]


def test_only_one_featured_image(db, storage):
    a = stored_image(db, storage, "A", "1/a.jpg")
    b = stored_image(db, storage, "B", "1/b.jpg")

    gallery_service.set_featured(db, a.id)
    gallery_service.set_featured(db, b.id)
    db.expire_all()

    assert gallery_service.get_featured(db).id == b.id
    assert [i.id for i in gallery_service.list_images(db) if i.is_featured] == [b.id]


def test_failed_feature_keeps_previous_image(db, storage, monkeypatch):
    a = stored_image(db, storage, "A", "1/a.jpg")
    b = stored_image(db, storage, "B", "1/b.jpg")
    gallery_service.set_featured(db, a.id)
    a_id, b_id = a.id, b.id

    def broken_commit():
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(PersistenceError):
        gallery_service.set_featured(db, b_id)

    assert [i.id for i in gallery_service.list_images(db) if i.is_featured] == [a_id]


def test_remove_featured(db, storage):
    image = stored_image(db, storage)
    gallery_service.set_featured(db, image.id)

    gallery_service.remove_featured(db, image.id)

    assert gallery_service.get_featured(db) is None


def test_feature_unknown_image(db):
    with pytest.raises(NotFound):
        gallery_service.set_featured(db, 999)


def test_delete_removes_row_and_file(db, storage):
    image_id = stored_image(db, storage).id

    assert gallery_service.delete_image(db, storage, image_id) is True

    assert not storage.exists("1/dunes.jpg")
    with pytest.raises(NotFound):
        gallery_service.get_image(db, image_id)


def test_delete_keeps_going_when_file_removal_fails(db, storage, monkeypatch):
    image_id = stored_image(db, storage).id

    def broken_remove(keys):
        raise StorageError("disk is read-only")

    monkeypatch.setattr(storage, "remove", broken_remove)

    assert gallery_service.delete_image(db, storage, image_id) is False
    with pytest.raises(NotFound):
        gallery_service.get_image(db, image_id)


def test_delete_image_stored_elsewhere(db, storage):
    image = gallery_service.add_image(db, "Remote", "https://cdn.example.com/remote.jpg")

    assert gallery_service.delete_image(db, storage, image.id) is True
