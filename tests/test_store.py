import threading
from datetime import datetime, timezone

import pytest

from visioncraft.db.store import MemoryStore
from visioncraft.models.contact import ContactCreate
from visioncraft.models.upload import ImageUploadCreate, UploadStatus


def _contact(name="Jo Smith"):
    return ContactCreate(name=name, email="a@b.com", message="This is a long enough message.")


def _upload(name="a.png"):
    return ImageUploadCreate(
        fileName=f"stored-{name}",
        originalName=name,
        fileSize="10",
        mimeType="image/png",
        uploadPath=f"/tmp/stored-{name}",
    )


def test_contact_ids_start_at_one_and_increase():
    store = MemoryStore()

    ids = [store.create_contact(_contact()).id for _ in range(3)]

    assert ids == [1, 2, 3]


def test_contact_and_upload_ids_are_independent():
    store = MemoryStore()

    store.create_contact(_contact())
    store.create_contact(_contact())
    upload = store.create_upload(_upload())

    assert upload.id == 1


def test_created_at_is_set_by_store():
    store = MemoryStore()
    before = datetime.now(timezone.utc)

    submission = store.create_contact(_contact())

    assert before <= submission.createdAt <= datetime.now(timezone.utc)


def test_upload_defaults():
    store = MemoryStore()

    upload = store.create_upload(_upload())

    assert upload.status == UploadStatus.UPLOADED
    assert upload.clientName is None
    assert upload.clientEmail is None
    assert upload.clientPhone is None


def test_listing_is_newest_first_with_id_tiebreak(monkeypatch):
    store = MemoryStore()
    fixed = datetime(2025, 1, 1, tzinfo=timezone.utc)

    class _FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return fixed

    monkeypatch.setattr("visioncraft.db.store.datetime", _FrozenDatetime)
    for name in ["a", "b", "c"]:
        store.create_contact(_contact(name=f"{name}{name}"))
        store.create_upload(_upload(name=f"{name}.png"))

    assert [c.id for c in store.list_contacts()] == [3, 2, 1]
    assert [u.id for u in store.list_uploads()] == [3, 2, 1]


def test_empty_listings():
    store = MemoryStore()

    assert store.list_contacts() == []
    assert store.list_uploads() == []


def test_returned_records_are_copies():
    store = MemoryStore()
    submission = store.create_contact(_contact())

    submission.name = "Changed"
    store.list_contacts()[0].message = "Changed too"

    stored = store.list_contacts()[0]
    assert stored.name == "Jo Smith"
    assert stored.message == "This is a long enough message."


def test_get_upload():
    store = MemoryStore()
    created = store.create_upload(_upload())

    assert store.get_upload(created.id) == created
    assert store.get_upload(99) is None


def test_update_upload_status():
    store = MemoryStore()
    created = store.create_upload(_upload())

    processing = store.update_upload_status(created.id, "processing")
    completed = store.update_upload_status(created.id, UploadStatus.COMPLETED)

    assert processing.status == UploadStatus.PROCESSING
    assert completed.status == UploadStatus.COMPLETED
    assert store.get_upload(created.id).status == UploadStatus.COMPLETED
    assert completed.createdAt == created.createdAt


def test_update_upload_status_unknown_id():
    store = MemoryStore()

    assert store.update_upload_status(42, "processing") is None


def test_update_upload_status_rejects_unknown_status():
    store = MemoryStore()
    created = store.create_upload(_upload())

    with pytest.raises(ValueError):
        store.update_upload_status(created.id, "deleted")
    assert store.get_upload(created.id).status == UploadStatus.UPLOADED


def test_concurrent_creates_get_unique_ids():
    store = MemoryStore()
    ids = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            new_id = store.create_contact(_contact()).id
            with lock:
                ids.append(new_id)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(ids) == list(range(1, 401))
