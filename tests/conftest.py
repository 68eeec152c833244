import pytest
from fastapi.testclient import TestClient

from visioncraft.core.config import Settings, get_settings
from visioncraft.core.notifier import get_notifier
from visioncraft.db.store import MemoryStore, get_store
from visioncraft.main import app


class FakeNotifier:
    """Records what would have been emailed; ``succeed`` controls the outcome."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.contacts = []
        self.uploads = []
        self.tests_sent = 0

    async def notify_contact(self, submission):
        self.contacts.append(submission)
        return self.succeed

    async def notify_upload(self, record, client_info):
        self.uploads.append((record, client_info))
        return self.succeed

    async def send_test(self):
        self.tests_sent += 1
        return self.succeed

    def describe(self):
        return {"env_present": {}, "transport": "fake" if self.succeed else None}


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "resend_api_key": None,
        "sendgrid_api_key": None,
        "smtp_host": None,
        "smtp_port": None,
        "smtp_user": None,
        "smtp_pass": None,
        "to_email": None,
        "from_email": None,
        "upload_dir": str(tmp_path / "uploads"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(settings, store, notifier):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 128
