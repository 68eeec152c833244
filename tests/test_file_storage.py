import io

import pytest

from visioncraft.core.errors import NotFoundError, ValidationError
from visioncraft.core.file_storage import (
    CHUNK_SIZE,
    ensure_upload_dir,
    resolve_upload_path,
    save_stream,
)


class _AsyncReader:
    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)
        self.reads = 0

    async def read(self, size: int) -> bytes:
        self.reads += 1
        return self._buffer.read(size)


def test_ensure_upload_dir_creates_nested(tmp_path):
    root = ensure_upload_dir(tmp_path / "a" / "b")

    assert root.is_dir()


@pytest.mark.asyncio
async def test_save_stream_writes_under_server_name(tmp_path):
    reader = _AsyncReader(b"x" * (CHUNK_SIZE * 2 + 10))

    stored = await save_stream(reader.read, tmp_path / "uploads", ".png", max_bytes=1024 * 1024)

    assert stored.size == CHUNK_SIZE * 2 + 10
    assert stored.file_name.endswith(".png")
    assert len(stored.file_name) == 32 + len(".png")
    assert stored.path.read_bytes() == b"x" * stored.size


@pytest.mark.asyncio
async def test_save_stream_stops_at_limit(tmp_path):
    reader = _AsyncReader(b"x" * (CHUNK_SIZE * 10))

    with pytest.raises(ValidationError):
        await save_stream(reader.read, tmp_path, ".jpg", max_bytes=CHUNK_SIZE + 1)

    # Stopped reading as soon as the limit was crossed
    assert reader.reads == 2
    assert list(tmp_path.iterdir()) == []


def test_resolve_upload_path_finds_file(tmp_path):
    (tmp_path / "photo.png").write_bytes(b"img")

    assert resolve_upload_path(tmp_path, "photo.png") == (tmp_path / "photo.png").resolve()


@pytest.mark.parametrize(
    "name",
    ["../secret.txt", "..", ".", "", "sub/../../secret.txt", "/etc/passwd", "bad\x00name.png"],
)
def test_resolve_upload_path_rejects_escapes(tmp_path, name):
    root = tmp_path / "uploads"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("secret")

    with pytest.raises(NotFoundError):
        resolve_upload_path(root, name)


def test_resolve_upload_path_missing_file(tmp_path):
    with pytest.raises(NotFoundError) as exc_info:
        resolve_upload_path(tmp_path, "missing.png")

    assert str(tmp_path) not in str(exc_info.value)


def test_resolve_upload_path_rejects_directories(tmp_path):
    (tmp_path / "nested").mkdir()

    with pytest.raises(NotFoundError):
        resolve_upload_path(tmp_path, "nested")
