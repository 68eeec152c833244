import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Union

from visioncraft.core.errors import NotFoundError
from visioncraft.core.validation import file_too_large

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class StoredFile:
    file_name: str
    path: Path
    size: int


def ensure_upload_dir(root: Union[str, Path]) -> Path:
    """Create the upload directory if it does not exist yet."""
    path = Path(root).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_stream(
    read: Callable[[int], Awaitable[bytes]],
    root: Union[str, Path],
    extension: str,
    max_bytes: int,
) -> StoredFile:
    """
    Copy an upload to the storage root under a fresh server-side name.

    The copy stops as soon as more than ``max_bytes`` have been read; the
    partial file is removed and a ValidationError is raised.
    """
    directory = ensure_upload_dir(root)
    file_name = f"{uuid.uuid4().hex}{extension}"
    path = directory / file_name

    size = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = await read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise file_too_large(max_bytes)
                out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    logger.info(f"Saved upload {file_name} ({size} bytes)")
    return StoredFile(file_name=file_name, path=path, size=size)


def remove_file(path: Union[str, Path]) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove {path}: {str(e)}")


def resolve_upload_path(root: Union[str, Path], name: str) -> Path:
    """
    Resolve ``name`` inside the storage root.

    The candidate is resolved and checked to stay inside the root before
    anything on disk is touched.

    Raises:
        NotFoundError: If the name escapes the root or no such file exists
    """
    base = Path(root).resolve()
    if not name or "\x00" in name:
        raise NotFoundError("Image not found")

    candidate = (base / name).resolve()
    if candidate == base or not candidate.is_relative_to(base):
        logger.warning(f"Rejected upload lookup outside storage root: {name!r}")
        raise NotFoundError("Image not found")

    if not candidate.is_file():
        raise NotFoundError("Image not found")
    return candidate
