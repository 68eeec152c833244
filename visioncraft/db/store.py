"""
Submission store for contact forms and image uploads.

The reference backing is in-memory and lives as long as the process does.
A durable backing can replace ``MemoryStore`` as long as it implements
``SubmissionStore``; handlers only talk to that interface.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from typing import Dict, List, Optional, Union

from visioncraft.core.errors import PersistenceError
from visioncraft.models.contact import ContactCreate, ContactSubmission
from visioncraft.models.upload import ImageUpload, ImageUploadCreate, UploadStatus

logger = logging.getLogger(__name__)


class SubmissionStore(ABC):
    """Append-only record keeper with sequential identifiers per entity type."""

    @abstractmethod
    def create_contact(self, data: ContactCreate) -> ContactSubmission: ...

    @abstractmethod
    def list_contacts(self) -> List[ContactSubmission]: ...

    @abstractmethod
    def create_upload(self, data: ImageUploadCreate) -> ImageUpload: ...

    @abstractmethod
    def list_uploads(self) -> List[ImageUpload]: ...

    @abstractmethod
    def get_upload(self, upload_id: int) -> Optional[ImageUpload]: ...

    @abstractmethod
    def update_upload_status(
        self, upload_id: int, status: Union[UploadStatus, str]
    ) -> Optional[ImageUpload]: ...


def _newest_first(records):
    return sorted(records, key=lambda r: (r.createdAt, r.id), reverse=True)


class MemoryStore(SubmissionStore):
    """
    In-memory store.

    Id assignment and insert happen under one lock, so the store is safe
    both on the event loop and from FastAPI's threadpool. Callers always
    get deep copies; the dicts below never leave this object.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._contacts: Dict[int, ContactSubmission] = {}
        self._uploads: Dict[int, ImageUpload] = {}
        self._next_contact_id = 1
        self._next_upload_id = 1

    def create_contact(self, data: ContactCreate) -> ContactSubmission:
        try:
            with self._lock:
                submission = ContactSubmission(
                    id=self._next_contact_id,
                    name=data.name,
                    email=str(data.email),
                    phone=data.phone,
                    message=data.message,
                    createdAt=datetime.now(timezone.utc),
                )
                self._contacts[submission.id] = submission
                self._next_contact_id += 1
        except Exception as e:
            logger.error(f"Failed to store contact submission: {str(e)}")
            raise PersistenceError("Failed to store contact submission") from e

        logger.info(f"Stored contact submission {submission.id}")
        return submission.model_copy(deep=True)

    def list_contacts(self) -> List[ContactSubmission]:
        with self._lock:
            records = [c.model_copy(deep=True) for c in self._contacts.values()]
        return _newest_first(records)

    def create_upload(self, data: ImageUploadCreate) -> ImageUpload:
        try:
            with self._lock:
                upload = ImageUpload(
                    **data.model_dump(),
                    id=self._next_upload_id,
                    status=UploadStatus.UPLOADED,
                    createdAt=datetime.now(timezone.utc),
                )
                self._uploads[upload.id] = upload
                self._next_upload_id += 1
        except Exception as e:
            logger.error(f"Failed to store image upload: {str(e)}")
            raise PersistenceError("Failed to store image upload") from e

        logger.info(f"Stored image upload {upload.id} ({upload.fileName})")
        return upload.model_copy(deep=True)

    def list_uploads(self) -> List[ImageUpload]:
        with self._lock:
            records = [u.model_copy(deep=True) for u in self._uploads.values()]
        return _newest_first(records)

    def get_upload(self, upload_id: int) -> Optional[ImageUpload]:
        with self._lock:
            upload = self._uploads.get(upload_id)
            return upload.model_copy(deep=True) if upload else None

    def update_upload_status(
        self, upload_id: int, status: Union[UploadStatus, str]
    ) -> Optional[ImageUpload]:
        """
        Move an upload to a new status.

        Returns:
            ImageUpload: The updated record, or None if the id is unknown

        Raises:
            ValueError: If status is not one of uploaded/processing/completed
        """
        new_status = UploadStatus(status)
        with self._lock:
            upload = self._uploads.get(upload_id)
            if upload is None:
                return None
            updated = upload.model_copy(update={"status": new_status})
            self._uploads[upload_id] = updated

        logger.info(f"Upload {upload_id} status changed to {new_status.value}")
        return updated.model_copy(deep=True)


@lru_cache
def get_store() -> SubmissionStore:
    """Returns the process-wide store"""
    return MemoryStore()
