"""
Request intake pipeline: validate -> persist -> notify.

This is the single implementation of the contact and upload flows. The HTTP
routers are thin adapters over ``IntakeService``; any other deployment
target (a function-per-invocation handler, a CLI) wraps the same object.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from fastapi import Depends

from visioncraft.core.config import Settings, get_settings
from visioncraft.core.errors import NotificationRequiredError, ValidationError
from visioncraft.core.file_storage import remove_file, resolve_upload_path, save_stream
from visioncraft.core.notifier import Notifier, get_notifier
from visioncraft.core.validation import (
    check_image_file,
    normalize_content_type,
    validate_contact,
    validate_upload_client_info,
)
from visioncraft.db.store import SubmissionStore, get_store
from visioncraft.models.contact import ContactSubmission
from visioncraft.models.upload import ImageUpload, ImageUploadCreate

logger = logging.getLogger(__name__)


class IncomingFile(Protocol):
    """What the pipeline needs from an uploaded file (Starlette's UploadFile fits)."""
    filename: Optional[str]
    content_type: Optional[str]
    read: Callable[[int], Awaitable[bytes]]


@dataclass
class ContactResult:
    submission: ContactSubmission
    email_sent: bool


@dataclass
class UploadResult:
    record: ImageUpload
    email_sent: bool


class IntakeService:
    def __init__(self, store: SubmissionStore, notifier: Notifier, settings: Settings):
        self.store = store
        self.notifier = notifier
        self.settings = settings

    async def submit_contact(self, payload: Any) -> ContactResult:
        """
        Validate, store and announce a contact form submission.

        The submission is stored before the notification is attempted, so a
        failed email never loses it. Under the fatal notification policy
        (``contact_notification_required``) a failed email raises
        NotificationRequiredError after the record has been stored.
        """
        data = validate_contact(payload)
        submission = self.store.create_contact(data)

        email_sent = await self.notifier.notify_contact(submission)
        if not email_sent:
            if self.settings.contact_notification_required:
                raise NotificationRequiredError(submission.id)
            logger.warning(f"Contact submission {submission.id} saved without email notification")

        return ContactResult(submission=submission, email_sent=email_sent)

    async def accept_upload(
        self,
        image: Optional[IncomingFile],
        clientName: Optional[str] = None,
        clientEmail: Optional[str] = None,
        clientPhone: Optional[str] = None,
    ) -> UploadResult:
        """
        Check, store and announce an image upload.

        File checks run before the client fields are looked at. The email is
        best-effort: its failure only shows up as ``email_sent=False``.
        """
        if image is None or not image.filename:
            raise ValidationError.single("image", "No image file provided")

        extension = check_image_file(image.content_type, image.filename)
        client_info = validate_upload_client_info(clientName, clientEmail, clientPhone)

        stored = await save_stream(
            image.read,
            self.settings.upload_dir,
            extension,
            self.settings.max_upload_bytes,
        )

        try:
            record = self.store.create_upload(
                ImageUploadCreate(
                    fileName=stored.file_name,
                    originalName=image.filename,
                    fileSize=str(stored.size),
                    mimeType=normalize_content_type(image.content_type),
                    uploadPath=str(stored.path),
                    **client_info.model_dump(),
                )
            )
        except Exception:
            remove_file(stored.path)
            raise

        email_sent = await self.notifier.notify_upload(record, client_info)
        if not email_sent:
            logger.warning(f"Image upload {record.id} saved without email notification")

        return UploadResult(record=record, email_sent=email_sent)

    def list_contacts(self) -> List[ContactSubmission]:
        return self.store.list_contacts()

    def list_uploads(self) -> List[ImageUpload]:
        return self.store.list_uploads()

    def locate_upload(self, name: str) -> Path:
        return resolve_upload_path(self.settings.upload_dir, name)


def get_intake_service(
    store: SubmissionStore = Depends(get_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> IntakeService:
    return IntakeService(store, notifier, settings)
