"""
Validation layer for inbound contact and upload payloads.

Every check here raises ``ValidationError`` with a list of per-field
violations. File checks use the MIME type and file name declared by the
client; the bytes themselves are not inspected.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from visioncraft.core.errors import ValidationError
from visioncraft.models.contact import ContactCreate
from visioncraft.models.upload import UploadClientInfo

logger = logging.getLogger(__name__)

# Accepted MIME type -> extension used for the stored file
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}


def _violations_from_pydantic(exc: PydanticValidationError) -> List[Dict[str, str]]:
    violations = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        violations.append({"field": field, "message": error.get("msg", "Invalid value")})
    return violations


def validate_contact(payload: Any) -> ContactCreate:
    """
    Validate a raw contact form payload.

    Args:
        payload: Untrusted mapping as decoded from the request body

    Returns:
        ContactCreate: The validated submission

    Raises:
        ValidationError: With one violation per failing field
    """
    if not isinstance(payload, Mapping):
        raise ValidationError.single("body", "Request body must be an object")

    try:
        return ContactCreate.model_validate(dict(payload))
    except PydanticValidationError as e:
        violations = _violations_from_pydantic(e)
        logger.info(f"Contact payload rejected on fields: {[v['field'] for v in violations]}")
        raise ValidationError(violations) from None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return value


def validate_upload_client_info(
    clientName: Optional[str] = None,
    clientEmail: Optional[str] = None,
    clientPhone: Optional[str] = None,
) -> UploadClientInfo:
    """Normalize the optional client fields; empty values become None."""
    return UploadClientInfo(
        clientName=_blank_to_none(clientName),
        clientEmail=_blank_to_none(clientEmail),
        clientPhone=_blank_to_none(clientPhone),
    )


def normalize_content_type(content_type: Optional[str]) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def check_image_file(content_type: Optional[str], filename: Optional[str]) -> str:
    """
    Accept or reject an image before anything is written.

    Returns:
        str: Extension to use for the stored file

    Raises:
        ValidationError: If the MIME type or the file extension is not allowed
    """
    if not filename:
        raise ValidationError.single("image", "No image file provided")

    mime_type = normalize_content_type(content_type)
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError.single(
            "image", "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
        )

    if Path(filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise ValidationError.single(
            "image", "Invalid file extension. Only .jpeg, .jpg, .png, .gif and .webp are allowed."
        )

    return ALLOWED_IMAGE_TYPES[mime_type]


def file_too_large(max_bytes: int) -> ValidationError:
    limit_mb = max_bytes // (1024 * 1024)
    return ValidationError.single("image", f"File exceeds the {limit_mb}MB limit")
