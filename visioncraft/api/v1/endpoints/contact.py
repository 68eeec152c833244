"""
Contact form endpoints.
The form posts JSON (or url-encoded fields); submissions are stored first and
then announced by email.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import Any, Dict, List
import json
import logging

from visioncraft.core.errors import IntakeError, ValidationError
from visioncraft.core.intake import IntakeService, get_intake_service
from visioncraft.core.notifier import Notifier, get_notifier
from visioncraft.models.contact import ContactSubmission

router = APIRouter()
logger = logging.getLogger(__name__)


async def read_payload(request: Request) -> Any:
    """Decode a JSON or form-encoded body into a plain mapping."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError.single("body", "Request body must be valid JSON")


@router.post("/contact", status_code=status.HTTP_200_OK)
async def submit_contact(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
) -> Dict[str, Any]:
    """
    Receive a contact form submission.

    Returns:
        dict: success flag, the new submission id and whether the email went out
    """
    payload = await read_payload(request)
    try:
        result = await service.submit_contact(payload)
    except IntakeError:
        raise
    except Exception as e:
        logger.error(f"Contact form error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit contact form",
        )

    return {
        "success": True,
        "id": result.submission.id,
        "emailSent": result.email_sent,
    }


@router.get(
    "/contact-submissions",
    response_model=List[ContactSubmission],
    status_code=status.HTTP_200_OK,
)
async def list_contact_submissions(service: IntakeService = Depends(get_intake_service)):
    """All contact submissions, newest first."""
    try:
        return service.list_contacts()
    except Exception as e:
        logger.error(f"Error listing contact submissions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch contact submissions",
        )


@router.get("/contact/debug", status_code=status.HTTP_200_OK)
async def contact_debug(notifier: Notifier = Depends(get_notifier)) -> Dict[str, Any]:
    """Report which email settings are present (booleans only) and the transport in use."""
    return notifier.describe()


@router.get("/contact/test", status_code=status.HTTP_200_OK)
async def contact_test(notifier: Notifier = Depends(get_notifier)) -> Dict[str, Any]:
    """Send a fixed test email through the selected transport."""
    if not await notifier.send_test():
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send test email",
        )
    return {"success": True, "message": "Test email sent."}
