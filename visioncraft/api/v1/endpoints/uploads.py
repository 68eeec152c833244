"""
Image upload endpoints for the preview request flow.
Clients upload one image plus optional contact details; the team gets an
email and edits the photo by hand.
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from typing import Any, Dict, List, Optional
import logging

from visioncraft.core.errors import IntakeError
from visioncraft.core.intake import IntakeService, get_intake_service
from visioncraft.models.upload import UploadSummary

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload-image", status_code=status.HTTP_200_OK)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    clientName: Optional[str] = Form(None),
    clientEmail: Optional[str] = Form(None),
    clientPhone: Optional[str] = Form(None),
    service: IntakeService = Depends(get_intake_service),
) -> Dict[str, Any]:
    """
    Accept an image for a free preview.

    Returns:
        dict: The new upload's id, original name, status and timestamp, and
        whether the notification email went out
    """
    try:
        result = await service.accept_upload(image, clientName, clientEmail, clientPhone)
    except IntakeError:
        raise
    except Exception as e:
        logger.error(f"Image upload error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload image",
        )
    finally:
        if image is not None:
            await image.close()

    record = result.record
    return {
        "success": True,
        "upload": {
            "id": record.id,
            "originalName": record.originalName,
            "status": record.status.value,
            "uploadedAt": record.createdAt.isoformat(),
        },
        "emailSent": result.email_sent,
    }


@router.get("/uploads", response_model=List[UploadSummary], status_code=status.HTTP_200_OK)
async def list_uploads(service: IntakeService = Depends(get_intake_service)):
    """All upload records, newest first, without storage paths."""
    try:
        return [UploadSummary.from_record(record) for record in service.list_uploads()]
    except Exception as e:
        logger.error(f"Error listing uploads: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch uploads",
        )


@router.get("/uploads/{name}")
async def get_uploaded_image(name: str, service: IntakeService = Depends(get_intake_service)):
    """Stream a stored image by its server-side file name."""
    path = service.locate_upload(name)
    return FileResponse(path)
