"""
Image upload models for the preview request flow.
The upload record tracks the stored file plus the optional client contact details.
"""

from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UploadStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"


class UploadClientInfo(BaseModel):
    """Optional client details sent alongside an image"""
    clientName: Optional[str] = None
    clientEmail: Optional[str] = None
    clientPhone: Optional[str] = None

    def has_any(self) -> bool:
        return any([self.clientName, self.clientEmail, self.clientPhone])


class ImageUploadCreate(UploadClientInfo):
    """Data needed to record an upload; id and createdAt are assigned by the store"""
    fileName: str  # server-assigned storage name
    originalName: str  # as sent by the client, display only
    fileSize: str
    mimeType: str
    uploadPath: str


class ImageUpload(ImageUploadCreate):
    """Full upload record"""
    id: int
    status: UploadStatus = UploadStatus.UPLOADED
    createdAt: datetime


class UploadSummary(UploadClientInfo):
    """Upload record as listed over HTTP (storage path omitted)"""
    id: int
    fileName: str
    originalName: str
    fileSize: str
    mimeType: str
    status: UploadStatus
    createdAt: datetime

    @classmethod
    def from_record(cls, record: ImageUpload) -> "UploadSummary":
        return cls(**record.model_dump(exclude={"uploadPath"}))
