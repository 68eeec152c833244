from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional, List

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Notification transports, tried in this order: Resend, SendGrid, SMTP
    resend_api_key: Optional[str] = None
    sendgrid_api_key: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None

    # Addresses
    to_email: Optional[str] = None
    from_email: Optional[str] = None
    default_sender: str = "visioncraftlabs@gmail.com"  # must be a verified SendGrid sender

    notification_timeout_seconds: float = 10.0
    contact_notification_required: bool = False

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = MAX_UPLOAD_BYTES

    # CORS settings
    allowed_origins: List[str] = ["*"]

    log_level: str = "INFO"


@lru_cache
def get_settings():
    return Settings()
