#run it with uvicorn visioncraft.main:app --reload
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
from contextlib import asynccontextmanager
import logging

from visioncraft.api.v1.api_router import api_router
from visioncraft.core.config import get_settings
from visioncraft.core.errors import (
    IntakeError,
    NotFoundError,
    NotificationRequiredError,
    PersistenceError,
    ValidationError,
)
from visioncraft.core.file_storage import ensure_upload_dir
from visioncraft.core.middleware import UploadSizeLimitMiddleware
from visioncraft.core.notifier import Notifier, get_notifier

# Load environment variables from .env file
load_dotenv()

settings = get_settings()

# Set up logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on application startup"""
    upload_root = ensure_upload_dir(settings.upload_dir)
    logger.info(f"Upload directory ready: {upload_root}")

    transport = get_notifier().describe()["transport"]
    if transport:
        logger.info(f"Email notifications will be sent via {transport}")
    else:
        # Not fatal: the first send attempt reports the missing configuration
        logger.warning("No email transport configured; notifications will fail")
    yield


app = FastAPI(title="VisionCraft Labs Website Backend", version="1.0.0", lifespan=lifespan)

app.add_middleware(UploadSizeLimitMiddleware, max_bytes=settings.max_upload_bytes)

# CORS setup (adjust origins as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Same handlers under /api (production) and at the bare path (serverless rewrites, dev)
app.include_router(api_router, prefix="/api")
app.include_router(api_router, include_in_schema=False)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, errors=exc.violations)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    violations = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body",
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid form data", errors=violations)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Image not found")


@app.exception_handler(NotificationRequiredError)
async def notification_required_handler(request: Request, exc: NotificationRequiredError):
    logger.error(f"Contact submission {exc.submission_id} stored but notification failed (fatal policy)")
    return _error(
        status.HTTP_502_BAD_GATEWAY,
        "Your message was saved but we could not notify the team. Please do not resubmit.",
        id=exc.submission_id,
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.url.path}: {str(exc)}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError):
    logger.error(f"Unhandled intake error on {request.url.path}: {str(exc)}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/api/health")
@app.get("/health", include_in_schema=False)
def health_check(notifier: Notifier = Depends(get_notifier)):
    """
    Health check endpoint.

    Reports which email transport would be used, never the credentials.
    """
    return {
        "status": "ok",
        "email_transport": notifier.describe()["transport"],
    }

