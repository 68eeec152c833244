from fastapi import APIRouter
from visioncraft.api.v1.endpoints import contact, uploads

api_router = APIRouter()

api_router.include_router(contact.router, tags=["Contact"])
api_router.include_router(uploads.router, tags=["Uploads"])
