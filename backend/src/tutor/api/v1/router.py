from fastapi import APIRouter

from .chat import router as chat_router
from .chapters import router as chapters_router
from .status import router as status_router


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(chat_router, tags=["chat"])
api_router.include_router(chapters_router, tags=["chapters"])
api_router.include_router(status_router, tags=["status"])
