"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.rooms import router as rooms_router
from api.v1.routes.services import router as services_router

router = APIRouter()
router.include_router(services_router)
router.include_router(profiles_router)
router.include_router(rooms_router)
