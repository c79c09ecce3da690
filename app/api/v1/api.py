from fastapi import APIRouter
from app.api.v1.routes.auth import router as auth_router
from app.api.v1.routes.checkin import router as checkin_router
from app.api.v1.routes.reservations import router as reservations_router
from app.api.v1.routes.accommodations import router as accommodations_router
from app.api.v1.routes.directory import router as directory_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(checkin_router)
api_router.include_router(reservations_router)
api_router.include_router(accommodations_router)
api_router.include_router(directory_router)
