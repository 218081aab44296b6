from fastapi import APIRouter

from app.api.routes import health, performance, targets


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(targets.router)
api_router.include_router(performance.router)
