from fastapi import APIRouter
from app.api.v1.endpoints import notifications, subscriptions, weather

api_router = APIRouter()

api_router.include_router(subscriptions.router, prefix="/subscribe", tags=["subscriptions"])
api_router.include_router(weather.router, prefix="/weather", tags=["weather"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
