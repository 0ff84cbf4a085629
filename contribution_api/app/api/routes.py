from fastapi import APIRouter
from . import health, events

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router)
api_router.include_router(events.router)
