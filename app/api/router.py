from fastapi import APIRouter

from app.api.routes import realtime
from app.domains.meetings.api import routes as meetings
from app.domains.scheduling.api import routes as scheduling

api_router = APIRouter()

# API routes (all have /api/v1 prefix from the app factory)
api_router.include_router(scheduling.router)
api_router.include_router(meetings.router)
api_router.include_router(realtime.router)
