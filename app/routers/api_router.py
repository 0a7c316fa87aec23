from fastapi import APIRouter
from app.routers import dashboard

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(dashboard.router, tags=["Dashboard"])
