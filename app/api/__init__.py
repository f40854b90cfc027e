from fastapi import APIRouter
from app.api.routes import admin, airports, health, search

# Create API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(admin.router)
api_router.include_router(airports.router)
api_router.include_router(health.router)
api_router.include_router(search.router)
