"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from opentutor.api.v1.endpoints import auth, practice, progress, achievements, dashboard

api_router = APIRouter()

# Each router defines its own prefix
api_router.include_router(auth.router)
api_router.include_router(practice.router)
api_router.include_router(progress.router)
api_router.include_router(achievements.router)
api_router.include_router(dashboard.router)
