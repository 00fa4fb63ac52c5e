"""
API Routes
"""
from fastapi import APIRouter

from hydianflow.api.webhooks.github import router as github_router

router = APIRouter()

router.include_router(github_router, prefix="/webhooks", tags=["webhooks"])
