"""Aggregate API v1 router that mounts all sub-routers."""
from fastapi import APIRouter
from app.api.v1 import feedback

router = APIRouter(prefix="/api/v1")

router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
