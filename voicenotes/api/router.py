"""API router aggregator."""
from fastapi import APIRouter
from voicenotes.api.routers import ai, health, notes

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(ai.router)
api_router.include_router(notes.router)
