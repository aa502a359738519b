"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import attendance, health

api_router = APIRouter()

# Check-in / check-out, attendance reads, reports
api_router.include_router(attendance.router)

# Health
api_router.include_router(health.router)
