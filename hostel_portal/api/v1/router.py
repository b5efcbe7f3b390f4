"""
API v1 Router - Main Entry Point
"""
from fastapi import APIRouter

from hostel_portal.api.v1 import payment_deadlines

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        500: {"description": "Internal Server Error"}
    }
)

router.include_router(payment_deadlines.router, tags=["Payment Deadlines"])
