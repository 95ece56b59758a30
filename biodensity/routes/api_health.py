"""
API Routes for Health Status
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from biodensity import __version__

router = APIRouter()


@router.get("/api/health")
async def health_check():
    """
    Simple health check endpoint for load balancers.

    Returns:
        Simple OK status
    """
    return JSONResponse(content={"status": "ok", "version": __version__})
