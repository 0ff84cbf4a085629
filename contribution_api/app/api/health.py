import logging
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from ..services.health import check_system_health

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])

@router.get("/health")
async def health_check(request: Request):
    """
    Public health check endpoint.

    No authentication required.
    """
    try:
        health_data = await check_system_health(request.app.state.mongo)
        return {
            "status": "healthy",
            **health_data
        }
    except HTTPException as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "detail": e.detail
            }
        )
