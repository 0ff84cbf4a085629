import logging
from fastapi import HTTPException, status
from ..database import MongoConnection

logger = logging.getLogger(__name__)

async def check_system_health(connection: MongoConnection):
    db_info = connection.info()
    if not await connection.ping():
        logger.error(f"Health check failed: database {db_info['url']} unreachable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Health check failed: database unreachable"
        )

    return {
        "database": {
            "status": "connected",
            **db_info
        }
    }
