import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from .services.error_handling import DatabaseError, ServiceError
from .config import Settings

logger = logging.getLogger(__name__)

class MongoConnection:
    """
    Owns the MongoDB client for the lifetime of the application.

    Constructed once at startup and handed to the services that need it,
    instead of living in module-level state.
    """

    def __init__(self, config: Settings, client: Optional[AsyncIOMotorClient] = None):
        self.config = config
        self.client = client if client is not None else AsyncIOMotorClient(
            config.MONGODB_URL,
            tz_aware=True,
            serverSelectionTimeoutMS=config.MONGODB_SERVER_SELECTION_TIMEOUT_MS
        )

    @property
    def database(self) -> AsyncIOMotorDatabase:
        return self.client[self.config.DB_NAME]

    @property
    def events(self) -> AsyncIOMotorCollection:
        return self.database[self.config.EVENTS_COLLECTION]

    async def ping(self) -> bool:
        """
        Check if MongoDB connection is healthy.
        """
        try:
            async with storage_deadline(self.config.STORAGE_TIMEOUT_SECONDS, "ping database"):
                await self.client.admin.command("ping")
            return True
        except DatabaseError:
            return False

    async def create_indexes(self) -> None:
        """
        Create the indexes the event queries rely on.

        (user_id, _id) serves point lookups, (user_id, updated_at) serves
        owner scans and title serves substring filtering.
        """
        async with storage_deadline(self.config.LIST_TIMEOUT_SECONDS, "create indexes"):
            await self.events.create_index([("user_id", ASCENDING), ("_id", ASCENDING)])
            await self.events.create_index([("user_id", ASCENDING), ("updated_at", ASCENDING)])
            await self.events.create_index([("title", ASCENDING)])
        logger.info(f"Indexes ensured on collection '{self.config.EVENTS_COLLECTION}'")

    def info(self) -> dict:
        return {
            "url": sanitize_mongodb_url(self.config.MONGODB_URL),
            "database": self.config.DB_NAME,
        }

    def close(self) -> None:
        self.client.close()

@asynccontextmanager
async def storage_deadline(seconds: float, operation: str):
    """
    Scope a storage call with a deadline.

    The wrapped work is cancelled when the deadline passes. Timeouts and
    driver errors surface as DatabaseError; service errors raised inside
    the scope pass through unchanged.

    Args:
        seconds: Time budget for the scope
        operation: Short description used in logs and error messages

    Raises:
        DatabaseError: On timeout or any driver error
    """
    try:
        async with asyncio.timeout(seconds):
            yield
    except ServiceError:
        raise
    except TimeoutError as e:
        logger.error(f"Storage deadline of {seconds}s exceeded: {operation}")
        raise DatabaseError(f"could not {operation}", original_error=e)
    except PyMongoError as e:
        logger.error(f"Database error during {operation}: {str(e)}", exc_info=True)
        raise DatabaseError(f"could not {operation}", original_error=e)

def sanitize_mongodb_url(url: str) -> str:
    """
    Hide password in MongoDB URL for safe logging.
    """
    if "://" not in url:
        return url
    protocol, rest = url.split("://", 1)
    if "@" not in rest:
        return url
    credentials, host = rest.rsplit("@", 1)
    if ":" in credentials:
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    return url
