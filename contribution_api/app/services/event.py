import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union
from bson import ObjectId
from ..config import Settings
from ..database import storage_deadline
from ..schemas.event import EventCreate, EventUpdate
from .cache import format_last_modified, generate_etag, is_not_modified, latest_event
from .error_handling import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "ACTIVE"


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond resolution BSON stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)

def parse_event_id(event_id: str) -> ObjectId:
    if not isinstance(event_id, str) or not ObjectId.is_valid(event_id):
        raise ValidationError(
            "invalid event id",
            details={"field": "id", "value": event_id}
        )
    return ObjectId(event_id)

def serialize_event(document: Dict[str, Any]) -> Dict[str, Any]:
    deadline = document.get("deadline")
    return {
        "id": str(document["_id"]),
        "user_id": str(document["user_id"]),
        "title": document.get("title", ""),
        "description": document.get("description", ""),
        "location": document.get("location", ""),
        "target_amount": document.get("target_amount", 0),
        "deadline": deadline.isoformat() if deadline else None,
        "status": document.get("status", ""),
        "created_at": document["created_at"].isoformat(),
        "updated_at": document["updated_at"].isoformat()
    }

def merge_update_fields(event: EventUpdate) -> Dict[str, Any]:
    """
    Collect the fields a partial update will write.

    Empty strings, a zero amount and a null deadline all mean "leave
    unchanged", so this operation cannot reset target_amount to 0 or
    clear a deadline.
    """
    fields = {}
    for name in ("title", "description", "location", "status"):
        value = getattr(event, name)
        if value:
            fields[name] = value
    if event.target_amount:
        fields["target_amount"] = event.target_amount
    if event.deadline is not None:
        fields["deadline"] = event.deadline
    return fields


@dataclass
class CachedResult:
    """Outcome of a read: either a body with validators or 'not modified'."""
    body: Union[Dict[str, Any], List[Dict[str, Any]], None] = None
    etag: Optional[str] = None
    last_modified: Optional[str] = None
    not_modified: bool = False

    @property
    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.etag:
            headers["ETag"] = self.etag
        if self.last_modified:
            headers["Last-Modified"] = self.last_modified
        return headers


class EventService:
    """
    Lifecycle of contribution events owned by a single caller.

    Every operation takes the resolved owner key and passes it to the
    store as part of the filter. Each storage call runs under its own
    deadline.

    Args:
        store: Event store adapter (see MongoEventStore)
        config: Application settings holding the storage deadlines
        clock: Returns the current UTC time
    """

    def __init__(self, store, config: Settings, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.config = config
        self.clock = clock

    async def create_event(self, owner_id: ObjectId, event: EventCreate) -> str:
        now = self.clock()
        document = {
            "_id": ObjectId(),
            "user_id": owner_id,
            "title": event.title,
            "description": event.description,
            "location": event.location,
            "target_amount": event.target_amount,
            "deadline": event.deadline,
            "status": DEFAULT_STATUS,
            "created_at": now,
            "updated_at": now
        }

        async with storage_deadline(self.config.STORAGE_TIMEOUT_SECONDS, "create event"):
            await self.store.insert(document)

        logger.info(f"Created event {document['_id']} for user {owner_id}")
        return str(document["_id"])

    async def list_events(
        self,
        owner_id: ObjectId,
        query: Optional[str] = None,
        if_none_match: Optional[str] = None
    ) -> CachedResult:
        """
        List the caller's events, optionally filtered by title substring.

        Validators come from the most recently updated event in the
        result. An empty result carries no validators.
        """
        async with storage_deadline(self.config.LIST_TIMEOUT_SECONDS, "fetch events"):
            documents = await self.store.find_many(owner_id, query)

        if not documents:
            return CachedResult(body=[])

        latest = latest_event(documents)
        etag = generate_etag(latest["_id"], latest["updated_at"])
        if is_not_modified(if_none_match, etag):
            return CachedResult(etag=etag, not_modified=True)

        return CachedResult(
            body=[serialize_event(document) for document in documents],
            etag=etag,
            last_modified=format_last_modified(latest["updated_at"])
        )

    async def get_event(
        self,
        owner_id: ObjectId,
        event_id: str,
        if_none_match: Optional[str] = None
    ) -> CachedResult:
        oid = parse_event_id(event_id)

        async with storage_deadline(self.config.STORAGE_TIMEOUT_SECONDS, "fetch event"):
            document = await self.store.find_one(oid, owner_id)

        if document is None:
            raise NotFoundError("Event")

        etag = generate_etag(document["_id"], document["updated_at"])
        if is_not_modified(if_none_match, etag):
            return CachedResult(etag=etag, not_modified=True)

        return CachedResult(
            body=serialize_event(document),
            etag=etag,
            last_modified=format_last_modified(document["updated_at"])
        )

    async def update_event(self, owner_id: ObjectId, event_id: str, event: EventUpdate) -> str:
        oid = parse_event_id(event_id)

        fields = merge_update_fields(event)
        if not fields:
            raise ValidationError("no fields to update")

        async with storage_deadline(self.config.STORAGE_TIMEOUT_SECONDS, "update event"):
            matched = await self.store.update_fields(oid, owner_id, fields, self.clock())

        if matched == 0:
            raise NotFoundError("Event")

        logger.info(f"Updated event {oid} fields: {', '.join(sorted(fields))}")
        return str(oid)

    async def delete_event(self, owner_id: ObjectId, event_id: str) -> str:
        oid = parse_event_id(event_id)

        async with storage_deadline(self.config.STORAGE_TIMEOUT_SECONDS, "delete event"):
            deleted = await self.store.delete_one(oid, owner_id)

        if deleted == 0:
            raise NotFoundError("Event")

        logger.info(f"Deleted event {oid}")
        return str(oid)
