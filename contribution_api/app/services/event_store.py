"""
MongoDB access for the events collection.

Every query carries the owner predicate, so a record belonging to another
user is never read, changed or removed. No business rules live here.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection


def owner_filter(owner_id: ObjectId) -> Dict[str, Any]:
    return {"user_id": owner_id}

def owned_event_filter(event_id: ObjectId, owner_id: ObjectId) -> Dict[str, Any]:
    return {"_id": event_id, "user_id": owner_id}

def list_filter(owner_id: ObjectId, query: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the list query for an owner.

    A non-empty query adds a case-insensitive substring match on title.
    The query is escaped so it is matched as literal text.
    """
    filter_ = owner_filter(owner_id)
    if query:
        filter_["title"] = {"$regex": re.escape(query), "$options": "i"}
    return filter_

def update_pipeline(fields: Dict[str, Any], updated_at: datetime) -> List[Dict[str, Any]]:
    # Values are wrapped in $literal so strings like "$title" are stored as text.
    stage = {key: {"$literal": value} for key, value in fields.items()}
    stage["updated_at"] = {"$max": [updated_at, {"$add": ["$updated_at", 1]}]}
    return [{"$set": stage}]

class MongoEventStore:
    """
    Event Store Adapter backed by a Motor collection.

    Methods return plain documents (dicts keyed as stored) or counts.
    Driver errors propagate to the caller, which scopes each call with a
    storage deadline.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def insert(self, document: Dict[str, Any]) -> ObjectId:
        result = await self.collection.insert_one(document)
        return result.inserted_id

    async def find_many(self, owner_id: ObjectId, query: Optional[str] = None) -> List[Dict[str, Any]]:
        cursor = self.collection.find(list_filter(owner_id, query))
        return await cursor.to_list(length=None)

    async def find_one(self, event_id: ObjectId, owner_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one(owned_event_filter(event_id, owner_id))

    async def update_fields(
        self,
        event_id: ObjectId,
        owner_id: ObjectId,
        fields: Dict[str, Any],
        updated_at: datetime
    ) -> int:
        """
        Set fields and advance updated_at in one atomic write.

        updated_at becomes the later of the given time and one millisecond
        past the stored value, so it strictly increases even when two
        writes land in the same millisecond.

        Returns:
            Number of matched documents (0 or 1)
        """
        result = await self.collection.update_one(
            owned_event_filter(event_id, owner_id),
            update_pipeline(fields, updated_at)
        )
        return result.matched_count

    async def delete_one(self, event_id: ObjectId, owner_id: ObjectId) -> int:
        """Delete a single owned event; returns the deleted count."""
        result = await self.collection.delete_one(owned_event_filter(event_id, owner_id))
        return result.deleted_count
