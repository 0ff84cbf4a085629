from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class EventBase(BaseModel):
    title: str = ""
    description: str = ""
    location: str = ""
    target_amount: float = 0
    deadline: Optional[datetime] = None

class EventCreate(EventBase):
    pass

class EventUpdate(BaseModel):
    """
    Partial update payload.

    Ownership, identifier and creation time are not part of the payload;
    unknown keys are ignored.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    target_amount: Optional[float] = None
    deadline: Optional[datetime] = None
    status: Optional[str] = None

class EventResponse(EventBase):
    id: str
    user_id: str
    status: str
    created_at: datetime
    updated_at: datetime

class EventMutationResponse(BaseModel):
    id: str
    message: str
