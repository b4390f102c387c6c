from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.friend_request import FriendRequestStatus
from app.schemas.user import UserSummary

class FriendRequestResponse(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    status: FriendRequestStatus
    created_at: datetime
    updated_at: datetime
    sender: Optional[UserSummary] = None
    recipient: Optional[UserSummary] = None

    class Config:
        from_attributes = True

class FriendRequestsOverviewResponse(BaseModel):
    """Pending requests addressed to the user plus recently accepted ones"""
    incoming: List[FriendRequestResponse]
    accepted: List[FriendRequestResponse]

class FriendRequestStatusResponse(BaseModel):
    message: str
    status: str

class NudgeResponse(BaseModel):
    message: str
