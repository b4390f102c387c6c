from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.models.story import StoryItemType
from app.schemas.user import UserSummary

class StoryItemCreate(BaseModel):
    type: StoryItemType
    url: str = Field(..., min_length=1)

class StoryItemResponse(BaseModel):
    id: str
    type: StoryItemType
    url: str
    created_at: datetime

    class Config:
        from_attributes = True

class StoryResponse(BaseModel):
    """A live story with its author's display fields"""
    id: str
    user_id: str
    user: Optional[UserSummary] = None
    items: List[StoryItemResponse]
    expires_at: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class StoryDeleteResponse(BaseModel):
    message: str
    story: Optional[StoryResponse] = None
