from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.schemas.user import UserSummary

class PostCreate(BaseModel):
    media_url: str
    caption: Optional[str] = Field(None, max_length=2200)

class CommentCreate(BaseModel):
    text: str = Field(..., max_length=1000)

class CommentResponse(BaseModel):
    id: str
    user_id: str
    user: Optional[UserSummary] = None
    text: str
    created_at: datetime

    class Config:
        from_attributes = True

class PostResponse(BaseModel):
    id: str
    user_id: str
    user: Optional[UserSummary] = None
    media_url: str
    caption: str
    liked_by: List[str]
    comments: List[CommentResponse]
    created_at: datetime

    class Config:
        from_attributes = True

class PostDeleteResponse(BaseModel):
    message: str
