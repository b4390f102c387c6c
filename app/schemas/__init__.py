from app.schemas.user import UserSummary, UserBase, UserUpdate, OnboardingRequest, UserResponse
from app.schemas.friends import (
    FriendRequestResponse, FriendRequestsOverviewResponse, FriendRequestStatusResponse, NudgeResponse
)
from app.schemas.story import StoryItemCreate, StoryItemResponse, StoryResponse, StoryDeleteResponse
from app.schemas.post import PostCreate, CommentCreate, CommentResponse, PostResponse, PostDeleteResponse

__all__ = [
    "UserSummary", "UserBase", "UserUpdate", "OnboardingRequest", "UserResponse",
    "FriendRequestResponse", "FriendRequestsOverviewResponse", "FriendRequestStatusResponse", "NudgeResponse",
    "StoryItemCreate", "StoryItemResponse", "StoryResponse", "StoryDeleteResponse",
    "PostCreate", "CommentCreate", "CommentResponse", "PostResponse", "PostDeleteResponse"
]
