from app.database import Base
from app.models.user import User
from app.models.friend_request import FriendRequest, FriendRequestStatus, ALLOWED_TRANSITIONS
from app.models.friendship import Friendship
from app.models.story import Story, StoryItem, StoryItemType
from app.models.post import Post, PostLike, PostComment

__all__ = [
    "Base", "User", "FriendRequest", "FriendRequestStatus", "ALLOWED_TRANSITIONS", "Friendship",
    "Story", "StoryItem", "StoryItemType", "Post", "PostLike", "PostComment"
]
