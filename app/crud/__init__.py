from app.crud.user import (
    get_user,
    get_user_by_email,
    user_exists,
    create_user,
    update_user,
    onboard_user,
    are_friends,
    add_friend,
    get_friends,
    get_recommended_users,
)
from app.crud.friends import FriendRequestLedger
from app.crud.story import StoryCRUD
from app.crud.post import PostCRUD

__all__ = [
    # User operations
    "get_user",
    "get_user_by_email",
    "user_exists",
    "create_user",
    "update_user",
    "onboard_user",

    # Friendship operations
    "are_friends",
    "add_friend",
    "get_friends",
    "get_recommended_users",

    # Friend request ledger
    "FriendRequestLedger",

    # Stories and posts
    "StoryCRUD",
    "PostCRUD"
]
