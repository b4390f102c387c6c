from sqlalchemy.orm import Session
from sqlalchemy import and_, func, select, union
from app.models import User, Friendship
from app.exceptions import InvalidOperationError
from app.utils.logger import get_logger
from typing import List, Optional

logger = get_logger(__name__)

# Profile fields required to finish onboarding
ONBOARDING_FIELDS = ("full_name", "bio", "native_language", "learning_language", "location")

# Fields a user may change on their own profile
UPDATABLE_FIELDS = ONBOARDING_FIELDS + ("profile_pic",)

# Profile fields backed by NOT NULL columns
REQUIRED_FIELDS = ("full_name",)

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get a user by ID."""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get a user by email (case-insensitive)."""
    return db.query(User).filter(func.lower(User.email) == email.lower()).first()

def user_exists(db: Session, user_id: str) -> bool:
    return db.query(User.id).filter(User.id == user_id).first() is not None

def create_user(db: Session, user_id: str, email: Optional[str], full_name: str = "") -> User:
    """
    Create a new user.

    Args:
        db: Database session
        user_id: Firebase UID
        email: User email
        full_name: Display name taken from the identity token, if any

    Returns:
        Created User object
    """
    db_user = User(id=user_id, email=email, full_name=full_name or "")
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Created user {user_id}")
    return db_user

def update_user(db: Session, user: User, update_data: dict) -> User:
    """
    Update profile fields; unknown and non-updatable keys are ignored.

    Raises:
        InvalidOperationError: if a required field is set to null
    """
    cleared = [field for field in REQUIRED_FIELDS if field in update_data and update_data[field] is None]
    if cleared:
        raise InvalidOperationError(f"Fields cannot be null: {', '.join(cleared)}")

    for field, value in update_data.items():
        if field in UPDATABLE_FIELDS:
            setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user

def onboard_user(db: Session, user: User, onboarding_data: dict) -> User:
    """
    Complete a user's profile and mark them onboarded.

    Raises:
        InvalidOperationError: if any required field is missing or blank
    """
    missing = [
        field for field in ONBOARDING_FIELDS
        if not (onboarding_data.get(field) or "").strip()
    ]
    if missing:
        raise InvalidOperationError(f"All fields are required. Missing: {', '.join(missing)}")

    for field in UPDATABLE_FIELDS:
        if onboarding_data.get(field) is not None:
            setattr(user, field, onboarding_data[field].strip())
    user.is_onboarded = True
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} completed onboarding")
    return user

def _friendship_filter(user_id: str, friend_id: str):
    user1_id, user2_id = sorted([user_id, friend_id])
    return and_(Friendship.user1_id == user1_id, Friendship.user2_id == user2_id)

def are_friends(db: Session, user_id: str, friend_id: str) -> bool:
    """Check if two users are friends."""
    return db.query(Friendship.id).filter(_friendship_filter(user_id, friend_id)).first() is not None

def add_friend(db: Session, user_id: str, friend_id: str) -> Friendship:
    """
    Make ``user_id`` and ``friend_id`` friends. Adding an existing friendship
    is a no-op.

    Only flushes: the caller commits, so the friendship lands in the same
    transaction as whatever caused it.
    """
    friendship = db.query(Friendship).filter(_friendship_filter(user_id, friend_id)).first()
    if friendship:
        return friendship

    user1_id, user2_id = sorted([user_id, friend_id])
    friendship = Friendship(user1_id=user1_id, user2_id=user2_id)
    db.add(friendship)
    db.flush()
    return friendship

def friend_ids_query(user_id: str):
    """Select of the ids on the other side of every friendship of ``user_id``."""
    friend_ids = union(
        select(Friendship.user2_id.label("friend_id")).where(Friendship.user1_id == user_id),
        select(Friendship.user1_id.label("friend_id")).where(Friendship.user2_id == user_id),
    ).subquery()
    return select(friend_ids.c.friend_id)

def get_friends(db: Session, user_id: str) -> List[User]:
    """All friends of a user, ordered by name."""
    return (
        db.query(User)
        .filter(User.id.in_(friend_ids_query(user_id)))
        .order_by(User.full_name, User.id)
        .all()
    )

def get_recommended_users(db: Session, user_id: str, limit: int = 50) -> List[User]:
    """Onboarded users who are neither the caller nor already their friends."""
    return (
        db.query(User)
        .filter(
            User.id != user_id,
            User.id.not_in(friend_ids_query(user_id)),
            User.is_onboarded.is_(True),
        )
        .order_by(User.created_at.desc(), User.id)
        .limit(limit)
        .all()
    )
