from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utcnow
import enum
import uuid

class FriendRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

# Allowed status changes. Accepted is terminal; rejected may be revived by a new send.
ALLOWED_TRANSITIONS = {
    FriendRequestStatus.PENDING: frozenset({FriendRequestStatus.ACCEPTED, FriendRequestStatus.REJECTED}),
    FriendRequestStatus.REJECTED: frozenset({FriendRequestStatus.PENDING}),
    FriendRequestStatus.ACCEPTED: frozenset(),
}

def can_transition(current, target) -> bool:
    """Whether a request in status ``current`` may move to ``target``."""
    return FriendRequestStatus(target) in ALLOWED_TRANSITIONS[FriendRequestStatus(current)]

def make_pair_key(user_a: str, user_b: str) -> str:
    """Order-independent key for the unordered pair {user_a, user_b}."""
    first, second = sorted([user_a, user_b])
    return f"{first}:{second}"

class FriendRequest(Base):
    """A directed friend request between two users."""
    __tablename__ = "friend_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    sender_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pair_key = Column(String, nullable=False, index=True)
    status = Column(String, default=FriendRequestStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], back_populates="sent_friend_requests")
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="received_friend_requests")

    __table_args__ = (
        CheckConstraint("sender_id <> recipient_id", name="ck_friend_request_distinct_users"),
        # At most one pending request per unordered pair
        Index(
            "uq_friend_requests_pending_pair",
            "pair_key",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_friend_requests_status_updated_at", "status", "updated_at"),
    )

    def __repr__(self):
        return f"<FriendRequest id={self.id} sender={self.sender_id} recipient={self.recipient_id} status={self.status}>"
