from sqlalchemy import Column, String, DateTime, UniqueConstraint, CheckConstraint, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utcnow
import uuid

class Friendship(Base):
    """
    Confirmed friendship between two users.

    One row per unordered pair, stored with ``user1_id < user2_id``, so the
    friends relation is symmetric by construction.
    """
    __tablename__ = "friendships"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user1_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user2_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    # Relationships
    user1 = relationship("User", foreign_keys=[user1_id], back_populates="friendships_as_user1")
    user2 = relationship("User", foreign_keys=[user2_id], back_populates="friendships_as_user2")

    __table_args__ = (
        UniqueConstraint('user1_id', 'user2_id', name='unique_friendship'),
        CheckConstraint('user1_id < user2_id', name='ck_friendship_ordered_pair'),
    )

    def friend_of(self, user_id: str) -> str:
        """The other member of the pair."""
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def __repr__(self):
        return f"<Friendship id={self.id} user1={self.user1_id} user2={self.user2_id}>"
