from sqlalchemy import Column, String, DateTime, Boolean, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utcnow

class User(Base):
    """User model for Firebase-authenticated Streamify users and their profile data."""
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # Firebase UID
    email = Column(String, unique=True, index=True, nullable=True)
    full_name = Column(String, nullable=False, default="")
    bio = Column(Text, nullable=True)
    profile_pic = Column(String, nullable=True)
    native_language = Column(String, nullable=True)
    learning_language = Column(String, nullable=True)
    location = Column(String, nullable=True)
    is_onboarded = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    # Friend relationships
    sent_friend_requests = relationship("FriendRequest", foreign_keys="FriendRequest.sender_id", back_populates="sender", cascade="all, delete-orphan")
    received_friend_requests = relationship("FriendRequest", foreign_keys="FriendRequest.recipient_id", back_populates="recipient", cascade="all, delete-orphan")
    friendships_as_user1 = relationship("Friendship", foreign_keys="Friendship.user1_id", back_populates="user1", cascade="all, delete-orphan")
    friendships_as_user2 = relationship("Friendship", foreign_keys="Friendship.user2_id", back_populates="user2", cascade="all, delete-orphan")

    # Stories and posts
    stories = relationship("Story", back_populates="user", cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User id={self.id} email={self.email} full_name={self.full_name}>"
