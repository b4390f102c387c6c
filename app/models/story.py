from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from datetime import timedelta
from app.database import Base
from app.utils.time import utcnow
import enum
import uuid

# Stories disappear from every feed this long after they were started
STORY_LIFETIME = timedelta(hours=24)

# Items a single story may hold
MAX_STORY_ITEMS = 20

class StoryItemType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"

def _default_expiry():
    return utcnow() + STORY_LIFETIME

class Story(Base):
    """
    A user's ephemeral story: an ordered set of media items visible to the
    author and their friends until ``expires_at``.
    """
    __tablename__ = "stories"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, default=_default_expiry, index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="stories")
    items = relationship(
        "StoryItem",
        back_populates="story",
        cascade="all, delete-orphan",
        order_by="StoryItem.created_at"
    )

    def __repr__(self):
        return f"<Story id={self.id} user={self.user_id} items={len(self.items)} expires_at={self.expires_at}>"

class StoryItem(Base):
    """A single image or video inside a story."""
    __tablename__ = "story_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    story_id = Column(String, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    url = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    story = relationship("Story", back_populates="items")

    def __repr__(self):
        return f"<StoryItem id={self.id} story={self.story_id} type={self.type}>"
