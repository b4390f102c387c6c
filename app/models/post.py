from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time import utcnow
import uuid

class Post(Base):
    """A media post in the public feed."""
    __tablename__ = "posts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    media_url = Column(String, nullable=False)
    caption = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="posts")
    likes = relationship("PostLike", back_populates="post", cascade="all, delete-orphan")
    comments = relationship(
        "PostComment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostComment.created_at"
    )

    @property
    def liked_by(self):
        """Ids of the users who currently like the post."""
        return sorted(like.user_id for like in self.likes)

    def __repr__(self):
        return f"<Post id={self.id} user={self.user_id}>"

class PostLike(Base):
    __tablename__ = "post_likes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    post = relationship("Post", back_populates="likes")

    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='unique_post_like'),
    )

class PostComment(Base):
    __tablename__ = "post_comments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    post_id = Column(String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="comments")
    user = relationship("User")

    def __repr__(self):
        return f"<PostComment id={self.id} post={self.post_id} user={self.user_id}>"
