from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from app.models.post import Post, PostLike, PostComment
from app.exceptions import InvalidOperationError, NotFoundError, ForbiddenError, ConflictError
from app.utils.logger import get_logger

logger = get_logger(__name__)

class PostCRUD:
    """Posts in the feed, with likes and comments."""

    @staticmethod
    def create_post(db: Session, user_id: str, media_url: str, caption: Optional[str] = None) -> Post:
        media_url = (media_url or "").strip()
        if not media_url:
            raise InvalidOperationError("Media URL is required")

        post = Post(user_id=user_id, media_url=media_url, caption=(caption or "").strip())
        db.add(post)
        db.commit()
        db.refresh(post)
        logger.info(f"Post {post.id} created by {user_id}")
        return post

    @staticmethod
    def get_posts(db: Session, limit: int = 100) -> List[Post]:
        """Newest posts first, with authors, likes and commenters loaded."""
        return db.query(Post).options(
            joinedload(Post.user),
            selectinload(Post.likes),
            selectinload(Post.comments).joinedload(PostComment.user)
        ).order_by(Post.created_at.desc(), Post.id).limit(limit).all()

    @staticmethod
    def get_post(db: Session, post_id: str) -> Optional[Post]:
        return db.query(Post).filter(Post.id == post_id).first()

    @staticmethod
    def _get_existing_post(db: Session, post_id: str) -> Post:
        post = PostCRUD.get_post(db, post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    @staticmethod
    def toggle_like(db: Session, post_id: str, user_id: str) -> Post:
        """Like the post, or take the like back if the user already likes it."""
        post = PostCRUD._get_existing_post(db, post_id)

        like = db.query(PostLike).filter(
            PostLike.post_id == post_id,
            PostLike.user_id == user_id
        ).first()

        try:
            if like:
                db.delete(like)
            else:
                db.add(PostLike(post_id=post_id, user_id=user_id))
            db.commit()
        except IntegrityError:
            # The same user liked the post concurrently
            db.rollback()
            raise ConflictError("Post like changed concurrently")

        db.refresh(post)
        logger.info(f"User {user_id} {'unliked' if like else 'liked'} post {post_id}")
        return post

    @staticmethod
    def add_comment(db: Session, post_id: str, user_id: str, text: str) -> Post:
        text = (text or "").strip()
        if not text:
            raise InvalidOperationError("Comment text is required")

        post = PostCRUD._get_existing_post(db, post_id)
        post.comments.append(PostComment(user_id=user_id, text=text))
        db.commit()
        db.refresh(post)
        return post

    @staticmethod
    def delete_post(db: Session, post_id: str, acting_user_id: str):
        post = PostCRUD._get_existing_post(db, post_id)
        if post.user_id != acting_user_id:
            raise ForbiddenError("Not authorized to delete this post")

        db.delete(post)
        db.commit()
        logger.info(f"Post {post_id} deleted by {acting_user_id}")

    @staticmethod
    def delete_comment(db: Session, post_id: str, comment_id: str, acting_user_id: str) -> Post:
        """Remove a comment from a post. Only the comment's author may do this."""
        post = PostCRUD._get_existing_post(db, post_id)

        comment = next((comment for comment in post.comments if comment.id == comment_id), None)
        if comment is None:
            raise NotFoundError("Comment not found")

        if comment.user_id != acting_user_id:
            raise ForbiddenError("Not authorized to delete this comment")

        post.comments.remove(comment)
        db.commit()
        db.refresh(post)
        return post
