from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import or_
from typing import List, Optional
from app.models.story import Story, StoryItem, StoryItemType, MAX_STORY_ITEMS
from app.crud.user import friend_ids_query
from app.exceptions import InvalidOperationError, NotFoundError, ForbiddenError
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

class StoryCRUD:
    """
    Ephemeral stories. A user has at most one live story; new media is
    appended to it until it holds ``MAX_STORY_ITEMS`` items. Expired stories
    are invisible to every read and are purged separately.
    """

    @staticmethod
    def add_story_item(db: Session, user_id: str, item_type: str, url: str) -> Story:
        """Append an item to the user's live story, starting a new story if none is live."""
        try:
            item_type = StoryItemType(item_type).value
        except ValueError:
            raise InvalidOperationError("Invalid story type")

        url = (url or "").strip()
        if not url:
            raise InvalidOperationError("Story media URL is required")

        story = StoryCRUD.get_live_story(db, user_id)
        if story is None:
            story = Story(user_id=user_id)
            db.add(story)
        elif len(story.items) >= MAX_STORY_ITEMS:
            raise InvalidOperationError(
                "Maximum number of story items reached. Delete some items to add more."
            )

        story.items.append(StoryItem(type=item_type, url=url))
        story.updated_at = utcnow()
        db.commit()
        db.refresh(story)
        logger.info(f"Story {story.id} of {user_id} now has {len(story.items)} item(s)")
        return story

    @staticmethod
    def get_live_story(db: Session, user_id: str) -> Optional[Story]:
        return db.query(Story).filter(
            Story.user_id == user_id,
            Story.expires_at >= utcnow()
        ).order_by(Story.created_at.desc()).first()

    @staticmethod
    def get_visible_stories(db: Session, user_id: str) -> List[Story]:
        """Live stories of the user and their friends, newest first."""
        return db.query(Story).filter(
            or_(Story.user_id == user_id, Story.user_id.in_(friend_ids_query(user_id))),
            Story.expires_at >= utcnow()
        ).options(
            joinedload(Story.user),
            selectinload(Story.items)
        ).order_by(Story.created_at.desc(), Story.id).all()

    @staticmethod
    def delete_story(db: Session, story_id: str, acting_user_id: str, item_id: Optional[str] = None) -> Optional[Story]:
        """
        Delete a whole story, or only ``item_id`` from it. Owner only.

        Returns the remaining story, or None once nothing is left of it.
        """
        story = db.query(Story).filter(
            Story.id == story_id,
            Story.expires_at >= utcnow()
        ).first()
        if not story:
            raise NotFoundError("Story not found")

        if story.user_id != acting_user_id:
            raise ForbiddenError("Not authorized to delete this story")

        if item_id:
            item = next((item for item in story.items if item.id == item_id), None)
            if item is None:
                raise NotFoundError("Story item not found")
            story.items.remove(item)

        if item_id and story.items:
            db.commit()
            db.refresh(story)
            logger.info(f"Removed item {item_id} from story {story_id}")
            return story

        db.delete(story)
        db.commit()
        logger.info(f"Story {story_id} deleted by {acting_user_id}")
        return None

    @staticmethod
    def purge_expired_stories(db: Session) -> int:
        """Delete every expired story with its items. Returns the number of stories removed."""
        expired = db.query(Story).filter(Story.expires_at < utcnow()).all()
        for story in expired:
            db.delete(story)
        db.commit()
        if expired:
            logger.info(f"Purged {len(expired)} expired stories")
        return len(expired)
