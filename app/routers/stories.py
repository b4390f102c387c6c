from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.database import get_db
from app.auth import get_current_user
from app.crud.story import StoryCRUD
from app.exceptions import ServiceError
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.models.user import User
from app.schemas.story import StoryItemCreate, StoryResponse, StoryDeleteResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/stories", tags=["stories"])

@router.post("/", response_model=StoryResponse, status_code=status.HTTP_201_CREATED)
@rate_limit_api_write
async def create_story(
    story_item: StoryItemCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add an image or video to the current user's story"""
    try:
        story = StoryCRUD.add_story_item(db, current_user.id, story_item.type, story_item.url)
        return StoryResponse.model_validate(story)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in create_story: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/", response_model=List[StoryResponse])
@rate_limit_api_read
async def get_stories(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Live stories of the current user and their friends"""
    try:
        stories = StoryCRUD.get_visible_stories(db, current_user.id)
        return [StoryResponse.model_validate(story) for story in stories]
    except Exception as e:
        logger.error(f"Error in get_stories: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/{story_id}", response_model=StoryDeleteResponse)
@rate_limit_api_write
async def delete_story(
    story_id: str,
    request: Request,
    item_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one item of a story (``item_id``) or the whole story"""
    try:
        story = StoryCRUD.delete_story(db, story_id, current_user.id, item_id)
        if story is None:
            return StoryDeleteResponse(message="Story deleted successfully")
        return StoryDeleteResponse(message="Story item deleted", story=StoryResponse.model_validate(story))
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in delete_story: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
