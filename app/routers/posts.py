from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.auth import get_current_user
from app.crud.post import PostCRUD
from app.exceptions import ServiceError
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.models.user import User
from app.schemas.post import PostCreate, CommentCreate, PostResponse, PostDeleteResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])

@router.get("/", response_model=List[PostResponse])
@rate_limit_api_read
async def get_posts(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The post feed, newest first"""
    try:
        return [PostResponse.model_validate(post) for post in PostCRUD.get_posts(db)]
    except Exception as e:
        logger.error(f"Error in get_posts: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@rate_limit_api_write
async def create_post(
    post: PostCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        created = PostCRUD.create_post(db, current_user.id, post.media_url, post.caption)
        return PostResponse.model_validate(created)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in create_post: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/{post_id}/like", response_model=PostResponse)
@rate_limit_api_write
async def like_post(
    post_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Like the post, or unlike it if the current user already does"""
    try:
        return PostResponse.model_validate(PostCRUD.toggle_like(db, post_id, current_user.id))
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in like_post: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/{post_id}/comment", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@rate_limit_api_write
async def comment_on_post(
    post_id: str,
    comment: CommentCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        post = PostCRUD.add_comment(db, post_id, current_user.id, comment.text)
        return PostResponse.model_validate(post)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in comment_on_post: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/{post_id}", response_model=PostDeleteResponse)
@rate_limit_api_write
async def delete_post(
    post_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        PostCRUD.delete_post(db, post_id, current_user.id)
        return PostDeleteResponse(message="Post deleted successfully")
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in delete_post: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/{post_id}/comments/{comment_id}", response_model=PostResponse)
@rate_limit_api_write
async def delete_comment(
    post_id: str,
    comment_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete one of the current user's comments"""
    try:
        post = PostCRUD.delete_comment(db, post_id, comment_id, current_user.id)
        return PostResponse.model_validate(post)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in delete_comment: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
