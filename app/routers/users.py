from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.auth import get_current_user
from app.crud.user import get_recommended_users
from app.exceptions import ServiceError
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_nudge
from app.middleware.request_id import get_request_id
from app.models.user import User
from app.schemas.friends import NudgeResponse
from app.schemas.user import UserSummary
from app.services.nudge_service import send_nudge
from app.utils.email_sender import create_email_sender
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

@router.get("/recommended", response_model=List[UserSummary])
@rate_limit_api_read
async def get_recommended(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Onboarded users the current user is not friends with yet"""
    try:
        users = get_recommended_users(db, current_user.id)
        return [UserSummary.model_validate(user) for user in users]
    except Exception as e:
        logger.error(f"Error in get_recommended: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/{user_id}/nudge", response_model=NudgeResponse)
@rate_limit_nudge
async def emergency_nudge(
    user_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id)
):
    """Email a friend that the current user is urgently trying to reach them"""
    try:
        recipient = send_nudge(db, current_user, user_id, create_email_sender())
        return NudgeResponse(message=f"Emergency nudge sent to {recipient.full_name}.")
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in emergency_nudge: {e}", request_id=request_id)
        raise HTTPException(status_code=500, detail="Failed to send emergency nudge")
