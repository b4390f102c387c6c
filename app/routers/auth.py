from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.auth import get_current_user
from app.crud.user import update_user, onboard_user
from app.exceptions import ServiceError
from app.middleware.rate_limit import rate_limit_api_write
from app.models.user import User
from app.schemas.user import UserResponse, UserUpdate, OnboardingRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Profile of the authenticated user"""
    return UserResponse.model_validate(current_user)

@router.put("/me", response_model=UserResponse)
@rate_limit_api_write
async def update_current_user(
    user_update: UserUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update the authenticated user's profile; only provided fields change"""
    try:
        user = update_user(db, current_user, user_update.model_dump(exclude_unset=True))
        return UserResponse.model_validate(user)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in update_current_user: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/onboarding", response_model=UserResponse)
@rate_limit_api_write
async def onboard(
    onboarding: OnboardingRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Complete the profile and mark the user onboarded"""
    try:
        user = onboard_user(db, current_user, onboarding.model_dump())
        return UserResponse.model_validate(user)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in onboard: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
