from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List
from app.database import get_db
from app.auth import get_current_user
from app.config import settings
from app.crud.friends import FriendRequestLedger
from app.crud.user import get_friends
from app.exceptions import ServiceError
from app.middleware.rate_limit import rate_limit_api_read, rate_limit_api_write
from app.schemas.friends import (
    FriendRequestResponse, FriendRequestsOverviewResponse, FriendRequestStatusResponse
)
from app.schemas.user import UserSummary
from app.models.user import User
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/users", tags=["friends"])

@router.post("/friend-request/{target_id}", response_model=FriendRequestResponse, status_code=status.HTTP_201_CREATED)
@rate_limit_api_write
async def send_friend_request(
    target_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Send a friend request to another user"""
    try:
        friend_request = FriendRequestLedger.send_friend_request(db, current_user.id, target_id)
        return FriendRequestResponse.model_validate(friend_request)
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in send_friend_request: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.put("/friend-request/{request_id}/accept", response_model=FriendRequestStatusResponse)
@rate_limit_api_write
async def accept_friend_request(
    request_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept a friend request addressed to the current user"""
    try:
        friend_request = FriendRequestLedger.accept_friend_request(db, request_id, current_user.id)
        return FriendRequestStatusResponse(
            message="Friend request accepted",
            status=friend_request.status
        )
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in accept_friend_request: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.put("/friend-request/{request_id}/reject", response_model=FriendRequestStatusResponse)
@rate_limit_api_write
async def reject_friend_request(
    request_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Reject a friend request addressed to the current user"""
    try:
        friend_request = FriendRequestLedger.reject_friend_request(db, request_id, current_user.id)
        return FriendRequestStatusResponse(
            message="Friend request rejected",
            status=friend_request.status
        )
    except (HTTPException, ServiceError):
        raise
    except Exception as e:
        logger.error(f"Error in reject_friend_request: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friend-requests", response_model=FriendRequestsOverviewResponse)
@rate_limit_api_read
async def get_friend_requests(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Incoming pending requests and requests accepted in the last day"""
    try:
        incoming = FriendRequestLedger.get_incoming_requests(db, current_user.id)
        accepted = FriendRequestLedger.get_recently_accepted_requests(
            db, current_user.id, settings.ACCEPTED_REQUESTS_WINDOW_HOURS
        )
        return FriendRequestsOverviewResponse(
            incoming=[FriendRequestResponse.model_validate(req) for req in incoming],
            accepted=[FriendRequestResponse.model_validate(req) for req in accepted]
        )
    except Exception as e:
        logger.error(f"Error in get_friend_requests: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/outgoing-friend-requests", response_model=List[FriendRequestResponse])
@rate_limit_api_read
async def get_outgoing_friend_requests(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pending requests sent by the current user"""
    try:
        outgoing = FriendRequestLedger.get_outgoing_requests(db, current_user.id)
        return [FriendRequestResponse.model_validate(req) for req in outgoing]
    except Exception as e:
        logger.error(f"Error in get_outgoing_friend_requests: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friends", response_model=List[UserSummary])
@rate_limit_api_read
async def get_my_friends(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Friends of the current user"""
    try:
        return [UserSummary.model_validate(friend) for friend in get_friends(db, current_user.id)]
    except Exception as e:
        logger.error(f"Error in get_my_friends: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
