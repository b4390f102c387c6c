from fastapi import Depends, HTTPException, Request, status, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from typing import Optional
from sqlalchemy.orm import Session
from app.database import get_db
from app.models import User
from app import crud

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db)
) -> User:
    """
    Verify Firebase ID token and load the matching user row.
    Falls back to X-User-ID header if bearer token is not provided.

    Users seen for the first time through a valid token are created on the fly.
    The user id is stored on ``request.state`` so rate limits are keyed per user.

    Raises:
        HTTPException: 401 if both token and X-User-ID are invalid or missing
    """
    if credentials is None and x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Either Bearer authentication or X-User-ID header is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if credentials:
        try:
            decoded_token = auth.verify_id_token(credentials.credentials)
        except Exception as firebase_error:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid token: {str(firebase_error)}",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user_id = decoded_token.get("uid")
        db_user = crud.get_user(db, user_id)
        if not db_user:
            db_user = crud.create_user(db, user_id, decoded_token.get("email"), decoded_token.get("name") or "")
    else:
        db_user = crud.get_user(db, x_user_id)
        if not db_user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid X-User-ID",
            )

    request.state.user_id = db_user.id
    return db_user
