from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import firebase_admin
from firebase_admin import credentials
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import os

from app.config import settings
from app.crud.story import StoryCRUD
from app.database import get_pool_status, get_session_local
from app.exceptions import ServiceError, service_error_handler
from app.init_db import init_db
from app.logging_config import configure_logging
from app.middleware.rate_limit import limiter
from app.middleware.request_id import RequestIDMiddleware
from app.routers import auth, friends, posts, stories, users
from app.utils.logger import get_logger

# Configure logging first
configure_logging()
logger = get_logger(__name__)

def init_firebase():
    """
    Initialize the Firebase Admin SDK used to verify ID tokens.

    Without a service account file the SDK is left uninitialized; bearer tokens
    are then rejected with 401 and only X-User-ID authentication works.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()
    firebase_json_path = settings.FIREBASE_SERVICE_ACCOUNT_JSON
    if not os.path.exists(firebase_json_path):
        logger.warning(f"FIREBASE_SERVICE_ACCOUNT_JSON not found at {firebase_json_path}. Bearer tokens will be rejected.")
        return None
    cred = credentials.Certificate(firebase_json_path)
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    firebase_app = firebase_admin.initialize_app(cred, options)
    logger.info("Initialized Firebase Admin with provided service account JSON")
    return firebase_app

init_firebase()

# Conditional docs configuration
if settings.DEBUG:
    docs_config = {"docs_url": "/docs", "redoc_url": "/redoc", "openapi_url": "/openapi.json"}
    logger.info("DEBUG mode: Swagger docs enabled at /docs")
else:
    docs_config = {"docs_url": None, "redoc_url": None, "openapi_url": None}

app = FastAPI(
    title="Streamify API",
    description="Social graph backend for Streamify: profiles, friendships, stories and posts",
    version="1.0.0",
    **docs_config
)

# Set up rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Typed service errors (not found, forbidden, conflict...) become JSON errors
app.add_exception_handler(ServiceError, service_error_handler)

# Add Request ID middleware first for proper request tracing
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(friends.router)
app.include_router(users.router)
app.include_router(stories.router)
app.include_router(posts.router)

@app.on_event("startup")
async def startup_event():
    """Create tables in this worker process (for Gunicorn compatibility)."""
    init_db()
    db = get_session_local()()
    try:
        StoryCRUD.purge_expired_stories(db)
    finally:
        db.close()
    logger.info(f"Streamify API started in {'DEBUG' if settings.DEBUG else 'PRODUCTION'} mode")

@app.get("/")
async def root():
    return {"message": "Streamify API", "version": "1.0.0"}

@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "streamify-api", "database_pool": get_pool_status()}
