# API Routers
from app.routers import auth, friends, posts, stories, users

__all__ = ["auth", "friends", "posts", "stories", "users"]
