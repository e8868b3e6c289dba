from fastapi import APIRouter
from app.api import bookmarks, follows, health, notifications, prompts, ratings, users
api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(users.router)
api_router.include_router(bookmarks.router)
api_router.include_router(follows.router)
api_router.include_router(prompts.router)
api_router.include_router(ratings.router)
api_router.include_router(notifications.router)
