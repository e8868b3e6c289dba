from app.models.user import User
from app.models.prompt import Prompt
from app.models.engagement import BookmarkFolder, PromptBookmark, PromptLike, PromptRating
from app.models.user_follow import UserFollow
from app.models.notification import Notification, NotificationEntityType, NotificationType

__all__ = [
    "User",
    "Prompt",
    "PromptRating",
    "PromptLike",
    "BookmarkFolder",
    "PromptBookmark",
    "UserFollow",
    "Notification",
    "NotificationType",
    "NotificationEntityType",
]
