"""Domain errors raised by the service layer.

Every error carries a stable ``code`` and the HTTP status the API layer maps it
to. Services raise them before the first write of a unit of work, so the
surrounding transaction rolls back with nothing persisted.
"""


class AppError(Exception):
    status_code = 500
    code = "SYS001"
    message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    code = "RES001"
    message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "RES002"
    message = "Resource already exists"


class ForbiddenError(AppError):
    status_code = 403
    code = "AUTH005"
    message = "Access forbidden"


class InvalidInputError(AppError):
    status_code = 400
    code = "VAL002"
    message = "Invalid input"


class LimitExceededError(AppError):
    status_code = 400
    code = "VAL003"
    message = "Limit exceeded"


# ── users ────────────────────────────────────────────────────────────────────
class UserNotFoundError(NotFoundError):
    code = "USER001"
    message = "User not found"


class UserAlreadyExistsError(ConflictError):
    code = "USER002"
    message = "User already exists with this email or nickname"


# ── prompts ──────────────────────────────────────────────────────────────────
class PromptNotFoundError(NotFoundError):
    code = "PROMPT001"
    message = "Prompt not found"


class InvalidCategoryError(InvalidInputError):
    code = "PROMPT002"
    message = "Invalid category"


# ── ratings ──────────────────────────────────────────────────────────────────
class RatingAlreadyExistsError(ConflictError):
    code = "RATING001"
    message = "You have already rated this prompt"


class RatingNotFoundError(NotFoundError):
    code = "RATING002"
    message = "Rating not found for this prompt"


class SelfRatingError(ForbiddenError):
    code = "RATING003"
    message = "You cannot rate your own prompt"


class UnauthorizedRatingAccessError(ForbiddenError):
    code = "RATING004"
    message = "You can only modify your own ratings"


class InvalidRatingError(InvalidInputError):
    code = "RATING005"
    message = "Rating must be an integer between 1 and 5"


class CommentTooLongError(InvalidInputError):
    code = "RATING006"
    message = "Comment must not exceed 1000 characters"


# ── bookmarks ────────────────────────────────────────────────────────────────
class BookmarkNotFoundError(NotFoundError):
    code = "BOOKMARK001"
    message = "Bookmark not found"


class BookmarkFolderNotFoundError(NotFoundError):
    code = "BOOKMARK002"
    message = "Bookmark folder not found"


class BookmarkFolderLimitExceededError(LimitExceededError):
    code = "BOOKMARK003"
    message = "Maximum bookmark folders limit exceeded"


class FolderNameAlreadyExistsError(ConflictError):
    code = "BOOKMARK004"
    message = "Folder with this name already exists"


class SelfBookmarkNotAllowedError(ForbiddenError):
    code = "BOOKMARK005"
    message = "Cannot bookmark your own prompt"


# ── follows ──────────────────────────────────────────────────────────────────
class SelfFollowNotAllowedError(ForbiddenError):
    code = "FOLLOW001"
    message = "Cannot follow yourself"


class AlreadyFollowingError(ConflictError):
    code = "FOLLOW002"
    message = "Already following this user"


class NotFollowingError(NotFoundError):
    code = "FOLLOW003"
    message = "Not following this user"


# ── notifications ────────────────────────────────────────────────────────────
class NotificationNotFoundError(NotFoundError):
    code = "NOTIF001"
    message = "Notification not found"
