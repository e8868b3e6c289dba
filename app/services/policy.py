"""Self-interaction rules for engagement and social-graph operations.

Whether a user may act on their own content is decided here, in one table,
rather than in each service.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Type

from app.core.exceptions import (
    AppError,
    SelfBookmarkNotAllowedError,
    SelfFollowNotAllowedError,
    SelfRatingError,
)


class Interaction(str, Enum):
    FOLLOW = "follow"
    RATE = "rate"
    BOOKMARK = "bookmark"
    LIKE = "like"


# interaction -> error raised when the actor is the owner, None when allowed
SELF_INTERACTION_POLICY: Dict[Interaction, Optional[Type[AppError]]] = {
    Interaction.FOLLOW: SelfFollowNotAllowedError,
    Interaction.RATE: SelfRatingError,
    Interaction.BOOKMARK: SelfBookmarkNotAllowedError,
    Interaction.LIKE: None,
}


def excludes_self(interaction: Interaction) -> bool:
    return SELF_INTERACTION_POLICY[interaction] is not None


def ensure_allowed(interaction: Interaction, actor_id: int, owner_id: int) -> None:
    """Raise the interaction's error if ``actor_id`` acts on their own target."""
    error = SELF_INTERACTION_POLICY[interaction]
    if error is not None and actor_id == owner_id:
        raise error()
