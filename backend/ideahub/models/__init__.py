from ideahub.models.user import User
from ideahub.models.idea_topic import IdeaTopic
from ideahub.models.idea import Idea

__all__ = [
    "User",
    "IdeaTopic",
    "Idea",
]
