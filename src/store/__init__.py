"""Session store and streak tracker backends."""

from .memory import InMemorySessionStore, InMemoryStreakTracker
from .rest import RestClient, RestSessionStore, RestStreakTracker

__all__ = [
    "InMemorySessionStore",
    "InMemoryStreakTracker",
    "RestClient",
    "RestSessionStore",
    "RestStreakTracker",
]
