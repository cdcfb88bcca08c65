"""
Services layer for relationship state, notifications and friend list composition.

This layer handles:
- Relationship persistence and state transitions
- Real-time notification dispatch
- Unread counter and last-message lookups
- Friend list aggregation
"""

from . import user_service

__all__ = [
    "user_service"
]
