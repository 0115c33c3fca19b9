"""
Services package for the Daily Roll service.

Services own every I/O boundary: Redis, the chat bot context API and the
Twitch API. They feed the pure operations layer and persist its results.
"""

from .roll_store import RollStore, RedisRollStore
from .roll_service import RollService, RollOutcome
from .session_key import SessionKeyResolver
from .stats_service import StatsService

__all__ = [
    'RollStore', 'RedisRollStore', 'RollService', 'RollOutcome',
    'SessionKeyResolver', 'StatsService',
]
