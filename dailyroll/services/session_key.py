"""
Session scope resolution.

A roll is scoped to the current broadcast when the channel is live, or to the
current UTC calendar day otherwise. Stream lookups are cached briefly in Redis
and never fail a roll: any upstream problem degrades to the offline scope.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from dailyroll.operations.cooldown import OFFLINE_TOKEN_PREFIX, STREAM_TOKEN_PREFIX
from dailyroll.services.providers import StreamProvider
from dailyroll.services.roll_store import RollStore
from dailyroll.utils.roll_exceptions import SessionLookupError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_stream_start(started_at: datetime) -> str:
    """ISO 8601 in UTC with second precision, e.g. 2024-05-01T18:03:12Z."""
    return started_at.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def stream_token(started_at: str) -> str:
    return f"{STREAM_TOKEN_PREFIX}{started_at}"


def offline_token(now: datetime) -> str:
    return f"{OFFLINE_TOKEN_PREFIX}{now.astimezone(timezone.utc).date().isoformat()}"


class SessionKeyResolver:
    """Derives the session scope token for a channel."""
    
    def __init__(self, provider: StreamProvider, store: RollStore, cache_ttl: int = 300,
                 clock: Callable[[], datetime] = _utcnow):
        self.provider = provider
        self.store = store
        self.cache_ttl = cache_ttl
        self.clock = clock
    
    async def resolve(self, community_id: Optional[str], is_live: bool) -> str:
        """
        Resolve the scope token.
        
        Args:
            community_id: Channel provider id, may be None when unknown
            is_live: Live flag reported by the chat bot
            
        Returns:
            "stream_<start>" while live, "offline_<YYYY-MM-DD>" otherwise
        """
        if is_live and community_id:
            started_at = await self._stream_start(community_id)
            if started_at:
                return stream_token(started_at)
        return offline_token(self.clock())
    
    async def _stream_start(self, community_id: str) -> Optional[str]:
        cached = await self.store.get_cached_stream_start(community_id)
        if cached:
            logger.debug(f"Using cached stream start time: {cached}")
            return cached
        
        try:
            started_at = await self.provider.get_stream_start(community_id)
        except SessionLookupError as e:
            logger.warning(f"{e}; falling back to offline scope")
            return None
        
        if started_at is None:
            logger.info(f"Channel {community_id} reports live but stream is not live upstream")
            return None
        
        formatted = format_stream_start(started_at)
        await self.store.cache_stream_start(community_id, formatted, self.cache_ttl)
        logger.debug(f"Stream start time: {formatted}")
        return formatted
