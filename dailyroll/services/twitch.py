"""
Twitch API integration for stream data.

Handles app access token management and stream start lookups. Every failure
is reported as SessionLookupError so the caller can fall back to the offline
scope.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

import aiohttp
from redis.exceptions import RedisError

from dailyroll.constants import KeyConstants
from dailyroll.services.providers import StreamProvider
from dailyroll.utils.roll_exceptions import SessionLookupError

logger = logging.getLogger(__name__)

TOKEN_URL = 'https://id.twitch.tv/oauth2/token'
STREAMS_URL = 'https://api.twitch.tv/helix/streams'


class TwitchStreamProvider(StreamProvider):
    """Stream start lookups via Twitch Helix with a Redis-cached app token."""
    
    def __init__(self, http: aiohttp.ClientSession, redis_client, client_id: Optional[str],
                 client_secret: Optional[str], timeout: float = 10):
        self.http = http
        self.redis = redis_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = aiohttp.ClientTimeout(total=timeout)
    
    async def get_app_token(self) -> str:
        """Get or refresh the Twitch app access token (cached for 50 days)."""
        try:
            cached = await self.redis.get(KeyConstants.TWITCH_APP_TOKEN)
        except RedisError as e:
            raise SessionLookupError('twitch', f"token cache unavailable: {e}") from e
        if cached:
            return cached
        
        logger.info("Fetching new Twitch app token")
        form = {
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'grant_type': 'client_credentials',
        }
        async with self.http.post(TOKEN_URL, data=form, timeout=self.timeout) as resp:
            if resp.status != 200:
                raise SessionLookupError('twitch', f"token request failed: {await resp.text()}")
            try:
                data = await resp.json()
            except ValueError as e:
                raise SessionLookupError('twitch', f"token response is not JSON: {e}") from e
        
        token = data.get('access_token') if isinstance(data, dict) else None
        if not token or not isinstance(token, str):
            raise SessionLookupError('twitch', "token response has no access_token")
        try:
            await self.redis.set(KeyConstants.TWITCH_APP_TOKEN, token, ex=KeyConstants.TWITCH_APP_TOKEN_TTL)
        except RedisError as e:
            logger.warning(f"Could not cache Twitch app token: {e}")
        return token
    
    async def get_stream_start(self, community_id: str) -> Optional[datetime]:
        if not self.client_id or not self.client_secret:
            raise SessionLookupError(community_id, "missing TWITCH_CLIENT_ID or TWITCH_CLIENT_SECRET")
        
        try:
            token = await self.get_app_token()
            headers = {'Authorization': f'Bearer {token}', 'Client-Id': self.client_id}
            async with self.http.get(STREAMS_URL, params={'user_id': community_id},
                                     headers=headers, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise SessionLookupError(community_id, f"HTTP {resp.status}: {await resp.text()}")
                payload = await resp.json()
            return parse_stream_start(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, TypeError,
                AttributeError, KeyError, IndexError) as e:
            raise SessionLookupError(community_id, str(e) or type(e).__name__) from e


def parse_stream_start(payload: dict) -> Optional[datetime]:
    """
    Extract started_at from a Helix streams response.
    
    Returns None when the channel is not live. Malformed payloads raise
    ValueError or TypeError.
    """
    if not isinstance(payload, dict):
        raise TypeError(f"streams response must be an object, got {type(payload).__name__}")
    
    streams = payload.get('data') or []
    if not streams:
        return None
    
    started_at = streams[0].get('started_at')
    if not started_at:
        return None
    try:
        return datetime.fromisoformat(started_at.replace('Z', '+00:00'))
    except ValueError as e:
        raise ValueError(f"bad started_at {started_at!r}") from e
