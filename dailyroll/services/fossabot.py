"""
Fossabot custom API integration.

Resolves the per-request token sent in the x-fossabot-customapitoken header
into the requesting user and channel.
"""

import asyncio
import logging

import aiohttp

from dailyroll.data_models.roll import RequestContext
from dailyroll.services.providers import ContextProvider
from dailyroll.utils.roll_exceptions import IdentityLookupError

logger = logging.getLogger(__name__)


def parse_context(data: dict) -> RequestContext:
    """Extract the fields a roll needs from a Fossabot context payload."""
    user = (data.get('message') or {}).get('user') or {}
    channel = data.get('channel') or {}
    
    user_id = user.get('provider_id')
    if not user_id:
        raise IdentityLookupError("context has no user provider_id")
    
    return RequestContext(
        user_id=str(user_id),
        username=user.get('display_name') or user.get('login') or 'Unknown',
        channel_id=str(channel['provider_id']) if channel.get('provider_id') else None,
        channel_name=channel.get('display_name') or '',
        is_live=bool(channel.get('is_live', False)),
    )


class FossabotContextProvider(ContextProvider):
    """Looks up request context from the Fossabot API. Never retried."""
    
    def __init__(self, http: aiohttp.ClientSession, base_url: str, timeout: float = 10):
        self.http = http
        self.base_url = base_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)
    
    async def get_context(self, token: str) -> RequestContext:
        url = f"{self.base_url}/context/{token}"
        try:
            async with self.http.get(url, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise IdentityLookupError(f"context lookup returned HTTP {resp.status}")
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise IdentityLookupError(str(e) or type(e).__name__) from e
        
        if not isinstance(data, dict):
            raise IdentityLookupError("context payload is not an object")
        return parse_context(data)
