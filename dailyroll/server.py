import logging
from datetime import timedelta
from typing import Optional

import aiohttp
from aiohttp import web

from dailyroll.config import Config
from dailyroll.data_models.roll import RequestContext
from dailyroll.operations.cooldown import CooldownEvaluator
from dailyroll.operations.reward_generator import RewardGenerator
from dailyroll.operations.tier_model import TierModel
from dailyroll.services.fossabot import FossabotContextProvider
from dailyroll.services.providers import ContextProvider
from dailyroll.services.roll_service import RollService
from dailyroll.services.roll_store import RedisRollStore, RollStore
from dailyroll.services.session_key import SessionKeyResolver
from dailyroll.services.stats_service import StatsService
from dailyroll.services.twitch import TwitchStreamProvider
from dailyroll.utils.redis_utils import RedisUtils
from dailyroll.utils.roll_exceptions import ChannelMismatchError, DailyRollException, IdentityLookupError

logger = logging.getLogger(__name__)

TOKEN_HEADER = 'x-fossabot-customapitoken'


class DailyRollServer:
    """Owns the long-lived clients and services behind the HTTP handlers."""

    def __init__(self, tier_model: TierModel):
        self.tier_model = tier_model
        self.redis = None
        self.http: Optional[aiohttp.ClientSession] = None
        self.store: Optional[RollStore] = None
        self.context_provider: Optional[ContextProvider] = None
        self.roll_service: Optional[RollService] = None
        self.stats_service: Optional[StatsService] = None
        self.resolver: Optional[SessionKeyResolver] = None

    @classmethod
    def from_config(cls) -> 'DailyRollServer':
        """Validate fixed configuration; any failure here must stop startup."""
        Config.validate()
        return cls(TierModel.load(Config.HERO_TIERS_FILE or None))

    def wire(self, store: RollStore, context_provider: ContextProvider, resolver: SessionKeyResolver,
             generator: Optional[RewardGenerator] = None):
        """Build the services from already-created collaborators."""
        self.store = store
        self.context_provider = context_provider
        self.resolver = resolver
        self.roll_service = RollService(
            store=store,
            resolver=resolver,
            evaluator=CooldownEvaluator(
                max_rolls_per_scope=Config.MAX_ROLLS_PER_SCOPE,
                cooldown=timedelta(hours=Config.COOLDOWN_HOURS),
            ),
            generator=generator or RewardGenerator(self.tier_model),
        )
        self.stats_service = StatsService(store)

    async def on_startup(self, app: web.Application):
        """Connect to Redis and the upstream APIs"""
        if self.roll_service is not None:
            # Already wired with injected collaborators
            return

        logger.info("Setting up Daily Roll service...")

        self.redis = await RedisUtils.create_redis_client()
        self.http = aiohttp.ClientSession()

        store = RedisRollStore(
            self.redis,
            record_ttl=Config.record_ttl_seconds(),
            lock_timeout=Config.LOCK_TIMEOUT_SECONDS,
            lock_wait=Config.LOCK_WAIT_SECONDS,
        )
        stream_provider = TwitchStreamProvider(
            self.http, self.redis, Config.TWITCH_CLIENT_ID, Config.TWITCH_CLIENT_SECRET,
            timeout=Config.HTTP_TIMEOUT_SECONDS,
        )
        self.wire(
            store=store,
            context_provider=FossabotContextProvider(
                self.http, Config.FOSSABOT_API_BASE, timeout=Config.HTTP_TIMEOUT_SECONDS
            ),
            resolver=SessionKeyResolver(stream_provider, store, cache_ttl=Config.STREAM_CACHE_TTL_SECONDS),
        )

        logger.info("Daily Roll service setup complete!")

    async def on_cleanup(self, app: web.Application):
        """Cleanup when the service is shutting down"""
        logger.info("Shutting down Daily Roll service...")
        if self.http:
            await self.http.close()
        if self.redis:
            await self.redis.aclose()

    async def request_context(self, request: web.Request, gated: bool = False) -> RequestContext:
        """
        Resolve the chat bot context for a request.

        Args:
            request: Incoming request carrying the Fossabot token header
            gated: Only allow the configured streamer's channel
        """
        token = request.headers.get(TOKEN_HEADER)
        if not token:
            raise web.HTTPBadRequest(text='Missing Fossabot token')

        context = await self.context_provider.get_context(token)

        if gated and context.channel_name.upper() != Config.STREAMER_NAME.upper():
            logger.info(f"Channel mismatch: {context.channel_name} != {Config.STREAMER_NAME}")
            raise ChannelMismatchError(context.channel_name)
        return context


CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': f'Content-Type, {TOKEN_HEADER}',
}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Open every endpoint to browser callers; preflight gets an empty 200"""
    if request.method == 'OPTIONS':
        return web.Response(headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as e:
        e.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Global error handler mapping roll failures to plain-text responses"""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except IdentityLookupError as e:
        logger.info(f"Rejected {request.path}: {e}")
        return web.Response(status=400, text=e.user_message)
    except ChannelMismatchError as e:
        return web.Response(status=403, text=e.user_message)
    except DailyRollException as e:
        # StoreError and anything else from the roll flow: no retry, no assumed outcome
        logger.error(f"Error in {request.path}: {e}", exc_info=True)
        return web.Response(status=500, text=e.user_message)
    except Exception as e:
        logger.error(f"Unexpected error in {request.path}: {e}", exc_info=True)
        return web.Response(status=500, text='Error processing request')


SERVER_KEY = web.AppKey('server', DailyRollServer)
