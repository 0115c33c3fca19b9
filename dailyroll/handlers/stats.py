import logging
import random

from aiohttp import web

from dailyroll.operations.leaderboard_scorer import LeaderboardKind
from dailyroll.server import SERVER_KEY
from dailyroll.utils.responses import format_leaderboard_response, format_stats_response

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

# Boards the !leaderboard command rotates between
ROTATING_KINDS = (LeaderboardKind.IQ, LeaderboardKind.HEIGHT, LeaderboardKind.ROLLS)


@routes.get('/api/stats/me')
async def stats_me(request: web.Request) -> web.Response:
    """!stats - personal totals, peaks and ranks"""
    server = request.app[SERVER_KEY]
    context = await server.request_context(request, gated=True)
    
    record = await server.stats_service.get_user_stats(context.user_id)
    ranks = await server.stats_service.get_ranks(context.user_id) if record else {}
    
    return web.Response(text=format_stats_response(context.username, record, ranks))


@routes.get('/api/stats/leaderboard')
async def stats_leaderboard(request: web.Request) -> web.Response:
    """!leaderboard - top 5 of a randomly chosen global board"""
    server = request.app[SERVER_KEY]
    await server.request_context(request, gated=True)
    
    kind = random.choice(ROTATING_KINDS)
    entries = await server.stats_service.leaderboard(kind)
    logger.debug(f"Selected leaderboard {kind.value}, {len(entries)} entries")
    
    return web.Response(text=format_leaderboard_response(kind, entries))


@routes.get('/api/stats/pepega')
async def stats_pepega(request: web.Request) -> web.Response:
    """!pepega - the five unluckiest rollers"""
    server = request.app[SERVER_KEY]
    await server.request_context(request, gated=True)
    
    entries = await server.stats_service.leaderboard(LeaderboardKind.PEPEGA)
    return web.Response(text=format_leaderboard_response(LeaderboardKind.PEPEGA, entries))


@routes.get('/api/stats/session')
async def stats_session(request: web.Request) -> web.Response:
    """!top - highest IQ rolls of the current stream (or day when offline)"""
    server = request.app[SERVER_KEY]
    context = await server.request_context(request, gated=True)
    
    token = await server.resolver.resolve(context.channel_id, context.is_live)
    entries = await server.stats_service.leaderboard(LeaderboardKind.IQ, token=token)
    title = "🧠 Top IQ this stream" if context.is_live else "🧠 Top IQ today"
    
    return web.Response(text=format_leaderboard_response(LeaderboardKind.IQ, entries, title=title))
