import logging

from aiohttp import web

from dailyroll.config import Config
from dailyroll.server import SERVER_KEY
from dailyroll.utils.responses import format_denial_response, format_roll_response

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.get('/api/dailyroll')
async def dailyroll(request: web.Request) -> web.Response:
    """!roll - roll IQ, height and hero, or get told off for trying again"""
    server = request.app[SERVER_KEY]
    context = await server.request_context(request)
    
    outcome = await server.roll_service.roll(context)
    
    if outcome.allowed:
        response = format_roll_response(context.username, outcome.reward)
    else:
        response = format_denial_response(context.username, outcome.escalation, Config.TIMEOUT_SECONDS)
    
    logger.debug(f"Response ({len(response)} chars): {response}")
    return web.Response(text=response)
