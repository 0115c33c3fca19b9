import traceback
import sys

from aiohttp import web

from dailyroll.config import Config
from dailyroll.handlers import roll, stats
from dailyroll.server import SERVER_KEY, DailyRollServer, cors_middleware, error_middleware
from dailyroll.utils.logger import setup_logger


def create_app(server: DailyRollServer = None) -> web.Application:
    """Build the web application. Raises ConfigurationError before serving anything."""
    server = server or DailyRollServer.from_config()
    
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[SERVER_KEY] = server
    app.add_routes(roll.routes)
    app.add_routes(stats.routes)
    app.on_startup.append(server.on_startup)
    app.on_cleanup.append(server.on_cleanup)
    return app


def main():
    """Main entry point"""
    logger = setup_logger('dailyroll', access_log=True)
    
    try:
        app = create_app()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        traceback.print_exc()
        return 1
    
    logger.info(f"Serving on {Config.HOST}:{Config.PORT}")
    web.run_app(app, host=Config.HOST, port=Config.PORT, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
