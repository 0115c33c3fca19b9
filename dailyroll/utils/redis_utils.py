"""
Redis utility module for centralized Redis configuration and connection logic.

Provides secure Redis connection management with production validation.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisUtils:
    """Centralized Redis configuration and connection utilities."""
    
    @staticmethod
    def get_secure_redis_url() -> Optional[str]:
        """Get Redis URL with security validation for production deployments."""
        from dailyroll.config import Config
        
        env_redis_url = Config.REDIS_URL
        if env_redis_url:
            if RedisUtils._validate_redis_security(env_redis_url):
                return env_redis_url
            logger.error("REDIS_URL contains insecure configuration")
            return None
        
        if not Config.DEBUG:
            logger.error("Production deployment requires secure Redis configuration. Set REDIS_URL with rediss:// protocol and authentication.")
            return None
        
        logger.warning("Development mode: using insecure localhost Redis. Do not use in production!")
        return 'redis://localhost:6379'
    
    @staticmethod
    def _validate_redis_security(redis_url: str) -> bool:
        """Validate that Redis URL meets security requirements."""
        if not redis_url:
            return False
        
        from dailyroll.config import Config
        if not Config.DEBUG:
            # Production mode - enforce strict security
            if not redis_url.startswith('rediss://'):
                logger.error("Production Redis must use rediss:// (TLS) protocol")
                return False
            if '@' not in redis_url:
                logger.error("Production Redis must include authentication credentials")
                return False
            return True
        
        if redis_url.startswith('redis://localhost') or redis_url.startswith('redis://127.0.0.1'):
            return True
        if redis_url.startswith('rediss://'):
            return True
        logger.warning("Potentially insecure Redis URL in development")
        return True
    
    @staticmethod
    async def create_redis_client() -> 'redis.Redis':
        """Create a Redis client with secure configuration.
        
        The roll flow cannot run without durable state, so an unusable
        configuration or an unreachable server is raised rather than
        swallowed.
        """
        from dailyroll.utils.roll_exceptions import ConfigurationError, StoreError
        
        redis_url = RedisUtils.get_secure_redis_url()
        if not redis_url:
            raise ConfigurationError("no usable REDIS_URL")
        
        client = redis.from_url(redis_url, decode_responses=True)
        try:
            await client.ping()
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            await client.aclose()
            raise StoreError("connect", str(e)) from e
        
        logger.info("Successfully connected to Redis")
        return client
