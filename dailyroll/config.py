import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Daily roll service configuration settings"""
    
    # Redis settings
    REDIS_URL = os.getenv('REDIS_URL')
    
    # Service settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 8080))
    STREAMER_NAME = os.getenv('STREAMER_NAME', '')
    
    # Upstream APIs
    FOSSABOT_API_BASE = os.getenv('FOSSABOT_API_BASE', 'https://api.fossabot.com/v2/customapi')
    TWITCH_CLIENT_ID = os.getenv('TWITCH_CLIENT_ID')
    TWITCH_CLIENT_SECRET = os.getenv('TWITCH_CLIENT_SECRET')
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', 10))
    
    # Cooldown settings
    MAX_ROLLS_PER_SCOPE = int(os.getenv('MAX_ROLLS_PER_SCOPE', 1))
    COOLDOWN_HOURS = float(os.getenv('COOLDOWN_HOURS', 24))
    RECORD_TTL_HOURS = float(os.getenv('RECORD_TTL_HOURS', COOLDOWN_HOURS + 1))
    TIMEOUT_SECONDS = int(os.getenv('TIMEOUT_SECONDS', 60))
    
    # Caching and locking
    STREAM_CACHE_TTL_SECONDS = int(os.getenv('STREAM_CACHE_TTL_SECONDS', 300))
    LOCK_TIMEOUT_SECONDS = float(os.getenv('LOCK_TIMEOUT_SECONDS', 10))
    LOCK_WAIT_SECONDS = float(os.getenv('LOCK_WAIT_SECONDS', 3))
    
    # Logging
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_FILE_PREFIX = os.getenv('LOG_FILE_PREFIX', 'dailyroll')
    
    # Optional JSON file replacing the built-in hero tiers
    HERO_TIERS_FILE = os.getenv('HERO_TIERS_FILE', '')
    
    @classmethod
    def record_ttl_seconds(cls) -> int:
        """TTL applied to user records, refreshed on every write"""
        return int(cls.RECORD_TTL_HOURS * 3600)
    
    @classmethod
    def validate(cls):
        """Validate that required configuration is present and sane"""
        from dailyroll.utils.roll_exceptions import ConfigurationError
        
        if cls.MAX_ROLLS_PER_SCOPE < 1:
            raise ConfigurationError("MAX_ROLLS_PER_SCOPE must be at least 1")
        if cls.COOLDOWN_HOURS <= 0:
            raise ConfigurationError("COOLDOWN_HOURS must be positive")
        if cls.RECORD_TTL_HOURS < cls.COOLDOWN_HOURS:
            raise ConfigurationError("RECORD_TTL_HOURS must cover COOLDOWN_HOURS")
        if cls.TIMEOUT_SECONDS <= 0:
            raise ConfigurationError("TIMEOUT_SECONDS must be positive")
        if cls.STREAM_CACHE_TTL_SECONDS <= 0:
            raise ConfigurationError("STREAM_CACHE_TTL_SECONDS must be positive")
        if not cls.STREAMER_NAME:
            raise ConfigurationError("STREAMER_NAME is required")
