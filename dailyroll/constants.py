"""
Service-wide constants for the Daily Roll service.

This module contains the fixed numbers used by the roll, tier and leaderboard
logic so the formulas read the same everywhere they are used.
"""

class RollConstants:
    """Constants for reward generation."""
    
    MIN_IQ = 0
    MAX_IQ = 200
    
    MAX_FEET = 9
    MAX_INCHES = 11
    
    # 9'11" expressed in inches
    MAX_HEIGHT_INCHES = MAX_FEET * 12 + MAX_INCHES

class TierConstants:
    """Tier numbering and classification thresholds."""
    
    TIER_NAMES = {
        1: 'hamster',
        2: 'unga',
        3: 'normal',
        4: 'bigbrain',
        5: 'overqualified',
    }
    
    # Upper bounds on the combined score, compared with strict less-than.
    # Anything at or above the last bound is tier 5.
    THRESHOLDS = (
        (0.15, 1),
        (0.35, 2),
        (0.65, 3),
        (0.85, 4),
    )
    TOP_TIER = 5

class PepegaConstants:
    """Weights for the worst-luck composite score (must sum to 1.0)."""
    
    IQ_WEIGHT = 0.4
    HEIGHT_WEIGHT = 0.3
    TIER_WEIGHT = 0.3

class KeyConstants:
    """Redis key namespaces."""
    
    PREFIX = 'dailyroll'
    USER = 'dailyroll:user:{user_id}'
    USERNAME = 'dailyroll:username:{user_id}'
    LOCK = 'dailyroll:lock:{user_id}'
    LEADERBOARD = 'dailyroll:leaderboard:{kind}'
    SESSION_LEADERBOARD = 'dailyroll:leaderboard:{token}:{kind}'
    STREAM_START = 'stream:{community_id}:start_time'
    TWITCH_APP_TOKEN = 'twitch:app_token'
    
    # App tokens live 60 days, refresh after 50
    TWITCH_APP_TOKEN_TTL = 50 * 24 * 60 * 60

class ResponseConstants:
    """Chat response limits and markers."""
    
    # Safe buffer under Twitch's 500 character limit
    MAX_RESPONSE_LENGTH = 450
    
    # Prefix the chat bot interprets as "apply a timeout"
    TIMEOUT_SENTINEL = '/timeout'
    
    LEADERBOARD_SIZE = 5
