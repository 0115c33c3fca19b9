"""
Roll data models for the Daily Roll service.

Provides immutable data transfer objects for rewards, durable user records
and the chat bot request context.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from dailyroll.constants import TierConstants


@dataclass(frozen=True)
class Height:
    """Rolled height in feet and inches."""
    feet: int
    inches: int
    
    @property
    def total_inches(self) -> int:
        return self.feet * 12 + self.inches
    
    @classmethod
    def from_inches(cls, total_inches: int) -> 'Height':
        return cls(feet=total_inches // 12, inches=total_inches % 12)
    
    def __str__(self) -> str:
        return f"{self.feet}'{self.inches}\""


@dataclass(frozen=True)
class Reward:
    """Result of one roll. Never persisted on its own."""
    iq: int
    height: Height
    hero: str
    tier: int
    
    @property
    def tier_name(self) -> str:
        return TierConstants.TIER_NAMES[self.tier]


@dataclass(frozen=True)
class RequestContext:
    """Who is rolling and where, as reported by the chat bot."""
    user_id: str
    username: str
    channel_id: Optional[str]
    channel_name: str
    is_live: bool


@dataclass(frozen=True)
class UserRecord:
    """Durable per-user statistics and cooldown state."""
    user_id: str
    username: str
    total_rolls: int = 0
    
    # Running sums for averages
    sum_iq: int = 0
    sum_height_inches: int = 0
    
    # All-time bests
    highest_iq: int = 0
    highest_iq_timestamp: Optional[datetime] = None
    tallest_height_inches: int = 0
    tallest_height_timestamp: Optional[datetime] = None
    
    # Tier counts
    tier1_count: int = 0
    tier2_count: int = 0
    tier3_count: int = 0
    tier4_count: int = 0
    tier5_count: int = 0
    
    # Most recent roll
    current_iq: int = 0
    current_height_inches: int = 0
    current_hero: str = ''
    current_tier: int = 0
    
    # Cooldown fields
    last_roll: Optional[datetime] = None
    last_token: str = ''
    rolls_this_scope: int = 0
    spam_count: int = 0
    
    def tier_count(self, tier: int) -> int:
        return getattr(self, f'tier{tier}_count')
    
    @property
    def non_tier1_count(self) -> int:
        return self.tier2_count + self.tier3_count + self.tier4_count + self.tier5_count
    
    @property
    def average_iq(self) -> float:
        return self.sum_iq / self.total_rolls if self.total_rolls else 0.0
    
    @property
    def average_height_inches(self) -> float:
        return self.sum_height_inches / self.total_rolls if self.total_rolls else 0.0
    
    def to_hash(self) -> Dict[str, str]:
        """Flatten to Redis hash fields. Missing timestamps are stored as ''."""
        fields = {}
        for name, value in self.__dict__.items():
            if isinstance(value, datetime):
                fields[name] = value.isoformat()
            elif value is None:
                fields[name] = ''
            else:
                fields[name] = str(value)
        return fields
    
    @classmethod
    def from_hash(cls, user_id: str, fields: Dict[str, str]) -> 'UserRecord':
        """Rebuild a record from Redis hash fields, tolerating missing keys."""
        def _int(name):
            return int(fields.get(name) or 0)
        
        def _time(name):
            raw = fields.get(name)
            return datetime.fromisoformat(raw) if raw else None
        
        return cls(
            user_id=user_id,
            username=fields.get('username') or 'Unknown',
            total_rolls=_int('total_rolls'),
            sum_iq=_int('sum_iq'),
            sum_height_inches=_int('sum_height_inches'),
            highest_iq=_int('highest_iq'),
            highest_iq_timestamp=_time('highest_iq_timestamp'),
            tallest_height_inches=_int('tallest_height_inches'),
            tallest_height_timestamp=_time('tallest_height_timestamp'),
            tier1_count=_int('tier1_count'),
            tier2_count=_int('tier2_count'),
            tier3_count=_int('tier3_count'),
            tier4_count=_int('tier4_count'),
            tier5_count=_int('tier5_count'),
            current_iq=_int('current_iq'),
            current_height_inches=_int('current_height_inches'),
            current_hero=fields.get('current_hero') or '',
            current_tier=_int('current_tier'),
            last_roll=_time('last_roll'),
            last_token=fields.get('last_token') or '',
            rolls_this_scope=_int('rolls_this_scope'),
            spam_count=_int('spam_count'),
        )
