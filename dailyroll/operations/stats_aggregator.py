"""
Statistics aggregation for the daily roll.

Folds a new reward into a user's cumulative record. This is a pure function
of its inputs; the caller owns persistence.
"""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from dailyroll.data_models.roll import Reward, UserRecord


class StatsAggregator:
    """Builds the next user record from the previous one and a reward."""
    
    @staticmethod
    def apply(record: Optional[UserRecord], reward: Reward, token: str,
              user_id: str, username: str, now: datetime) -> UserRecord:
        """
        Apply one successful roll.
        
        Ties on the all-time bests move the timestamp to the newer roll.
        
        Args:
            record: Previous record, or None on the first roll
            reward: The reward just rolled
            token: Session scope token of this roll
            user_id: Stable user identity
            username: Current display name
            now: Roll time
            
        Returns:
            A new UserRecord; the input is never mutated
        """
        if record is None:
            record = UserRecord(user_id=user_id, username=username)
        
        height_inches = reward.height.total_inches
        
        if reward.iq >= record.highest_iq or record.highest_iq_timestamp is None:
            highest_iq, highest_iq_timestamp = reward.iq, now
        else:
            highest_iq, highest_iq_timestamp = record.highest_iq, record.highest_iq_timestamp
        
        if height_inches >= record.tallest_height_inches or record.tallest_height_timestamp is None:
            tallest, tallest_timestamp = height_inches, now
        else:
            tallest, tallest_timestamp = record.tallest_height_inches, record.tallest_height_timestamp
        
        if record.last_token == token:
            rolls_this_scope = record.rolls_this_scope + 1
        else:
            rolls_this_scope = 1
        
        tier_field = f'tier{reward.tier}_count'
        
        return replace(
            record,
            username=username,
            total_rolls=record.total_rolls + 1,
            sum_iq=record.sum_iq + reward.iq,
            sum_height_inches=record.sum_height_inches + height_inches,
            highest_iq=highest_iq,
            highest_iq_timestamp=highest_iq_timestamp,
            tallest_height_inches=tallest,
            tallest_height_timestamp=tallest_timestamp,
            current_iq=reward.iq,
            current_height_inches=height_inches,
            current_hero=reward.hero,
            current_tier=reward.tier,
            last_roll=now,
            last_token=token,
            rolls_this_scope=rolls_this_scope,
            spam_count=0,
            **{tier_field: record.tier_count(reward.tier) + 1},
        )
