"""
Roll eligibility state machine.

While the channel is live, rolls are limited per stream: a user may roll
MAX_ROLLS_PER_SCOPE times per broadcast, and a new broadcast always opens a
fresh allowance. Offline (or when the stream start is unknown) a plain
wall-clock cooldown applies instead.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from dailyroll.data_models.roll import UserRecord

STREAM_TOKEN_PREFIX = 'stream_'
OFFLINE_TOKEN_PREFIX = 'offline_'


class RollState(Enum):
    NO_PRIOR_ROLL = 'no_prior_roll'
    ELIGIBLE = 'eligible'
    ON_COOLDOWN = 'on_cooldown'


class Escalation(Enum):
    MILD_REBUKE = 'mild_rebuke'
    ESCALATE = 'escalate'


@dataclass(frozen=True)
class CooldownDecision:
    state: RollState
    # Remaining wall-clock cooldown, only known for offline decisions
    remaining: Optional[timedelta] = None
    
    @property
    def allowed(self) -> bool:
        return self.state is not RollState.ON_COOLDOWN


class CooldownEvaluator:
    """Decides whether a user may roll given their stored record."""
    
    def __init__(self, max_rolls_per_scope: int = 1, cooldown: timedelta = timedelta(hours=24)):
        if max_rolls_per_scope < 1:
            raise ValueError("max_rolls_per_scope must be at least 1")
        self.max_rolls_per_scope = max_rolls_per_scope
        self.cooldown = cooldown
    
    def evaluate(self, record: Optional[UserRecord], current_token: str,
                 is_live: bool, now: datetime) -> CooldownDecision:
        """
        Decide roll eligibility.
        
        Args:
            record: Stored user record, or None for a first-time roller
            current_token: Session scope token resolved for this request
            is_live: Whether the channel reports itself as live
            now: Current time (timezone-aware UTC)
            
        Returns:
            CooldownDecision with the resulting state
        """
        if record is None:
            return CooldownDecision(RollState.NO_PRIOR_ROLL)
        
        if is_live and current_token.startswith(STREAM_TOKEN_PREFIX):
            if (record.last_token == current_token
                    and record.rolls_this_scope >= self.max_rolls_per_scope):
                return CooldownDecision(RollState.ON_COOLDOWN)
            return CooldownDecision(RollState.ELIGIBLE)
        
        if record.last_roll is None:
            return CooldownDecision(RollState.ELIGIBLE)
        
        elapsed = now - record.last_roll
        if elapsed < self.cooldown:
            return CooldownDecision(RollState.ON_COOLDOWN, remaining=self.cooldown - elapsed)
        return CooldownDecision(RollState.ELIGIBLE)
    
    @staticmethod
    def escalation(spam_count: int) -> Escalation:
        """First denial in a window is a rebuke, every later one escalates."""
        if spam_count < 1:
            raise ValueError("spam_count must be at least 1 after a denial")
        if spam_count == 1:
            return Escalation.MILD_REBUKE
        return Escalation.ESCALATE
