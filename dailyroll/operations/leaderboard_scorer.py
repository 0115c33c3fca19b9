"""
Leaderboard scoring.

Higher pepega score means better luck, so the worst-luck board reads the
pepega collection in ascending order while every other board is descending.
"""

from enum import Enum
from typing import Dict

from dailyroll.constants import PepegaConstants, RollConstants
from dailyroll.data_models.roll import Reward, UserRecord


class LeaderboardKind(str, Enum):
    IQ = 'iq'
    HEIGHT = 'height'
    ROLLS = 'rolls'
    PEPEGA = 'pepega'
    
    @property
    def ascending(self) -> bool:
        return self is LeaderboardKind.PEPEGA


# Boards that also exist per session scope
SESSION_KINDS = (LeaderboardKind.IQ, LeaderboardKind.HEIGHT)


def pepega_score(record: UserRecord) -> float:
    """
    Composite luck score in [0, 1]: 40% IQ, 30% height, 30% non-hamster rate.
    
    Defined as exactly 0.0 for a record with no rolls.
    """
    if record.total_rolls == 0:
        return 0.0
    
    iq_component = (record.average_iq / RollConstants.MAX_IQ) * PepegaConstants.IQ_WEIGHT
    height_component = (record.average_height_inches / RollConstants.MAX_HEIGHT_INCHES) * PepegaConstants.HEIGHT_WEIGHT
    tier_component = (record.non_tier1_count / record.total_rolls) * PepegaConstants.TIER_WEIGHT
    return iq_component + height_component + tier_component


def global_scores(record: UserRecord, reward: Reward) -> Dict[LeaderboardKind, float]:
    """Scores written to the global boards after a roll; the latest roll overwrites."""
    return {
        LeaderboardKind.IQ: reward.iq,
        LeaderboardKind.HEIGHT: reward.height.total_inches,
        LeaderboardKind.ROLLS: record.total_rolls,
        LeaderboardKind.PEPEGA: pepega_score(record),
    }


def session_scores(reward: Reward) -> Dict[LeaderboardKind, float]:
    """Scores written to the per-session boards after a roll."""
    return {
        LeaderboardKind.IQ: reward.iq,
        LeaderboardKind.HEIGHT: reward.height.total_inches,
    }
