"""
Reward generation for the daily roll.

IQ and height are drawn independently and uniformly. The tier is a pure
function of the two, and the hero is drawn uniformly from that tier's pool.
"""

import random
from typing import Optional

from dailyroll.constants import RollConstants, TierConstants
from dailyroll.data_models.roll import Height, Reward
from dailyroll.operations.tier_model import TierModel


def combined_score(iq: int, height: Height) -> float:
    """Average of normalized IQ and normalized height, in [0, 1]."""
    return (iq / RollConstants.MAX_IQ + height.total_inches / RollConstants.MAX_HEIGHT_INCHES) / 2


def classify(iq: int, height: Height) -> int:
    """Map an IQ and height to a tier using strict less-than thresholds."""
    combined = combined_score(iq, height)
    for bound, tier in TierConstants.THRESHOLDS:
        if combined < bound:
            return tier
    return TierConstants.TOP_TIER


class RewardGenerator:
    """Draws rewards against a tier model."""
    
    def __init__(self, tier_model: TierModel, rng: Optional[random.Random] = None):
        self.tier_model = tier_model
        self.rng = rng or random.Random()
    
    def roll_iq(self) -> int:
        return self.rng.randint(RollConstants.MIN_IQ, RollConstants.MAX_IQ)
    
    def roll_height(self) -> Height:
        return Height(
            feet=self.rng.randint(0, RollConstants.MAX_FEET),
            inches=self.rng.randint(0, RollConstants.MAX_INCHES),
        )
    
    def roll_hero(self, tier: int) -> str:
        return self.rng.choice(self.tier_model.heroes(tier))
    
    def roll(self) -> Reward:
        iq = self.roll_iq()
        height = self.roll_height()
        tier = classify(iq, height)
        return Reward(iq=iq, height=height, hero=self.roll_hero(tier), tier=tier)
