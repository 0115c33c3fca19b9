"""
Roll orchestration.

One call per chat "!roll": resolve the session scope, then, under the
per-user lock, read the record, decide eligibility and either roll and
persist or count the denied attempt.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from dailyroll.data_models.roll import RequestContext, Reward, UserRecord
from dailyroll.operations.cooldown import CooldownDecision, CooldownEvaluator, Escalation
from dailyroll.operations.leaderboard_scorer import global_scores, session_scores
from dailyroll.operations.reward_generator import RewardGenerator
from dailyroll.operations.stats_aggregator import StatsAggregator
from dailyroll.services.roll_store import RollStore
from dailyroll.services.session_key import SessionKeyResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollOutcome:
    """What happened to one roll request."""
    decision: CooldownDecision
    token: str
    reward: Optional[Reward] = None
    record: Optional[UserRecord] = None
    spam_count: int = 0
    escalation: Optional[Escalation] = None
    
    @property
    def allowed(self) -> bool:
        return self.reward is not None


class RollService:
    """Runs the roll flow against injected collaborators."""
    
    def __init__(self, store: RollStore, resolver: SessionKeyResolver,
                 evaluator: CooldownEvaluator, generator: RewardGenerator,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.store = store
        self.resolver = resolver
        self.evaluator = evaluator
        self.generator = generator
        self.clock = clock
    
    async def roll(self, context: RequestContext) -> RollOutcome:
        """
        Handle one roll request.
        
        Raises:
            StoreError: when Redis cannot be read or written; no outcome is assumed
        """
        token = await self.resolver.resolve(context.channel_id, context.is_live)
        
        async with self.store.user_lock(context.user_id):
            now = self.clock()
            record = await self.store.get_record(context.user_id)
            decision = self.evaluator.evaluate(record, token, context.is_live, now)
            
            if not decision.allowed:
                spam_count = await self.store.increment_spam(context.user_id)
                escalation = self.evaluator.escalation(spam_count)
                logger.info(
                    f"Denied roll for {context.username} ({context.user_id}) in {token}: "
                    f"attempt {spam_count}, {escalation.value}"
                )
                return RollOutcome(decision=decision, token=token, record=record,
                                   spam_count=spam_count, escalation=escalation)
            
            reward = self.generator.roll()
            updated = StatsAggregator.apply(record, reward, token, context.user_id, context.username, now)
            
            await self.store.save_cooldown(updated)
            await self.store.save_record(updated)
            await self.store.update_leaderboards(
                context.user_id, context.username,
                global_scores(updated, reward), token, session_scores(reward),
            )
        
        logger.info(
            f"{context.username} rolled IQ {reward.iq}, {reward.height}, "
            f"{reward.hero} (tier {reward.tier}) in {token}"
        )
        return RollOutcome(decision=decision, token=token, reward=reward, record=updated)
