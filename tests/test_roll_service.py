import asyncio
import random
from datetime import datetime, timedelta, timezone

import pytest

from dailyroll.data_models.roll import RequestContext
from dailyroll.operations.cooldown import CooldownEvaluator, Escalation, RollState
from dailyroll.operations.leaderboard_scorer import LeaderboardKind
from dailyroll.operations.reward_generator import RewardGenerator
from dailyroll.operations.tier_model import TierModel
from dailyroll.services.roll_service import RollService
from dailyroll.services.session_key import SessionKeyResolver
from dailyroll.utils.roll_exceptions import StoreError

from fakes import FakeClock, InMemoryRollStore, StubStreamProvider

STREAM_A = datetime(2024, 5, 1, 17, 0, tzinfo=timezone.utc)
STREAM_B = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)


def context(is_live=True, user_id='42', username='viewer'):
    return RequestContext(user_id=user_id, username=username, channel_id='1001',
                          channel_name='streamer', is_live=is_live)


class Harness:
    def __init__(self, started_at=STREAM_A, max_rolls=1):
        self.clock = FakeClock()
        self.store = InMemoryRollStore()
        self.provider = StubStreamProvider(started_at)
        self.service = RollService(
            store=self.store,
            resolver=SessionKeyResolver(self.provider, self.store, clock=self.clock),
            evaluator=CooldownEvaluator(max_rolls_per_scope=max_rolls, cooldown=timedelta(hours=24)),
            generator=RewardGenerator(TierModel.load(), rng=random.Random(7)),
            clock=self.clock,
        )

    def roll(self, ctx=None):
        return asyncio.run(self.service.roll(ctx or context()))

    def new_stream(self, started_at):
        self.provider.started_at = started_at
        self.store.stream_cache.clear()


def test_first_roll_succeeds_and_persists():
    h = Harness()
    outcome = h.roll()

    assert outcome.allowed
    assert outcome.decision.state is RollState.NO_PRIOR_ROLL
    assert outcome.token == 'stream_2024-05-01T17:00:00Z'

    record = h.store.records['42']
    assert record.total_rolls == 1
    assert record.rolls_this_scope == 1
    assert record.last_token == outcome.token
    assert h.store.boards['iq']['42'] == outcome.reward.iq
    assert h.store.boards[f'{outcome.token}:height']['42'] == outcome.reward.height.total_inches
    assert h.store.names['42'] == 'viewer'


def test_cooldown_fields_written_before_statistics():
    h = Harness()
    h.roll()
    writes = [c for c in h.store.calls if c in ('save_cooldown', 'save_record', 'update_leaderboards')]
    assert writes == ['save_cooldown', 'save_record', 'update_leaderboards']


def test_second_roll_in_same_stream_escalates():
    h = Harness()
    h.roll()
    before = h.store.records['42'].total_rolls

    first_denial = h.roll()
    second_denial = h.roll()
    third_denial = h.roll()

    assert not first_denial.allowed
    assert first_denial.escalation is Escalation.MILD_REBUKE
    assert second_denial.escalation is Escalation.ESCALATE
    assert third_denial.escalation is Escalation.ESCALATE
    assert third_denial.spam_count == 3
    assert h.store.records['42'].total_rolls == before


def test_new_stream_reopens_rolls_and_resets_escalation():
    h = Harness()
    h.roll()
    h.roll()
    h.roll()

    h.new_stream(STREAM_B)
    h.clock.advance(timedelta(hours=3))
    outcome = h.roll()

    assert outcome.allowed
    assert outcome.token == 'stream_2024-05-01T20:00:00Z'
    assert h.store.records['42'].spam_count == 0
    assert h.roll().escalation is Escalation.MILD_REBUKE


def test_offline_cooldown_is_24_hours():
    h = Harness()
    offline = context(is_live=False)

    assert h.roll(offline).allowed
    h.clock.advance(timedelta(hours=23))
    assert not h.roll(offline).allowed
    h.clock.advance(timedelta(hours=1))
    assert h.roll(offline).allowed


def test_scope_limit_above_one():
    h = Harness(max_rolls=2)
    assert h.roll().allowed
    assert h.roll().allowed
    assert h.store.records['42'].rolls_this_scope == 2
    assert not h.roll().allowed


def test_concurrent_rolls_for_one_user_only_succeed_once():
    h = Harness()

    async def burst():
        return await asyncio.gather(*(h.service.roll(context()) for _ in range(5)))

    outcomes = asyncio.run(burst())

    assert sum(outcome.allowed for outcome in outcomes) == 1
    assert h.store.records['42'].total_rolls == 1
    assert sorted(o.spam_count for o in outcomes if not o.allowed) == [1, 2, 3, 4]


def test_different_users_do_not_block_each_other():
    h = Harness()

    async def burst():
        return await asyncio.gather(*(h.service.roll(context(user_id=str(i), username=f'u{i}')) for i in range(5)))

    assert all(outcome.allowed for outcome in asyncio.run(burst()))
    assert len(h.store.boards[LeaderboardKind.ROLLS.value]) == 5


def test_store_failure_surfaces_without_a_decision():
    h = Harness()
    h.roll()
    h.store.fail = True
    with pytest.raises(StoreError):
        h.roll()
    h.store.fail = False
    assert h.store.records['42'].spam_count == 0


def test_stream_lookup_failure_still_rolls_offline():
    h = Harness()
    h.provider.error = True
    outcome = h.roll()
    assert outcome.allowed
    assert outcome.token == 'offline_2024-05-01'
