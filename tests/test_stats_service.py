import asyncio

import pytest

from dailyroll.data_models.roll import UserRecord
from dailyroll.operations.leaderboard_scorer import LeaderboardKind
from dailyroll.services.stats_service import StatsService

from fakes import InMemoryRollStore


@pytest.fixture
def store():
    store = InMemoryRollStore()
    store.boards['iq'] = {'1': 150, '2': 90, '3': 200}
    store.boards['pepega'] = {'1': 0.7, '2': 0.2, '3': 0.9}
    store.boards['stream_A:iq'] = {'2': 90}
    store.names = {'1': 'alice', '2': 'bob', '3': 'carol'}
    store.records['2'] = UserRecord(user_id='2', username='bob', total_rolls=1, tier1_count=1)
    return store


def test_global_leaderboard_is_descending(store):
    entries = asyncio.run(StatsService(store).leaderboard(LeaderboardKind.IQ))
    assert [(e.rank, e.username) for e in entries] == [(1, 'carol'), (2, 'alice'), (3, 'bob')]


def test_pepega_board_lists_unluckiest_first(store):
    entries = asyncio.run(StatsService(store).leaderboard(LeaderboardKind.PEPEGA))
    assert [e.username for e in entries] == ['bob', 'alice', 'carol']


def test_session_board(store):
    entries = asyncio.run(StatsService(store).leaderboard(LeaderboardKind.IQ, token='stream_A'))
    assert [e.username for e in entries] == ['bob']


def test_no_session_board_for_rolls(store):
    with pytest.raises(ValueError):
        asyncio.run(StatsService(store).leaderboard(LeaderboardKind.ROLLS, token='stream_A'))


def test_page_size(store):
    entries = asyncio.run(StatsService(store, page_size=2).leaderboard(LeaderboardKind.IQ))
    assert len(entries) == 2


def test_user_stats_and_ranks(store):
    service = StatsService(store)
    assert asyncio.run(service.get_user_stats('2')).username == 'bob'
    assert asyncio.run(service.get_user_stats('9')) is None

    ranks = asyncio.run(service.get_ranks('2'))
    assert ranks[LeaderboardKind.IQ] == 3
    assert ranks[LeaderboardKind.PEPEGA] == 1
    assert ranks[LeaderboardKind.ROLLS] is None
