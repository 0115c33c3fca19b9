import asyncio
import random
from datetime import datetime, timezone

import pytest
from aiohttp import test_utils

from dailyroll.config import Config
from dailyroll.data_models.roll import RequestContext
from dailyroll.main import create_app
from dailyroll.operations.reward_generator import RewardGenerator
from dailyroll.operations.tier_model import TierModel
from dailyroll.server import TOKEN_HEADER, DailyRollServer
from dailyroll.services.session_key import SessionKeyResolver

from fakes import InMemoryRollStore, StubContextProvider, StubStreamProvider

VIEWER = RequestContext(user_id='42', username='viewer', channel_id='1001',
                        channel_name='Streamer', is_live=True)
ELSEWHERE = RequestContext(user_id='43', username='lurker', channel_id='2002',
                           channel_name='OtherChannel', is_live=False)


@pytest.fixture(autouse=True)
def streamer(monkeypatch):
    monkeypatch.setattr(Config, 'STREAMER_NAME', 'streamer')
    monkeypatch.setattr(Config, 'MAX_ROLLS_PER_SCOPE', 1)
    monkeypatch.setattr(Config, 'TIMEOUT_SECONDS', 60)


def build_server(store):
    server = DailyRollServer(TierModel.load())
    started = datetime(2024, 5, 1, 17, 0, tzinfo=timezone.utc)
    server.wire(
        store=store,
        context_provider=StubContextProvider({'good': VIEWER, 'other': ELSEWHERE}),
        resolver=SessionKeyResolver(StubStreamProvider(started), store),
        generator=RewardGenerator(server.tier_model, rng=random.Random(3)),
    )
    return server


def run_requests(store, requests):
    """Issue (path, token) requests in order and return (status, text) pairs."""
    async def go():
        app = create_app(build_server(store))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            results = []
            for path, token in requests:
                headers = {TOKEN_HEADER: token} if token else {}
                resp = await client.get(path, headers=headers)
                results.append((resp.status, await resp.text()))
            return results
    return asyncio.run(go())


def test_roll_then_rebuke_then_timeout():
    store = InMemoryRollStore()
    results = run_requests(store, [('/api/dailyroll', 'good')] * 3)

    assert [status for status, _ in results] == [200, 200, 200]
    assert 'viewer' in results[0][1]
    assert not results[1][1].startswith('/timeout')
    assert results[2][1].startswith('/timeout viewer 60s ')
    assert store.records['42'].total_rolls == 1


def test_missing_token_is_bad_request():
    (status, text), = run_requests(InMemoryRollStore(), [('/api/dailyroll', None)])
    assert status == 400
    assert 'Missing Fossabot token' in text


def test_invalid_token_is_bad_request():
    store = InMemoryRollStore()
    (status, _), = run_requests(store, [('/api/dailyroll', 'bogus')])
    assert status == 400
    assert store.records == {}


def test_store_outage_is_server_error():
    store = InMemoryRollStore()
    store.fail = True
    (status, text), = run_requests(store, [('/api/dailyroll', 'good')])
    assert status == 500
    assert text


def test_stats_are_gated_to_streamer_channel():
    (status, text), = run_requests(InMemoryRollStore(), [('/api/stats/me', 'other')])
    assert status == 403
    assert 'not available' in text


def test_stats_after_roll():
    store = InMemoryRollStore()
    results = run_requests(store, [
        ('/api/stats/me', 'good'),
        ('/api/dailyroll', 'good'),
        ('/api/stats/me', 'good'),
        ('/api/stats/leaderboard', 'good'),
        ('/api/stats/pepega', 'good'),
        ('/api/stats/session', 'good'),
    ])

    assert all(status == 200 for status, _ in results)
    assert 'No rolls yet' in results[0][1]
    assert results[2][1].startswith('viewer: 1 roll |')
    assert '1. viewer' in results[3][1]
    assert '1. viewer' in results[4][1]
    assert 'this stream' in results[5][1]
    assert '1. viewer' in results[5][1]


def test_cors_headers_and_preflight():
    async def go():
        app = create_app(build_server(InMemoryRollStore()))
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            preflight = await client.options('/api/dailyroll')
            rolled = await client.get('/api/dailyroll', headers={TOKEN_HEADER: 'good'})
            rejected = await client.get('/api/stats/me')
            return [(resp.status, resp.headers.get('Access-Control-Allow-Origin')) for resp in
                    (preflight, rolled, rejected)]

    assert asyncio.run(go()) == [(200, '*'), (200, '*'), (400, '*')]
