"""
Durable state for the daily roll.

RollStore is the storage boundary used by the roll and stats services.
RedisRollStore keeps one hash per user, sorted sets per leaderboard, a
username lookup and the stream start cache. Every Redis failure surfaces as
StoreError; nothing here retries.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, List, Mapping, Optional, Tuple

from redis.exceptions import LockError, RedisError

from dailyroll.constants import KeyConstants
from dailyroll.data_models.roll import UserRecord
from dailyroll.operations.leaderboard_scorer import LeaderboardKind
from dailyroll.utils.roll_exceptions import StoreError

logger = logging.getLogger(__name__)

# Hash fields written before the statistics so a crash between the two
# writes can only skew statistics, never reopen a cooldown
COOLDOWN_FIELDS = ('username', 'last_roll', 'last_token', 'rolls_this_scope', 'spam_count')


class RollStore(ABC):
    """Storage operations needed by the roll flow."""

    @abstractmethod
    def user_lock(self, user_id: str):
        """Async context manager serializing read-decide-write per user."""
        pass

    @abstractmethod
    async def get_record(self, user_id: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def increment_spam(self, user_id: str) -> int:
        """Increment and persist the denied-attempt counter, returning the new value."""
        pass

    @abstractmethod
    async def save_cooldown(self, record: UserRecord) -> None:
        pass

    @abstractmethod
    async def save_record(self, record: UserRecord) -> None:
        pass

    @abstractmethod
    async def update_leaderboards(self, user_id: str, username: str,
                                  global_scores: Mapping[LeaderboardKind, float],
                                  token: str,
                                  session_scores: Mapping[LeaderboardKind, float]) -> None:
        pass

    @abstractmethod
    async def top(self, kind: LeaderboardKind, count: int,
                  token: Optional[str] = None) -> List[Tuple[str, float]]:
        """Best entries first; for the pepega board that means the lowest scores."""
        pass

    @abstractmethod
    async def rank(self, kind: LeaderboardKind, user_id: str) -> Optional[int]:
        """1-indexed rank on a global board, None when the user is absent."""
        pass

    @abstractmethod
    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        pass

    @abstractmethod
    async def get_cached_stream_start(self, community_id: str) -> Optional[str]:
        pass

    @abstractmethod
    async def cache_stream_start(self, community_id: str, started_at: str, ttl: int) -> None:
        pass


def leaderboard_key(kind: LeaderboardKind, token: Optional[str] = None) -> str:
    if token:
        return KeyConstants.SESSION_LEADERBOARD.format(token=token, kind=kind.value)
    return KeyConstants.LEADERBOARD.format(kind=kind.value)


class RedisRollStore(RollStore):
    """RollStore backed by redis.asyncio."""

    def __init__(self, redis_client, record_ttl: int, lock_timeout: float = 10, lock_wait: float = 3):
        """
        Args:
            redis_client: redis.asyncio client created with decode_responses=True
            record_ttl: Seconds a user record survives without a new write
            lock_timeout: Seconds before an abandoned per-user lock expires
            lock_wait: Seconds a request waits for a busy per-user lock
        """
        self.redis = redis_client
        self.record_ttl = record_ttl
        self.lock_timeout = lock_timeout
        self.lock_wait = lock_wait

    @asynccontextmanager
    async def _wrap(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise StoreError(operation, str(e)) from e

    @asynccontextmanager
    async def user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            KeyConstants.LOCK.format(user_id=user_id),
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_wait,
        )
        async with self._wrap('lock'):
            acquired = await lock.acquire()
        if not acquired:
            raise StoreError('lock', f"user {user_id} is still busy")

        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # Expired under us; the next holder already owns it
                logger.warning(f"Lock for user {user_id} expired before release: {e}")
            except RedisError as e:
                # Left to expire after lock_timeout
                logger.error(f"Could not release lock for user {user_id}: {e}")

    async def get_record(self, user_id: str) -> Optional[UserRecord]:
        async with self._wrap('get_record'):
            fields = await self.redis.hgetall(KeyConstants.USER.format(user_id=user_id))
        if not fields:
            return None
        return UserRecord.from_hash(user_id, fields)

    async def increment_spam(self, user_id: str) -> int:
        key = KeyConstants.USER.format(user_id=user_id)
        async with self._wrap('increment_spam'):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hincrby(key, 'spam_count', 1)
                pipe.expire(key, self.record_ttl)
                spam_count, _ = await pipe.execute()
        return int(spam_count)

    async def _write_fields(self, operation: str, user_id: str, fields: Dict[str, str]) -> None:
        key = KeyConstants.USER.format(user_id=user_id)
        async with self._wrap(operation):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(key, mapping=fields)
                pipe.expire(key, self.record_ttl)
                await pipe.execute()

    async def save_cooldown(self, record: UserRecord) -> None:
        fields = record.to_hash()
        await self._write_fields('save_cooldown', record.user_id, {name: fields[name] for name in COOLDOWN_FIELDS})

    async def save_record(self, record: UserRecord) -> None:
        await self._write_fields('save_record', record.user_id, record.to_hash())
        logger.info(f"Stats updated for {record.username} ({record.user_id}): {record.total_rolls} total rolls")

    async def update_leaderboards(self, user_id: str, username: str,
                                  global_scores: Mapping[LeaderboardKind, float],
                                  token: str,
                                  session_scores: Mapping[LeaderboardKind, float]) -> None:
        async with self._wrap('update_leaderboards'):
            async with self.redis.pipeline(transaction=False) as pipe:
                for kind, score in global_scores.items():
                    pipe.zadd(leaderboard_key(kind), {user_id: score})
                for kind, score in session_scores.items():
                    pipe.zadd(leaderboard_key(kind, token), {user_id: score})
                pipe.set(KeyConstants.USERNAME.format(user_id=user_id), username)
                await pipe.execute()
        logger.debug(f"Leaderboards updated for {user_id}")

    async def top(self, kind: LeaderboardKind, count: int,
                  token: Optional[str] = None) -> List[Tuple[str, float]]:
        key = leaderboard_key(kind, token)
        async with self._wrap('top'):
            if kind.ascending:
                entries = await self.redis.zrange(key, 0, count - 1, withscores=True)
            else:
                entries = await self.redis.zrevrange(key, 0, count - 1, withscores=True)
        return [(member, float(score)) for member, score in entries]

    async def rank(self, kind: LeaderboardKind, user_id: str) -> Optional[int]:
        key = leaderboard_key(kind)
        async with self._wrap('rank'):
            if kind.ascending:
                rank = await self.redis.zrank(key, user_id)
            else:
                rank = await self.redis.zrevrank(key, user_id)
        return rank + 1 if rank is not None else None

    async def usernames(self, user_ids: Iterable[str]) -> Dict[str, str]:
        user_ids = list(user_ids)
        if not user_ids:
            return {}
        async with self._wrap('usernames'):
            names = await self.redis.mget([KeyConstants.USERNAME.format(user_id=uid) for uid in user_ids])
        return {uid: name for uid, name in zip(user_ids, names) if name}

    async def get_cached_stream_start(self, community_id: str) -> Optional[str]:
        async with self._wrap('get_cached_stream_start'):
            return await self.redis.get(KeyConstants.STREAM_START.format(community_id=community_id))

    async def cache_stream_start(self, community_id: str, started_at: str, ttl: int) -> None:
        async with self._wrap('cache_stream_start'):
            await self.redis.set(KeyConstants.STREAM_START.format(community_id=community_id), started_at, ex=ttl)
