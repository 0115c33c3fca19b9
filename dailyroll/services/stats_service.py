"""
Read-only statistics and leaderboard queries for the stats commands.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from dailyroll.data_models.roll import UserRecord
from dailyroll.operations.leaderboard_scorer import SESSION_KINDS, LeaderboardKind
from dailyroll.services.roll_store import RollStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedEntry:
    """Single leaderboard row."""
    rank: int
    user_id: str
    username: str
    score: float


class StatsService:
    """Personal stats, ranks and leaderboards."""
    
    def __init__(self, store: RollStore, page_size: int = 5):
        self.store = store
        self.page_size = page_size
    
    async def get_user_stats(self, user_id: str) -> Optional[UserRecord]:
        record = await self.store.get_record(user_id)
        if record is None or record.total_rolls == 0:
            return None
        return record
    
    async def get_ranks(self, user_id: str) -> Dict[LeaderboardKind, Optional[int]]:
        return {kind: await self.store.rank(kind, user_id) for kind in LeaderboardKind}
    
    async def leaderboard(self, kind: LeaderboardKind, token: Optional[str] = None) -> List[RankedEntry]:
        """
        Top entries of a board, best first.
        
        For the pepega board "best first" means the unluckiest users first.
        
        Args:
            kind: Which board to read
            token: Session scope token for per-session boards, None for global
        """
        if token and kind not in SESSION_KINDS:
            raise ValueError(f"no per-session {kind.value} leaderboard")
        entries = await self.store.top(kind, self.page_size, token)
        names = await self.store.usernames(user_id for user_id, _ in entries)
        return [
            RankedEntry(rank=i, user_id=user_id, username=names.get(user_id, 'Unknown'), score=score)
            for i, (user_id, score) in enumerate(entries, start=1)
        ]
