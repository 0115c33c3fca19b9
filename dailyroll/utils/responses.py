"""
Chat response formatting.

Every response is a single line under the Twitch chat limit. The wording is
cosmetic; the only hard contract is the "/timeout <user> <seconds>s" prefix
on escalations, which the chat bot executes as a moderation command.
"""

import logging
import random
from typing import Dict, List, Optional

from dailyroll.constants import ResponseConstants
from dailyroll.data_models.roll import Height, Reward, UserRecord
from dailyroll.operations.cooldown import Escalation
from dailyroll.operations.leaderboard_scorer import LeaderboardKind

logger = logging.getLogger(__name__)

# Rebukes for users who try to roll too early
INSULTS = [
    "nice double roll",
    "bro thinks they can roll twice lmao",
    "greedy much? come back later",
    "did you think I wouldn't notice? 🤨",
    "one roll per stream, genius",
    "patience is a virtue you clearly lack",
    "imagine being this desperate for RNG",
    "the audacity",
    "no. just no.",
    "someone didn't read the rules smh",
    "bro really thought 💀",
    "not you trying to cheat the system",
    "the greed is astronomical",
    "erm what the sigma? (you can't roll twice)",
    "chat is this real? 🤨📸",
    "least greedy twitch chatter",
    "you're done, you're done 🫵",
    "reported to the cyber police",
]

ROLL_FORMATS = [
    "{username}'s Daily Roll: IQ {iq} | Height {height} | Hero: {hero}",
    "🎲 {username} rolled: {iq} IQ, {height} tall, destined for {hero}",
    "Daily Stats for {username}: IQ {iq} • {height} • Should play {hero}",
    "{username}: IQ={iq} | Height={height} | Today's hero: {hero}",
    "[{username}] IQ: {iq} | {height} | Hero Roll: {hero} 🎯",
]

TIER_FLAVOR = {
    1: "hamster tier 🐹",
    2: "unga bunga tier 🦍",
    3: "perfectly normal tier",
    4: "big brain tier 🧠",
    5: "overqualified tier 👑",
}

LEADERBOARD_TITLES = {
    LeaderboardKind.IQ: "🧠 Top IQ",
    LeaderboardKind.HEIGHT: "📏 Tallest",
    LeaderboardKind.ROLLS: "🎲 Most Rolls",
    LeaderboardKind.PEPEGA: "🤡 Pepega Hall of Shame",
}


def clamp(response: str) -> str:
    """Cut a response to the safe chat length, marking the cut with an ellipsis."""
    limit = ResponseConstants.MAX_RESPONSE_LENGTH
    response = ' '.join(response.split())
    if len(response) <= limit:
        return response
    logger.warning(f"Response exceeds safe length: {len(response)}")
    return response[:limit - 1] + '…'


def format_roll_response(username: str, reward: Reward, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    line = rng.choice(ROLL_FORMATS).format(
        username=username, iq=reward.iq, height=reward.height, hero=reward.hero
    )
    return clamp(f"{line} ({TIER_FLAVOR[reward.tier]})")


def format_denial_response(username: str, escalation: Escalation, timeout_seconds: int,
                           rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    insult = rng.choice(INSULTS)
    if escalation is Escalation.ESCALATE:
        return clamp(f"{ResponseConstants.TIMEOUT_SENTINEL} {username} {timeout_seconds}s {insult}")
    return clamp(insult)


def format_stats_response(username: str, record: Optional[UserRecord],
                          ranks: Dict[LeaderboardKind, Optional[int]]) -> str:
    if record is None or record.total_rolls == 0:
        return f"{username}: No rolls yet! Type !roll to get started."

    roll_count = f"{record.total_rolls} roll{'' if record.total_rolls == 1 else 's'}"
    current_height = Height.from_inches(record.current_height_inches)
    current = f"Latest: {record.current_iq} IQ, {current_height}, {record.current_hero}"
    peak = f"Peak: {record.highest_iq} IQ, {Height.from_inches(record.tallest_height_inches)}"

    rank_parts = []
    for kind, label in ((LeaderboardKind.IQ, 'IQ'), (LeaderboardKind.HEIGHT, 'height'),
                        (LeaderboardKind.PEPEGA, 'pepega')):
        if ranks.get(kind):
            rank_parts.append(f"#{ranks[kind]} {label}")
    rank_string = f" | Rank: {', '.join(rank_parts)}" if rank_parts else ''

    return clamp(f"{username}: {roll_count} | {current} | {peak}{rank_string}")


def _format_score(kind: LeaderboardKind, score: float) -> str:
    if kind is LeaderboardKind.HEIGHT:
        return str(Height.from_inches(int(score)))
    if kind is LeaderboardKind.IQ:
        return f"{int(score)} IQ"
    if kind is LeaderboardKind.ROLLS:
        return f"{int(score)} rolls"
    return f"{score * 100:.1f}%"


def format_leaderboard_response(kind: LeaderboardKind, entries: List, title: Optional[str] = None) -> str:
    """
    Format a leaderboard as one line.

    Args:
        kind: Which board the entries belong to
        entries: RankedEntry rows, best first
        title: Override for the board title
    """
    title = title or LEADERBOARD_TITLES[kind]
    if not entries:
        return f"{title}: nobody has rolled yet!"
    parts = [f"{e.rank}. {e.username} ({_format_score(kind, e.score)})" for e in entries]
    return clamp(f"{title}: {' | '.join(parts)}")
