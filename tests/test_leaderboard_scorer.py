import pytest

from dailyroll.data_models.roll import Height, Reward, UserRecord
from dailyroll.operations.leaderboard_scorer import (
    LeaderboardKind, global_scores, pepega_score, session_scores,
)


def test_pepega_is_zero_without_rolls():
    assert pepega_score(UserRecord(user_id='1', username='a')) == 0.0


def test_bottom_tier_stats_score_low():
    record = UserRecord(user_id='1', username='a', total_rolls=10, sum_iq=250,
                        sum_height_inches=250, tier1_count=9, tier2_count=1)
    score = pepega_score(record)
    assert score == pytest.approx(0.05 + 0.3 * 25 / 119 + 0.03)
    assert score < 0.2


def test_top_tier_stats_score_high():
    record = UserRecord(user_id='1', username='a', total_rolls=10, sum_iq=1800,
                        sum_height_inches=1100, tier3_count=2, tier4_count=3, tier5_count=5)
    score = pepega_score(record)
    assert score > 0.8
    assert score <= 1.0


def test_perfect_record_scores_one():
    record = UserRecord(user_id='1', username='a', total_rolls=2, sum_iq=400,
                        sum_height_inches=238, tier5_count=2)
    assert pepega_score(record) == pytest.approx(1.0)


def test_only_pepega_board_is_ascending():
    assert LeaderboardKind.PEPEGA.ascending
    assert not any(kind.ascending for kind in LeaderboardKind if kind is not LeaderboardKind.PEPEGA)


def test_scores_written_after_a_roll():
    record = UserRecord(user_id='1', username='a', total_rolls=3, sum_iq=300,
                        sum_height_inches=150, tier3_count=3)
    roll = Reward(iq=120, height=Height(6, 2), hero='Ana', tier=3)

    scores = global_scores(record, roll)

    assert scores[LeaderboardKind.IQ] == 120
    assert scores[LeaderboardKind.HEIGHT] == 74
    assert scores[LeaderboardKind.ROLLS] == 3
    assert scores[LeaderboardKind.PEPEGA] == pepega_score(record)
    assert session_scores(roll) == {LeaderboardKind.IQ: 120, LeaderboardKind.HEIGHT: 74}
