"""
Operations Layer

This package provides the pure decision and scoring logic of the daily roll.
Nothing here performs I/O: the services layer feeds operations with records
read from Redis and persists what they return.

Each operations module focuses on a specific concern:
- TierModel: hero pools per skill tier
- RewardGenerator: IQ, height and hero draws
- CooldownEvaluator: roll eligibility and spam escalation
- StatsAggregator: folding a reward into a user record
- LeaderboardScorer: pepega score and leaderboard values
"""
