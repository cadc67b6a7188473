"""
Trading bounded context: domain layer.

- Quote simulation arithmetic
- Leaderboard ranking
- Funded account drawdown / profit-target rules
"""
