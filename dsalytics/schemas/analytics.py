"""
Pydantic schemas for analytics endpoints
"""
from pydantic import BaseModel
from typing import List


class UserAnalytics(BaseModel):
    """Activity counters derived from topic completion timestamps"""
    total_completed: int
    completed_today: int
    streak: int


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    name: str
    solved_problems: int
    completed_topics: int


class Leaderboard(BaseModel):
    entries: List[LeaderboardEntry]
