"""
Core Module - adaptive difficulty and scoring pipeline.

Pure functions with no I/O:
- scoring: score_answers, ScoreResult
- difficulty: select_difficulty, Difficulty, ScoreRecord
- trends: analyze_trend, TrendAnalysis
- advisor: fallback_suggestions
- errors: error taxonomy mapped to HTTP statuses
"""

from quizzer.core.advisor import fallback_suggestions
from quizzer.core.difficulty import Difficulty, ScoreRecord, select_difficulty
from quizzer.core.scoring import QuestionResult, ScoreResult, round_half_up, score_answers
from quizzer.core.trends import Trend, TrendAnalysis, analyze_trend

__all__ = [
    # Scoring
    "QuestionResult",
    "ScoreResult",
    "round_half_up",
    "score_answers",
    # Difficulty
    "Difficulty",
    "ScoreRecord",
    "select_difficulty",
    # Trends
    "Trend",
    "TrendAnalysis",
    "analyze_trend",
    # Advice
    "fallback_suggestions",
]
