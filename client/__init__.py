"""
Exam Portal client package
Talks to the API over httpx; the token lives on an explicit ApiSession object
"""

from .session import ApiError, ApiSession
from .countdown import ExamCountdown
from .attempt import ExamAttempt

__all__ = [
    "ApiError",
    "ApiSession",
    "ExamCountdown",
    "ExamAttempt",
]
