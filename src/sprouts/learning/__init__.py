from .game import AnswerOutcome, GameSession
from .generator import ProblemGenerator
from .models import BucketStats, ParentSettings, ProgressRecord, SettingsLocks
from .parent_settings import ParentSettingsStore, PinPad
from .progress import ProgressStore, summarize_progress
from .recent import RecentProblemGuard
from .timer import SessionTicker, SessionTimer

__all__ = [
    "AnswerOutcome",
    "BucketStats",
    "GameSession",
    "ParentSettings",
    "ParentSettingsStore",
    "PinPad",
    "ProblemGenerator",
    "ProgressRecord",
    "ProgressStore",
    "RecentProblemGuard",
    "SessionTicker",
    "SessionTimer",
    "SettingsLocks",
    "summarize_progress",
]
