from __future__ import annotations

import time
from typing import Any, Callable, Dict, Iterable, List

from pydantic import ValidationError

from sprouts.config.schema import DIFFICULTIES
from sprouts.learning.models import ProgressRecord
from sprouts.storage.blob import JsonBlob
from sprouts.storage.kv_store import KeyValueBackend
from sprouts.utils.logging import get_logger

logger = get_logger(__name__)


def _epoch_millis(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class ProgressStore:
    """
    Persist cumulative performance counters for one Sprouts app.

    Every mutating call is a read-modify-write of a single JSON blob: the current record is
    loaded from the backend, updated, written back and returned. Loading never raises. A
    missing or unreadable blob yields the zeroed defaults, and a readable one is
    shallow-merged over those defaults so fields added in later versions fill in
    automatically.

    Blob Format
    -----------
    Stored under ``storage_key`` with camelCase keys::

        {
          "totalQuestionsAnswered": 12,
          "totalCorrectAnswers": 9,
          "streakBest": 5,
          "currentStreak": 2,
          "sessionsCount": 3,
          "totalPlayTimeSeconds": 640,
          "lastPlayedAt": 1760870400000,
          "perDifficultyStats": {"beginner": {"answered": 12, "correct": 9}, ...},
          "perModeStats": {"vocab": {"answered": 7, "correct": 6}, ...}
        }

    Parameters
    ----------
    backend : KeyValueBackend
        Where the blob lives (in-memory for tests, one JSON file per key on disk).
    storage_key : str
        Key of the blob, e.g. ``science_sprouts_progress``.
    modes : Iterable[str]
        Mode keys that get a ``perModeStats`` bucket in the defaults.
    clock : Callable[[], float], default=time.time
        Seconds since the epoch; used to stamp ``lastPlayedAt``.

    Examples
    --------
    >>> store = ProgressStore(MemoryBackend(), "science_sprouts_progress", ["vocab", "labs"])
    >>> store.record_answer(correct=True, difficulty="beginner", mode="vocab").current_streak
    1
    >>> store.record_answer(correct=False, difficulty="beginner", mode="vocab").streak_best
    1
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        storage_key: str,
        modes: Iterable[str],
        clock: Callable[[], float] = time.time,
    ):
        self.storage_key = storage_key
        self.modes: List[str] = list(modes)
        self.clock = clock
        self._blob = JsonBlob(backend, storage_key, label="progress")

    def default_blob(self) -> Dict[str, Any]:
        """Return the zeroed record shape as a fresh camelCase mapping."""
        return {
            "totalQuestionsAnswered": 0,
            "totalCorrectAnswers": 0,
            "streakBest": 0,
            "currentStreak": 0,
            "sessionsCount": 0,
            "totalPlayTimeSeconds": 0,
            "lastPlayedAt": None,
            "perDifficultyStats": {
                difficulty: {"answered": 0, "correct": 0} for difficulty in DIFFICULTIES
            },
            "perModeStats": {mode: {"answered": 0, "correct": 0} for mode in self.modes},
        }

    def load_progress(self) -> ProgressRecord:
        """Read the stored record merged over defaults; the defaults on any failure."""
        merged = self._blob.read(self.default_blob())
        try:
            return ProgressRecord.model_validate(merged)
        except ValidationError as exc:
            logger.error(
                "progress_blob_invalid", storage_key=self.storage_key, error=str(exc)
            )
            return ProgressRecord.model_validate(self.default_blob())

    def save_progress(self, record: ProgressRecord) -> None:
        """Write ``record`` to storage. A failed write is logged and dropped."""
        self._blob.write(record.to_blob())

    def record_answer(self, *, correct: bool, difficulty: str, mode: str) -> ProgressRecord:
        """
        Count one answered question and persist the result.

        Parameters
        ----------
        correct : bool
            Whether the learner picked the right option.
        difficulty : str
            Difficulty the problem was generated at. Unknown keys leave the per-difficulty
            buckets untouched.
        mode : str
            Mode the problem came from. Unknown keys leave the per-mode buckets untouched.

        Returns
        -------
        ProgressRecord
            The updated record, exactly as written.
        """
        record = self.load_progress()

        record.total_questions_answered += 1
        if correct:
            record.total_correct_answers += 1
            record.current_streak += 1
            if record.current_streak > record.streak_best:
                record.streak_best = record.current_streak
        else:
            record.current_streak = 0

        for buckets, key in (
            (record.per_difficulty_stats, difficulty),
            (record.per_mode_stats, mode),
        ):
            bucket = buckets.get(key)
            if bucket is None:
                continue
            bucket.answered += 1
            if correct:
                bucket.correct += 1

        record.last_played_at = _epoch_millis(self.clock)
        self.save_progress(record)
        return record

    def record_session_start(self) -> ProgressRecord:
        """Count a new play session and stamp ``lastPlayedAt``."""
        record = self.load_progress()
        record.sessions_count += 1
        record.last_played_at = _epoch_millis(self.clock)
        self.save_progress(record)
        return record

    def record_session_end(self, duration_seconds: int | None) -> ProgressRecord:
        """Add a finished session's length to the play-time total; falsy durations add 0."""
        record = self.load_progress()
        record.total_play_time_seconds += int(duration_seconds or 0)
        self.save_progress(record)
        return record


def format_play_time(seconds: int) -> str:
    """Render seconds as ``"<minutes>m <seconds>s"``."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def summarize_progress(record: ProgressRecord) -> Dict[str, Any]:
    """Build the figures shown on the parent stats screen."""
    accuracy = 0
    if record.total_questions_answered > 0:
        accuracy = round(record.total_correct_answers / record.total_questions_answered * 100)
    return {
        "accuracy": accuracy,
        "streak_best": record.streak_best,
        "questions": record.total_questions_answered,
        "play_time": format_play_time(record.total_play_time_seconds),
        "sessions": record.sessions_count,
        "per_difficulty": [
            (difficulty, bucket.answered, bucket.correct)
            for difficulty, bucket in record.per_difficulty_stats.items()
        ],
        "per_mode": [
            (mode, bucket.answered, bucket.correct)
            for mode, bucket in record.per_mode_stats.items()
        ],
    }
