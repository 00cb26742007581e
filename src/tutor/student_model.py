"""
Student Profile Tracker.

Persistent statistical record of a learner. The record is an immutable
TutorState; the only way to change it is recording an attempt:

    new_state = apply_attempt(state, attempt)

StudentProfileTracker wraps that transition with loading, locking and
persistence. Loading never fails: an absent or corrupt document yields a
fresh beginner profile.

Mistake detection is a substring heuristic on the raw answer and is
approximate.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Sequence
from datetime import datetime

from loguru import logger

from src.tutor.exceptions import CorruptDocumentError
from src.tutor.models import (
    Difficulty,
    StudentAttempt,
    StudentLevel,
    StudentProfile,
    TutorState,
)
from src.tutor.parsing import has_separator, leading_number, strip_whitespace
from src.tutor.persistence import DocumentStore
from src.tutor.solver import MISTAKE_MISSING_ROOT, MISTAKE_PLUS_MINUS, solve

HISTORY_LIMIT = 50
MISTAKE_LIMIT = 5
RECENT_WINDOW = 10


# =============================================================================
# Pure transition
# =============================================================================


def detect_mistakes(attempt: StudentAttempt) -> list[str]:
    """Label the mistakes visible in an incorrect attempt's raw text."""
    mistakes = []
    answer = attempt.user_answer

    if "±" in answer:
        mistakes.append(MISTAKE_PLUS_MINUS)

    solution = solve(attempt.equation)
    two_roots_expected = solution.has_real_solutions and solution.x1 != solution.x2
    single_number = leading_number(strip_whitespace(answer)) is not None and not has_separator(answer)
    if single_number and two_roots_expected:
        mistakes.append(MISTAKE_MISSING_ROOT)

    return mistakes


def add_mistakes(current: Sequence[str], new: Sequence[str], limit: int = MISTAKE_LIMIT) -> tuple[str, ...]:
    """Append unseen labels, evicting the oldest beyond the limit."""
    mistakes = list(current)
    for mistake in new:
        if mistake in mistakes:
            continue
        mistakes.append(mistake)
        if len(mistakes) > limit:
            mistakes.pop(0)
    return tuple(mistakes)


def compute_level(total_attempts: int, success_rate: float) -> StudentLevel:
    if total_attempts >= 20 and success_rate >= 80:
        return StudentLevel.ADVANCED
    if total_attempts >= 10 and success_rate >= 60:
        return StudentLevel.INTERMEDIATE
    return StudentLevel.BEGINNER


def compute_preferred_difficulty(recent: Sequence[StudentAttempt]) -> Difficulty:
    """Difficulty suggested by the success rate of the given window."""
    if not recent:
        rate = 0.0
    else:
        rate = sum(1 for a in recent if a.is_correct) / len(recent) * 100

    if rate >= 80:
        return Difficulty.HARD
    if rate >= 50:
        return Difficulty.MEDIUM
    return Difficulty.EASY


def apply_attempt(
    state: TutorState,
    attempt: StudentAttempt,
    history_limit: int = HISTORY_LIMIT,
    mistake_limit: int = MISTAKE_LIMIT,
    recent_window: int = RECENT_WINDOW,
) -> TutorState:
    """
    Record an attempt and return the updated state.

    Args:
        state: Current learner state
        attempt: The new attempt
        history_limit: Attempts kept in history (oldest dropped)
        mistake_limit: Distinct mistake labels kept (oldest evicted)
        recent_window: Attempts considered for the preferred difficulty

    Returns:
        New TutorState; the input is not modified
    """
    profile = state.profile
    attempts = (*state.attempts, attempt)[-history_limit:]

    total = profile.total_attempts + 1
    correct = profile.correct_answers + (1 if attempt.is_correct else 0)

    mistakes = profile.common_mistakes
    if not attempt.is_correct:
        mistakes = add_mistakes(mistakes, detect_mistakes(attempt), limit=mistake_limit)

    average_time = (profile.average_time * (total - 1) + attempt.time_spent) / total
    success_rate = correct / total * 100

    new_profile = StudentProfile(
        level=compute_level(total, success_rate),
        total_attempts=total,
        correct_answers=correct,
        average_time=average_time,
        common_mistakes=mistakes,
        preferred_difficulty=compute_preferred_difficulty(attempts[-recent_window:]),
        last_session=attempt.timestamp,
    )
    return TutorState(profile=new_profile, attempts=attempts)


# =============================================================================
# Tracker
# =============================================================================


class StudentProfileTracker:
    """
    Load, update and persist one learner's state.

    record_attempt() holds a lock across the read-modify-write so two
    concurrent submissions cannot interleave. The in-memory state only
    advances once the store accepted the new document.
    """

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] = datetime.now,
        history_limit: int = HISTORY_LIMIT,
        mistake_limit: int = MISTAKE_LIMIT,
        recent_window: int = RECENT_WINDOW,
    ):
        self._store = store
        self._clock = clock
        self.history_limit = history_limit
        self.mistake_limit = mistake_limit
        self.recent_window = recent_window
        self._lock = threading.Lock()
        self._state = self._load()

    @property
    def state(self) -> TutorState:
        return self._state

    @property
    def profile(self) -> StudentProfile:
        return self._state.profile

    @property
    def current_level(self) -> StudentLevel:
        return self._state.profile.level

    def success_rate(self) -> float:
        return self._state.profile.success_rate

    def recent_attempts(self, count: int = RECENT_WINDOW) -> list[StudentAttempt]:
        if count <= 0:
            return []
        return list(self._state.attempts[-count:])

    def record_attempt(self, attempt: StudentAttempt) -> StudentProfile:
        """
        Record an attempt and persist the full document.

        Returns:
            The updated profile
        """
        with self._lock:
            new_state = apply_attempt(
                self._state,
                attempt,
                history_limit=self.history_limit,
                mistake_limit=self.mistake_limit,
                recent_window=self.recent_window,
            )
            self._save(new_state)
            self._state = new_state

        profile = new_state.profile
        logger.debug(
            f"Recorded attempt ({'correct' if attempt.is_correct else 'incorrect'}): "
            f"{profile.correct_answers}/{profile.total_attempts}, level={profile.level.value}"
        )
        return profile

    def reset(self) -> None:
        """Discard all history and persist a fresh beginner profile."""
        with self._lock:
            new_state = self._default_state()
            self._save(new_state)
            self._state = new_state
        logger.info("Student progress reset")

    def export_data(self) -> str:
        """Full {profile, attempts} document as pretty-printed JSON."""
        return json.dumps(self._state.model_dump(mode="json"), indent=2, ensure_ascii=False)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _default_state(self) -> TutorState:
        return TutorState(profile=StudentProfile(last_session=self._clock()))

    def _load(self) -> TutorState:
        try:
            document = self._store.load()
        except CorruptDocumentError as e:
            logger.warning(f"Stored tutor state is corrupt, starting fresh: {e}")
            return self._default_state()

        if document is None:
            logger.info("No stored tutor state, starting with a beginner profile")
            return self._default_state()

        try:
            state = TutorState.model_validate(document)
        except (ValueError, TypeError) as e:  # pydantic ValidationError is a ValueError
            logger.warning(f"Stored tutor state failed validation, starting fresh: {e}")
            return self._default_state()

        if len(state.attempts) > self.history_limit:
            state = TutorState(profile=state.profile, attempts=state.attempts[-self.history_limit:])

        logger.info(
            f"Loaded tutor state: {state.profile.total_attempts} attempts, level={state.profile.level.value}"
        )
        return state

    def _save(self, state: TutorState) -> None:
        self._store.save(state.model_dump(mode="json"))
