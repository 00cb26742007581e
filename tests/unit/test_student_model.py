"""
Unit tests for the student model.

Tests the pure attempt transition and the persistent tracker:
- Counters, running average time, level thresholds
- Mistake detection and bounded mistake list
- History limit, persistence and recovery from bad documents

Run: pytest tests/unit/test_student_model.py -v
"""

import json
from datetime import timedelta

import pytest

from src.tutor.models import Difficulty, StudentLevel, StudentProfile, TutorState
from src.tutor.persistence import Base, InMemoryDocumentStore, JsonFileDocumentStore, SqlDocumentStore
from src.tutor.solver import MISTAKE_MISSING_ROOT, MISTAKE_PLUS_MINUS
from src.tutor.student_model import (
    StudentProfileTracker,
    add_mistakes,
    apply_attempt,
    compute_level,
    compute_preferred_difficulty,
    detect_mistakes,
)


class FailingStore(InMemoryDocumentStore):
    def save(self, document):
        raise OSError("disk full")


class TestApplyAttempt:
    """Pure state transition."""

    def test_three_correct_attempts(self, make_attempt):
        state = TutorState()
        for seconds in (10, 20, 30):
            state = apply_attempt(state, make_attempt(time_spent=seconds))

        profile = state.profile
        assert profile.total_attempts == 3
        assert profile.correct_answers == 3
        assert profile.average_time == pytest.approx(20)
        assert profile.level == StudentLevel.BEGINNER
        assert profile.preferred_difficulty == Difficulty.HARD
        assert len(state.attempts) == 3

    def test_input_state_unchanged(self, make_attempt):
        state = TutorState()
        new_state = apply_attempt(state, make_attempt())

        assert state.profile.total_attempts == 0
        assert state.attempts == ()
        assert new_state is not state

    def test_last_session_is_attempt_timestamp(self, make_attempt, fixed_now):
        when = fixed_now + timedelta(days=2)
        state = apply_attempt(TutorState(), make_attempt(timestamp=when))
        assert state.profile.last_session == when

    def test_history_limit_keeps_newest(self, make_attempt):
        state = TutorState()
        for i in range(5):
            state = apply_attempt(state, make_attempt(time_spent=i), history_limit=3)

        assert state.profile.total_attempts == 5
        assert [a.time_spent for a in state.attempts] == [2, 3, 4]

    def test_correct_attempt_records_no_mistakes(self, make_attempt):
        state = apply_attempt(TutorState(), make_attempt(user_answer="1 ± 2", is_correct=True))
        assert state.profile.common_mistakes == ()

    def test_incorrect_single_root_recorded(self, make_attempt):
        state = apply_attempt(TutorState(), make_attempt(user_answer="1", is_correct=False))
        assert state.profile.common_mistakes == (MISTAKE_MISSING_ROOT,)

    def test_full_mistake_list_evicts_oldest(self, make_attempt):
        seeded = ("m1", "m2", "m3", "m4", "m5")
        state = TutorState(profile=StudentProfile(total_attempts=5, common_mistakes=seeded))

        state = apply_attempt(state, make_attempt(user_answer="1", is_correct=False))

        assert state.profile.common_mistakes == ("m2", "m3", "m4", "m5", MISTAKE_MISSING_ROOT)

    def test_level_reaches_intermediate(self, make_attempt):
        state = TutorState()
        for _ in range(10):
            state = apply_attempt(state, make_attempt())
        assert state.profile.level == StudentLevel.INTERMEDIATE

    def test_level_reaches_advanced(self, make_attempt):
        state = TutorState()
        for i in range(20):
            state = apply_attempt(state, make_attempt(is_correct=i % 5 != 0))  # 16/20 = 80%
        assert state.profile.level == StudentLevel.ADVANCED


class TestRules:

    @pytest.mark.parametrize(
        "total, rate, expected",
        [
            (0, 0, StudentLevel.BEGINNER),
            (9, 100, StudentLevel.BEGINNER),
            (10, 60, StudentLevel.INTERMEDIATE),
            (10, 59.9, StudentLevel.BEGINNER),
            (20, 79.9, StudentLevel.INTERMEDIATE),
            (20, 80, StudentLevel.ADVANCED),
        ],
    )
    def test_compute_level(self, total, rate, expected):
        assert compute_level(total, rate) == expected

    def test_preferred_difficulty(self, make_attempt):
        assert compute_preferred_difficulty([]) == Difficulty.EASY
        half = [make_attempt(is_correct=True), make_attempt(is_correct=False)]
        assert compute_preferred_difficulty(half) == Difficulty.MEDIUM
        assert compute_preferred_difficulty([make_attempt(is_correct=False)]) == Difficulty.EASY

    def test_add_mistakes_fifo(self):
        assert add_mistakes(("a", "b"), ["c"], limit=2) == ("b", "c")

    def test_add_mistakes_ignores_known(self):
        assert add_mistakes(("a", "b"), ["a", "b"], limit=2) == ("a", "b")

    def test_detect_plus_minus_and_missing_root(self, make_attempt):
        mistakes = detect_mistakes(make_attempt(user_answer="1 ± 2", is_correct=False))
        assert mistakes == [MISTAKE_PLUS_MINUS, MISTAKE_MISSING_ROOT]

    def test_detect_plus_minus_only_with_separator(self, make_attempt):
        mistakes = detect_mistakes(make_attempt(user_answer="1 ± 2, 3", is_correct=False))
        assert mistakes == [MISTAKE_PLUS_MINUS]

    def test_single_number_for_double_root_is_not_missing_root(self, make_attempt):
        attempt = make_attempt(1, 2, 1, user_answer="1", is_correct=False)
        assert detect_mistakes(attempt) == []

    def test_zero_counts_as_a_number(self, make_attempt):
        attempt = make_attempt(1, -3, 2, user_answer="0", is_correct=False)
        assert detect_mistakes(attempt) == [MISTAKE_MISSING_ROOT]

    def test_spaced_sign_counts_as_a_number(self, make_attempt):
        attempt = make_attempt(1, -3, 2, user_answer="- 1", is_correct=False)
        assert detect_mistakes(attempt) == [MISTAKE_MISSING_ROOT]


class TestTracker:
    """Load, record, persist."""

    def test_fresh_profile(self, tracker):
        assert tracker.profile.total_attempts == 0
        assert tracker.current_level == StudentLevel.BEGINNER
        assert tracker.success_rate() == 0
        assert tracker.recent_attempts() == []

    def test_record_attempt_persists(self, tracker, store, make_attempt):
        profile = tracker.record_attempt(make_attempt())

        assert profile.total_attempts == 1
        assert store.save_count == 1
        assert store.load()["profile"]["total_attempts"] == 1

    def test_state_survives_reload(self, store, clock, make_attempt):
        first = StudentProfileTracker(store, clock=clock)
        first.record_attempt(make_attempt(time_spent=12))
        first.record_attempt(make_attempt(user_answer="1", is_correct=False))

        second = StudentProfileTracker(store, clock=clock)
        assert second.profile == first.profile
        assert len(second.recent_attempts()) == 2
        assert second.recent_attempts(1)[0].user_answer == "1"

    def test_save_failure_keeps_previous_state(self, clock, make_attempt):
        tracker = StudentProfileTracker(FailingStore(), clock=clock)

        with pytest.raises(OSError):
            tracker.record_attempt(make_attempt())
        assert tracker.profile.total_attempts == 0

    def test_invalid_document_starts_fresh(self, clock, fixed_now):
        store = InMemoryDocumentStore({"profile": {"total_attempts": 1, "correct_answers": 5}})
        tracker = StudentProfileTracker(store, clock=clock)

        assert tracker.profile.total_attempts == 0
        assert tracker.profile.last_session == fixed_now

    def test_corrupt_file_starts_fresh(self, tmp_path, clock):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        tracker = StudentProfileTracker(JsonFileDocumentStore(path), clock=clock)
        assert tracker.profile.total_attempts == 0

    def test_unreadable_file_starts_fresh(self, tmp_path, clock):
        path = tmp_path / "state.json"
        path.mkdir()

        tracker = StudentProfileTracker(JsonFileDocumentStore(path), clock=clock)
        assert tracker.profile.total_attempts == 0

    def test_unreadable_database_starts_fresh(self, tmp_path, clock):
        store = SqlDocumentStore(f"sqlite:///{tmp_path / 'tutor.db'}")
        Base.metadata.drop_all(bind=store.engine)

        tracker = StudentProfileTracker(store, clock=clock)
        assert tracker.profile.total_attempts == 0

    def test_loaded_history_trimmed(self, make_attempt, clock):
        state = TutorState(
            profile=StudentProfile(total_attempts=4, correct_answers=4),
            attempts=tuple(make_attempt(time_spent=i) for i in range(4)),
        )
        store = InMemoryDocumentStore(state.model_dump(mode="json"))

        tracker = StudentProfileTracker(store, clock=clock, history_limit=2)
        assert [a.time_spent for a in tracker.recent_attempts(10)] == [2, 3]
        assert tracker.profile.total_attempts == 4

    def test_reset(self, tracker, store, make_attempt):
        tracker.record_attempt(make_attempt())
        tracker.reset()

        assert tracker.profile.total_attempts == 0
        assert store.load()["attempts"] == []

    def test_export_data(self, tracker, make_attempt):
        tracker.record_attempt(make_attempt(user_answer="2, 1"))
        data = json.loads(tracker.export_data())

        assert data["profile"]["correct_answers"] == 1
        assert data["attempts"][0]["user_answer"] == "2, 1"
        assert data["attempts"][0]["equation"] == {"a": 1.0, "b": -3.0, "c": 2.0}
