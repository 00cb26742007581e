"""
Tutor Controller.

Facade wiring the tutor components for external callers (CLI, UI):
- recommended_equation(): pick the next equation from the success rate
- process_answer(): record an attempt in the student profile
- submit_answer(): validate -> record -> decide, in one call
- progress(): immutable profile snapshot
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from loguru import logger

from src.tutor import pedagogy
from src.tutor.curriculum import CurriculumClassifier
from src.tutor.models import (
    Difficulty,
    Equation,
    PedagogicalAction,
    StudentAttempt,
    StudentLevel,
    StudentProfile,
)
from src.tutor.persistence import build_store
from src.tutor.solver import identify_common_error
from src.tutor.student_model import StudentProfileTracker
from src.tutor.validator import AnswerValidator, ValidationResult

EASIER_BELOW = 30.0
HARDER_ABOVE = 80.0


@dataclass(frozen=True)
class TutorResponse:
    """Everything the presentation layer needs after an answer."""

    validation: ValidationResult
    profile: StudentProfile
    feedback: str
    action: PedagogicalAction
    show_hint: bool
    show_solution: bool

    @property
    def is_correct(self) -> bool:
        return self.validation.is_correct


class TutorController:
    """Orchestrates tracker, classifier and validator; policy comes from pedagogy."""

    def __init__(
        self,
        tracker: StudentProfileTracker,
        classifier: CurriculumClassifier | None = None,
        validator: AnswerValidator | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.tracker = tracker
        self.classifier = classifier or CurriculumClassifier()
        self.validator = validator or AnswerValidator()
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Any) -> TutorController:
        """Build a controller with the store and tuning from configuration."""
        tracker = StudentProfileTracker(
            build_store(settings),
            history_limit=settings.history_limit,
            mistake_limit=settings.mistake_limit,
            recent_window=settings.recent_window,
        )
        classifier = CurriculumClassifier(
            rng=random.Random(settings.random_seed),
            max_attempts=settings.generation_max_attempts,
        )
        return cls(tracker, classifier, AnswerValidator(tolerance=settings.answer_tolerance))

    # -------------------------------------------------------------------------
    # Equations
    # -------------------------------------------------------------------------

    def recommended_equation(self, success_rate: float) -> Equation:
        """
        Generate the next equation for a success rate (0-100).

        Below 30% yields an easy equation, above 80% a hard one,
        medium otherwise.
        """
        if success_rate < EASIER_BELOW:
            difficulty = Difficulty.EASY
        elif success_rate > HARDER_ABOVE:
            difficulty = Difficulty.HARD
        else:
            difficulty = Difficulty.MEDIUM
        return self.classifier.generate(difficulty)

    def should_show_hint(self, equation: Equation, attempts: int) -> bool:
        """Hints come earlier for hard equations and beginners."""
        difficulty = self.classifier.classify(equation)
        if difficulty == Difficulty.HARD or self.tracker.current_level == StudentLevel.BEGINNER:
            return attempts >= 1
        return attempts >= 2

    def next_hint_level(self, current_hint: int, equation: Equation) -> int:
        return min(current_hint + 1, self.classifier.max_hints_for(equation) - 1)

    # -------------------------------------------------------------------------
    # Answers
    # -------------------------------------------------------------------------

    def process_answer(
        self,
        equation: Equation,
        user_answer: str,
        is_correct: bool,
        time_spent: float,
    ) -> StudentProfile:
        """Record an attempt stamped with the current time."""
        attempt = StudentAttempt(
            equation=equation,
            user_answer=user_answer,
            is_correct=is_correct,
            time_spent=time_spent,
            timestamp=self._clock(),
        )
        return self.tracker.record_attempt(attempt)

    def submit_answer(
        self,
        equation: Equation,
        user_answer: str,
        time_spent: float,
        attempts: int = 1,
    ) -> TutorResponse:
        """
        Run one full interaction.

        Args:
            equation: Equation being solved
            user_answer: Raw answer text
            time_spent: Seconds spent on this answer
            attempts: Attempts on this equation, including this one

        Returns:
            TutorResponse with validation, updated profile, feedback and next action
        """
        validation = self.validator.validate(equation, user_answer)
        profile = self.process_answer(equation, user_answer, validation.is_correct, time_spent)

        last_error = None
        if not validation.is_correct:
            last_error = identify_common_error(equation, user_answer) or validation.message

        response = TutorResponse(
            validation=validation,
            profile=profile,
            feedback=pedagogy.personalized_feedback(validation.is_correct, profile, attempts),
            action=pedagogy.decide_next_action(profile, attempts, last_error),
            show_hint=not validation.is_correct and pedagogy.should_show_hint(profile, attempts),
            show_solution=pedagogy.should_show_solution(profile, attempts),
        )
        logger.debug(
            f"Answer {user_answer!r} for {equation}: {validation.feedback_code.value}, "
            f"next action {response.action.type.value}"
        )
        return response

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def progress(self) -> StudentProfile:
        """Snapshot of the current profile (a copy; the model is frozen)."""
        return self.tracker.profile.model_copy(deep=True)

    def reset_progress(self) -> None:
        self.tracker.reset()
