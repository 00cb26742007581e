"""
Answer Validator.

Compares a free-text student answer with the solver's roots and returns
correctness, a feedback code and the suggested next step. Never raises
on any input string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.tutor.models import Equation
from src.tutor.parsing import parse_answer
from src.tutor.solver import solve

DEFAULT_TOLERANCE = 0.01

# Accepted ways of saying "no real solution" (matched case-insensitively)
NO_SOLUTION_PHRASES = (
    "sem solução",
    "sem soluções",
    "não há soluções",
    "impossível",
    "no solution",
    "no real solution",
    "no real roots",
)


class FeedbackCode(str, Enum):
    CORRECT = "correct"
    CORRECT_NO_SOLUTION = "correct_no_solution"
    EXPECTED_NO_SOLUTION = "expected_no_solution"
    NO_VALID_NUMBERS = "no_valid_numbers"
    MISSING_ROOT = "missing_root"
    EXTRA_ROOT = "extra_root"
    CHECK_YOUR_WORK = "check_your_work"


class SuggestedAction(str, Enum):
    CONTINUE = "continue"
    RETRY = "retry"
    REVIEW_BHASKARA = "review_bhaskara"
    REVIEW_DISCRIMINANT = "review_discriminant"
    SHOW_HINT = "show_hint"


FEEDBACK_MESSAGES: dict[FeedbackCode, str] = {
    FeedbackCode.CORRECT: "Excellent! That's the right answer.",
    FeedbackCode.CORRECT_NO_SOLUTION: "Correct! The equation has no real solutions.",
    FeedbackCode.EXPECTED_NO_SOLUTION: (
        "Incorrect. When the discriminant is negative there are no real solutions."
    ),
    FeedbackCode.NO_VALID_NUMBERS: "Please enter a valid answer, e.g. '1, -2.5'.",
    FeedbackCode.MISSING_ROOT: "You found only one root. This equation has two solutions.",
    FeedbackCode.EXTRA_ROOT: "This equation has only one solution (a double root).",
    FeedbackCode.CHECK_YOUR_WORK: "Incorrect answer. Check your calculations.",
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking one answer."""

    is_correct: bool
    feedback_code: FeedbackCode
    suggested_action: SuggestedAction

    @property
    def message(self) -> str:
        return FEEDBACK_MESSAGES[self.feedback_code]


class AnswerValidator:
    """Check student answers against the true roots."""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance

    def validate(self, equation: Equation, raw_answer: str) -> ValidationResult:
        """
        Validate a raw answer.

        Args:
            equation: Equation being solved
            raw_answer: Answer as typed (e.g. "1, 2" or "no solution")

        Returns:
            ValidationResult with correctness, feedback code and suggested action
        """
        solution = solve(equation)

        if not solution.has_real_solutions:
            if self.states_no_solution(raw_answer):
                return ValidationResult(True, FeedbackCode.CORRECT_NO_SOLUTION, SuggestedAction.CONTINUE)
            return ValidationResult(
                False, FeedbackCode.EXPECTED_NO_SOLUTION, SuggestedAction.REVIEW_DISCRIMINANT
            )

        expected = solution.roots
        given = sorted(parse_answer(raw_answer))

        if not given:
            return ValidationResult(False, FeedbackCode.NO_VALID_NUMBERS, SuggestedAction.RETRY)

        if len(given) == len(expected) and all(
            abs(want - got) < self.tolerance for want, got in zip(expected, given)
        ):
            return ValidationResult(True, FeedbackCode.CORRECT, SuggestedAction.CONTINUE)

        if len(given) == 1 and len(expected) == 2:
            return ValidationResult(False, FeedbackCode.MISSING_ROOT, SuggestedAction.REVIEW_BHASKARA)

        if len(given) == 2 and len(expected) == 1:
            return ValidationResult(False, FeedbackCode.EXTRA_ROOT, SuggestedAction.REVIEW_DISCRIMINANT)

        return ValidationResult(False, FeedbackCode.CHECK_YOUR_WORK, SuggestedAction.SHOW_HINT)

    @staticmethod
    def states_no_solution(raw_answer: str) -> bool:
        text = raw_answer.lower()
        return any(phrase in text for phrase in NO_SOLUTION_PHRASES)
