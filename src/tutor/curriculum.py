"""
Curriculum Classifier.

Labels equations with a difficulty using an ordered rule list (first
match wins, medium when nothing matches) and generates equations for a
target difficulty by rejection sampling.

Rule order matters: a perfect square such as x² + 2x + 1 also has small
integer coefficients, so the perfect-square rule must be checked first.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from loguru import logger

from src.tutor.models import Difficulty, Equation, StudentAttempt, StudentLevel
from src.tutor.solver import MISTAKE_MISSING_ROOT, MISTAKE_PLUS_MINUS

DEFAULT_DIFFICULTY = Difficulty.MEDIUM
DEFAULT_MAX_ATTEMPTS = 50

# Inclusive coefficient ranges per difficulty: (a, b, c)
COEFFICIENT_RANGES: dict[Difficulty, tuple[tuple[int, int], tuple[int, int], tuple[int, int]]] = {
    Difficulty.EASY: ((1, 3), (-3, 3), (-3, 3)),
    Difficulty.MEDIUM: ((1, 5), (-5, 5), (-5, 5)),
    Difficulty.HARD: ((2, 9), (-10, 10), (-10, 10)),
}

FALLBACK_EQUATIONS: dict[Difficulty, Equation] = {
    Difficulty.EASY: Equation(1, 0, -4),  # x² - 4 = 0
    Difficulty.MEDIUM: Equation(2, 3, -5),  # 2x² + 3x - 5 = 0
    Difficulty.HARD: Equation(3, 7, 2),  # 3x² + 7x + 2 = 0
}

MAX_HINTS: dict[Difficulty, int] = {
    Difficulty.EASY: 3,
    Difficulty.MEDIUM: 4,
    Difficulty.HARD: 5,
}


@dataclass(frozen=True)
class CurriculumRule:
    """A named predicate that assigns a difficulty."""

    name: str
    predicate: Callable[[Equation], bool]
    difficulty: Difficulty
    description: str

    def matches(self, equation: Equation) -> bool:
        return self.predicate(equation)


@dataclass(frozen=True)
class CurriculumProgress:
    """Correct answers per difficulty."""

    easy_completed: int
    medium_completed: int
    hard_completed: int
    total_completed: int


# =============================================================================
# Rule predicates
# =============================================================================


def _coefficients(eq: Equation) -> tuple[float, float, float]:
    return eq.a, eq.b, eq.c


def _is_integral(value: float) -> bool:
    return float(value).is_integer()


def is_perfect_square(eq: Equation) -> bool:
    return eq.discriminant == 0


def has_no_linear_term(eq: Equation) -> bool:
    return eq.b == 0


def has_no_constant_term(eq: Equation) -> bool:
    return eq.c == 0


def has_small_integer_coefficients(eq: Equation) -> bool:
    coeffs = _coefficients(eq)
    return all(abs(v) <= 5 for v in coeffs) and all(_is_integral(v) for v in coeffs)


def has_negative_discriminant(eq: Equation) -> bool:
    return eq.discriminant < 0


def has_large_coefficients(eq: Equation) -> bool:
    return any(abs(v) > 10 for v in _coefficients(eq))


def has_decimal_coefficients(eq: Equation) -> bool:
    return not all(_is_integral(v) for v in _coefficients(eq))


def has_irrational_roots(eq: Equation) -> bool:
    delta = eq.discriminant
    if delta <= 0:
        return False
    return not _is_integral(math.sqrt(delta))


RULES: tuple[CurriculumRule, ...] = (
    CurriculumRule("perfect_square", is_perfect_square, Difficulty.EASY,
                   "Perfect square trinomial (Δ = 0)"),
    CurriculumRule("no_linear_term", has_no_linear_term, Difficulty.EASY,
                   "No linear term (b = 0)"),
    CurriculumRule("no_constant_term", has_no_constant_term, Difficulty.EASY,
                   "No constant term (c = 0)"),
    CurriculumRule("integer_coefficients_small", has_small_integer_coefficients, Difficulty.MEDIUM,
                   "Small integer coefficients"),
    CurriculumRule("negative_discriminant", has_negative_discriminant, Difficulty.MEDIUM,
                   "Negative discriminant (no real solutions)"),
    CurriculumRule("large_coefficients", has_large_coefficients, Difficulty.HARD,
                   "Large coefficients"),
    CurriculumRule("decimal_coefficients", has_decimal_coefficients, Difficulty.HARD,
                   "Decimal coefficients"),
    CurriculumRule("irrational_roots", has_irrational_roots, Difficulty.HARD,
                   "Irrational roots"),
)


# =============================================================================
# Classifier
# =============================================================================


class CurriculumClassifier:
    """
    Classify and generate equations by difficulty.

    The random source is injectable so generation is reproducible:

        classifier = CurriculumClassifier(rng=random.Random(42))
        classifier.generate(Difficulty.HARD)
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rules: Iterable[CurriculumRule] = RULES,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.rules: tuple[CurriculumRule, ...] = tuple(rules)

    def classify(self, equation: Equation) -> Difficulty:
        """Return the difficulty of the first matching rule (medium if none)."""
        rule = self.matching_rule(equation)
        if rule is None:
            return DEFAULT_DIFFICULTY
        return rule.difficulty

    def matching_rule(self, equation: Equation) -> CurriculumRule | None:
        for rule in self.rules:
            if rule.matches(equation):
                return rule
        return None

    def applicable_rules(self, equation: Equation) -> list[CurriculumRule]:
        """All rules whose predicate holds, in priority order."""
        return [rule for rule in self.rules if rule.matches(equation)]

    def generate(self, target: Difficulty) -> Equation:
        """
        Generate an equation classified as the target difficulty.

        Draws random coefficients from the difficulty's range up to
        max_attempts times, then falls back to a fixed equation.
        """
        target = Difficulty(target)
        for attempt in range(1, self.max_attempts + 1):
            equation = self._draw(target)
            if self.classify(equation) == target:
                logger.debug(f"Generated {target.value} equation {equation} after {attempt} draw(s)")
                return equation

        fallback = FALLBACK_EQUATIONS[target]
        logger.debug(
            f"No {target.value} equation after {self.max_attempts} draws, using fallback {fallback}"
        )
        return fallback

    def _draw(self, difficulty: Difficulty) -> Equation:
        (a_lo, a_hi), (b_lo, b_hi), (c_lo, c_hi) = COEFFICIENT_RANGES[difficulty]
        return Equation(
            a=self._rng.randint(a_lo, a_hi),
            b=self._rng.randint(b_lo, b_hi),
            c=self._rng.randint(c_lo, c_hi),
        )

    @staticmethod
    def max_hints(difficulty: Difficulty) -> int:
        return MAX_HINTS[Difficulty(difficulty)]

    def max_hints_for(self, equation: Equation) -> int:
        return self.max_hints(self.classify(equation))

    def curriculum_progress(self, attempts: Iterable[StudentAttempt]) -> CurriculumProgress:
        """Count correct attempts per difficulty of their equation."""
        counts = {difficulty: 0 for difficulty in Difficulty}
        for attempt in attempts:
            if attempt.is_correct:
                counts[self.classify(attempt.equation)] += 1
        return CurriculumProgress(
            easy_completed=counts[Difficulty.EASY],
            medium_completed=counts[Difficulty.MEDIUM],
            hard_completed=counts[Difficulty.HARD],
            total_completed=sum(counts.values()),
        )

    @staticmethod
    def recommended_topics(level: StudentLevel, recent_mistakes: Iterable[str]) -> list[str]:
        """Topics to revisit given the learner level and recorded mistakes."""
        mistakes = set(recent_mistakes)
        topics = []

        if level == StudentLevel.BEGINNER:
            topics.extend(["Identifying coefficients", "Computing the discriminant"])

        if MISTAKE_PLUS_MINUS in mistakes:
            topics.extend(["Bhaskara formula", "Interpreting roots"])

        if MISTAKE_MISSING_ROOT in mistakes:
            topics.extend(["Special cases of the discriminant", "Two distinct solutions"])

        return topics
