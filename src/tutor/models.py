"""
Tutor Domain Models.

Shared value types for the quadratic tutor:
- Equation / Solution / SolutionStep: computed on demand, never persisted
- Difficulty / StudentLevel: ordered labels
- StudentAttempt / StudentProfile / TutorState: the persisted learner record
- PedagogicalAction / TeachingStrategy: policy engine outputs

Everything here is immutable. State changes produce new values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.tutor.exceptions import InvalidEquationError


# =============================================================================
# Enums
# =============================================================================


class Difficulty(str, Enum):
    """Equation difficulty, ordered by intended challenge."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank >= other.rank

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            Difficulty.EASY: "green",
            Difficulty.MEDIUM: "yellow",
            Difficulty.HARD: "red",
        }[self]


_DIFFICULTY_RANK = {Difficulty.EASY: 0, Difficulty.MEDIUM: 1, Difficulty.HARD: 2}


class StudentLevel(str, Enum):
    """Learner level derived from absolute attempt and success thresholds."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def display_name(self) -> str:
        return self.value.title()


class ActionType(str, Enum):
    """Kinds of pedagogical action the policy engine can emit."""

    HINT = "hint"
    EXPLANATION = "explanation"
    EXAMPLE = "example"
    PRACTICE = "practice"
    REVIEW = "review"


# =============================================================================
# Equations
# =============================================================================


class Coefficients(Protocol):
    """Shape of the result produced by an expression-extraction collaborator."""

    a: float
    b: float
    c: float


def format_number(value: float) -> str:
    """Render integral floats without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


@dataclass(frozen=True)
class Equation:
    """A quadratic equation ax² + bx + c = 0 with a != 0."""

    a: float
    b: float
    c: float

    def __post_init__(self) -> None:
        for name in ("a", "b", "c"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidEquationError(f"Coefficient {name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidEquationError(f"Coefficient {name} must be finite, got {value!r}")
        if self.a == 0:
            raise InvalidEquationError("Coefficient a must be non-zero for a quadratic equation")
        if not math.isfinite(self.discriminant):
            raise InvalidEquationError("Coefficients are too large: the discriminant overflows")

    @classmethod
    def from_coefficients(cls, coeffs: Coefficients | None) -> Equation:
        """
        Build an equation from an extraction result.

        Args:
            coeffs: Object with a, b, c attributes, or None when extraction failed

        Returns:
            Equation

        Raises:
            InvalidEquationError: If extraction failed or a == 0
        """
        if coeffs is None:
            raise InvalidEquationError("Cannot form an equation from the given expression")
        return cls(a=coeffs.a, b=coeffs.b, c=coeffs.c)

    @property
    def discriminant(self) -> float:
        return self.b * self.b - 4 * self.a * self.c

    def format(self) -> str:
        """Render as 'ax² + bx + c = 0'."""
        text = f"{format_number(self.a)}x²"
        text += f" + {format_number(self.b)}x" if self.b >= 0 else f" - {format_number(abs(self.b))}x"
        text += f" + {format_number(self.c)}" if self.c >= 0 else f" - {format_number(abs(self.c))}"
        return text + " = 0"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class Solution:
    """Roots of an equation. x1 is always the + branch of the formula."""

    x1: float | None
    x2: float | None
    delta: float
    has_real_solutions: bool

    @property
    def is_double_root(self) -> bool:
        return self.has_real_solutions and self.x1 == self.x2

    @property
    def roots(self) -> list[float]:
        """Distinct real roots, ascending."""
        if not self.has_real_solutions:
            return []
        if self.x1 == self.x2:
            return [self.x1]
        return sorted([self.x1, self.x2])


@dataclass(frozen=True)
class SolutionStep:
    """One line of a worked solution."""

    step: int
    description: str
    formula: str | None = None
    calculation: str | None = None
    result: str | None = None


# =============================================================================
# Learner record
# =============================================================================


class StudentAttempt(BaseModel):
    """A single answer submission. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    equation: Equation
    user_answer: str
    is_correct: bool
    time_spent: float = Field(ge=0, description="Seconds spent on the answer")
    timestamp: datetime = Field(default_factory=datetime.now)


class StudentProfile(BaseModel):
    """Statistical summary of a learner's history."""

    model_config = ConfigDict(frozen=True)

    level: StudentLevel = StudentLevel.BEGINNER
    total_attempts: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    average_time: float = Field(default=0.0, ge=0)
    common_mistakes: tuple[str, ...] = ()
    preferred_difficulty: Difficulty = Difficulty.EASY
    last_session: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def _check_counters(self) -> StudentProfile:
        if self.correct_answers > self.total_attempts:
            raise ValueError("correct_answers cannot exceed total_attempts")
        return self

    @property
    def success_rate(self) -> float:
        """Percentage of correct answers (0-100); 0 before any attempt."""
        if self.total_attempts == 0:
            return 0.0
        return self.correct_answers / self.total_attempts * 100


class TutorState(BaseModel):
    """The persisted document: profile plus bounded attempt history."""

    model_config = ConfigDict(frozen=True)

    profile: StudentProfile = Field(default_factory=StudentProfile)
    attempts: tuple[StudentAttempt, ...] = ()


# =============================================================================
# Pedagogy
# =============================================================================


@dataclass(frozen=True)
class PedagogicalAction:
    """What the tutor should do next. Lower priority is more urgent."""

    type: ActionType
    content: str
    priority: int
    reason: str


@dataclass(frozen=True)
class TeachingStrategy:
    """Entry of the fixed teaching strategy catalog."""

    name: str
    description: str
    applicable_for: tuple[str, ...]
    techniques: tuple[str, ...]
