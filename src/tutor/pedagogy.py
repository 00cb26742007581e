"""
Pedagogical Policy Engine.

Pure decision logic over a StudentProfile snapshot plus live context
(attempts on the current equation, last detected error). No internal
state: every function returns the same answer for the same inputs.

Decision chains are evaluated top to bottom; the first matching branch
wins.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from src.tutor.models import (
    ActionType,
    Difficulty,
    PedagogicalAction,
    StudentLevel,
    StudentProfile,
    TeachingStrategy,
)

# =============================================================================
# Strategy catalog
# =============================================================================

SCAFFOLDING = TeachingStrategy(
    name="Scaffolding",
    description="Heavy initial support that tapers off as the learner progresses",
    applicable_for=("beginner", "struggling"),
    techniques=("step-by-step", "guided-practice", "hints"),
)
MASTERY_LEARNING = TeachingStrategy(
    name="Mastery Learning",
    description="Demonstrated competence before moving to harder material",
    applicable_for=("methodical", "perfectionist"),
    techniques=("repetition", "varied-practice", "assessment"),
)
DISCOVERY_LEARNING = TeachingStrategy(
    name="Discovery Learning",
    description="Minimal guidance so the learner works concepts out independently",
    applicable_for=("advanced", "independent"),
    techniques=("exploration", "minimal-guidance", "problem-solving"),
)
ADAPTIVE_FEEDBACK = TeachingStrategy(
    name="Adaptive Feedback",
    description="Feedback tuned to the learner's profile",
    applicable_for=("all",),
    techniques=("immediate-feedback", "delayed-feedback", "peer-feedback"),
)

STRATEGIES: tuple[TeachingStrategy, ...] = (
    SCAFFOLDING,
    MASTERY_LEARNING,
    DISCOVERY_LEARNING,
    ADAPTIVE_FEEDBACK,
)

# Attempts on the current equation before a hint / the full solution is shown
HINT_THRESHOLDS = {
    StudentLevel.BEGINNER: 1,
    StudentLevel.INTERMEDIATE: 2,
    StudentLevel.ADVANCED: 3,
}
SOLUTION_THRESHOLDS = {
    StudentLevel.BEGINNER: 3,
    StudentLevel.INTERMEDIATE: 4,
    StudentLevel.ADVANCED: 5,
}

# level -> (first attempt, later attempts)
CORRECT_FEEDBACK = {
    StudentLevel.BEGINNER: ("🎉 Excellent! You got it on the first try!", "✅ Well done! You solved it!"),
    StudentLevel.INTERMEDIATE: ("🌟 Great work!", "✅ Correct! You're making progress!"),
    StudentLevel.ADVANCED: ("🏆 Perfect! Complete mastery!", "👍 Correct! Keep it up!"),
}
INCORRECT_FIRST_FEEDBACK = {
    StudentLevel.BEGINNER: "🤔 Don't worry, let's try again calmly.",
    StudentLevel.INTERMEDIATE: "🎯 Almost there! Review your calculations.",
    StudentLevel.ADVANCED: "🎯 Almost there! Review your calculations.",
}
INCORRECT_SECOND_FEEDBACK = "How about looking at the hints? They can help!"
INCORRECT_LATER_FEEDBACK = "Let's review the concept step by step to clear up your doubts."


@dataclass(frozen=True)
class DifficultyRecommendation:
    difficulty: Difficulty
    reason: str


@dataclass(frozen=True)
class LearningPath:
    """Where the learner is in the topic sequence."""

    current_concept: str
    next_concepts: tuple[str, ...]
    prerequisites: tuple[str, ...]
    estimated_minutes: int
    difficulty: Difficulty


@dataclass(frozen=True)
class ActivitySuggestion:
    activity: str
    description: str
    estimated_minutes: int


def _success_rate(profile: StudentProfile) -> float:
    """Success rate with the denominator floored at 1."""
    return profile.correct_answers / max(1, profile.total_attempts) * 100


# =============================================================================
# Decisions
# =============================================================================


def select_strategy(profile: StudentProfile) -> TeachingStrategy:
    """
    Choose the teaching strategy for a learner.

    Order: Scaffolding (beginner or more than 3 mistakes), Mastery
    Learning (over 20 attempts averaging over 60s), Discovery Learning
    (advanced), Adaptive Feedback otherwise.
    """
    if profile.level == StudentLevel.BEGINNER or len(profile.common_mistakes) > 3:
        return SCAFFOLDING

    if profile.total_attempts > 20 and profile.average_time > 60:
        return MASTERY_LEARNING

    if profile.level == StudentLevel.ADVANCED:
        return DISCOVERY_LEARNING

    return ADAPTIVE_FEEDBACK


def decide_next_action(
    profile: StudentProfile,
    attempts: int,
    last_error: str | None = None,
) -> PedagogicalAction:
    """
    Decide the next pedagogical action.

    Args:
        profile: Learner profile snapshot
        attempts: Attempts made on the current equation
        last_error: Description of the last detected error, if any

    Returns:
        PedagogicalAction (priority 1 is most urgent)
    """
    if attempts >= 3:
        return PedagogicalAction(
            type=ActionType.EXPLANATION,
            content="Let's review the concept step by step.",
            priority=1,
            reason="Repeated incorrect attempts call for a conceptual review",
        )

    if _success_rate(profile) < 40:
        return PedagogicalAction(
            type=ActionType.REVIEW,
            content="How about reviewing the basics before continuing?",
            priority=1,
            reason="A low success rate points to knowledge gaps",
        )

    if last_error:
        return PedagogicalAction(
            type=ActionType.HINT,
            content=specific_hint(last_error),
            priority=2,
            reason="Specific error identified",
        )

    strategy = select_strategy(profile)

    if strategy is SCAFFOLDING:
        return PedagogicalAction(
            type=ActionType.HINT,
            content="Here's a hint to help you along.",
            priority=2,
            reason="Scaffolding strategy: gradual support",
        )

    if strategy is DISCOVERY_LEARNING:
        return PedagogicalAction(
            type=ActionType.PRACTICE,
            content="Try solving it without hints first.",
            priority=3,
            reason="Discovery learning strategy",
        )

    return PedagogicalAction(
        type=ActionType.HINT,
        content="Keep going, you're on the right track!",
        priority=3,
        reason="General encouragement",
    )


def specific_hint(error: str) -> str:
    """Hint text keyed to keywords in an error description."""
    text = error.lower()

    if "discriminant" in text or "delta" in text:
        return "Remember: Δ = b² - 4ac. Check that you squared b correctly."

    if "sign" in text or "±" in text:
        return "Watch the signs! The -b term already flips the sign of b."

    if "root" in text:
        return "When Δ > 0 there are two distinct roots. Use x = (-b ± √Δ) / (2a)."

    return "Go over your calculations step by step and find where the error happened."


def adapt_difficulty(profile: StudentProfile) -> DifficultyRecommendation:
    """Recommend the next difficulty. The 'hard' check precedes the 'easy' check."""
    rate = _success_rate(profile)

    if rate >= 80 and profile.average_time < 45 and profile.level != StudentLevel.BEGINNER:
        return DifficultyRecommendation(
            Difficulty.HARD, "High accuracy and speed show readiness for bigger challenges"
        )

    if rate < 40 or profile.average_time > 120:
        return DifficultyRecommendation(
            Difficulty.EASY, "Low accuracy or long solve times call for consolidation"
        )

    if 50 <= rate < 80:
        return DifficultyRecommendation(
            Difficulty.MEDIUM, "Balanced performance allows gradual progression"
        )

    return DifficultyRecommendation(Difficulty.MEDIUM, "Default setting to keep engagement")


def should_show_hint(profile: StudentProfile, attempts: int) -> bool:
    return attempts >= HINT_THRESHOLDS[profile.level]


def should_show_solution(profile: StudentProfile, attempts: int) -> bool:
    return attempts >= SOLUTION_THRESHOLDS[profile.level]


def personalized_feedback(is_correct: bool, profile: StudentProfile, attempts: int) -> str:
    """Deterministic feedback text for an answer."""
    if is_correct:
        first, later = CORRECT_FEEDBACK[profile.level]
        return first if attempts == 1 else later

    if attempts <= 1:
        return INCORRECT_FIRST_FEEDBACK[profile.level]
    if attempts == 2:
        return INCORRECT_SECOND_FEEDBACK
    return INCORRECT_LATER_FEEDBACK


# =============================================================================
# Planning
# =============================================================================


def learning_path(profile: StudentProfile) -> LearningPath:
    """Current concept and what comes next for the learner's level."""
    if profile.level == StudentLevel.BEGINNER:
        return LearningPath(
            current_concept="Identifying Coefficients",
            next_concepts=("Computing the Discriminant", "Interpreting the Discriminant"),
            prerequisites=("Basic algebra", "Operations with negative numbers"),
            estimated_minutes=30,
            difficulty=Difficulty.EASY,
        )

    if profile.level == StudentLevel.INTERMEDIATE:
        discriminant_trouble = any(
            "discriminant" in m.lower() or "delta" in m.lower() for m in profile.common_mistakes
        )
        if discriminant_trouble:
            return LearningPath(
                current_concept="Computing the Discriminant",
                next_concepts=("Bhaskara Formula", "Special Cases"),
                prerequisites=("Identifying Coefficients",),
                estimated_minutes=25,
                difficulty=Difficulty.MEDIUM,
            )
        return LearningPath(
            current_concept="Bhaskara Formula",
            next_concepts=("Special Cases", "Practical Applications"),
            prerequisites=("Computing the Discriminant",),
            estimated_minutes=20,
            difficulty=Difficulty.MEDIUM,
        )

    return LearningPath(
        current_concept="Special Cases and Applications",
        next_concepts=("Biquadratic Equations", "Systems with Quadratics"),
        prerequisites=("Bhaskara Formula", "Graphical Interpretation"),
        estimated_minutes=15,
        difficulty=Difficulty.HARD,
    )


def study_time(profile: StudentProfile) -> int:
    """Recommended study time in minutes."""
    if profile.level == StudentLevel.BEGINNER:
        minutes = 30.0
    elif profile.level == StudentLevel.ADVANCED:
        minutes = 15.0
    else:
        minutes = 20.0

    if profile.average_time > 60:
        minutes *= 1.5
    elif profile.average_time < 30:
        minutes *= 0.8

    if profile.total_attempts < 10:
        minutes *= 1.2
    elif profile.total_attempts > 50:
        minutes *= 0.9

    return math.floor(minutes + 0.5)


def suggest_next_activity(profile: StudentProfile) -> ActivitySuggestion:
    rate = _success_rate(profile)

    if rate < 50:
        return ActivitySuggestion(
            activity="Review the Basics",
            description="Revisit identifying coefficients and computing the discriminant.",
            estimated_minutes=15,
        )

    if rate < 75:
        return ActivitySuggestion(
            activity="Guided Practice",
            description="Solve a few equations with hints available.",
            estimated_minutes=20,
        )

    return ActivitySuggestion(
        activity="Advanced Challenge",
        description="Test yourself on harder equations.",
        estimated_minutes=25,
    )
