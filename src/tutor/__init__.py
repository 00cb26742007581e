"""
Quadratic Tutor: adaptive practice engine for quadratic equations.

Components:
- solver: discriminant, roots and worked solutions
- CurriculumClassifier: rule-based difficulty labels and equation generation
- AnswerValidator: free-text answer checking with feedback codes
- StudentProfileTracker: persistent learner statistics
- pedagogy: teaching strategy, next action and difficulty decisions
- TutorController: orchestration facade
"""

from src.tutor.controller import TutorController, TutorResponse
from src.tutor.curriculum import CurriculumClassifier, CurriculumProgress, CurriculumRule
from src.tutor.exceptions import CorruptDocumentError, InvalidEquationError, TutorError
from src.tutor.models import (
    ActionType,
    Difficulty,
    Equation,
    PedagogicalAction,
    Solution,
    SolutionStep,
    StudentAttempt,
    StudentLevel,
    StudentProfile,
    TeachingStrategy,
    TutorState,
)
from src.tutor.persistence import (
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    SqlDocumentStore,
    build_store,
)
from src.tutor.solver import explain, solve
from src.tutor.student_model import StudentProfileTracker, apply_attempt
from src.tutor.validator import AnswerValidator, FeedbackCode, SuggestedAction, ValidationResult

__all__ = [
    # Facade
    "TutorController",
    "TutorResponse",
    # Components
    "AnswerValidator",
    "CurriculumClassifier",
    "StudentProfileTracker",
    "apply_attempt",
    "explain",
    "solve",
    # Persistence
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "SqlDocumentStore",
    "build_store",
    # Data models
    "CurriculumProgress",
    "CurriculumRule",
    "Equation",
    "PedagogicalAction",
    "Solution",
    "SolutionStep",
    "StudentAttempt",
    "StudentProfile",
    "TeachingStrategy",
    "TutorState",
    "ValidationResult",
    # Enums
    "ActionType",
    "Difficulty",
    "FeedbackCode",
    "StudentLevel",
    "SuggestedAction",
    # Errors
    "CorruptDocumentError",
    "InvalidEquationError",
    "TutorError",
]
