"""
Equation Solver.

Expert knowledge for quadratic equations:
- solve(): discriminant and roots via the Bhaskara formula
- explain(): deterministic step-by-step worked solution
- identify_common_error(): recognise typical answer mistakes
- KNOWLEDGE_BASE: concepts, procedures and common errors per topic
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from src.tutor.models import Equation, Solution, SolutionStep, format_number
from src.tutor.parsing import parse_answer

# Mistake labels shared with the student model
MISTAKE_PLUS_MINUS = "incorrect use of ±"
MISTAKE_MISSING_ROOT = "missing a root"


@dataclass(frozen=True)
class ExpertKnowledge:
    """A concept the tutor can teach."""

    concept: str
    prerequisites: tuple[str, ...]
    procedures: tuple[str, ...]
    examples: tuple[Equation, ...]
    common_errors: tuple[str, ...]


KNOWLEDGE_BASE: tuple[ExpertKnowledge, ...] = (
    ExpertKnowledge(
        concept="Identifying Coefficients",
        prerequisites=("Basic algebra", "Polynomials"),
        procedures=(
            "Identify coefficient a (the x² term)",
            "Identify coefficient b (the x term)",
            "Identify coefficient c (the constant term)",
        ),
        examples=(Equation(1, 2, 1), Equation(2, -3, 1), Equation(1, 0, -4)),
        common_errors=(
            "Mixing up the order of the coefficients",
            "Missing negative signs on coefficients",
            "Ignoring implicit coefficients (like the 1 in x²)",
        ),
    ),
    ExpertKnowledge(
        concept="Computing the Discriminant",
        prerequisites=("Identifying Coefficients",),
        procedures=(
            "Apply Δ = b² - 4ac",
            "Compute b²",
            "Compute 4ac",
            "Subtract the two values",
        ),
        examples=(Equation(1, 2, 1), Equation(1, 3, 2), Equation(1, 1, 1)),
        common_errors=(
            "Forgetting to square b",
            "Sign error in 4ac",
            "Basic arithmetic slip",
        ),
    ),
    ExpertKnowledge(
        concept="Bhaskara Formula",
        prerequisites=("Computing the Discriminant",),
        procedures=(
            "Check that Δ ≥ 0",
            "Apply x = (-b ± √Δ) / (2a)",
            "Compute x₁ = (-b + √Δ) / (2a)",
            "Compute x₂ = (-b - √Δ) / (2a)",
        ),
        examples=(Equation(1, -3, 2), Equation(2, 4, 2), Equation(1, 0, -4)),
        common_errors=(
            "Using the formula when Δ < 0",
            "Sign error in -b",
            "Forgetting to divide by 2a",
        ),
    ),
)


def solve(equation: Equation) -> Solution:
    """
    Compute the discriminant and real roots of an equation.

    Args:
        equation: Quadratic equation (a != 0)

    Returns:
        Solution with x1 from the + branch and x2 from the - branch
    """
    a, b = equation.a, equation.b
    delta = equation.discriminant

    if delta < 0:
        return Solution(x1=None, x2=None, delta=delta, has_real_solutions=False)

    if delta == 0:
        x = -b / (2 * a)
        return Solution(x1=x, x2=x, delta=delta, has_real_solutions=True)

    root = math.sqrt(delta)
    x1 = (-b + root) / (2 * a)
    x2 = (-b - root) / (2 * a)
    return Solution(x1=x1, x2=x2, delta=delta, has_real_solutions=True)


def explain(equation: Equation) -> list[SolutionStep]:
    """
    Build the worked solution for an equation.

    Always starts with the coefficients and the discriminant, then adds
    one step when Δ < 0, two when Δ = 0 and four when Δ > 0.
    """
    a, b, c = (format_number(v) for v in (equation.a, equation.b, equation.c))
    delta = equation.discriminant
    two_a = format_number(2 * equation.a)
    minus_b = format_number(-equation.b)

    steps = [
        SolutionStep(
            step=1,
            description="Identify the coefficients of the equation",
            formula="ax² + bx + c = 0",
            calculation=f"a = {a}, b = {b}, c = {c}",
            result="Coefficients identified",
        ),
        SolutionStep(
            step=2,
            description="Compute the discriminant (Δ)",
            formula="Δ = b² - 4ac",
            calculation=(
                f"Δ = {b}² - 4({a})({c}) = "
                f"{format_number(equation.b * equation.b)} - {format_number(4 * equation.a * equation.c)}"
            ),
            result=f"Δ = {format_number(delta)}",
        ),
    ]

    if delta < 0:
        steps.append(SolutionStep(
            step=3,
            description="Analyse the discriminant",
            calculation=f"Since Δ = {format_number(delta)} < 0",
            result="The equation has no real solutions",
        ))
        return steps

    if delta == 0:
        x = -equation.b / (2 * equation.a)
        steps.append(SolutionStep(
            step=3,
            description="Analyse the discriminant",
            calculation="Since Δ = 0",
            result="The equation has one double root",
        ))
        steps.append(SolutionStep(
            step=4,
            description="Compute the solution",
            formula="x = -b / (2a)",
            calculation=f"x = -({b}) / (2 × {a}) = {minus_b} / {two_a}",
            result=f"x = {x:.2f}",
        ))
        return steps

    root = math.sqrt(delta)
    x1 = (-equation.b + root) / (2 * equation.a)
    x2 = (-equation.b - root) / (2 * equation.a)
    shown_delta = format_number(delta)

    steps.extend([
        SolutionStep(
            step=3,
            description="Analyse the discriminant",
            calculation=f"Since Δ = {shown_delta} > 0",
            result="The equation has two distinct real solutions",
        ),
        SolutionStep(
            step=4,
            description="Apply the Bhaskara formula",
            formula="x = (-b ± √Δ) / (2a)",
            calculation=f"x = ({minus_b} ± √{shown_delta}) / {two_a}",
            result="Computing both roots",
        ),
        SolutionStep(
            step=5,
            description="Compute x₁",
            calculation=f"x₁ = ({minus_b} + √{shown_delta}) / {two_a} = ({minus_b} + {root:.2f}) / {two_a}",
            result=f"x₁ = {x1:.2f}",
        ),
        SolutionStep(
            step=6,
            description="Compute x₂",
            calculation=f"x₂ = ({minus_b} - √{shown_delta}) / {two_a} = ({minus_b} - {root:.2f}) / {two_a}",
            result=f"x₂ = {x2:.2f}",
        ),
    ])
    return steps


def identify_common_error(equation: Equation, user_answer: str) -> str | None:
    """
    Recognise a typical mistake in a raw answer.

    Returns:
        Human-readable description of the mistake, or None
    """
    solution = solve(equation)

    if "±" in user_answer and solution.has_real_solutions:
        return "Incorrect use of ±. The two roots must be computed separately."

    numbers = parse_answer(user_answer)
    if len(numbers) == 1 and solution.has_real_solutions and solution.x1 != solution.x2:
        return "You found only one root, but this equation has two distinct solutions."

    return None


def get_knowledge(concept: str) -> ExpertKnowledge | None:
    """Look up a concept in the knowledge base."""
    for entry in KNOWLEDGE_BASE:
        if entry.concept == concept:
            return entry
    return None


def all_concepts() -> list[str]:
    return [entry.concept for entry in KNOWLEDGE_BASE]


def similar_example(equation: Equation, rng: random.Random | None = None) -> Equation:
    """Perturb each coefficient by -1, 0 or +1, keeping a >= 1."""
    rng = rng or random.Random()
    variations = (-1, 0, 1)
    return Equation(
        a=max(1, equation.a + rng.choice(variations)),
        b=equation.b + rng.choice(variations),
        c=equation.c + rng.choice(variations),
    )
