"""
Quadratic Tutor CLI.

A Rich terminal interface for practising quadratic equations with an
adaptive tutor.

Commands:
- tutor solve      - Roots and worked solution
- tutor classify   - Difficulty and matching curriculum rules
- tutor generate   - New equation for a difficulty
- tutor check      - Validate an answer and record it
- tutor practice   - Interactive practice loop
- tutor progress   - Learner profile and recommendations
- tutor export     - Dump the stored learner document
- tutor reset      - Clear learner history

Coefficients are passed as options so negative values parse cleanly:
    python -m src.tutor solve -a 1 -b -3 -c 2
"""
from __future__ import annotations

import random
import sys
import time
from typing import Optional

import typer
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import get_settings
from src.tutor import pedagogy
from src.tutor.controller import TutorController
from src.tutor.curriculum import CurriculumClassifier
from src.tutor.exceptions import InvalidEquationError
from src.tutor.models import Difficulty, Equation, SolutionStep, format_number
from src.tutor.solver import explain, solve

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="tutor",
    help="Quadratic Tutor: adaptive practice for quadratic equations",
    no_args_is_help=True,
)
console = Console()

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
}

QUIT_INPUTS = {"q", "quit", "exit"}


def configure_logging(level: str, log_file: str | None = None) -> None:
    """Replace loguru's default sink with the configured ones."""
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{message}</level>")
    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation="1 MB",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}",
        )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Adaptive tutor for ax² + bx + c = 0."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


def _controller() -> TutorController:
    return TutorController.from_settings(get_settings())


def _equation(a: float, b: float, c: float) -> Equation:
    """Build an equation or exit with an error message."""
    try:
        return Equation(a, b, c)
    except InvalidEquationError as e:
        console.print(f"[{STYLES['incorrect']}]{e}[/]")
        raise typer.Exit(code=1)


# =============================================================================
# Display Helpers
# =============================================================================


def display_steps(steps: list[SolutionStep]) -> None:
    table = Table(title="Worked solution", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Step")
    table.add_column("Formula", style="magenta")
    table.add_column("Calculation")
    table.add_column("Result", style="green")

    for step in steps:
        table.add_row(
            str(step.step),
            step.description,
            step.formula or "",
            step.calculation or "",
            step.result or "",
        )
    console.print(table)


def display_roots(equation: Equation) -> None:
    solution = solve(equation)
    if not solution.has_real_solutions:
        content = f"Δ = {format_number(solution.delta)}\nNo real solutions"
    elif solution.is_double_root:
        content = f"Δ = 0\nx = {solution.x1:.4g} (double root)"
    else:
        content = f"Δ = {format_number(solution.delta)}\nx₁ = {solution.x1:.4g}\nx₂ = {solution.x2:.4g}"

    console.print(Panel(content, title=equation.format(), border_style="cyan", padding=(1, 2)))


def display_profile(controller: TutorController) -> None:
    profile = controller.progress()

    table = Table(title="Learner profile", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Level", profile.level.display_name)
    table.add_row("Attempts", str(profile.total_attempts))
    table.add_row("Correct", str(profile.correct_answers))
    table.add_row("Success rate", f"{profile.success_rate:.0f}%")
    table.add_row("Average time", f"{profile.average_time:.1f}s")
    table.add_row("Preferred difficulty", profile.preferred_difficulty.value)
    table.add_row("Last session", profile.last_session.strftime("%Y-%m-%d %H:%M"))
    console.print(table)

    if profile.common_mistakes:
        console.print("[bold]Common mistakes:[/bold]")
        for mistake in profile.common_mistakes:
            console.print(f"  • {mistake}")


# =============================================================================
# Commands
# =============================================================================


@app.command("solve")
def solve_command(
    a: float = typer.Option(..., "-a", help="Coefficient of x²"),
    b: float = typer.Option(0.0, "-b", help="Coefficient of x"),
    c: float = typer.Option(0.0, "-c", help="Constant term"),
) -> None:
    """Show the roots and the worked solution."""
    equation = _equation(a, b, c)
    display_roots(equation)
    display_steps(explain(equation))


@app.command("classify")
def classify_command(
    a: float = typer.Option(..., "-a", help="Coefficient of x²"),
    b: float = typer.Option(0.0, "-b", help="Coefficient of x"),
    c: float = typer.Option(0.0, "-c", help="Constant term"),
) -> None:
    """Show the difficulty and every curriculum rule that matches."""
    equation = _equation(a, b, c)
    classifier = CurriculumClassifier()
    difficulty = classifier.classify(equation)
    winner = classifier.matching_rule(equation)

    console.print(
        f"{equation.format()}  →  [{difficulty.color}]{difficulty.value}[/{difficulty.color}]"
        f"  (max hints: {classifier.max_hints(difficulty)})"
    )

    table = Table(box=box.SIMPLE)
    table.add_column("Rule")
    table.add_column("Difficulty")
    table.add_column("Description", style="dim")
    for rule in classifier.applicable_rules(equation):
        marker = "→ " if rule is winner else "  "
        table.add_row(f"{marker}{rule.name}", rule.difficulty.value, rule.description)
    if table.row_count:
        console.print(table)
    else:
        console.print("[dim]No rule matched; default difficulty applies.[/dim]")


@app.command("generate")
def generate_command(
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM, "--difficulty", "-d", help="Target difficulty"),
    count: int = typer.Option(1, "--count", "-n", min=1, help="Number of equations"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible output"),
) -> None:
    """Generate equations for a difficulty."""
    settings = get_settings()
    rng = random.Random(seed if seed is not None else settings.random_seed)
    classifier = CurriculumClassifier(rng=rng, max_attempts=settings.generation_max_attempts)

    for _ in range(count):
        equation = classifier.generate(difficulty)
        label = classifier.classify(equation)
        console.print(f"{equation.format()}  [{label.color}]({label.value})[/{label.color}]")


@app.command("check")
def check_command(
    answer: str = typer.Argument(..., help="Your answer, e.g. '1, 2' or 'no solution'"),
    a: float = typer.Option(..., "-a", help="Coefficient of x²"),
    b: float = typer.Option(0.0, "-b", help="Coefficient of x"),
    c: float = typer.Option(0.0, "-c", help="Constant term"),
    time_spent: float = typer.Option(0.0, "--time", "-t", min=0, help="Seconds spent"),
    attempts: int = typer.Option(1, "--attempts", min=1, help="Attempts on this equation so far"),
) -> None:
    """Check an answer, record it and show what to do next."""
    equation = _equation(a, b, c)
    controller = _controller()
    response = controller.submit_answer(equation, answer, time_spent, attempts)

    style = STYLES["correct"] if response.is_correct else STYLES["incorrect"]
    console.print(Panel(
        f"{response.validation.message}\n\n{response.feedback}",
        title=equation.format(),
        border_style=style,
        padding=(1, 2),
    ))
    console.print(
        f"[{STYLES['info']}]Next:[/] {response.action.content} "
        f"[dim]({response.action.type.value}, priority {response.action.priority})[/dim]"
    )
    if response.show_solution:
        display_steps(explain(equation))


@app.command("practice")
def practice_command(
    rounds: int = typer.Option(3, "--rounds", "-r", min=1, help="Equations to practise"),
) -> None:
    """Practise interactively. Type 'q' to stop."""
    controller = _controller()

    for round_number in range(1, rounds + 1):
        profile = controller.progress()
        equation = controller.recommended_equation(profile.success_rate)
        difficulty = controller.classifier.classify(equation)

        console.print()
        console.print(Panel(
            equation.format(),
            title=f"Equation {round_number}/{rounds}  |  [{difficulty.color}]{difficulty.value}[/{difficulty.color}]",
            title_align="left",
            border_style="cyan",
            padding=(1, 2),
        ))

        attempts = 0
        started = time.monotonic()
        while True:
            answer = Prompt.ask("Your answer")
            if answer.strip().lower() in QUIT_INPUTS:
                console.print("[dim]Session ended.[/dim]")
                return

            attempts += 1
            elapsed = time.monotonic() - started
            response = controller.submit_answer(equation, answer, elapsed, attempts)
            style = STYLES["correct"] if response.is_correct else STYLES["incorrect"]
            console.print(f"[{style}]{response.feedback}[/]")

            if response.is_correct:
                break
            if response.show_solution:
                display_steps(explain(equation))
                break
            if response.show_hint:
                console.print(f"[{STYLES['warning']}]Hint:[/] {response.action.content}")
            started = time.monotonic()

    console.print()
    display_profile(controller)


@app.command("progress")
def progress_command() -> None:
    """Show the learner profile and recommendations."""
    controller = _controller()
    display_profile(controller)
    profile = controller.progress()

    strategy = pedagogy.select_strategy(profile)
    recommendation = pedagogy.adapt_difficulty(profile)
    path = pedagogy.learning_path(profile)
    activity = pedagogy.suggest_next_activity(profile)
    done = controller.classifier.curriculum_progress(controller.tracker.recent_attempts(controller.tracker.history_limit))
    topics = controller.classifier.recommended_topics(profile.level, profile.common_mistakes)

    lines = [
        f"[bold]Strategy:[/bold] {strategy.name} - {strategy.description}",
        f"[bold]Next difficulty:[/bold] {recommendation.difficulty.value} ({recommendation.reason})",
        f"[bold]Current concept:[/bold] {path.current_concept} → {', '.join(path.next_concepts)}",
        f"[bold]Suggested activity:[/bold] {activity.activity} (~{activity.estimated_minutes} min)",
        f"[bold]Recommended study time:[/bold] {pedagogy.study_time(profile)} min",
        f"[bold]Solved (recent history):[/bold] easy {done.easy_completed}, "
        f"medium {done.medium_completed}, hard {done.hard_completed}",
    ]
    if topics:
        lines.append(f"[bold]Topics to revisit:[/bold] {', '.join(topics)}")

    console.print(Panel("\n".join(lines), title="Recommendations", border_style="cyan"))


@app.command("export")
def export_command() -> None:
    """Print the stored learner document as JSON."""
    controller = _controller()
    console.print_json(controller.tracker.export_data())


@app.command("reset")
def reset_command(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Clear all learner history."""
    if not yes and not Confirm.ask("Delete all progress?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit()

    _controller().reset_progress()
    console.print(f"[{STYLES['correct']}]Progress reset.[/]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
