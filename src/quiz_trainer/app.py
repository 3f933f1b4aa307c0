"""Interactive CLI application."""
import logging
import os
import time

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table

from quiz_trainer.dashboard import (
    format_elapsed, format_study_time, get_question_counts, get_result_color,
    get_result_label, get_subject_progress,
)
from quiz_trainer.db import DEFAULT_DB_PATH, KeyValueStore, init_db
from quiz_trainer.models import OPTION_LETTERS, Subject
from quiz_trainer.progress import ProgressStore
from quiz_trainer.quiz import ANSWER_DELAY_SECONDS, QuizController, QuizState
from quiz_trainer.subjects import load_subjects
from quiz_trainer.variants import get_variant_set, variant_key

console = Console()

THEME_STYLES = {
    "dark": {"border": "blue", "accent": "cyan", "muted": "dim"},
    "light": {"border": "grey50", "accent": "dark_blue", "muted": "grey39"},
}

EXIT_WORDS = ("q", "menu")
SKIP_WORDS = ("s",)


class SessionExitRequested(Exception):
    """Raised when the user asks to leave a running quiz."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def styles(progress: ProgressStore) -> dict:
    return THEME_STYLES[progress.get_theme()]


def show_welcome(progress: ProgressStore):
    console.print(Panel(
        "[bold]Quiz Trainer[/bold]\n[dim]Exam preparation by variants[/dim]",
        title="Welcome", border_style=styles(progress)["border"],
    ))


def show_subjects(progress: ProgressStore, subjects: list[Subject]):
    table = Table(title="Subjects")
    table.add_column("#", justify="right")
    table.add_column("Subject", style=styles(progress)["accent"])
    table.add_column("Questions", justify="right")
    table.add_column("Variants", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Errors", justify="right")
    for i, subject in enumerate(subjects, 1):
        p = get_subject_progress(progress, subject)
        table.add_row(
            str(i),
            subject.name,
            str(p["total_questions"]),
            str(p["total_variants"]),
            f"{p['completed_count']}/{p['total_variants']} ({p['completion_percent']}%)",
            f"{p['average_percent']}%",
            f"[red]{p['wrong_count']}[/red]" if p["wrong_count"] else "0",
        )
    console.print(table)


def show_variants(progress: ProgressStore, subject: Subject):
    completed = progress.get_completed_variants(subject.id)
    counts = get_question_counts(subject)
    table = Table(title=subject.name)
    table.add_column("Variant", justify="right")
    table.add_column("Questions", justify="right")
    table.add_column("Best")
    for number in get_variant_set(subject).variant_numbers:
        record = completed.get(variant_key(number))
        best = f"[green]{record.percentage}%[/green]" if record else ""
        table.add_row(str(number), str(counts[number]), best)
    marathon = completed.get("marathon")
    table.add_row("marathon", str(counts["marathon"]),
                  f"[green]{marathon.percentage}%[/green]" if marathon else "")
    console.print(table)

    stats = progress.get_stats(subject.id)
    console.print(
        f"  Attempts: [bold]{stats.total_attempts}[/bold]  |  "
        f"Questions: [bold]{stats.total_questions}[/bold]  |  "
        f"Correct: [bold]{stats.total_correct}[/bold]  |  "
        f"Time: [bold]{format_study_time(stats.total_time_ms)}[/bold]  |  "
        f"Errors to review: [bold]{len(progress.get_wrong_answers(subject.id))}[/bold]"
    )


def parse_answer(raw: str, option_count: int) -> int | None:
    """Map '1'-'5' or an option letter to an option index."""
    key = raw.strip().lower()
    if key.isdigit():
        index = int(key) - 1
    elif key in OPTION_LETTERS:
        index = OPTION_LETTERS.index(key)
    else:
        return None
    return index if 0 <= index < option_count else None


def render_question(controller: QuizController):
    snap = controller.snapshot()
    question = snap.question
    style = styles(controller.progress)
    title = f"Question {snap.current_index + 1}/{snap.total_questions}"
    if snap.is_error_review:
        title += " [red](error review)[/red]"
    console.print(Panel(
        question.question, title=title,
        subtitle=f"{format_elapsed(snap.elapsed_ms)}  {snap.progress:.0%}",
        border_style=style["border"],
    ))
    for option in question.options:
        console.print(f"  [{style['accent']}]{option.letter})[/{style['accent']}] {option.text}")


def run_quiz_session(controller: QuizController, delay: float = ANSWER_DELAY_SECONDS):
    """Drive the active session until it completes. Raises SessionExitRequested on q/menu."""
    while controller.state is QuizState.IN_PROGRESS:
        snap = controller.snapshot()
        if snap.question is None:
            console.print("[yellow]No questions available![/yellow]")
            controller.exit_to_menu()
            return
        render_question(controller)
        raw = session_prompt("\nYour answer ([cyan]s[/cyan] to skip, [cyan]q[/cyan] to exit)")
        if raw.strip().lower() in SKIP_WORDS:
            controller.skip()
            console.print("[dim]Skipped, it will come back later.[/dim]\n")
            continue
        index = parse_answer(raw, len(snap.question.options))
        if index is None:
            console.print("[red]Pick one of the listed options.[/red]")
            continue
        correct = controller.answer_index(index)
        if correct:
            console.print("[green]Correct![/green]")
        else:
            right = snap.question.correct_option()
            if right is None:
                console.print("[red]Incorrect.[/red]")
            else:
                console.print(f"[red]Incorrect.[/red] Answer: [green]{right.letter}) {right.text}[/green]")
        token = controller.advance_token()
        if delay:
            time.sleep(delay)
        controller.next(token)
        console.print()


def show_result(controller: QuizController):
    result = controller.result
    color = get_result_color(result.percentage)
    console.print(Panel(
        f"[bold]{result.score}/{result.total}[/bold]  [{color}]{result.percentage}% "
        f"{get_result_label(result.percentage)}[/{color}]\nTime: {format_elapsed(result.elapsed_ms)}",
        title="Error review finished" if result.is_error_review else "Result",
        border_style=color,
    ))


def play(controller: QuizController, delay: float = ANSWER_DELAY_SECONDS):
    """Run sessions back to back while the user keeps choosing restart."""
    while True:
        try:
            run_quiz_session(controller, delay=delay)
        except SessionExitRequested:
            controller.exit_to_menu()
            console.print("[dim]Quiz abandoned, progress was not saved.[/dim]")
            return
        if controller.state is not QuizState.COMPLETED:
            return
        show_result(controller)
        choice = Prompt.ask("Again or back to menu?", choices=["restart", "menu"], default="menu")
        if choice != "restart" or not controller.restart():
            controller.exit_to_menu()
            return


def cmd_subject(controller: QuizController, subject: Subject, delay: float = ANSWER_DELAY_SECONDS):
    progress = controller.progress
    controller.select_subject(subject)
    numbers = [str(n) for n in get_variant_set(subject).variant_numbers]
    while True:
        show_variants(progress, subject)
        console.print("\n  Pick a variant number, [cyan]marathon[/cyan], [cyan]errors[/cyan], "
                      "[cyan]reset[/cyan] or [cyan]back[/cyan]")
        choice = Prompt.ask("[bold]>[/bold]", default="back").strip().lower()
        if choice == "back":
            return
        elif choice == "marathon":
            controller.start_quiz(subject, "marathon")
            play(controller, delay)
        elif choice == "errors":
            if controller.start_error_review(subject):
                play(controller, delay)
            else:
                console.print("[green]No missed questions to review.[/green]")
        elif choice == "reset":
            if Confirm.ask(f"Reset all progress for {subject.name}?", default=False):
                progress.reset_subject(subject.id)
                console.print("[yellow]Progress reset.[/yellow]")
        elif choice in numbers:
            controller.start_quiz(subject, int(choice))
            play(controller, delay)
        else:
            console.print("[red]Unknown choice. Try again.[/red]")


def main():
    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("QUIZ_TRAINER_DEBUG") else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    progress = ProgressStore(KeyValueStore(db_path))
    subjects = load_subjects()
    controller = QuizController(progress)

    show_welcome(progress)

    while True:
        show_subjects(progress, subjects)
        console.print("\n  Pick a subject number, [cyan]theme[/cyan] or [cyan]quit[/cyan]")
        choice = Prompt.ask("\n[bold]>[/bold]").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on your exam![/dim]")
                break
            elif choice == "theme":
                console.print(f"[dim]Theme: {progress.toggle_theme()}[/dim]")
            elif choice.isdigit() and 1 <= int(choice) <= len(subjects):
                cmd_subject(controller, subjects[int(choice) - 1])
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            controller.exit_to_menu()
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            controller.exit_to_menu()
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
