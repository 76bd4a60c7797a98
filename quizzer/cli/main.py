"""
Typer CLI for the AI Quizzer service.

Commands:
    quizzer db init         - Initialize database tables
    quizzer serve           - Run the API with uvicorn
    quizzer token USERNAME  - Print a bearer token for a user
    quizzer preview         - Generate questions without storing them
    quizzer leaderboard     - Show the leaderboard for a grade and subject

Usage:
    quizzer --help
    quizzer db init
    quizzer token alice
    quizzer preview --grade 5 --subject Math --difficulty hard --count 3
"""

from __future__ import annotations

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from quizzer import __version__
from quizzer.core.difficulty import Difficulty
from quizzer.core.errors import QuizzerError
from quizzer.db.database import init_db, session_scope
from quizzer.logging_config import configure_logging
from quizzer.services.container import ServiceContainer, build_container

app = typer.Typer(help="AI Quizzer CLI: adaptive quizzes over a REST API", no_args_is_help=True)
console = Console()


@app.callback()
def main_callback() -> None:
    """Configure logging from settings before any command runs."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)


def _container() -> ServiceContainer:
    return build_container(get_settings())


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")
    container = _container()
    try:
        init_db(container.engine)
    finally:
        container.close()
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# SERVICE COMMANDS
# ========================================


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from API_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the REST API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "quizzer.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("token")
def token(username: str = typer.Argument(..., help="Username carried in the token")) -> None:
    """Print a bearer token, as POST /login would return."""
    settings = get_settings()
    container = _container()
    try:
        issued = container.token_service.issue(username)
    except QuizzerError as e:
        rprint(f"[red]✗[/red] {e.message}")
        raise typer.Exit(code=1)
    finally:
        container.close()
    console.print(issued, soft_wrap=True)
    rprint(f"[dim]expires in {settings.jwt_expires_minutes} minutes[/dim]")


@app.command("preview")
def preview(
    grade: str = typer.Option(..., "--grade", "-g", help="Grade level, e.g. 5"),
    subject: str = typer.Option(..., "--subject", "-s", help="Subject, e.g. Math"),
    difficulty: Difficulty = typer.Option(Difficulty.MEDIUM, "--difficulty", "-d", case_sensitive=False),
    count: int = typer.Option(5, "--count", "-n", min=1, max=20, help="Number of questions"),
) -> None:
    """Generate questions and show them without storing a quiz."""
    container = _container()
    try:
        questions = container.question_generator.generate(grade, subject, difficulty, count)
    finally:
        container.close()

    table = Table(title=f"Grade {grade} {subject} ({difficulty.value})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Question")
    table.add_column("Options")
    table.add_column("Answer", justify="center")

    for q in questions:
        options = "\n".join(f"{i}. {opt}" for i, opt in enumerate(q.options))
        table.add_row(str(q.id), q.question, options, str(q.correct_answer))

    console.print(table)


@app.command("leaderboard")
def leaderboard(
    grade: str = typer.Option(..., "--grade", "-g"),
    subject: str = typer.Option(..., "--subject", "-s"),
    limit: int = typer.Option(10, "--limit", "-l", min=1, max=100),
) -> None:
    """Show the top submissions by score for a grade and subject."""
    container = _container()
    try:
        with session_scope(container.session_factory) as session:
            board = container.quiz_service(session).leaderboard(grade, subject, limit)
    finally:
        container.close()

    if not board.leaderboard:
        rprint(f"[yellow]No submissions yet for grade {grade} {subject}[/yellow]")
        return

    table = Table(title=f"Leaderboard: grade {grade} {subject}")
    table.add_column("Rank", justify="right")
    table.add_column("User", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Completed")

    for entry in board.leaderboard:
        table.add_row(
            str(entry.rank),
            entry.username,
            str(entry.score),
            entry.completed_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command("version")
def version() -> None:
    """Show version information."""
    rprint(f"[bold]ai-quizzer[/bold] v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
