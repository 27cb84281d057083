"""Developer CLI for HybridOne Coach.

Runs the coach locally through the same ModeCoordinator the API uses:
interactive chat with automatic switch to the program builder, one-shot
plan generation, and the FastAPI server.
"""

import asyncio
import os
from datetime import UTC, datetime
from pathlib import Path

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from hybrid_coach.coach.export.plan_export import MarkdownPlanRenderer
from hybrid_coach.coach.mode_coordinator import BuilderStage, Mode, ModeCoordinator
from hybrid_coach.coach.schemas.conversation import Role
from hybrid_coach.coach.schemas.plan_document import PlanDocument
from hybrid_coach.coach.schemas.plan_parameters import DEFAULT_PLAN_PARAMETERS, FitnessLevel, PlanParameters
from hybrid_coach.core.logger import setup_logger
from hybrid_coach.services.llm.generation_client import PydanticAIGenerationClient

console = Console()

app = typer.Typer(
    name="hybrid-coach",
    help="HybridOne Coach CLI - local chat and program builder",
    add_completion=False,
)

DEFAULT_HOST = os.getenv("SERVER_HOST", "127.0.0.1")

CHAT_COMMANDS = {
    "/builder": "switch to the program builder",
    "/chat": "switch back to chat",
    "/generate": "generate a plan from the current builder form",
    "/new": "start a new plan",
    "/export": "write the current plan to Markdown files",
    "/exit": "leave the session",
}


def _setup_logging(debug: bool = False) -> None:
    """Log to a per-session file under ./logs; the terminal only shows warnings unless debugging."""
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    setup_logger(level="DEBUG" if debug else "WARNING", log_file=f"logs/cli_{timestamp}.log")


def render_plan_table(plan: PlanDocument) -> Table:
    """Build a rich table with one row per session, in plan order."""
    table = Table(title=f"{plan.title} ({plan.duration_weeks} weeks)", show_lines=True)
    table.add_column("Day", style="bold cyan", no_wrap=True)
    table.add_column("Focus", style="magenta")
    table.add_column("Warm-up")
    table.add_column("Main Work")
    table.add_column("Accessory")
    table.add_column("Notes", style="dim")
    for session in plan.sessions:
        table.add_row(
            session.day,
            session.focus,
            "\n".join(session.warmup),
            "\n".join(session.main_work),
            "\n".join(session.accessory),
            session.notes,
        )
    return table


def write_plan_exports(plan: PlanDocument, output_dir: Path) -> list[Path]:
    """Write schedule and analysis documents for a plan.

    Returns:
        Paths written, schedule first
    """
    renderer = MarkdownPlanRenderer()
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for artifact in (renderer.render_schedule(plan), renderer.render_analysis(plan)):
        path = output_dir / artifact.filename
        path.write_text(artifact.content, encoding="utf-8")
        written.append(path)
    logger.info("Plan exported", files=[str(path) for path in written])
    return written


def _print_builder_state(coordinator: ModeCoordinator) -> None:
    if coordinator.notice:
        console.print(f"[red]{coordinator.notice}[/red]")
        coordinator.dismiss_notice()
    if coordinator.stage == BuilderStage.RESULT and coordinator.plan is not None:
        console.print(render_plan_table(coordinator.plan))
        console.print(Panel(coordinator.plan.analysis, title="Analysis", border_style="green"))
    else:
        form = coordinator.form
        console.print(
            Panel(
                Text(
                    f"Goal: {form.goal}\n"
                    f"Fitness level: {form.fitness_level.value}\n"
                    f"Days per week: {form.days_per_week}\n"
                    f"Equipment: {form.equipment}\n"
                    f"Injuries: {form.injuries or 'None'}"
                ),
                title="Program Builder",
                subtitle="/generate to build this plan",
                border_style="cyan",
            )
        )


async def _run_chat_async(coordinator: ModeCoordinator, output_dir: Path) -> None:
    console.print(
        Panel(
            Text("HybridOne Coach - Interactive Mode", style="bold cyan"),
            subtitle=" | ".join(CHAT_COMMANDS),
            border_style="cyan",
        )
    )
    console.print(f"[bold cyan]Coach:[/bold cyan] {coordinator.log[0].text}\n")

    while True:
        try:
            user_input = console.input("[bold cyan]You:[/bold cyan] ").strip()
        except (KeyboardInterrupt, EOFError):
            console.print("\n[yellow]Exiting...[/yellow]")
            break

        if not user_input:
            continue
        command = user_input.lower()
        if command in {"/exit", "exit", "quit"}:
            console.print("[yellow]Exiting...[/yellow]")
            break
        if command == "/chat":
            coordinator.navigate(Mode.CHAT)
            continue
        if command == "/builder":
            coordinator.navigate(Mode.BUILDER)
            _print_builder_state(coordinator)
            continue
        if command == "/generate":
            with console.status("Building your program..."):
                await coordinator.submit_form()
            _print_builder_state(coordinator)
            continue
        if command == "/new":
            coordinator.start_new_plan()
            _print_builder_state(coordinator)
            continue
        if command == "/export":
            if coordinator.plan is None:
                console.print("[yellow]No plan to export yet.[/yellow]")
            else:
                for path in write_plan_exports(coordinator.plan, output_dir):
                    console.print(f"[green]Wrote {path}[/green]")
            continue

        first_new_turn = len(coordinator.log)
        with console.status("Analyzing..."):
            outcome = await coordinator.send_message(user_input)
        for turn in coordinator.log.turns[first_new_turn:]:
            if turn.role == Role.MODEL:
                console.print(f"\n[bold cyan]Coach:[/bold cyan] {turn.text}")
        console.print()

        if outcome.plan_request is not None:
            pending = coordinator.pending_transition
            if pending is not None:
                with console.status("Building your program..."):
                    await pending
            _print_builder_state(coordinator)

    await coordinator.aclose()


@app.command()
def chat(
    output_dir: Path = typer.Option(Path("plans"), "--output-dir", "-o", help="Directory for /export"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Chat with the coach. Plan requests open the program builder automatically."""
    _setup_logging(debug=debug)
    coordinator = ModeCoordinator(PydanticAIGenerationClient())
    asyncio.run(_run_chat_async(coordinator, output_dir))


@app.command()
def plan(
    goal: str = typer.Option(DEFAULT_PLAN_PARAMETERS.goal, "--goal", help="Training goal"),
    fitness_level: FitnessLevel = typer.Option(DEFAULT_PLAN_PARAMETERS.fitness_level, "--level", help="Fitness level"),
    days_per_week: int = typer.Option(DEFAULT_PLAN_PARAMETERS.days_per_week, "--days", min=3, max=6, help="Training days per week"),
    equipment: str = typer.Option(DEFAULT_PLAN_PARAMETERS.equipment, "--equipment", help="Available equipment"),
    injuries: str = typer.Option("", "--injuries", help="Injuries or limitations"),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Write schedule and analysis here"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Generate a plan directly from builder parameters."""
    _setup_logging(debug=debug)
    params = PlanParameters(
        goal=goal,
        fitness_level=fitness_level,
        days_per_week=days_per_week,
        equipment=equipment,
        injuries=injuries,
    )
    coordinator = ModeCoordinator(PydanticAIGenerationClient())
    with console.status("Building your program..."):
        result = asyncio.run(coordinator.submit_form(params))

    if result is None:
        console.print(f"[red]Error:[/red] {coordinator.notice}", style="bold red")
        raise typer.Exit(1)

    console.print(render_plan_table(result))
    if output_dir is not None:
        for path in write_plan_exports(result, output_dir):
            console.print(f"[green]Wrote {path}[/green]")


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("hybrid_coach.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
