"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from portfolio_ai.config import ENV_KEYS, CredentialSet, ProviderName, load_config
from portfolio_ai.errors import PortfolioAIError
from portfolio_ai.models.generation import ContentGenerationRequest
from portfolio_ai.models.profile import StructuredResumeProfile
from portfolio_ai.pipeline.content_generator import ContentGenerator
from portfolio_ai.pipeline.orchestrator import AIOrchestrator
from portfolio_ai.usage.cost_calculator import calculate_cost, summarize_usage

app = typer.Typer(
    name="portfolio-ai",
    help="Resume parsing, profile enhancement and portfolio copy generation",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _generator(config_path: Path | None) -> ContentGenerator:
    config = load_config(config_path)
    return ContentGenerator(CredentialSet.from_env(), config)


def _run(coro, description: str):
    """Run a coroutine behind a spinner, turning core errors into exit code 1."""
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            return asyncio.run(coro)
    except (PortfolioAIError, ValidationError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


def _emit(data, output: Path | None) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output is None:
        console.print_json(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Saved: {output}[/green]")


def _read_json(path: Path):
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]{path} is not valid JSON: {exc}[/red]")
        raise typer.Exit(1) from exc


@app.command()
def providers(
    config_path: Path = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Show which model providers are configured."""
    config = load_config(config_path)
    credentials = CredentialSet.from_env()
    orchestrator = AIOrchestrator.from_credentials(credentials, config)

    table = Table(title="Model providers")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Status")
    for name in ProviderName:
        adapter = orchestrator.providers.get(name)
        if adapter is None:
            env = " / ".join(ENV_KEYS[name])
            table.add_row(name.value, config.llm.model_for(name), f"[yellow]missing {env}[/yellow]")
        else:
            table.add_row(name.value, adapter.model, "[green]configured[/green]")
    console.print(table)
    if credentials.is_empty:
        console.print("[red]No API keys configured. Set OPENAI_API_KEY, ANTHROPIC_API_KEY or GOOGLE_AI_API_KEY.[/red]")
        raise typer.Exit(1)


@app.command()
def parse(
    resume: Path = typer.Argument(help="Plain-text resume file"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the profile JSON here"),
    config_path: Path = typer.Option(None, "--config", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Extract a structured profile from resume text."""
    _setup_logging(verbose)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)

    generator = _generator(config_path)
    text = resume.read_text(encoding="utf-8")
    profile = _run(generator.parse_resume(text), "Parsing resume...")
    _emit(profile.to_dict(), output)


@app.command()
def enhance(
    profile_path: Path = typer.Argument(help="Profile JSON produced by `parse`"),
    section: list[str] = typer.Option(
        None, "--section", "-s", help="Section to enhance (summary, experience, projects)"
    ),
    output: Path = typer.Option(None, "--output", "-o", help="Write the enhanced profile JSON here"),
    config_path: Path = typer.Option(None, "--config", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Enhance a structured profile with AI-rewritten sections."""
    _setup_logging(verbose)
    data = _read_json(profile_path)
    try:
        profile = StructuredResumeProfile.model_validate(data)
    except ValidationError as exc:
        console.print(f"[red]{profile_path} is not a valid profile: {exc}[/red]")
        raise typer.Exit(1) from exc

    generator = _generator(config_path)
    enhanced = _run(generator.enhance_profile(profile, section or None), "Enhancing profile...")
    _emit(enhanced.model_dump(mode="json", by_alias=True), output)

    scores = enhanced.confidence
    console.print(
        Panel(
            f"Summary: {scores.summary:.2f} | Experience: {scores.experience:.2f} | "
            f"Projects: {scores.projects:.2f} | [bold]Overall: {scores.overall:.2f}[/bold]",
            title=f"Confidence ({enhanced.metadata.get('model')})",
        )
    )


@app.command()
def generate(
    content_type: str = typer.Argument(help="summary, experience, project, skills, rewrite or caption"),
    input_path: Path = typer.Option(..., "--input", "-i", help="JSON file with the task input"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the generated JSON here"),
    config_path: Path = typer.Option(None, "--config", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Generate portfolio copy for one content type."""
    _setup_logging(verbose)
    data = _read_json(input_path)

    generator = _generator(config_path)
    request = ContentGenerationRequest.model_construct(content_type=content_type, input=data)
    result = _run(generator.generate(request), f"Generating {content_type}...")
    _emit(result.data, output)

    usage = summarize_usage([result])
    console.print(
        f"[dim]model: {result.model} | tokens: {usage['total_tokens']} | "
        f"est. cost: ${calculate_cost([result]):.4f}[/dim]"
    )


if __name__ == "__main__":
    app()
