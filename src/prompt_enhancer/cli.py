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
from rich.table import Table

from prompt_enhancer.clients.llm_client import LLMClient
from prompt_enhancer.config import AppConfig, load_config
from prompt_enhancer.errors import InvalidRequestError
from prompt_enhancer.models.request import EnhancementRequest
from prompt_enhancer.models.result import EnhancementMethod, EnhancementResult
from prompt_enhancer.pipeline.fewshot_selector import FewShotSelector, detect_category, load_examples
from prompt_enhancer.pipeline.orchestrator import EnhancementOrchestrator

app = typer.Typer(
    name="prompt-enhancer",
    help="Rewrite rough prompts into clear, well-structured prompts for LLMs.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

METHOD_COLORS = {
    EnhancementMethod.DIRECT: "green",
    EnhancementMethod.SEQUENTIAL_THINKING: "cyan",
    EnhancementMethod.FALLBACK: "yellow",
}


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # SDK and HTTP internals are noisy at DEBUG.
    for name in ("anthropic", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(max(logging.getLevelName(level), logging.INFO))


def build_orchestrator(config: AppConfig) -> EnhancementOrchestrator:
    return EnhancementOrchestrator(LLMClient.from_config(config.llm), config)


def _print_result(result: EnhancementResult, verbose: bool) -> None:
    color = METHOD_COLORS[result.method]
    console.print(
        Panel(
            result.text,
            title=f"Enhanced prompt [{color}]({result.method.value})[/{color}]",
            expand=False,
        )
    )
    if result.method is EnhancementMethod.FALLBACK:
        reason = result.trace.fallback_reason or "unknown"
        console.print(f"[yellow]Provider unavailable, used local fallback: {reason}[/yellow]")
    if not verbose:
        return

    trace = result.trace
    table = Table(title="Trace", show_header=False)
    table.add_row("Attempts", str(trace.attempts))
    table.add_row("Validation failures", str(trace.validation_failures))
    if trace.validation_reasons:
        table.add_row("Validation reasons", ", ".join(trace.validation_reasons))
    table.add_row("Examples", "; ".join(trace.examples_used) or "-")
    table.add_row("Thought passes", str(trace.thought_passes))
    table.add_row("Confidence", f"{result.confidence:.2f}")
    table.add_row("Tokens", f"{trace.input_tokens} in / {trace.output_tokens} out")
    table.add_row("Est. cost", f"${trace.estimated_cost_usd:.5f}")
    table.add_row("Elapsed", f"{trace.elapsed_seconds:.1f}s")
    console.print(table)
    for thought in result.thoughts:
        label = "Synthesis" if thought.is_final else "Thought"
        console.print(f"[dim]{label} {thought.index}:[/dim] {thought.content}")


@app.command()
def enhance(
    prompt: str = typer.Argument(help="The raw prompt to enhance"),
    goal: str = typer.Option(None, "--goal", "-g", help="Desired outcome"),
    style: str = typer.Option(None, "--style", "-s", help="Writing style (concise, formal, ...)"),
    tone: str = typer.Option(None, "--tone", help="Tone (neutral, persuasive, ...)"),
    audience: str = typer.Option(None, "--audience", "-a", help="Target audience"),
    language: str = typer.Option(None, "--language", "-l", help="Output language, e.g. en, id"),
    level: int = typer.Option(None, "--level", min=1, max=5, help="Enhancement strength 1-5"),
    thinking: bool = typer.Option(
        None, "--thinking/--no-thinking", help="Force sequential thinking on or off"
    ),
    thoughts: int = typer.Option(None, "--thoughts", "-n", help="Number of thinking passes (1-10)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the diagnostic trace"),
) -> None:
    """Enhance a prompt and print the result."""
    try:
        config = load_config(config_path)
    except (ValueError, TypeError) as exc:
        err_console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(1)
    setup_logging("DEBUG" if verbose else config.logging.level)

    try:
        request = EnhancementRequest(
            prompt=prompt,
            goal=goal,
            style=style,
            tone=tone,
            audience=audience,
            language=language,
            level=level,
            enable_sequential_thinking=thinking,
            thought_count=thoughts,
        )
    except ValidationError as exc:
        err_console.print(f"[red]Invalid request: {exc.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    orchestrator = build_orchestrator(config)
    try:
        with console.status("Enhancing prompt..."):
            result = asyncio.run(orchestrator.enhance(request))
    except InvalidRequestError as exc:
        err_console.print(f"[red]Invalid request: {exc}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(result.model_dump_json())
    else:
        _print_result(result, verbose)


@app.command()
def examples(
    style: str = typer.Option(None, "--style", "-s", help="Style hint"),
    tone: str = typer.Option(None, "--tone", help="Tone hint"),
    goal: str = typer.Option(None, "--goal", "-g", help="Goal hint"),
    prompt: str = typer.Option(None, "--prompt", "-p", help="Prompt used to detect the category"),
    limit: int = typer.Option(None, "--limit", "-k", help="How many examples to show"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Show which few-shot examples would be selected for the given hints."""
    config = load_config(config_path)
    path = config.fewshot.resolved_examples_path
    selector = FewShotSelector(
        load_examples(path) if path is not None else load_examples(),
        limit=config.fewshot.limit,
    )
    category = detect_category(prompt) if prompt else None
    selected = selector.select(style=style, tone=tone, goal=goal, category=category, limit=limit)

    table = Table(title=f"Few-shot examples (category: {category or '-'})")
    table.add_column("#", justify="right")
    table.add_column("Category")
    table.add_column("Quality", justify="right")
    table.add_column("Input")
    for i, example in enumerate(selected, 1):
        table.add_row(str(i), example.category, f"{example.quality_score:.2f}", example.input)
    console.print(table)


@app.command("show-config")
def show_config(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
) -> None:
    """Print the effective configuration (credentials masked)."""
    config = load_config(config_path)
    data = {
        "llm": {
            "model": config.llm.model,
            "base_url": config.llm.base_url,
            "api_key": "***" if config.llm.api_key else None,
            "timeout": config.llm.timeout,
            "max_tokens": config.llm.max_tokens,
            "temperature": config.llm.temperature,
        },
        "retry": vars(config.retry),
        "thinking": {**vars(config.thinking), "complexity_keywords": list(config.thinking.complexity_keywords)},
        "validation": {
            **vars(config.validation),
            "placeholder_patterns": list(config.validation.placeholder_patterns),
        },
        "fewshot": vars(config.fewshot),
        "logging": vars(config.logging),
    }
    console.print_json(json.dumps(data))


if __name__ == "__main__":
    app()
