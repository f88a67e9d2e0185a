"""PersonaBrief CLI using typer."""

from __future__ import annotations

import asyncio
import base64
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from personabrief.config import get_config
from personabrief.errors import PipelineError, classify_error, user_message
from personabrief.logging_setup import setup_logging
from personabrief.schemas import PipelineResult
from personabrief.services import PersonaPipeline

app = typer.Typer(
    name="personabrief",
    help="Designer personas and spoken briefings from a person's writing.",
    no_args_is_help=True,
)

console = Console()

DATA_URI_PREFIX = "data:audio/mpeg;base64,"


async def _run_pipeline(article_text: str, brief: str) -> PipelineResult:
    pipeline = PersonaPipeline.from_config(get_config())
    try:
        return await pipeline.generate_persona(article_text, brief)
    finally:
        await pipeline.text_provider.aclose()
        await pipeline.speech_provider.aclose()


def _write_audio(result: PipelineResult, path: Path) -> bool:
    """Decode the audio data URI to an MP3 file. Returns False if there is no audio."""
    if not result.audio_url.startswith(DATA_URI_PREFIX):
        return False
    path.write_bytes(base64.b64decode(result.audio_url[len(DATA_URI_PREFIX):]))
    return True


def _print_result(result: PipelineResult) -> None:
    persona = result.persona

    console.print(Panel(persona.summary, title=f"[bold]{persona.persona_name}[/bold]"))
    console.print(
        f"[dim]{persona.professional_context.seniority} {persona.professional_context.role}, "
        f"{persona.professional_context.industry}[/dim]"
    )
    console.print(
        f"Tone: {persona.communication_style.tone} ({persona.communication_style.verbosity} verbosity)"
    )

    table = Table(title="Design Guidance")
    table.add_column("Do", style="green")
    table.add_column("Avoid", style="red")
    rows = max(len(persona.design_guidance.do), len(persona.design_guidance.avoid))
    for i in range(rows):
        do = persona.design_guidance.do[i] if i < len(persona.design_guidance.do) else ""
        avoid = persona.design_guidance.avoid[i] if i < len(persona.design_guidance.avoid) else ""
        table.add_row(do, avoid)
    console.print(table)

    if persona.brief_conflicts:
        console.print("[bold yellow]Brief conflicts:[/bold yellow]")
        for conflict in persona.brief_conflicts:
            console.print(f"  - {conflict}")

    console.print("\n[bold]Audio script:[/bold]")
    console.print(f"  {result.audio_script}")
    console.print(f"\n[dim]Processed in {result.processing_time_ms:.0f}ms[/dim]")


@app.command()
def generate(
    article: Path = typer.Option(..., "--article", "-a", help="Path to a text file with the article or write-up"),
    brief: str = typer.Option(..., "--brief", "-b", help="Design brief the persona should be aligned with"),
    audio_out: Optional[Path] = typer.Option(None, "--audio-out", "-o", help="Write the spoken briefing to this MP3 file"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """Generate a persona and spoken briefing from an article."""
    config = get_config()
    setup_logging(config.log_level, use_json=config.log_json)

    if not article.exists():
        console.print(f"[red]File not found: {article}[/red]")
        raise typer.Exit(1)

    article_text = article.read_text(encoding="utf-8")

    try:
        with console.status("[bold green]Generating persona..."):
            result = asyncio.run(_run_pipeline(article_text, brief))
    except PipelineError as e:
        console.print(f"[red]Error: {user_message(classify_error(e))}[/red]")
        console.print(f"[dim]{e} (stage: {e.stage}, after {e.elapsed_ms:.0f}ms)[/dim]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(result.model_dump(by_alias=True, mode="json")))
    else:
        _print_result(result)

    if not result.has_audio:
        console.print("[yellow]Audio synthesis failed; only the text script is available.[/yellow]")
    elif audio_out is not None and _write_audio(result, audio_out):
        console.print(f"[green]Audio written to {audio_out}[/green]")


@app.command("api")
def run_api(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    port: int = typer.Option(3001, "--port", help="Port to bind to"),
) -> None:
    """Run the FastAPI server."""
    import uvicorn

    console.print(f"[green]Starting PersonaBrief API at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    uvicorn.run(
        "personabrief.api.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    app()
