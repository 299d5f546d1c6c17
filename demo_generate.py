"""
demo_generate.py – Interactive terminal demo for the training plan pipeline

Run:
    python demo_generate.py

Requires:
    .env file with GEMINI_API_KEY set, or FORCE_MOCK_MODE=true for the
    rule-based generator.  See .env.example for format.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

# ── make src/ importable without installing the package ──────────────────────
sys.path.insert(0, str(Path(__file__).parent / "src"))

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from train_plan.config import get_settings
from train_plan.generation import (
    GenerationResult,
    PlanGenerationController,
    build_controller,
    default_export_path,
)
from train_plan.guardrails import GuardrailLevel
from train_plan.models import (
    QUICK_TEMPLATES,
    SUBJECTS,
    FreeformPlanRequest,
    PlanRequest,
    StructuredPlanRequest,
    get_quick_template,
)

console = Console()

LEVEL_STYLE = {
    GuardrailLevel.BLOCK: "bold red",
    GuardrailLevel.WARN:  "bold yellow",
    GuardrailLevel.INFO:  "cyan",
}


# ─── Intake ──────────────────────────────────────────────────────────────────

def ask_request() -> PlanRequest:
    """Guided interview: free text, a quick template, or the custom form."""
    mode = Prompt.ask(
        "[cyan]1.[/cyan] How would you like to describe the training?",
        choices=["describe", "template", "custom"],
        default="describe",
    )

    if mode == "describe":
        console.print("[cyan]2.[/cyan] Describe your training needs "
                      "[dim](e.g. project-based learning for high school science teachers)[/dim]:")
        return FreeformPlanRequest(prompt=Prompt.ask("   >"))

    if mode == "template":
        for key, tpl in QUICK_TEMPLATES.items():
            console.print(f"   [bold]{key}[/bold] — {tpl['label']}: [dim]{tpl['description']}[/dim]")
        template_id = Prompt.ask("[cyan]2.[/cyan] Template", choices=list(QUICK_TEMPLATES))
        return get_quick_template(template_id)

    title = Prompt.ask("[cyan]2.[/cyan] Training title")
    subject = Prompt.ask(
        "[cyan]3.[/cyan] Subject area",
        choices=[s["value"] for s in SUBJECTS] + ["all"],
        default="all",
    )
    level = Prompt.ask("[cyan]4.[/cyan] Teaching level [dim](e.g. Elementary, Middle School)[/dim]",
                       default="")
    duration = IntPrompt.ask("[cyan]5.[/cyan] Duration in minutes", default=60)
    console.print("[cyan]6.[/cyan] What should teachers learn from this training?")
    objectives = Prompt.ask("   >")
    notes = Prompt.ask("[cyan]7.[/cyan] Additional notes [dim](optional)[/dim]", default="")
    return StructuredPlanRequest(
        title=title,
        subject=subject,
        teaching_level=level,
        duration_minutes=duration,
        objectives=objectives,
        additional_notes=notes,
    )


# ─── Display helpers ─────────────────────────────────────────────────────────

def show_result(result: GenerationResult) -> None:
    if not result.ok:
        console.print(Panel(result.message, title="[bold red]Generation failed[/bold red]",
                            border_style="red"))
        if result.error is not None and str(result.error) != result.message:
            console.print(f"[dim]{result.error}[/dim]")
        return

    console.print()
    console.rule("[bold magenta]Your Training Plan[/bold magenta]")
    console.print(Markdown(result.plan or ""))
    console.rule()

    if result.advisories:
        notes = Table(box=box.SIMPLE, show_header=False, padding=(0, 1))
        notes.add_column("Code", no_wrap=True)
        notes.add_column("Message", style="white")
        for v in result.advisories:
            style = LEVEL_STYLE.get(v.level, "white")
            notes.add_row(f"[{style}]{v.code}[/{style}]", v.message)
        console.print(Panel(notes, title="[bold]Guardrail notes[/bold]", border_style="yellow"))


def offer_export(controller: PlanGenerationController) -> None:
    if not controller.current_plan:
        return
    if Confirm.ask("Download the plan as PDF?", default=True):
        outcome = controller.export(default_export_path())
        style = "green" if outcome.ok else "red"
        console.print(f"[{style}]{outcome.message}[/{style}]"
                      + (f" [dim]{outcome.path}[/dim]" if outcome.path else ""))


# ─── Main ────────────────────────────────────────────────────────────────────

def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.app.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    console.print()
    console.print(Panel(
        "[bold]Teacher Training Plan Generator[/bold]\n"
        f"[dim]{'Gemini (live)' if settings.live_mode else 'Mock mode'}  •  "
        "describe → generate → export[/dim]",
        style="on dark_violet",
        expand=False,
    ))

    controller = build_controller(settings)
    if controller.current_plan:
        console.print("[dim]A previous plan was restored; it is replaced by the next one.[/dim]")

    try:
        request = ask_request()
        with console.status("[bold blue]Generating your training plan…"):
            result = asyncio.run(controller.submit(request))
        show_result(result)
        offer_export(controller)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(0)

    except Exception:
        console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
