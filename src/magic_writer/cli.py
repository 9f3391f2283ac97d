"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from markupsafe import escape
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from magic_writer.clients.llm_client import LLMClient
from magic_writer.clients.text_service import TextService
from magic_writer.config import AppConfig, load_config
from magic_writer.editor.controller import ReconciliationController
from magic_writer.editor.document import Document
from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import PendingEdit

app = typer.Typer(
    name="magic-writer",
    help="AI writing assistant: drafts, rewrites, style suggestions and grammar checks",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _build(config: AppConfig, text: str = "") -> tuple[LLMClient, ReconciliationController]:
    llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
    service = TextService(
        llm,
        config.llm,
        suggest_min_chars=config.editor.suggest_min_chars,
        grammar_min_chars=config.editor.grammar_min_chars,
    )
    controller = ReconciliationController(service, Document(str(escape(text))), config.editor)
    return llm, controller


def _read_text(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _print_usage(llm: LLMClient) -> None:
    usage = llm.get_token_summary()
    console.print(
        f"[dim]Tokens: {usage['input']} in / {usage['output']} out "
        f"({len(usage['calls'])} calls)[/dim]"
    )


def _confirm_edit(edit: PendingEdit) -> bool:
    console.print(
        Panel(
            f"[red]{edit.match_text}[/red] -> [green]{edit.replacement_text}[/green]"
            + (f"\n[dim]{edit.annotation}[/dim]" if edit.annotation else ""),
            title=f"{edit.kind.value} edit",
        )
    )
    return typer.confirm("Accept?", default=True)


def _review(controller: ReconciliationController, edits: tuple[PendingEdit, ...]) -> int:
    """Ask about each edit in turn; return how many were accepted."""
    accepted = 0
    for edit in edits:
        if controller.store.get(edit.id, edit.kind) is None:
            continue
        if f'id="{edit.dom_id}"' not in controller.content:
            console.print(f"[yellow]Not found in text, skipped: {edit.match_text}[/yellow]")
            continue
        if controller.on_overlay_click(edit.kind.css_class, edit.dom_id, _confirm_edit):
            accepted += 1
    return accepted


def _finish(controller: ReconciliationController, file: Path, write: bool) -> None:
    text = controller.document.text
    if write:
        file.write_text(text, encoding="utf-8")
        console.print(f"[green]Saved: {file}[/green]")
    else:
        console.print(Panel(text, title="Result"))


@app.command()
def draft(
    prompt: str = typer.Argument(help="What to write"),
    attach: list[Path] = typer.Option([], "--attach", "-a", help="File to attach (repeatable)"),
    output: Path = typer.Option(None, "--output", "-o", help="Output HTML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate a new draft from a prompt."""
    _setup_logging(verbose)
    config = load_config()
    files = []
    for path in attach:
        if not path.exists():
            console.print(f"[red]Attachment not found: {path}[/red]")
            raise typer.Exit(1)
        files.append(AttachedFile.from_bytes(path.name, path.read_bytes()))

    llm, controller = _build(config)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Generating draft...", total=None)
        markup = asyncio.run(controller.generate(prompt, files))

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markup, encoding="utf-8")
        console.print(f"[green]Saved: {output}[/green]")
    else:
        console.print(Panel(controller.document.text.strip(), title="Draft"))
    if verbose:
        _print_usage(llm)


@app.command()
def check(
    file: Path = typer.Argument(help="Text file to proofread"),
    write: bool = typer.Option(False, "--write", "-w", help="Write accepted edits back to the file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Check spelling and grammar, reviewing each error interactively."""
    _setup_logging(verbose)
    config = load_config()
    llm, controller = _build(config, _read_text(file))

    with console.status("Checking grammar..."):
        errors = asyncio.run(controller.check_grammar())
    if not errors:
        console.print("[green]No errors found.[/green]")
        return

    console.print(f"Found {len(errors)} issue(s).")
    accepted = _review(controller, errors)
    console.print(f"Accepted {accepted} of {len(errors)}.")
    _finish(controller, file, write)
    if verbose:
        _print_usage(llm)


@app.command()
def suggest(
    file: Path = typer.Argument(help="Text file to improve"),
    write: bool = typer.Option(False, "--write", "-w", help="Write accepted edits back to the file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Get style suggestions, reviewing each one interactively."""
    _setup_logging(verbose)
    config = load_config()
    llm, controller = _build(config, _read_text(file))

    if len(controller.document.text.strip()) < config.editor.suggest_min_chars:
        console.print(
            f"[yellow]Text is too short for suggestions "
            f"(at least {config.editor.suggest_min_chars} characters).[/yellow]"
        )
        return

    with console.status("Getting suggestions..."):
        suggestions = asyncio.run(controller.request_suggestions())
    if not suggestions:
        console.print("[green]No suggestions.[/green]")
        return

    accepted = _review(controller, suggestions)
    console.print(f"Accepted {accepted} of {len(suggestions)}.")
    _finish(controller, file, write)
    if verbose:
        _print_usage(llm)


@app.command()
def rewrite(
    file: Path = typer.Argument(help="Text file containing the passage"),
    find: str = typer.Option(..., "--find", "-f", help="Passage to rewrite (first occurrence)"),
    instruction: str = typer.Option(..., "--instruction", "-i", help="How to rewrite it"),
    write: bool = typer.Option(False, "--write", "-w", help="Write the result back to the file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Rewrite one passage of a file following an instruction."""
    _setup_logging(verbose)
    config = load_config()
    llm, controller = _build(config, _read_text(file))

    if controller.rewriter.select_text(find) is None:
        console.print(f"[red]Passage not found: {find}[/red]")
        raise typer.Exit(1)

    with console.status("Rewriting..."):
        rewritten = asyncio.run(controller.rewrite_selection(instruction))
    if rewritten is None:
        console.print("[yellow]Rewrite failed; text left unchanged.[/yellow]")
        raise typer.Exit(1)

    console.print(Panel(rewritten, title="Rewritten passage"))
    _finish(controller, file, write)
    if verbose:
        _print_usage(llm)
