"""
PhaseGate command line.

    phasegate score FILE --type spec
    phasegate align --product product.md --structure structure.md
    phasegate run plan.json --preset development --generator template
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from phasegate.application.workflow_engine import WorkflowEngine
from phasegate.domain.config import PRESETS, OrchestratorConfig
from phasegate.domain.exceptions import PhaseGateError
from phasegate.domain.models import (
    CrossValidationResult,
    DocumentType,
    SteeringDocument,
    Task,
    TaskType,
    ValidationResult,
    Workflow,
    WorkflowStatus,
)
from phasegate.guards import (
    CrossDocumentValidator,
    HeuristicContentScorer,
    SteeringDocumentValidator,
)
from phasegate.infrastructure.config_loader import (
    load_config_file,
    load_config_from_env,
    load_plan,
    load_preset,
)
from phasegate.infrastructure.logging_setup import setup_logging
from phasegate.infrastructure.persistence import (
    FilesystemLifecycleEventStore,
    FilesystemWorkflowRepository,
)
from phasegate.infrastructure.registry import GeneratorRegistry
from phasegate.infrastructure.substrate import InProcessSubstrate

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)

STATUS_STYLES = {
    "completed": "green",
    "failed": "red",
    "in_progress": "yellow",
    "pending": "dim",
    "active": "yellow",
}


# =============================================================================
# Rendering
# =============================================================================


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_validation(title: str, result: ValidationResult, threshold: float) -> None:
    table = Table(title=title, show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    passed = result.valid and result.score >= threshold
    verdict = "[green]PASS[/green]" if passed else "[red]FAIL[/red]"
    table.add_row("Result", verdict)
    table.add_row("Score", f"{result.score:.2f}")
    table.add_row("Threshold", f"{threshold:.2f}")
    for label, messages in (
        ("Errors", result.errors),
        ("Warnings", result.warnings),
        ("Suggestions", result.suggestions),
    ):
        if messages:
            table.add_row(label, "\n".join(messages))
    console.print(table)


def print_alignment(result: CrossValidationResult) -> None:
    table = Table(title="Cross-document alignment", show_header=True)
    table.add_column("Document", style="cyan")
    table.add_column("Product", justify="right")
    table.add_column("Structure", justify="right")
    table.add_column("Technology", justify="right")
    table.add_column("Average", justify="right", style="bold")

    for doc_type, scores in result.document_scores.items():
        table.add_row(
            doc_type.value,
            f"{scores.product:.2f}",
            f"{scores.structure:.2f}",
            f"{scores.technology:.2f}",
            f"{scores.average:.2f}",
        )
    console.print(table)
    console.print(f"Overall alignment: [bold]{result.overall_alignment:.1%}[/bold]")

    if result.issues:
        console.print("\n[bold red]Issues:[/bold red]")
        for issue in result.issues:
            console.print(f"  - {issue}")
    if result.recommendations:
        console.print("\n[bold yellow]Recommendations:[/bold yellow]")
        for recommendation in result.recommendations:
            console.print(f"  - {recommendation}")


def print_tasks(workflow: Workflow, tasks: list[Task]) -> None:
    table = Table(title=f"Workflow {workflow.name}", show_header=True)
    table.add_column("Phase", style="magenta")
    table.add_column("Task")
    table.add_column("Priority")
    table.add_column("Status")
    table.add_column("Quality", justify="right")

    for task in tasks:
        style = STATUS_STYLES.get(task.status.value, "")
        quality = f"{task.quality:.2f}" if task.quality is not None else "-"
        table.add_row(
            task.task_type.value,
            task.description,
            task.priority.value,
            f"[{style}]{task.status.value}[/{style}]" if style else task.status.value,
            quality,
        )
    console.print(table)

    style = STATUS_STYLES.get(workflow.status.value, "")
    console.print(f"Workflow status: [{style}]{workflow.status.value}[/{style}]")


# =============================================================================
# CLI Commands
# =============================================================================


@click.group()
@click.version_option(package_name="phasegate")
def cli() -> None:
    """PhaseGate: phase-gated, review-scored artifact production."""
    pass


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "content_type",
    required=True,
    type=click.Choice([t.value for t in TaskType]),
    help="Artifact type the file contains",
)
@click.option(
    "--threshold",
    default=OrchestratorConfig.quality_threshold,
    show_default=True,
    type=click.FloatRange(0.0, 1.0),
    help="Minimum acceptable quality score",
)
def score(file: Path, content_type: str, threshold: float) -> None:
    """Run FILE through the quality gate."""
    content = file.read_text(encoding="utf-8")
    result = HeuristicContentScorer().evaluate(content, content_type, threshold)
    print_validation(str(file), result, threshold)
    if not result.valid or result.score < threshold:
        raise SystemExit(1)


def _document_option(name: str) -> click.Option:
    return click.option(
        f"--{name}",
        default=None,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help=f"Path to the {name} steering document",
    )


@cli.command()
@_document_option("product")
@_document_option("structure")
@_document_option("tech")
def align(product: Path | None, structure: Path | None, tech: Path | None) -> None:
    """Check alignment between steering documents."""
    paths = {
        DocumentType.PRODUCT: product,
        DocumentType.STRUCTURE: structure,
        DocumentType.TECH: tech,
    }
    documents = [
        SteeringDocument(
            doc_type=t, content=p.read_text(encoding="utf-8"), title=p.stem
        )
        for t, p in paths.items()
        if p is not None
    ]
    if not documents:
        raise click.UsageError("Supply at least one of --product/--structure/--tech")

    validator = SteeringDocumentValidator()
    for document in documents:
        result = validator.validate_document(document.content, document.doc_type)
        print_validation(f"{document.doc_type.value}: {document.title}", result, 0.0)

    print_alignment(CrossDocumentValidator().alignment(documents))


def _build_config(
    config_path: Path | None, preset: str | None, artifact_dir: Path | None
) -> OrchestratorConfig:
    base = load_preset(preset) if preset else None
    config = load_config_file(config_path, base) if config_path else base
    config = load_config_from_env(base=config)
    if artifact_dir is not None:
        config = config.with_overrides(
            persistence_enabled=True, workflow_directory=str(artifact_dir)
        )
    return config


@cli.command()
@click.argument("plan", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a JSON configuration file",
)
@click.option(
    "--preset",
    default=None,
    type=click.Choice(sorted(PRESETS)),
    help="Configuration preset applied first",
)
@click.option(
    "--generator",
    default="template",
    show_default=True,
    help="Registered content generator name",
)
@click.option("--model", default=None, help="Model name for the openai generator")
@click.option(
    "--host",
    default="http://localhost:11434",
    show_default=True,
    help="OpenAI-compatible API URL for the openai generator",
)
@click.option(
    "--artifact-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Persist workflows and artifacts under this directory",
)
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file")
@click.option(
    "-v", "--verbose", is_flag=True, help="Enable verbose (DEBUG) logging to console"
)
def run(
    plan: Path,
    config_path: Path | None,
    preset: str | None,
    generator: str,
    model: str | None,
    host: str,
    artifact_dir: Path | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """Build a workflow from PLAN and execute it."""
    setup_logging("phasegate", log_file=log_file, verbose=verbose)

    try:
        config = _build_config(config_path, preset, artifact_dir)
        plan_data = load_plan(plan)

        generator_options: dict[str, object] = {}
        if generator == "openai":
            base_url = host.rstrip("/")
            if not base_url.endswith("/v1"):
                base_url = f"{base_url}/v1"
            generator_options["base_url"] = base_url
            generator_options["timeout"] = config.generation_timeout
            if model:
                generator_options["model"] = model
        content_generator = GeneratorRegistry.create(generator, **generator_options)

        repository = None
        event_store = None
        if config.persistence_enabled:
            base_dir = Path(config.workflow_directory)
            repository = FilesystemWorkflowRepository(base_dir)
            event_store = FilesystemLifecycleEventStore(base_dir)

        with WorkflowEngine(
            config,
            content_generator,
            repository=repository,
            substrate=InProcessSubstrate(),
            event_store=event_store,
        ) as engine:
            engine.initialize_session()
            workflow = engine.create_workflow(
                plan_data["name"], plan_data.get("description", "")
            )
            for entry in plan_data["tasks"]:
                task = engine.create_task(
                    entry["description"], entry["type"], entry.get("priority", "medium")
                )
                engine.add_task_to_workflow(workflow.workflow_id, task.task_id)

            workflow = engine.execute_workflow(workflow.workflow_id)
            print_tasks(workflow, engine.workflow_tasks(workflow.workflow_id))
    except PhaseGateError as e:
        logger.debug("Run aborted", exc_info=True)
        print_error(str(e))
        raise SystemExit(2) from None

    if workflow.status is not WorkflowStatus.COMPLETED:
        raise SystemExit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
