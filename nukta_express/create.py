"""Project creation flow.

Validates the project name, resolves a ``ProjectConfig`` from the
non-interactive defaults, runs the ``ProjectGenerator`` and reports the
outcome on the console.

Usage::

    import asyncio
    from nukta_express.create import CreateOptions, create_project

    asyncio.run(create_project("my-api", CreateOptions(template="auth", install=False)))
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from rich.panel import Panel
from rich.table import Table

from nukta_express.config import ScaffoldConfig
from nukta_express.metrics import PerformanceMonitor
from nukta_express.scaffolder.generator import (
    GenerationResult,
    ProjectConfig,
    ProjectGenerator,
)
from nukta_express.scaffolder.registry import TemplateRegistry, build_default_registry
from nukta_express.scaffolder.validation import validate_project_name
from nukta_express.utils import (
    console,
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
)

DEFAULT_AUTHOR = "Nukta Solutions"


class InvalidProjectNameError(Exception):
    """Raised before any side effect when the project name is rejected."""

    def __init__(self, name: str, errors: list[str]) -> None:
        self.name = name
        self.errors = errors
        super().__init__(f"Invalid project name {name!r}: " + "; ".join(errors))


class CreateOptions(BaseModel):
    """Caller-supplied switches for a create run."""

    template: str = Field(default="full")
    git: bool = Field(default=False)
    install: bool = Field(default=True)
    output_dir: Path = Field(default=Path("."))


def default_project_config(name: str, options: CreateOptions) -> ProjectConfig:
    """Build the ``ProjectConfig`` used when prompts are skipped."""
    return ProjectConfig(
        name=name,
        template=options.template,
        git=options.git,
        install=options.install,
        description=f"{name} - Express.js API",
        author=DEFAULT_AUTHOR,
        license="MIT",
        database="mongodb",
        authentication=True,
        cors=True,
        logging=True,
        validation=True,
        testing=False,
        docker=False,
    )


async def create_project(
    name: str,
    options: CreateOptions | None = None,
    settings: ScaffoldConfig | None = None,
    *,
    registry: TemplateRegistry | None = None,
    monitor: PerformanceMonitor | None = None,
) -> GenerationResult:
    """Validate *name*, generate the project and print the next steps.

    Raises:
        InvalidProjectNameError: the name failed validation; nothing was
            created.
        Any error raised by :meth:`ProjectGenerator.generate`.
    """
    options = options or CreateOptions()
    settings = settings or ScaffoldConfig()

    validation = validate_project_name(name)
    if not validation.valid:
        print_error("Invalid project name")
        for error in validation.errors:
            print_error(f"  {error}")
        raise InvalidProjectNameError(name, validation.errors)

    config = default_project_config(name, options)
    generator = ProjectGenerator(config, settings, registry=registry)

    try:
        with create_progress() as progress:
            progress.add_task(f"Creating {name} from the {config.template} template...", total=None)
            result = await generator.generate(options.output_dir)
    except Exception as exc:
        print_error(f"Failed to create project: {exc}")
        raise

    print_success("Project created successfully!")

    if monitor is not None:
        monitor.record_project_creation(
            name,
            config.template,
            result.duration_seconds * 1000,
            generator.renderer.cache.hit_rate,
        )

    print_summary_table(
        {
            "Project": str(result.project_path),
            "Template": result.template,
            "Files": str(len(result.files)),
            "Warnings": str(len(result.warnings)),
            "Duration": format_duration(result.duration_seconds),
        },
        title="Scaffold Summary",
    )
    show_next_steps(config)
    return result


def next_steps(config: ProjectConfig) -> list[str]:
    steps = [f"cd {config.name}"]
    if not config.install:
        steps.append("npm install")
    steps.append("cp .env.example .env")
    steps.append("npm run dev")
    return steps


def show_next_steps(config: ProjectConfig) -> None:
    body = "\n".join(f"  {cmd}" for cmd in next_steps(config))
    console.print(Panel(body, title="[bold]Next steps[/bold]", border_style="bright_blue"))


def describe_templates(registry: TemplateRegistry | None = None) -> None:
    """Print the available templates as a table."""
    if registry is None:
        registry = build_default_registry()
    table = Table(title="Available Templates", show_header=True, header_style="bold cyan")
    table.add_column("Template", style="green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Files", justify="right")
    for entry in registry.list():
        table.add_row(
            entry["name"],
            entry["description"],
            str(len(registry.get(entry["name"]).files)),
        )
    console.print(table)
