"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and generates an Express.js + TypeScript project
directory from the chosen template.  A run moves through::

    IDLE -> DIRECTORY_CHECK -> FILE_GENERATION -> [GIT_INIT]
         -> [DEPENDENCY_INSTALL] -> DONE

with ``FAILED`` reachable from the first three steps.  Only the directory
check and file generation are fatal; git and dependency installation are
best-effort and degrade to warnings.
"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from nukta_express.config import ScaffoldConfig
from nukta_express.utils import print_hint, print_warning, run_command

from .registry import (
    TemplateDefinition,
    TemplateNotFoundError,
    TemplateRegistry,
    build_default_registry,
)
from .templates import RenderError, TemplateRenderer

GIT_COMMIT_MESSAGE = "Initial commit: Express.js project setup"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ProjectExistsError(Exception):
    """Raised when the target project directory is already present."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Directory "{path.name}" already exists')


class GenerationError(Exception):
    """Raised when a project file cannot be written."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to generate {path}: {cause}")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """Options for a single scaffold run."""

    name: str = Field(..., description="Project name (directory and package name)")
    description: str = Field(default="")
    author: str = Field(default="")
    license: str = Field(default="MIT")
    template: str = Field(default="full", description="Registered template name")
    database: str = Field(default="mongodb")
    authentication: bool = Field(default=True)
    cors: bool = Field(default=True)
    logging: bool = Field(default=True)
    validation: bool = Field(default=True)
    testing: bool = Field(default=False)
    docker: bool = Field(default=False)
    git: bool = Field(default=False, description="Initialise a git repository")
    install: bool = Field(default=True, description="Install npm dependencies")

    def template_context(self) -> dict[str, Any]:
        """The data context handed to every template."""
        return self.model_dump(mode="json")


class GenerationState(str, Enum):
    IDLE = "idle"
    DIRECTORY_CHECK = "directory_check"
    FILE_GENERATION = "file_generation"
    GIT_INIT = "git_init"
    DEPENDENCY_INSTALL = "dependency_install"
    DONE = "done"
    FAILED = "failed"


class PostStepWarning(BaseModel):
    """A non-fatal failure in an optional post-generation step."""

    step: str
    message: str
    hint: str = ""
    detail: str = ""


class GenerationResult(BaseModel):
    project_path: Path
    template: str
    files: list[Path] = Field(default_factory=list)
    warnings: list[PostStepWarning] = Field(default_factory=list)
    state: GenerationState = GenerationState.DONE
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.state is GenerationState.DONE


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Scaffolding orchestrator for one ``ProjectConfig``.

    The registry and renderer are injectable; by default the built-in
    ``basic``/``auth``/``full`` registry and a renderer over the bundled
    template sources are used.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: ScaffoldConfig | None = None,
        *,
        registry: TemplateRegistry | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or ScaffoldConfig()
        self.registry = registry if registry is not None else build_default_registry()
        if renderer is None:
            renderer = TemplateRenderer(
                self.settings.template_dir,
                registry=self.registry,
                cache_expiry_seconds=self.settings.cache_expiry_seconds,
            )
        self.renderer = renderer
        self.state = GenerationState.IDLE
        self.warnings: list[PostStepWarning] = []

    # -- Public API --------------------------------------------------------

    async def generate(self, output_dir: str | Path = ".") -> GenerationResult:
        """Generate the project under ``<output_dir>/<name>``.

        Raises:
            TemplateNotFoundError: the configured template is unknown.
            ProjectExistsError: the project directory already exists.
            RenderError: a template source is malformed.
            GenerationError: a file could not be written.
        """
        started = time.monotonic()
        self.warnings = []
        project_root = Path(output_dir) / self.config.name

        try:
            template = self.registry.get(self.config.template)

            self.state = GenerationState.DIRECTORY_CHECK
            await self._create_project_directory(project_root)

            self.state = GenerationState.FILE_GENERATION
            files = await self._generate_project_files(template, project_root)
        except Exception:
            self.state = GenerationState.FAILED
            raise

        if self.config.git:
            self.state = GenerationState.GIT_INIT
            await self._initialize_git(project_root)

        if self.config.install:
            self.state = GenerationState.DEPENDENCY_INSTALL
            await self._install_dependencies(project_root)

        self.state = GenerationState.DONE
        return GenerationResult(
            project_path=project_root,
            template=template.name,
            files=files,
            warnings=list(self.warnings),
            state=self.state,
            duration_seconds=time.monotonic() - started,
        )

    def cache_stats(self) -> dict[str, Any]:
        return self.renderer.cache.stats()

    def clear_cache(self) -> None:
        self.renderer.cache.clear()

    # -- Directory check ---------------------------------------------------

    async def _create_project_directory(self, project_root: Path) -> None:
        if await asyncio.to_thread(project_root.exists):
            raise ProjectExistsError(project_root)
        try:
            await asyncio.to_thread(project_root.mkdir, parents=True, exist_ok=False)
        except FileExistsError:
            raise ProjectExistsError(project_root) from None

    # -- File generation ---------------------------------------------------

    async def _generate_project_files(
        self, template: TemplateDefinition, project_root: Path
    ) -> list[Path]:
        """Render and write every template file, then the env files."""
        context = self.config.template_context()

        async def _render_one(target_path: str, template_id: str) -> Path:
            try:
                return await self.renderer.render_to_file(
                    template_id, project_root / target_path, context
                )
            except (RenderError, TemplateNotFoundError):
                raise
            except Exception as exc:
                raise GenerationError(target_path, exc) from exc

        # Let every write settle before reporting the first failure.
        outcomes = await asyncio.gather(
            *(_render_one(f.target_path, f.template_id) for f in template.files),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        written: list[Path] = list(outcomes)
        env_files = await asyncio.gather(
            *(
                self._write_extra_file(project_root, name, content)
                for name, content in self._additional_files().items()
            )
        )
        return [*written, *env_files]

    def _additional_files(self) -> dict[str, str]:
        return {
            ".env.example": _env_content(self.config.name, "your-super-secret-{}-key-here"),
            ".env": _env_content(
                self.config.name, "your-super-secret-{}-key-here-change-in-production"
            ),
        }

    async def _write_extra_file(self, project_root: Path, name: str, content: str) -> Path:
        path = project_root / name
        try:
            await asyncio.to_thread(path.write_text, content, "utf-8")
        except OSError as exc:
            raise GenerationError(name, exc) from exc
        return path

    # -- Best-effort post steps --------------------------------------------

    async def _initialize_git(self, project_root: Path) -> bool:
        commands = [
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", GIT_COMMIT_MESSAGE],
        ]
        for cmd in commands:
            try:
                code, _, stderr = await run_command(
                    cmd, cwd=project_root, timeout=self.settings.git_timeout
                )
            except OSError as exc:
                code, stderr = -1, str(exc)
            if code != 0:
                self._warn(
                    PostStepWarning(
                        step="git",
                        message="Git initialization failed, but project was created successfully",
                        hint="You can initialize the repository manually by running: git init",
                        detail=stderr,
                    )
                )
                return False
        return True

    async def _install_dependencies(self, project_root: Path) -> bool:
        cmd = self.settings.install_command
        try:
            code, _, stderr = await run_command(
                cmd, cwd=project_root, timeout=self.settings.install_timeout
            )
        except OSError as exc:
            code, stderr = -1, str(exc)
        if code != 0:
            self._warn(
                PostStepWarning(
                    step="install",
                    message="Dependency installation failed, but project was created successfully",
                    hint=f"You can install dependencies manually by running: {' '.join(cmd)}",
                    detail=stderr,
                )
            )
            return False
        return True

    def _warn(self, warning: PostStepWarning) -> None:
        self.warnings.append(warning)
        print_warning(warning.message)
        if warning.hint:
            print_hint(warning.hint)


# ---------------------------------------------------------------------------
# Env files
# ---------------------------------------------------------------------------

def _env_content(project_name: str, secret_pattern: str) -> str:
    """Server, database, JWT, CORS, rate-limit and security settings."""
    jwt_secret = secret_pattern.format("jwt")
    refresh_secret = secret_pattern.format("refresh")
    return (
        "# Server Configuration\n"
        "NODE_ENV=development\n"
        "PORT=5000\n"
        "\n"
        "# Database Configuration\n"
        f"MONGODB_URI=mongodb://localhost:27017/{project_name}\n"
        "\n"
        "# JWT Configuration\n"
        f"JWT_SECRET={jwt_secret}\n"
        "JWT_EXPIRES_IN=7d\n"
        f"JWT_REFRESH_SECRET={refresh_secret}\n"
        "JWT_REFRESH_EXPIRES_IN=30d\n"
        "\n"
        "# CORS Configuration\n"
        "CORS_ORIGIN=http://localhost:3000\n"
        "\n"
        "# Rate Limiting\n"
        "RATE_LIMIT_WINDOW_MS=900000\n"
        "RATE_LIMIT_MAX_REQUESTS=100\n"
        "\n"
        "# Logging\n"
        "LOG_LEVEL=info\n"
        "\n"
        "# Security\n"
        "BCRYPT_SALT_ROUNDS=12\n"
    )
