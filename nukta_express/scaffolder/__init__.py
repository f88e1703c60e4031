"""nukta-express scaffolder -- generates Express.js + TypeScript projects.

Quick usage::

    from nukta_express.scaffolder import ProjectConfig, ProjectGenerator

    config = ProjectConfig(name="my-api", template="auth", install=False)
    result = await ProjectGenerator(config).generate("/tmp/output")
"""

from nukta_express.scaffolder.cache import RenderCache, make_cache_key
from nukta_express.scaffolder.generator import (
    GenerationError,
    GenerationResult,
    GenerationState,
    ProjectConfig,
    ProjectExistsError,
    ProjectGenerator,
)
from nukta_express.scaffolder.registry import (
    FileDescriptor,
    TemplateDefinition,
    TemplateNotFoundError,
    TemplateRegistry,
    build_default_registry,
    compose_template,
)
from nukta_express.scaffolder.templates import RenderError, TemplateRenderer
from nukta_express.scaffolder.validation import ValidationResult, validate_project_name

__all__ = [
    "FileDescriptor",
    "GenerationError",
    "GenerationResult",
    "GenerationState",
    "ProjectConfig",
    "ProjectExistsError",
    "ProjectGenerator",
    "RenderCache",
    "RenderError",
    "TemplateDefinition",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "TemplateRenderer",
    "ValidationResult",
    "build_default_registry",
    "compose_template",
    "make_cache_key",
    "validate_project_name",
]
