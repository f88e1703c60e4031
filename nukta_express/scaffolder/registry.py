"""Template catalog for project scaffolding.

A template is an ordered list of ``FileDescriptor`` entries plus the npm
dependency maps written into the generated ``package.json``.  Templates are
composed incrementally: ``auth`` extends ``basic`` and ``full`` extends
``auth``.  Composition never reorders the base's files.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TemplateNotFoundError(Exception):
    """Raised when a template name is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f'Template "{name}" not found. Available templates: {", ".join(available)}'
        )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class FileDescriptor(BaseModel):
    """Output path paired with the template source that produces it."""

    model_config = ConfigDict(frozen=True)

    target_path: str = Field(..., description="Path relative to the project root")
    template_id: str = Field(..., description="Template source identifier")

    @field_validator("target_path")
    @classmethod
    def _stay_inside_project(cls, value: str) -> str:
        normalized = value.replace("\\", "/")
        path = PurePosixPath(normalized)
        if not normalized or path.is_absolute() or normalized.startswith("/"):
            raise ValueError(f"target path must be relative: {value!r}")
        if ".." in path.parts:
            raise ValueError(f"target path escapes the project root: {value!r}")
        return normalized


class TemplateDefinition(BaseModel):
    """A named scaffold variant."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    files: tuple[FileDescriptor, ...] = ()
    dependencies: Mapping[str, str] = Field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("dependencies", "dev_dependencies", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _unique_targets(self) -> "TemplateDefinition":
        seen: set[str] = set()
        for descriptor in self.files:
            if descriptor.target_path in seen:
                raise ValueError(
                    f"duplicate target path in template {self.name!r}: "
                    f"{descriptor.target_path}"
                )
            seen.add(descriptor.target_path)
        return self

    @property
    def target_paths(self) -> list[str]:
        return [f.target_path for f in self.files]


def compose_template(
    base: TemplateDefinition, derived: TemplateDefinition
) -> TemplateDefinition:
    """Return a new definition layering *derived* on top of *base*.

    Files are the base's files in their original order followed by the
    derived template's own files.  Dependency maps are merged with the
    derived template's versions winning on conflict.  Neither input is
    modified.
    """
    return TemplateDefinition(
        name=derived.name,
        description=derived.description,
        files=base.files + derived.files,
        dependencies={**base.dependencies, **derived.dependencies},
        dev_dependencies={**base.dev_dependencies, **derived.dev_dependencies},
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """Catalog of known templates, read-only once frozen."""

    def __init__(self) -> None:
        self._templates: dict[str, TemplateDefinition] = {}
        self._frozen = False

    def register(
        self, definition: TemplateDefinition, extends: str | None = None
    ) -> TemplateDefinition:
        """Add *definition*, composing it onto *extends* when given.

        Returns the stored (possibly composed) definition.
        """
        if self._frozen:
            raise RuntimeError("template registry is frozen")
        if definition.name in self._templates:
            raise ValueError(f'Template "{definition.name}" is already registered')
        if extends is not None:
            definition = compose_template(self.get(extends), definition)
        self._templates[definition.name] = definition
        return definition

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> TemplateDefinition:
        """Return the template called *name*.

        Raises:
            TemplateNotFoundError: listing every registered name.
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateNotFoundError(name, self.names()) from None

    def list(self) -> list[dict[str, str]]:
        """Return ``{name, description}`` entries in registration order."""
        return [
            {"name": t.name, "description": t.description}
            for t in self._templates.values()
        ]

    def names(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[TemplateDefinition]:
        return iter(list(self._templates.values()))


# ---------------------------------------------------------------------------
# Built-in templates
# ---------------------------------------------------------------------------


def _files(*paths: str) -> tuple[FileDescriptor, ...]:
    """Descriptors whose template id mirrors the output path."""
    return tuple(FileDescriptor(target_path=p, template_id=p) for p in paths)


BASIC_TEMPLATE = TemplateDefinition(
    name="basic",
    description="Minimal Express.js setup with TypeScript",
    files=_files(
        "src/app.ts",
        "src/server.ts",
        "src/app/config/index.ts",
        "src/app/constants.ts",
        "src/app/middlewares/error-handler.ts",
        "src/app/middlewares/not-found.ts",
        "src/app/routes/index.ts",
        "src/@types/index.d.ts",
        "tsconfig.json",
        "package.json",
        ".gitignore",
        "README.md",
    ),
    dependencies={
        "express": "^4.18.2",
        "dotenv": "^16.4.4",
        "cors": "^2.8.5",
        "express-async-errors": "^3.1.1",
        "http-status-codes": "^2.3.0",
    },
    dev_dependencies={
        "@types/express": "^4.17.13",
        "@types/node": "^20.10.0",
        "@types/cors": "^2.8.17",
        "typescript": "^5.3.2",
        "ts-node": "^10.9.1",
        "nodemon": "^3.1.7",
    },
)

AUTH_TEMPLATE = TemplateDefinition(
    name="auth",
    description="Express.js with authentication middleware",
    files=_files(
        "src/app/middlewares/authentication.ts",
        "src/app/modules/user/user.model.ts",
        "src/app/modules/user/user.type.ts",
        "src/app/modules/auth/auth.controller.ts",
        "src/app/modules/auth/auth.service.ts",
        "src/app/modules/auth/auth.route.ts",
        "src/app/modules/auth/auth.type.ts",
        "src/app/shared/createJWT.ts",
        "src/app/shared/sendResponse.ts",
        "src/app/shared/setCookie.ts",
        "src/app/shared/userTokens.ts",
        "src/app/errors/bad-request.ts",
        "src/app/errors/custom-api.ts",
        "src/app/errors/forbidden.ts",
        "src/app/errors/not-found.ts",
        "src/app/errors/unauthenticated.ts",
    ),
    dependencies={
        "mongoose": "^8.2.1",
        "bcrypt": "^5.1.1",
        "jsonwebtoken": "^9.0.2",
        "@types/bcrypt": "^5.0.2",
        "@types/jsonwebtoken": "^9.0.2",
    },
)

FULL_TEMPLATE = TemplateDefinition(
    name="full",
    description="Complete setup with all features",
    files=_files(
        "src/app/shared/QueryBuilder.ts",
        "jest.config.js",
        ".eslintrc.js",
        ".prettierrc",
        "Dockerfile",
        "docker-compose.yml",
    ),
    dependencies={
        "morgan": "^1.10.0",
        "@types/morgan": "^1.9.9",
        "joi": "^17.11.0",
        "@types/joi": "^17.2.3",
        "helmet": "^7.1.0",
        "express-rate-limit": "^7.1.5",
        "express-promise-router": "^4.1.1",
    },
    dev_dependencies={
        "jest": "^29.7.0",
        "ts-jest": "^29.1.1",
        "@types/jest": "^29.5.8",
        "supertest": "^6.3.3",
        "@types/supertest": "^2.0.16",
        "eslint": "^8.54.0",
        "@typescript-eslint/eslint-plugin": "^6.13.0",
        "@typescript-eslint/parser": "^6.13.0",
        "prettier": "^3.1.0",
        "cpx": "^1.5.0",
    },
)


def build_default_registry() -> TemplateRegistry:
    """Return a frozen registry holding ``basic``, ``auth`` and ``full``."""
    registry = TemplateRegistry()
    registry.register(BASIC_TEMPLATE)
    registry.register(AUTH_TEMPLATE, extends="basic")
    registry.register(FULL_TEMPLATE, extends="auth")
    registry.freeze()
    return registry
