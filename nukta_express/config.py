"""nukta-express configuration.

Typed configuration for the scaffolder. Settings use Pydantic v2 models so
they are validated at construction time and serialised to/from JSON or
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class ScaffoldConfig(BaseModel):
    """Global scaffolder configuration.

    Instances are created once by the create flow (or by tests) and handed to
    ``ProjectGenerator`` and ``TemplateRenderer``.
    """

    template_dir: Path | None = Field(
        default=None,
        description="Directory holding template sources; None uses the bundled templates",
    )
    cache_expiry_seconds: float = Field(
        default=300.0, gt=0, description="Lifetime of a rendered template in the cache"
    )
    install_timeout: int = Field(
        default=300, ge=1, description="Dependency install timeout in seconds"
    )
    git_timeout: int = Field(default=60, ge=1, description="Per git command timeout in seconds")
    package_manager: str = Field(default="npm")
    metrics_path: Path = Field(default=Path("./.nukta-cli-metrics.json"))

    @property
    def install_command(self) -> list[str]:
        """Command used for the dependency install step."""
        return [self.package_manager, "install"]

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            NUKTA_TEMPLATE_DIR, NUKTA_CACHE_EXPIRY, NUKTA_INSTALL_TIMEOUT,
            NUKTA_GIT_TIMEOUT, NUKTA_PACKAGE_MANAGER, NUKTA_METRICS_PATH.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NUKTA_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["NUKTA_TEMPLATE_DIR"])
        if os.environ.get("NUKTA_CACHE_EXPIRY"):
            kwargs["cache_expiry_seconds"] = float(os.environ["NUKTA_CACHE_EXPIRY"])
        if os.environ.get("NUKTA_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["NUKTA_INSTALL_TIMEOUT"])
        if os.environ.get("NUKTA_GIT_TIMEOUT"):
            kwargs["git_timeout"] = int(os.environ["NUKTA_GIT_TIMEOUT"])
        if os.environ.get("NUKTA_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["NUKTA_PACKAGE_MANAGER"]
        if os.environ.get("NUKTA_METRICS_PATH"):
            kwargs["metrics_path"] = Path(os.environ["NUKTA_METRICS_PATH"])
        return cls(**kwargs)
