"""Shared pytest fixtures for the nukta-express test suite.

Provides reusable fixtures for:
- Temporary output and template-source directories
- A controllable clock for cache expiry
- Project configurations for each built-in template
- A mocked ``run_command`` for git / npm post-steps
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from nukta_express.config import ScaffoldConfig
from nukta_express.scaffolder.generator import ProjectConfig


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory that generated projects are written into."""
    out = tmp_path / "output"
    out.mkdir()
    return out


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A small template source tree with one nested and one root template."""
    root = tmp_path / "templates"
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.ts.j2").write_text(
        "const name = '{{ name }}';\n{% if cors %}app.use(cors());\n{% endif %}",
        encoding="utf-8",
    )
    (root / "greeting.txt.j2").write_text("Hello {{ name | upper }}!\n", encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> ScaffoldConfig:
    """Scaffold settings with metrics kept inside the temp directory."""
    return ScaffoldConfig(metrics_path=tmp_path / "metrics.json")


@pytest.fixture
def project_config() -> ProjectConfig:
    """A ``basic`` project with no post-steps."""
    return ProjectConfig(
        name="my-api",
        description="my-api - Express.js API",
        author="Nukta Solutions",
        template="basic",
        git=False,
        install=False,
    )


@pytest.fixture
def full_config() -> ProjectConfig:
    return ProjectConfig(
        name="full-api",
        description="A complete API",
        author="octocat",
        license="Apache-2.0",
        template="full",
        testing=True,
        docker=True,
        git=False,
        install=False,
    )


# ---------------------------------------------------------------------------
# Subprocess helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_run_command():
    """Patch the generator's ``run_command`` to succeed without spawning.

    Yields the ``AsyncMock`` so tests can change ``return_value`` /
    ``side_effect`` and inspect calls.
    """
    with patch(
        "nukta_express.scaffolder.generator.run_command",
        new=AsyncMock(return_value=(0, "", "")),
    ) as mocked:
        yield mocked
