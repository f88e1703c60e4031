"""Integration tests for the create flow.

These tests run the real validator, registry, renderer and generator
end-to-end and check that the generated Express.js project contains
well-formed configuration files.  Git and npm are never spawned.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
import yaml

from nukta_express.create import CreateOptions, create_project
from nukta_express.metrics import PerformanceMonitor

BASIC_FILE_COUNT = 12
AUTH_FILE_COUNT = 28
FULL_FILE_COUNT = 34

_RELATIVE_IMPORT_RE = re.compile(r"""(?:from|import)\s+["'](\.{1,2}/[^"']+)["']""")


def _unresolved_imports(project_root: Path) -> list[str]:
    """Relative imports in generated TypeScript that point at no generated file."""
    missing = []
    for source in project_root.rglob("*.ts"):
        text = source.read_text(encoding="utf-8")
        for spec in _RELATIVE_IMPORT_RE.findall(text):
            target = (source.parent / spec).resolve()
            candidates = [target.with_name(target.name + ".ts"), target / "index.ts"]
            if not any(c.is_file() for c in candidates):
                rel = source.relative_to(project_root).as_posix()
                missing.append(f"{rel} -> {spec}")
    return missing


@pytest.mark.integration
class TestScaffoldEndToEnd:
    """Generate each built-in template through ``create_project``."""

    @pytest.mark.parametrize(
        "template,count",
        [("basic", BASIC_FILE_COUNT), ("auth", AUTH_FILE_COUNT), ("full", FULL_FILE_COUNT)],
    )
    async def test_template_file_counts(
        self, template: str, count: int, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template=template, output_dir=output_dir, install=False)
        result = await create_project(f"{template}-api", options, settings)

        generated = [p for p in result.project_path.rglob("*") if p.is_file()]
        # Template files plus .env and .env.example.
        assert len(generated) == count + 2
        assert len(result.files) == count + 2

    async def test_full_project_is_well_formed(
        self, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template="full", output_dir=output_dir, install=False)
        result = await create_project("shop-api", options, settings)
        root = result.project_path

        manifest = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert manifest["name"] == "shop-api"
        assert manifest["description"] == "shop-api - Express.js API"
        for dep in ("express", "mongoose", "jsonwebtoken", "helmet"):
            assert dep in manifest["dependencies"], f"Missing dependency {dep}"
        assert "jest" in manifest["devDependencies"]

        tsconfig = json.loads((root / "tsconfig.json").read_text(encoding="utf-8"))
        assert tsconfig["compilerOptions"]["rootDir"] == "./src"

        compose = yaml.safe_load((root / "docker-compose.yml").read_text(encoding="utf-8"))
        assert "app" in compose["services"]
        assert "mongo" in compose["services"]

        server = (root / "src" / "server.ts").read_text(encoding="utf-8")
        assert "mongoose" in server

        app = (root / "src" / "app.ts").read_text(encoding="utf-8")
        assert "shop-api" in app

    async def test_basic_server_has_no_database(
        self, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template="basic", output_dir=output_dir, install=False)
        result = await create_project("tiny", options, settings)
        server = (result.project_path / "src" / "server.ts").read_text(encoding="utf-8")
        assert "mongoose" not in server
        assert not (result.project_path / "src" / "app" / "modules").exists()

    async def test_git_and_install_requested(
        self, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template="auth", output_dir=output_dir, git=True, install=True)
        result = await create_project("svc", options, settings)

        assert result.success
        assert result.warnings == []
        programs = [c.args[0][0] for c in mock_run_command.await_args_list]
        assert programs == ["git", "git", "git", "npm"]

    async def test_runs_accumulate_metrics(
        self, output_dir: Path, settings, mock_run_command
    ) -> None:
        monitor = PerformanceMonitor(settings.metrics_path)
        monitor.load()
        for name in ("one", "two"):
            options = CreateOptions(template="basic", output_dir=output_dir, install=False)
            await create_project(name, options, settings, monitor=monitor)

        reloaded = PerformanceMonitor(settings.metrics_path)
        metrics = reloaded.load()
        assert metrics.total_projects == 2
        assert metrics.templates_used == {"basic": 2}
        assert metrics.average_generation_ms >= 0

    @pytest.mark.parametrize("template", ["basic", "auth", "full"])
    async def test_relative_imports_resolve(
        self, template: str, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template=template, output_dir=output_dir, install=False)
        result = await create_project(f"{template}-app", options, settings)

        assert _unresolved_imports(result.project_path) == []
        for source in result.project_path.rglob("*.ts"):
            text = source.read_text(encoding="utf-8")
            assert not text.startswith("// Generated file:"), source.name

    async def test_auth_controller_is_real_source(
        self, output_dir: Path, settings, mock_run_command
    ) -> None:
        options = CreateOptions(template="auth", output_dir=output_dir, install=False)
        result = await create_project("auth-app", options, settings)
        auth_dir = result.project_path / "src" / "app" / "modules" / "auth"
        controller = (auth_dir / "auth.controller.ts").read_text(encoding="utf-8")
        assert "export class AuthController" in controller
        service = (auth_dir / "auth.service.ts").read_text(encoding="utf-8")
        assert "export class AuthService" in service
