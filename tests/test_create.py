"""Unit tests for the create flow (nukta_express.create)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from nukta_express.create import (
    DEFAULT_AUTHOR,
    CreateOptions,
    InvalidProjectNameError,
    create_project,
    default_project_config,
    describe_templates,
    next_steps,
)
from nukta_express.metrics import PerformanceMonitor
from nukta_express.scaffolder.generator import ProjectConfig, ProjectExistsError
from nukta_express.scaffolder.registry import TemplateNotFoundError, TemplateRegistry


class TestDefaultProjectConfig:
    @pytest.mark.unit
    def test_non_interactive_defaults(self):
        config = default_project_config("shop", CreateOptions())
        assert config.description == "shop - Express.js API"
        assert config.author == DEFAULT_AUTHOR
        assert config.template == "full"
        assert config.license == "MIT"
        assert config.database == "mongodb"
        assert config.authentication and config.cors and config.logging and config.validation
        assert not config.testing
        assert not config.docker

    @pytest.mark.unit
    def test_options_carried(self):
        config = default_project_config("shop", CreateOptions(template="auth", git=True, install=False))
        assert config.template == "auth"
        assert config.git is True
        assert config.install is False


class TestNextSteps:
    @pytest.mark.unit
    def test_with_install(self):
        assert next_steps(ProjectConfig(name="p")) == ["cd p", "cp .env.example .env", "npm run dev"]

    @pytest.mark.unit
    def test_without_install(self):
        steps = next_steps(ProjectConfig(name="p", install=False))
        assert steps[1] == "npm install"


class TestCreateProject:
    @pytest.mark.unit
    async def test_invalid_name_creates_nothing(self, output_dir, settings, mock_run_command):
        options = CreateOptions(output_dir=output_dir, install=False)
        with pytest.raises(InvalidProjectNameError) as exc_info:
            await create_project("node_modules", options, settings)
        assert exc_info.value.errors == [
            '"node_modules" is a reserved word and cannot be used as a project name'
        ]
        assert list(output_dir.iterdir()) == []
        mock_run_command.assert_not_awaited()

    @pytest.mark.unit
    async def test_creates_project(self, output_dir, settings, mock_run_command):
        options = CreateOptions(template="basic", output_dir=output_dir, install=False)
        result = await create_project("shop", options, settings)
        assert result.success
        assert (output_dir / "shop" / "package.json").exists()
        assert (output_dir / "shop" / ".env.example").exists()

    @pytest.mark.unit
    async def test_records_metrics(self, output_dir, settings, mock_run_command):
        monitor = PerformanceMonitor(settings.metrics_path)
        options = CreateOptions(template="auth", output_dir=output_dir, install=False)
        await create_project("shop", options, settings, monitor=monitor)
        metrics = monitor.get_metrics()
        assert metrics.total_projects == 1
        assert metrics.templates_used == {"auth": 1}
        assert settings.metrics_path.exists()

    @pytest.mark.unit
    async def test_generation_error_propagates(self, output_dir, settings, mock_run_command):
        (output_dir / "shop").mkdir()
        monitor = PerformanceMonitor(settings.metrics_path)
        options = CreateOptions(template="basic", output_dir=output_dir, install=False)
        with patch("nukta_express.create.print_error") as err:
            with pytest.raises(ProjectExistsError):
                await create_project("shop", options, settings, monitor=monitor)
        err.assert_called_once()
        assert monitor.get_metrics().total_projects == 0

    @pytest.mark.unit
    async def test_injected_empty_registry(self, output_dir, settings, mock_run_command):
        options = CreateOptions(template="full", output_dir=output_dir, install=False)
        with pytest.raises(TemplateNotFoundError):
            await create_project("shop", options, settings, registry=TemplateRegistry())
        assert not (output_dir / "shop").exists()

    @pytest.mark.unit
    async def test_install_warning_still_succeeds(self, output_dir, settings, mock_run_command):
        mock_run_command.return_value = (1, "", "npm ERR!")
        options = CreateOptions(template="basic", output_dir=output_dir, install=True)
        result = await create_project("shop", options, settings)
        assert result.success
        assert [w.step for w in result.warnings] == ["install"]


class TestDescribeTemplates:
    @pytest.mark.unit
    def test_lists_registered_templates(self):
        with patch("nukta_express.create.console") as mock_console:
            describe_templates()
        table = mock_console.print.call_args.args[0]
        assert table.row_count == 3

    @pytest.mark.unit
    def test_empty_registry_lists_nothing(self):
        with patch("nukta_express.create.console") as mock_console:
            describe_templates(TemplateRegistry())
        table = mock_console.print.call_args.args[0]
        assert table.row_count == 0
