"""Cumulative performance metrics across scaffold runs.

``PerformanceMonitor`` is an explicit collaborator: callers construct it with
a file path, ``load()`` it, record runs, and it persists itself with
``save()``.  A missing or corrupt file loads as fresh metrics.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError
from rich.table import Table

from nukta_express.utils import console, print_warning


class PerformanceMetrics(BaseModel):
    total_projects: int = Field(default=0, ge=0)
    average_generation_ms: float = Field(default=0.0, ge=0)
    cache_hit_rate: float = Field(default=0.0, ge=0, le=100)
    last_project_created: str = ""
    templates_used: dict[str, int] = Field(default_factory=dict)


class PerformanceMonitor:
    """Records project creations and persists the totals as JSON."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.metrics = PerformanceMetrics()

    def load(self) -> PerformanceMetrics:
        """Read metrics from disk, starting fresh when unreadable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
            self.metrics = PerformanceMetrics.model_validate_json(raw)
        except (OSError, ValidationError):
            self.metrics = PerformanceMetrics()
        return self.get_metrics()

    def save(self) -> bool:
        """Write metrics to disk; a failure is reported, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(self.metrics.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            print_warning(f"Could not save metrics to {self.path}: {exc}")
            return False
        return True

    def record_project_creation(
        self,
        project_name: str,
        template: str,
        generation_ms: float,
        cache_hit_rate: float,
    ) -> PerformanceMetrics:
        m = self.metrics
        previous_total = m.average_generation_ms * m.total_projects
        m.total_projects += 1
        m.average_generation_ms = (previous_total + generation_ms) / m.total_projects
        m.cache_hit_rate = cache_hit_rate
        m.last_project_created = datetime.now(timezone.utc).isoformat()
        m.templates_used[template] = m.templates_used.get(template, 0) + 1
        self.save()
        return self.get_metrics()

    def get_metrics(self) -> PerformanceMetrics:
        """Return a copy so callers cannot mutate the recorded totals."""
        return self.metrics.model_copy(deep=True)

    def reset(self) -> None:
        self.metrics = PerformanceMetrics()
        self.save()

    def display(self) -> None:
        """Print the metrics as a Rich table."""
        m = self.metrics
        table = Table(title="CLI Performance Metrics", show_header=True, header_style="bold cyan")
        table.add_column("Metric", style="dim", no_wrap=True)
        table.add_column("Value")
        table.add_row("Total projects created", str(m.total_projects))
        table.add_row("Average generation time", f"{round(m.average_generation_ms)}ms")
        table.add_row("Cache hit rate", f"{m.cache_hit_rate}%")
        if m.last_project_created:
            table.add_row("Last project created", m.last_project_created[:10])
        for template, count in sorted(
            m.templates_used.items(), key=lambda item: item[1], reverse=True
        ):
            table.add_row(f"Template: {template}", f"{count} projects")
        console.print(table)
