"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which resolves a template id to its
source under the ``app_templates/`` directory and renders it with the project
configuration.  Resolution has two tiers: a ``<template_id>.j2`` source on
disk, and when that is absent, built-in default content from
:mod:`nukta_express.scaffolder.defaults`.  Rendered output is memoised in a
:class:`~nukta_express.scaffolder.cache.RenderCache`.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any, Mapping

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
)

from .cache import DEFAULT_EXPIRY_SECONDS, RenderCache, make_cache_key
from .defaults import default_content
from .registry import TemplateRegistry


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "app_templates"

TEMPLATE_SUFFIX = ".j2"


class RenderError(Exception):
    """Raised when a template source exists but cannot be rendered."""

    def __init__(self, template_id: str, cause: BaseException) -> None:
        self.template_id = template_id
        self.cause = cause
        super().__init__(f"Failed to render template {template_id}: {cause}")


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders project files from Jinja2 sources with caching and fallback.

    Output is source code, so autoescaping is disabled.  Undefined variables
    are errors (``StrictUndefined``) rather than silently empty strings.
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        *,
        cache: RenderCache | None = None,
        registry: TemplateRegistry | None = None,
        cache_expiry_seconds: float = DEFAULT_EXPIRY_SECONDS,
    ) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.cache = cache if cache is not None else RenderCache(cache_expiry_seconds)
        self.registry = registry
        self.render_count = 0
        self._count_lock = threading.Lock()
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Single template rendering -----------------------------------------

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        """Render *template_id* with *context*.

        A cached render for the same id and context is returned unchanged.
        A missing source yields built-in default content (not cached).

        Raises:
            RenderError: the source exists but is malformed or fails while
                rendering.
        """
        key = make_cache_key(template_id, context)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        template = self._load(template_id)
        if template is None:
            return default_content(template_id, context, self.registry)

        content = self._render_source(template_id, template, context)
        self.cache.put(key, content, context)
        return content

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_id: str,
        output_path: str | Path,
        context: Mapping[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Rendering and writing run in worker threads.  Parent directories are
        created automatically.  Returns the output path.
        """
        content = await asyncio.to_thread(self.render, template_id, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    # -- Internals ---------------------------------------------------------

    def _load(self, template_id: str) -> Template | None:
        """Compile the source for *template_id*; ``None`` when it is missing."""
        try:
            return self.env.get_template(f"{template_id}{TEMPLATE_SUFFIX}")
        except TemplateNotFound:
            return None
        except (TemplateError, UnicodeDecodeError) as exc:
            raise RenderError(template_id, exc) from exc

    def _render_source(
        self, template_id: str, template: Template, context: Mapping[str, Any]
    ) -> str:
        with self._count_lock:
            self.render_count += 1
        try:
            return template.render(dict(context))
        except Exception as exc:  # noqa: BLE001 - template code can raise anything
            raise RenderError(template_id, exc) from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
