"""Template: lifecycle operations for the artifacts one template generates.

Each Template owns a single lock. Every mutation of its scope (write,
delete, rename) and the lookups feeding it run under that lock, so
concurrent render/delete/rename requests for the same template are
serialized while separate templates proceed in parallel. Rendering itself
runs outside the lock.

Lifecycle of one (source, artifact) pair:

    Unmapped --render--> Mapped --render--> Mapped (updated)
                           |--rename--> Mapped (renamed)
                           `--delete--> Deleted

Example:
    >>> template = Template(item, renderer, sources)
    >>> template.render_to_file(SourceFile("/project/src/Foo.cs"), persist=True)
    True
    >>> template.rename_artifact(
    ...     SourceFile("/project/src/Bar.cs"),
    ...     "/project/src/Foo.cs",
    ...     "/project/src/Bar.cs",
    ...     persist=True,
    ... )
"""

from __future__ import annotations

import fnmatch
import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from stencil.foundation.errors import StencilError
from stencil.generation.allocator import OutputPathAllocator
from stencil.generation.lookup import ArtifactLookup
from stencil.generation.mapping import MappingStore
from stencil.generation.protocols import (
    Renderer,
    RenderResult,
    SourceEnumerator,
    SourceFile,
    SourceUnit,
    TemplateItem,
    VersionControl,
)
from stencil.generation.reconciler import WriteReconciler
from stencil.generation.settings import TemplateSettings

logger = logging.getLogger(__name__)


@dataclass
class RenderReport:
    """Outcome of rendering every source unit of a template."""

    rendered: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    saved: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.errors

    def to_dict(self) -> dict:
        return {
            "rendered": self.rendered,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": self.errors,
            "saved": self.saved,
        }


class Template:
    """Renders source units through one template and keeps its artifacts in sync."""

    def __init__(
        self,
        item: TemplateItem,
        renderer: Renderer,
        sources: SourceEnumerator,
        settings: TemplateSettings | None = None,
        vcs: VersionControl | None = None,
    ) -> None:
        started = time.perf_counter()

        self.item = item
        self.renderer = renderer
        self.sources = sources
        self.settings = settings or TemplateSettings()
        self._lock = threading.Lock()

        self.mappings = MappingStore(item.container)
        self.lookup = ArtifactLookup(item, self.mappings)
        self.allocator = OutputPathAllocator(item.path, self.settings, self.lookup, self.mappings)
        self.reconciler = WriteReconciler(
            item,
            self.allocator,
            self.lookup,
            self.mappings,
            self._lock,
            vcs=vcs,
        )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug("Template %s ready in %.0f ms", item.name, elapsed_ms)

    @property
    def path(self) -> Path:
        return Path(self.item.path)

    # ─────────────────────────────────────────────────────────────────
    # Source selection
    # ─────────────────────────────────────────────────────────────────

    def get_source_units_to_process(self) -> set[str]:
        """Absolute paths of every source unit this template renders."""
        return set(
            self.sources.list_source_units(
                self.settings.included_scopes,
                self.settings.source_pattern,
            )
        )

    def should_process(self, path: str) -> bool:
        """Whether a changed file at `path` concerns this template."""
        if not fnmatch.fnmatch(Path(path).name, self.settings.source_pattern):
            return False
        return self.sources.contains_unit(path, self.settings.included_scopes)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle operations
    # ─────────────────────────────────────────────────────────────────

    def render(self, source: SourceUnit) -> RenderResult:
        """Render `source` without touching any file."""
        return self.renderer.render(source)

    def render_to_file(self, source: SourceUnit, persist: bool) -> bool:
        """Render `source` and write, update or delete its artifact.

        A failed render leaves files and mappings untouched.

        Returns:
            Whether rendering succeeded.
        """
        result = self.render(source)
        if not result.success:
            logger.warning("Rendering %s failed; artifact left unchanged", source.full_name)
            return False

        self.reconciler.reconcile(source, result.text, persist)
        return True

    def delete_artifact(self, path: str, persist: bool) -> bool:
        """Remove the artifact generated from the source at `path`.

        Returns:
            True if an artifact was removed. A source without an artifact is a no-op.
        """
        return self.reconciler.delete(path, persist)

    def rename_artifact(
        self,
        source: SourceUnit,
        old_path: str,
        new_path: str,
        persist: bool,
    ) -> bool:
        """Follow a source rename from `old_path` to `new_path`.

        If the filename is unchanged (the source moved directories) only the
        mapping is updated. Otherwise the artifact is renamed to the name
        the allocator picks for the renamed source.

        Returns:
            True if an artifact was found and updated.
        """
        with self._lock:
            item = self.lookup.find_by_source_path(old_path)
            if item is None:
                return False

            if Path(old_path).name == Path(new_path).name:
                self.mappings.set_mapped_source(item, new_path)
            else:
                self.mappings.require_slot(item)
                new_output_path = self.allocator.allocate(source)
                logger.info("Renaming %s -> %s", item.name, new_output_path.name)
                item.rename(new_output_path.name)
                self.mappings.set_mapped_source(item, new_path)

            if persist:
                self.item.container.save()
            return True

    # ─────────────────────────────────────────────────────────────────
    # Batch and maintenance
    # ─────────────────────────────────────────────────────────────────

    def render_all(self, persist: bool = True, paths: Iterable[str] | None = None) -> RenderReport:
        """Render every source unit, saving the container once at the end.

        With `paths`, only those units are rendered; paths this template
        doesn't process are reported as skipped. Failures are collected in
        the report instead of stopping the batch.
        """
        report = RenderReport()

        if paths is None:
            selected = self.get_source_units_to_process()
        else:
            selected = set()
            for path in paths:
                if self.should_process(path):
                    selected.add(path)
                else:
                    report.skipped.append(path)

        for path in sorted(selected):
            try:
                success = self.render_to_file(SourceFile(path), persist=False)
            except StencilError as e:
                logger.error("Failed to generate output for %s: %s", path, e)
                report.errors[path] = str(e)
                continue
            except Exception as e:
                logger.exception("Unexpected error generating output for %s", path)
                report.errors[path] = f"{type(e).__name__}: {e}"
                continue

            if success:
                report.rendered.append(path)
            else:
                report.failed.append(path)

        if persist and report.rendered:
            with self._lock:
                self.item.container.save()
            report.saved = True

        return report

    def verify(self) -> None:
        """Check the template's own tracked entry is still readable.

        Raises:
            ItemUnavailableError: If the entry was removed from the container.
        """
        path = self.item.path
        logger.debug("Template entry %s is available", path)
