"""Write reconciler: write-on-change with checkout, tracking and mapping.

Files are compared byte-for-byte with the rendered text (UTF-8) and only
rewritten when they differ, so re-rendering an unchanged source touches
nothing on disk.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from stencil.generation.allocator import OutputPathAllocator
from stencil.generation.lookup import ArtifactLookup
from stencil.generation.mapping import MappingStore
from stencil.generation.protocols import (
    SourceUnit,
    TemplateItem,
    TrackedItem,
    VersionControl,
)

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def has_changed(path: str | Path, text: str) -> bool:
    """Whether `text` differs from the file at `path`. A missing file counts as changed."""
    path = Path(path)
    if not path.is_file():
        return True
    return path.read_bytes() != text.encode(ENCODING)


class WriteReconciler:
    """Brings one artifact on disk and in the scope in line with a render result.

    All public methods run under the owning template's lock.
    """

    def __init__(
        self,
        scope: TemplateItem,
        allocator: OutputPathAllocator,
        lookup: ArtifactLookup,
        mappings: MappingStore,
        lock: threading.Lock,
        vcs: VersionControl | None = None,
    ) -> None:
        self.scope = scope
        self.allocator = allocator
        self.lookup = lookup
        self.mappings = mappings
        self.vcs = vcs
        self._lock = lock

    def reconcile(self, source: SourceUnit, text: str | None, persist: bool) -> bool:
        """Apply a render result for `source`.

        `text is None` removes the source's artifact instead of writing one.

        Returns:
            True once the artifact (or its absence) matches the result.

        Raises:
            IntegrityError: If the artifact has no mapping slot.
            CollisionExhaustedError: If no output name could be allocated.
        """
        if text is None:
            self.delete(source.full_name, persist)
            return True

        self.write(source, text, persist)
        return True

    def write(self, source: SourceUnit, text: str, persist: bool) -> TrackedItem:
        """Write `text` as the artifact for `source` and map it back."""
        with self._lock:
            output_path = self.allocator.allocate(source)
            item = self.lookup.find_by_output_path(output_path)
            if item is not None:
                self.mappings.require_slot(item)

            if has_changed(output_path, text):
                self.check_out(output_path)
                output_path.write_bytes(text.encode(ENCODING))
                logger.info("%s %s", "Updated" if item else "Created", output_path)
            else:
                logger.debug("Unchanged %s", output_path)

            if item is None:
                item = self.scope.add_from_file(str(output_path))

            self.mappings.set_mapped_source(item, source.full_name)

            if persist:
                self.scope.container.save()

            return item

    def delete(self, source_path: str, persist: bool) -> bool:
        """Remove the artifact mapped to `source_path`.

        Returns:
            True if an artifact was removed, False if none was mapped.
        """
        with self._lock:
            item = self.lookup.find_by_source_path(source_path)
            if item is None:
                return False

            logger.info("Deleting %s (source %s)", item.path, source_path)
            item.delete()

            if persist:
                self.scope.container.save()
            return True

    def check_out(self, path: str | Path) -> None:
        """Check the file out of version control before overwriting it.

        Best-effort: failures are logged and the write proceeds.
        """
        if self.vcs is None:
            return

        path = str(path)
        try:
            if (
                Path(path).is_file()
                and self.vcs.is_tracked(path)
                and not self.vcs.is_checked_out(path)
            ):
                self.vcs.check_out(path)
                logger.debug("Checked out %s", path)
        except Exception as e:
            logger.error("Checkout of %s failed: %s", path, e)
