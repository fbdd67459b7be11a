"""Artifact registry lookup over a template's scope.

Both lookups scan only the direct children of the template's tracked
entry. A child whose metadata can't be read (it is being removed while we
scan) is skipped; a skipped child that was the real match shows up as
"not found".
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from stencil.foundation.errors import ItemUnavailableError
from stencil.foundation.paths import same_path
from stencil.generation.mapping import MappingStore
from stencil.generation.protocols import TemplateItem, TrackedItem

logger = logging.getLogger(__name__)


class ArtifactLookup:
    """Finds tracked artifacts in a scope by source path or output path."""

    def __init__(self, scope: TemplateItem, mappings: MappingStore) -> None:
        self.scope = scope
        self.mappings = mappings

    def find_by_source_path(self, path: str | Path) -> TrackedItem | None:
        """The artifact whose mapping equals `path` (case-insensitive), if any."""
        return self._find(lambda item: same_path(path, self.mappings.get_mapped_source(item)))

    def find_by_output_path(self, path: str | Path) -> TrackedItem | None:
        """The artifact stored at `path` (case-insensitive), if any."""
        return self._find(lambda item: same_path(path, item.path))

    def iter_readable(self) -> Iterator[tuple[TrackedItem, Path | None]]:
        """Yield (item, mapped source) for every child whose metadata is readable."""
        for item in list(self.scope.children()):
            try:
                yield item, self.mappings.get_mapped_source(item)
            except ItemUnavailableError as e:
                logger.debug("Skipping unavailable item: %s", e)

    def _find(self, matches: Callable[[TrackedItem], bool]) -> TrackedItem | None:
        for item in list(self.scope.children()):
            try:
                if matches(item):
                    return item
            except ItemUnavailableError as e:
                logger.debug("Skipping unavailable item: %s", e)
        return None
