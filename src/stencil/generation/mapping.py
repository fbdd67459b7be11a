"""Mapping store: the persisted back-reference from an artifact to its source.

The mapping is a string attribute on the tracked artifact itself, holding
the source path relative to the container root. There is no separate table;
lookups re-validate it by scanning (see lookup.py).
"""

from __future__ import annotations

import logging
from pathlib import Path

from stencil.foundation.errors import argument_missing, mapping_slot_missing
from stencil.foundation.paths import relative_to_root, resolve_from_root
from stencil.generation.protocols import Container, TrackedItem

logger = logging.getLogger(__name__)

MAPPED_SOURCE_ATTRIBUTE = "mapped_source"


class MappingStore:
    """Reads and writes the `mapped_source` attribute of artifacts.

    Example:
        >>> store = MappingStore(project)
        >>> store.set_mapped_source(item, "/project/src/Foo.cs")
        >>> item.get_attribute("mapped_source")
        'src/Foo.cs'
        >>> store.get_mapped_source(item)
        PosixPath('/project/src/Foo.cs')
    """

    def __init__(self, container: Container, attribute: str = MAPPED_SOURCE_ATTRIBUTE) -> None:
        self.container = container
        self.attribute = attribute

    def get_mapped_source(self, item: TrackedItem | None) -> Path | None:
        """Absolute source path the artifact was generated from, or None if unmapped.

        Raises:
            ItemUnavailableError: If the item's metadata cannot be read right now.
        """
        if item is None:
            return None

        value = item.get_attribute(self.attribute)
        if value is None or not value.strip():
            return None

        return resolve_from_root(self.container.root, value)

    def set_mapped_source(self, item: TrackedItem | None, source_path: str | Path | None) -> None:
        """Map `item` to `source_path`, writing only when the stored value differs.

        Raises:
            IntegrityError: If item or source_path is missing, or the item has
                no mapping attribute slot.
        """
        if item is None:
            raise argument_missing("item")
        if source_path is None:
            raise argument_missing("source_path")

        relative = relative_to_root(self.container.root, source_path)
        self.require_slot(item)

        current = item.get_attribute(self.attribute) or ""
        if relative.casefold() == current.strip().casefold():
            return

        item.set_attribute(self.attribute, relative)
        logger.debug("Mapped %s -> %s", item.path, relative)

    def require_slot(self, item: TrackedItem) -> None:
        """Raise IntegrityError unless `item` exposes the mapping attribute."""
        if not item.has_attribute(self.attribute):
            raise mapping_slot_missing(self.attribute, item.path)
