"""JSON-manifest project: the reference container for tracked files.

Thread-safe JSON-based storage of tracked items and their attributes.

Storage layout:
    <root>/.stencil/
    └── project.json     # items, their children and attributes

Manifest format:
    {
      "version": 1,
      "updated_at": "...",
      "items": [
        {
          "path": "templates/models.tpl.py",
          "attributes": {},
          "children": [
            {"path": "templates/Foo.ts", "attributes": {"mapped_source": "src/Foo.cs"}, "children": []}
          ]
        }
      ]
    }

Item paths are stored relative to the root with forward slashes.

Example:
    >>> project = Project(Path("/project"))
    >>> template = project.add_item("/project/templates/models.tpl.py")
    >>> artifact = template.add_from_file("/project/templates/Foo.ts")
    >>> artifact.set_attribute("mapped_source", "src/Foo.cs")
    >>> project.save()
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from stencil.foundation.errors import ErrorCode, StencilError, item_unavailable
from stencil.foundation.paths import (
    normalize_path,
    relative_to_root,
    resolve_from_root,
    same_path,
)
from stencil.generation.mapping import MAPPED_SOURCE_ATTRIBUTE

logger = logging.getLogger(__name__)

# Attribute slots every newly tracked file exposes
DEFAULT_ATTRIBUTES = (MAPPED_SOURCE_ATTRIBUTE,)


class ProjectItem:
    """A file tracked by a Project, optionally owning child items.

    Once deleted, reading the item's metadata raises ItemUnavailableError.
    """

    def __init__(
        self,
        project: Project,
        path: str | Path,
        parent: ProjectItem | None = None,
        attributes: dict[str, str] | None = None,
    ) -> None:
        self.project = project
        self.parent = parent
        self._path = normalize_path(path)
        self._attributes: dict[str, str] = (
            dict(attributes) if attributes is not None else dict.fromkeys(DEFAULT_ATTRIBUTES, "")
        )
        self._children: list[ProjectItem] = []
        self._removed = False

    def __repr__(self) -> str:
        state = " removed" if self._removed else ""
        return f"ProjectItem({str(self._path)!r}{state})"

    def _check_available(self) -> None:
        if self._removed:
            raise item_unavailable(str(self._path))

    @property
    def path(self) -> str:
        self._check_available()
        return str(self._path)

    @property
    def name(self) -> str:
        self._check_available()
        return self._path.name

    @property
    def container(self) -> Project:
        return self.project

    @property
    def removed(self) -> bool:
        return self._removed

    # ─────────────────────────────────────────────────────────────────
    # Children
    # ─────────────────────────────────────────────────────────────────

    def children(self) -> list[ProjectItem]:
        return list(self._children)

    def add_from_file(self, path: str | Path) -> ProjectItem:
        """Track an existing file as a child of this item.

        Returns the existing child when the file is already tracked here.

        Raises:
            StencilError: If the file does not exist.
        """
        self._check_available()
        path = normalize_path(path)
        if not path.is_file():
            raise StencilError(code=ErrorCode.FILE_NOT_FOUND, context={"path": str(path)})

        for child in self._children:
            if not child.removed and same_path(child._path, path):
                return child

        child = ProjectItem(self.project, path, parent=self)
        self._children.append(child)
        return child

    def _detach(self, child: ProjectItem) -> None:
        if child in self._children:
            self._children.remove(child)

    # ─────────────────────────────────────────────────────────────────
    # File operations
    # ─────────────────────────────────────────────────────────────────

    def delete(self) -> None:
        """Stop tracking the item and remove its file (and its children) from disk."""
        self._check_available()

        for child in self.children():
            child.delete()

        self._removed = True
        if self.parent is not None:
            self.parent._detach(self)
        else:
            self.project._detach(self)

        self._path.unlink(missing_ok=True)
        logger.debug("Deleted %s", self._path)

    def rename(self, new_name: str) -> None:
        """Rename the item's file within its directory.

        Raises:
            StencilError: If another file already has that name.
        """
        self._check_available()
        if not new_name or Path(new_name).name != new_name:
            raise StencilError(code=ErrorCode.INVALID_NAME, context={"name": new_name})

        target = self._path.with_name(new_name)
        if target.exists() and not same_path(target, self._path):
            raise StencilError(code=ErrorCode.ITEM_EXISTS, context={"path": str(target)})

        if self._path.exists():
            self._path.rename(target)
        logger.debug("Renamed %s -> %s", self._path.name, new_name)
        self._path = target

    # ─────────────────────────────────────────────────────────────────
    # Attributes
    # ─────────────────────────────────────────────────────────────────

    def has_attribute(self, name: str) -> bool:
        self._check_available()
        return name in self._attributes

    def get_attribute(self, name: str) -> str | None:
        self._check_available()
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        """Set an existing attribute slot.

        Raises:
            KeyError: If the item has no such slot.
        """
        self._check_available()
        if name not in self._attributes:
            raise KeyError(f"{self._path.name} has no attribute '{name}'")
        self._attributes[name] = value

    # ─────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        relative = relative_to_root(self.project.root, self._path)
        return {
            "path": relative.replace(os.sep, "/"),
            "attributes": dict(self._attributes),
            "children": [child.to_dict() for child in self.children()],
        }

    @classmethod
    def from_dict(
        cls,
        project: Project,
        data: dict[str, Any],
        parent: ProjectItem | None = None,
    ) -> ProjectItem:
        """Deserialize from dict."""
        item = cls(
            project,
            resolve_from_root(project.root, data["path"]),
            parent=parent,
            attributes=data.get("attributes", {}),
        )
        item._children = [
            cls.from_dict(project, child, parent=item) for child in data.get("children", [])
        ]
        return item


class Project:
    """Container of tracked items, persisted to `.stencil/project.json`."""

    MANIFEST_VERSION = 1

    def __init__(self, root: str | Path, manifest_path: str | Path | None = None) -> None:
        self._root = normalize_path(root)
        self.manifest_path = (
            Path(manifest_path) if manifest_path else self._root / ".stencil" / "project.json"
        )
        self._lock = threading.Lock()
        self._items: list[ProjectItem] = []
        self.load()

    @property
    def root(self) -> Path:
        return self._root

    def items(self) -> list[ProjectItem]:
        """Top-level tracked items."""
        return list(self._items)

    def add_item(self, path: str | Path) -> ProjectItem:
        """Track an existing file at the top level (e.g. a template).

        Raises:
            StencilError: If the file does not exist.
        """
        path = normalize_path(path)
        if not path.is_file():
            raise StencilError(code=ErrorCode.FILE_NOT_FOUND, context={"path": str(path)})

        existing = self.find_item(path)
        if existing is not None and existing.parent is None:
            return existing

        item = ProjectItem(self, path, attributes={})
        with self._lock:
            self._items.append(item)
        return item

    def find_item(self, path: str | Path) -> ProjectItem | None:
        """Find a tracked item anywhere in the project (case-insensitive)."""
        pending = self.items()
        while pending:
            item = pending.pop(0)
            if not item.removed and same_path(item._path, path):
                return item
            pending.extend(item.children())
        return None

    def _detach(self, item: ProjectItem) -> None:
        with self._lock:
            if item in self._items:
                self._items.remove(item)

    def load(self) -> None:
        """Load items from the manifest if it exists.

        Raises:
            StencilError: If the manifest is unreadable or from another version.
        """
        if not self.manifest_path.exists():
            return

        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StencilError(
                code=ErrorCode.MANIFEST_INVALID,
                context={"path": str(self.manifest_path), "detail": str(e)},
                cause=e,
            ) from e

        version = data.get("version") if isinstance(data, dict) else None
        if version != self.MANIFEST_VERSION:
            raise StencilError(
                code=ErrorCode.MANIFEST_INVALID,
                context={"path": str(self.manifest_path), "detail": f"unsupported version {version!r}"},
            )

        with self._lock:
            self._items = [ProjectItem.from_dict(self, item) for item in data.get("items", [])]

    def save(self) -> None:
        """Write the manifest atomically."""
        with self._lock:
            data = {
                "version": self.MANIFEST_VERSION,
                "updated_at": datetime.now(UTC).isoformat(),
                "items": [item.to_dict() for item in self._items],
            }
            self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.manifest_path.with_name(self.manifest_path.name + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp.replace(self.manifest_path)
        logger.debug("Saved %s", self.manifest_path)
