"""Protocol definitions for the collaborators a template works against.

These protocols define abstract interfaces for the systems the generation
engine consumes but does not own: source enumeration, rendering, the
container that tracks generated files, and version control. Reference
implementations live in stencil.container and stencil.vcs; tests swap in
in-memory doubles.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class SourceUnit(Protocol):
    """An input file processed by a template."""

    @property
    def full_name(self) -> str:
        """Absolute path of the source unit."""
        ...


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A source unit backed by a file on disk."""

    full_name: str

    @property
    def name(self) -> str:
        return Path(self.full_name).name


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of rendering one source unit.

    `text is None` with `success=True` means no output should exist for the
    source.
    """

    text: str | None
    success: bool


@runtime_checkable
class Renderer(Protocol):
    """Turns a source unit into output text."""

    def render(self, source: SourceUnit) -> RenderResult:
        ...


@runtime_checkable
class SourceEnumerator(Protocol):
    """Lists the source units belonging to a project."""

    def list_source_units(self, included_scopes: Sequence[str], pattern: str) -> set[str]:
        """Absolute paths of every source unit matching `pattern` in the scopes."""
        ...

    def contains_unit(self, path: str, included_scopes: Sequence[str]) -> bool:
        """Whether `path` is a source unit in one of the scopes."""
        ...


@runtime_checkable
class Container(Protocol):
    """The tracking structure (project) holding templates and artifacts."""

    @property
    def root(self) -> Path:
        """Directory that mapped source paths are stored relative to."""
        ...

    def save(self) -> None:
        ...


@runtime_checkable
class TrackedItem(Protocol):
    """A file tracked by the container.

    Reading metadata of an item that is concurrently being removed raises
    ItemUnavailableError.
    """

    @property
    def path(self) -> str:
        """Absolute storage path of the item."""
        ...

    @property
    def name(self) -> str:
        ...

    def rename(self, new_name: str) -> None:
        """Rename the item and its file in place."""
        ...

    def delete(self) -> None:
        """Remove the item from the container and its file from disk."""
        ...

    def has_attribute(self, name: str) -> bool:
        ...

    def get_attribute(self, name: str) -> str | None:
        ...

    def set_attribute(self, name: str, value: str) -> None:
        ...


@runtime_checkable
class TemplateItem(TrackedItem, Protocol):
    """The template's own tracked entry; its children form the template's scope."""

    @property
    def container(self) -> Container:
        ...

    def children(self) -> Iterable[TrackedItem]:
        ...

    def add_from_file(self, path: str) -> TrackedItem:
        """Start tracking an existing file as a child of this item."""
        ...


@runtime_checkable
class VersionControl(Protocol):
    """Checkout collaborator consulted before overwriting a checked-in file."""

    def is_tracked(self, path: str) -> bool:
        ...

    def is_checked_out(self, path: str) -> bool:
        ...

    def check_out(self, path: str) -> None:
        ...
