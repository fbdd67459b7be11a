"""Reference container: JSON-manifest project and filesystem source enumeration."""

from stencil.container.project import DEFAULT_ATTRIBUTES, Project, ProjectItem
from stencil.container.sources import FileSystemSources

__all__ = [
    "DEFAULT_ATTRIBUTES",
    "FileSystemSources",
    "Project",
    "ProjectItem",
]
