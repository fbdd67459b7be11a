"""Version-control collaborators consulted before overwriting files."""

from stencil.vcs.git import GitVersionControl, NullVersionControl, create_version_control

__all__ = [
    "GitVersionControl",
    "NullVersionControl",
    "create_version_control",
]
