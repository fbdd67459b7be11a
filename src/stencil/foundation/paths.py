"""Path utilities shared by the mapping store and lookups.

Zero-dependency path operations: root-relative encoding of mapped source
paths and case-insensitive path comparison.
"""

import os
from pathlib import Path


def normalize_path(path: str | Path) -> Path:
    """Make a path absolute and collapse `.`/`..` segments without touching the filesystem.

    Example:
        >>> normalize_path("/project/src/../lib/Foo.cs")
        PosixPath('/project/lib/Foo.cs')
    """
    return Path(os.path.normpath(os.path.abspath(os.fspath(path))))


def same_path(a: str | Path | None, b: str | Path | None) -> bool:
    """Compare two paths case-insensitively after normalization.

    None never equals anything.
    """
    if a is None or b is None:
        return False
    return str(normalize_path(a)).casefold() == str(normalize_path(b)).casefold()


def to_native_separators(value: str) -> str:
    """Convert either separator style to the host's native one."""
    if os.sep == "/":
        return value.replace("\\", "/")
    return value.replace("/", os.sep)


def relative_to_root(root: str | Path, path: str | Path) -> str:
    """Encode `path` relative to `root` using native separators.

    Paths outside the root get `..` segments. Paths that cannot be expressed
    relatively (another drive on Windows) are returned absolute, which
    resolve_from_root() still maps back to the same path.

    Example:
        >>> relative_to_root("/project", "/project/src/Foo.cs")
        'src/Foo.cs'
    """
    root_path = normalize_path(root)
    target = normalize_path(path)
    try:
        return os.path.relpath(target, root_path)
    except ValueError:
        return str(target)


def resolve_from_root(root: str | Path, value: str) -> Path:
    """Resolve a stored relative value against `root`.

    Accepts values written with either separator convention.

    Example:
        >>> resolve_from_root("/project", "src\\\\Foo.cs")
        PosixPath('/project/src/Foo.cs')
    """
    return normalize_path(Path(root) / to_native_separators(value))
