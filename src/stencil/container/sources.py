"""Filesystem source enumeration."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from stencil.foundation.paths import normalize_path, resolve_from_root

logger = logging.getLogger(__name__)

# Directories never scanned for source units
EXCLUDED_DIRS = frozenset({".stencil", ".git", ".hg", ".svn", "node_modules", "__pycache__"})


class FileSystemSources:
    """Finds source units under the included directories of a project root.

    Scopes are directories relative to the root; no scopes means the
    whole root.
    """

    def __init__(self, root: str | Path, excluded_dirs: frozenset[str] = EXCLUDED_DIRS) -> None:
        self.root = normalize_path(root)
        self.excluded_dirs = excluded_dirs

    def _scope_dirs(self, included_scopes: Sequence[str]) -> list[Path]:
        if not included_scopes:
            return [self.root]
        return [resolve_from_root(self.root, scope) for scope in included_scopes]

    def _is_excluded(self, path: Path, base: Path) -> bool:
        try:
            parts = path.relative_to(base).parts[:-1]
        except ValueError:
            return False
        return any(part in self.excluded_dirs for part in parts)

    def list_source_units(self, included_scopes: Sequence[str], pattern: str) -> set[str]:
        """Absolute paths of files matching `pattern` anywhere under the scopes."""
        units: set[str] = set()
        for base in self._scope_dirs(included_scopes):
            if not base.is_dir():
                logger.warning("Included scope %s is not a directory", base)
                continue
            for path in base.rglob(pattern):
                if path.is_file() and not self._is_excluded(path, base):
                    units.add(str(normalize_path(path)))
        return units

    def contains_unit(self, path: str, included_scopes: Sequence[str]) -> bool:
        """Whether `path` lies under one of the scopes (case-insensitive).

        The file need not exist, so deleted sources can still be matched.
        """
        target = str(normalize_path(path)).casefold()
        for base in self._scope_dirs(included_scopes):
            prefix = str(base).casefold().rstrip(os.sep) + os.sep
            if target.startswith(prefix) and not self._is_excluded(normalize_path(path), base):
                return True
        return False
