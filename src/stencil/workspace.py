"""Workspace: wires a project root to its templates and collaborators.

Example:
    >>> ws = Workspace(Path("/project"))
    >>> ws.register_template("templates/models.tpl.py")
    >>> template = ws.template("templates/models.tpl.py")
    >>> report = template.render_all()
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from stencil.container import FileSystemSources, Project
from stencil.foundation.config import StencilConfig, load_config
from stencil.foundation.errors import ErrorCode, template_error
from stencil.foundation.paths import normalize_path
from stencil.generation.loader import load_template
from stencil.generation.settings import TemplateSettings
from stencil.generation.template import Template
from stencil.vcs import create_version_control

logger = logging.getLogger(__name__)


class Workspace:
    """A project root with its config, tracked items and loaded templates.

    Templates are cached, so every caller shares one Template (and its lock)
    per template file.
    """

    def __init__(self, root: str | Path, config: StencilConfig | None = None) -> None:
        self.root = normalize_path(root)
        self.config = config or load_config(root=self.root)
        self.project = Project(self.root)
        self.sources = FileSystemSources(self.root)
        self.vcs = create_version_control(
            self.config.vcs.backend,
            self.root,
            enabled=self.config.vcs.enabled,
        )
        self._templates: dict[str, Template] = {}
        self._lock = threading.Lock()

    def resolve(self, path: str | Path) -> Path:
        """Absolute path for `path`, taken relative to the root unless already absolute."""
        path = Path(path)
        return normalize_path(path if path.is_absolute() else self.root / path)

    def register_template(self, path: str | Path) -> Template:
        """Track a template module in the project and load it."""
        resolved = self.resolve(path)
        load_template(resolved)  # fail before tracking a broken module
        self.project.add_item(resolved)
        self.project.save()
        return self.template(resolved)

    def template(self, path: str | Path) -> Template:
        """Load a registered template.

        Raises:
            StencilError: If the template is not registered or can't be loaded.
        """
        resolved = self.resolve(path)
        key = str(resolved).casefold()

        with self._lock:
            if key in self._templates:
                return self._templates[key]

            item = self.project.find_item(resolved)
            if item is None or item.parent is not None:
                raise template_error(ErrorCode.TEMPLATE_NOT_FOUND, str(resolved))

            defaults = TemplateSettings.from_config(self.config.generation)
            renderer, settings = load_template(resolved, defaults)
            template = Template(item, renderer, self.sources, settings, vcs=self.vcs)
            self._templates[key] = template
            return template

    def templates(self) -> list[Template]:
        """Every registered template."""
        return [self.template(item.path) for item in self.project.items()]
