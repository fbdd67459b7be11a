"""Load templates written as Python modules.

A template module defines how one source unit becomes output text:

    # models.tpl.py
    OUTPUT_EXTENSION = "d.ts"          # optional
    SOURCE_PATTERN = "*.cs"            # optional
    INCLUDED_SCOPES = ["src/Models"]   # optional

    def output_filename(source):       # optional
        return Path(source.full_name).stem.lower()

    def configure(settings):           # optional, receives TemplateSettings
        ...

    def render(source):                # required
        return f"// generated from {source.name}\\n"

`render` returning None means the source should have no output. Raising
marks the render as failed.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from stencil.foundation.errors import ErrorCode, template_error
from stencil.generation.protocols import RenderResult, SourceUnit
from stencil.generation.settings import TemplateSettings

logger = logging.getLogger(__name__)


class ModuleRenderer:
    """Renderer backed by a template module's `render` function."""

    def __init__(self, module: ModuleType, path: Path) -> None:
        self.module = module
        self.path = path

    def render(self, source: SourceUnit) -> RenderResult:
        try:
            text = self.module.render(source)
        except Exception as e:
            logger.error("Template %s failed on %s: %s", self.path.name, source.full_name, e)
            return RenderResult(text=None, success=False)

        if text is not None and not isinstance(text, str):
            logger.error(
                "Template %s returned %s for %s, expected str or None",
                self.path.name,
                type(text).__name__,
                source.full_name,
            )
            return RenderResult(text=None, success=False)

        return RenderResult(text=text, success=True)


def _module_name(path: Path) -> str:
    digest = hashlib.sha256(str(path).encode()).hexdigest()[:12]
    return f"stencil_template_{digest}"


def load_module(path: str | Path) -> ModuleType:
    """Import a template module from its file path.

    Raises:
        StencilError: If the file is missing, fails to import, or has no render().
    """
    path = Path(path).resolve()
    if not path.is_file():
        raise template_error(ErrorCode.TEMPLATE_INVALID, str(path), "file not found")

    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise template_error(ErrorCode.TEMPLATE_INVALID, str(path), "not a Python module")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise template_error(ErrorCode.TEMPLATE_INVALID, str(path), str(e)) from e

    if not callable(getattr(module, "render", None)):
        sys.modules.pop(name, None)
        raise template_error(ErrorCode.TEMPLATE_INVALID, str(path), "render(source) is not defined")

    return module


def load_template(
    path: str | Path,
    defaults: TemplateSettings | None = None,
) -> tuple[ModuleRenderer, TemplateSettings]:
    """Load a template module and derive its renderer and settings.

    Module-level settings override `defaults`; `configure(settings)` runs last.
    """
    path = Path(path).resolve()
    module = load_module(path)

    scopes = getattr(module, "INCLUDED_SCOPES", None)
    settings = (defaults or TemplateSettings()).with_overrides(
        output_extension=getattr(module, "OUTPUT_EXTENSION", None),
        source_pattern=getattr(module, "SOURCE_PATTERN", None),
        included_scopes=tuple(scopes) if scopes is not None else None,
        output_filename_factory=getattr(module, "output_filename", None),
    )

    configure = getattr(module, "configure", None)
    if callable(configure):
        try:
            configure(settings)
        except Exception as e:
            raise template_error(ErrorCode.TEMPLATE_INVALID, str(path), f"configure() failed: {e}") from e

    logger.debug("Loaded template module %s", path)
    return ModuleRenderer(module, path), settings
