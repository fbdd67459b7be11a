"""Stencil - template-driven code generation that keeps generated files in sync.

Each template renders source units (for example `*.cs` files) into output
files placed next to the template, remembers which source every output came
from, and follows sources as they are edited, renamed and deleted.
"""

__version__ = "0.1.0"

from stencil.foundation.errors import ErrorCode, StencilError
from stencil.generation import RenderReport, SourceFile, Template, TemplateSettings
from stencil.workspace import Workspace

__all__ = [
    "ErrorCode",
    "RenderReport",
    "SourceFile",
    "StencilError",
    "Template",
    "TemplateSettings",
    "Workspace",
    "__version__",
]
