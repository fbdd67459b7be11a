"""Artifact synchronization for template-driven code generation.

A Template renders source units and keeps exactly one generated file per
source in its scope, with a persisted back-reference from each generated
file to its source.

Example:
    >>> from stencil.generation import SourceFile, Template
    >>> template = Template(item, renderer, sources)
    >>> template.render_to_file(SourceFile("/project/src/Foo.cs"), persist=True)
"""

from stencil.generation.allocator import (
    MAX_ALLOCATION_ATTEMPTS,
    OutputPathAllocator,
    split_filename,
)
from stencil.generation.lookup import ArtifactLookup
from stencil.generation.mapping import MAPPED_SOURCE_ATTRIBUTE, MappingStore
from stencil.generation.protocols import (
    Container,
    Renderer,
    RenderResult,
    SourceEnumerator,
    SourceFile,
    SourceUnit,
    TemplateItem,
    TrackedItem,
    VersionControl,
)
from stencil.generation.reconciler import WriteReconciler, has_changed
from stencil.generation.settings import TemplateSettings
from stencil.generation.template import RenderReport, Template

__all__ = [
    "MAPPED_SOURCE_ATTRIBUTE",
    "MAX_ALLOCATION_ATTEMPTS",
    "ArtifactLookup",
    "Container",
    "MappingStore",
    "OutputPathAllocator",
    "RenderReport",
    "RenderResult",
    "Renderer",
    "SourceEnumerator",
    "SourceFile",
    "SourceUnit",
    "Template",
    "TemplateItem",
    "TemplateSettings",
    "TrackedItem",
    "VersionControl",
    "WriteReconciler",
    "has_changed",
    "split_filename",
]
