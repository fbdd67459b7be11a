"""Per-template settings: output naming policy and source selection."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace

from stencil.foundation.config import (
    DEFAULT_OUTPUT_EXTENSION,
    DEFAULT_SOURCE_PATTERN,
    GenerationConfig,
)
from stencil.generation.protocols import SourceUnit

OutputFilenameFactory = Callable[[SourceUnit], str]


@dataclass(slots=True)
class TemplateSettings:
    """Settings a template module or the project config supplies."""

    output_extension: str | None = None
    """Extension for generated files. Blank means .ts."""

    output_filename_factory: OutputFilenameFactory | None = None
    """Optional callable naming the output file for a source unit."""

    included_scopes: tuple[str, ...] = field(default_factory=tuple)
    """Directories to take source units from. Empty means the project root."""

    source_pattern: str = DEFAULT_SOURCE_PATTERN

    @classmethod
    def from_config(cls, config: GenerationConfig) -> TemplateSettings:
        return cls(
            output_extension=config.output_extension,
            included_scopes=tuple(config.included_scopes),
            source_pattern=config.source_pattern,
        )

    def with_overrides(self, **changes: object) -> TemplateSettings:
        """Return a copy with the non-None values in `changes` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def extension(self) -> str:
        """The configured extension normalized to a single leading dot.

        Example:
            >>> TemplateSettings(output_extension="..d.ts").extension
            '.d.ts'
        """
        if self.output_extension is None or not self.output_extension.strip():
            return DEFAULT_OUTPUT_EXTENSION
        return "." + self.output_extension.strip().strip(".")
