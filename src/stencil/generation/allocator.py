"""Output path allocation with deterministic collision resolution.

The output file for a source unit lives next to the template. When the
natural name is already taken by an artifact mapped to a different source,
numbered names are tried in order:

    Foo.ts, Foo (1).ts, Foo (2).ts, ...

`.d.ts` counts as a single extension, so declaration files become
`Foo (1).d.ts` rather than `Foo.d (1).ts`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stencil.foundation.errors import CollisionExhaustedError, ErrorCode
from stencil.foundation.paths import same_path
from stencil.generation.lookup import ArtifactLookup
from stencil.generation.mapping import MappingStore
from stencil.generation.protocols import SourceUnit
from stencil.generation.settings import TemplateSettings

logger = logging.getLogger(__name__)

MAX_ALLOCATION_ATTEMPTS = 999

DECLARATION_EXTENSION = ".d.ts"


def split_filename(filename: str) -> tuple[str, str]:
    """Split a filename into stem and extension, keeping `.d.ts` whole.

    Example:
        >>> split_filename("Foo.d.ts")
        ('Foo', '.d.ts')
        >>> split_filename("Foo.model.ts")
        ('Foo.model', '.ts')
    """
    if filename.lower().endswith(DECLARATION_EXTENSION):
        return filename[: -len(DECLARATION_EXTENSION)], filename[-len(DECLARATION_EXTENSION):]

    dot = filename.rfind(".")
    if dot == -1:
        return filename, ""
    return filename[:dot], filename[dot:]


class OutputPathAllocator:
    """Computes the output path for a source unit within a template's scope."""

    def __init__(
        self,
        template_path: str | Path,
        settings: TemplateSettings,
        lookup: ArtifactLookup,
        mappings: MappingStore,
        max_attempts: int = MAX_ALLOCATION_ATTEMPTS,
    ) -> None:
        self.directory = Path(template_path).parent
        self.settings = settings
        self.lookup = lookup
        self.mappings = mappings
        self.max_attempts = max_attempts

    def output_filename(self, source: SourceUnit) -> str:
        """Base output filename from the naming policy.

        A failing filename factory is logged and the default
        `<source stem><extension>` is used instead.
        """
        extension = self.settings.extension
        factory = self.settings.output_filename_factory

        if factory is not None:
            try:
                filename = factory(source)
                if "." not in filename:
                    filename += extension
                return filename
            except Exception as e:
                logger.warning("Can't get output filename for '%s' (%s)", source.full_name, e)

        return Path(source.full_name).stem + extension

    def allocate(self, source: SourceUnit) -> Path:
        """Pick the output path for `source`.

        A candidate is accepted when nothing is tracked there, or when the
        artifact there is unmapped or already mapped to this source.

        Raises:
            CollisionExhaustedError: If every attempt collides.
        """
        source_path = source.full_name
        filename = self.output_filename(source)
        stem, extension = split_filename(filename)
        candidate = self.directory / filename

        for attempt in range(1, self.max_attempts + 1):
            item = self.lookup.find_by_output_path(candidate)
            if item is None:
                return candidate

            mapped = self.mappings.get_mapped_source(item)
            if mapped is None or same_path(source_path, mapped):
                return candidate

            logger.debug("%s is mapped to %s, trying next name", candidate.name, mapped)
            candidate = self.directory / f"{stem} ({attempt}){extension}"

        raise CollisionExhaustedError(
            code=ErrorCode.COLLISION_EXHAUSTED,
            context={"source": source_path, "attempts": self.max_attempts},
        )
