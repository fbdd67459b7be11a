"""Errors raised by stencil.

Every error carries an `ErrorCode`. The thousands digit of the code names the
area that failed, and each code maps to a message template and, for some, a
list of hints shown by the CLI. Templates are filled from the error's
`context` dict; a missing key leaves the template as written.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Stable numeric codes, shown to users as ST-<code>.

        1xxx  integrity (mapping slots, required arguments)
        2xxx  output path allocation
        3xxx  project container and its items
        5xxx  configuration
        6xxx  template modules
    """

    MAPPING_SLOT_MISSING = 1001
    ARGUMENT_MISSING = 1002

    COLLISION_EXHAUSTED = 2001

    ITEM_UNAVAILABLE = 3001
    ITEM_EXISTS = 3002
    FILE_NOT_FOUND = 3003
    MANIFEST_INVALID = 3004
    INVALID_NAME = 3005

    CONFIG_INVALID = 5001

    TEMPLATE_NOT_FOUND = 6001
    TEMPLATE_INVALID = 6002

    @property
    def category(self) -> str:
        return _CATEGORIES.get(self.value // 1000, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """False for errors that point at a broken project rather than bad input."""
        return self not in _FATAL


_CATEGORIES = {
    1: "integrity",
    2: "allocation",
    3: "container",
    5: "config",
    6: "template",
}

_FATAL = frozenset({
    ErrorCode.MAPPING_SLOT_MISSING,
    ErrorCode.ARGUMENT_MISSING,
    ErrorCode.COLLISION_EXHAUSTED,
    ErrorCode.MANIFEST_INVALID,
})

ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.MAPPING_SLOT_MISSING: "Cannot find '{attribute}' attribute on '{path}'.",
    ErrorCode.ARGUMENT_MISSING: "Required argument '{argument}' is missing.",
    ErrorCode.COLLISION_EXHAUSTED: (
        "Could not allocate an output path for '{source}' after {attempts} attempts."
    ),
    ErrorCode.ITEM_UNAVAILABLE: "Tracked item '{path}' is not available.",
    ErrorCode.ITEM_EXISTS: "'{path}' already exists.",
    ErrorCode.FILE_NOT_FOUND: "File not found: {path}",
    ErrorCode.MANIFEST_INVALID: "Invalid project manifest '{path}': {detail}",
    ErrorCode.INVALID_NAME: "'{name}' is not a valid file name.",
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
    ErrorCode.TEMPLATE_NOT_FOUND: "Template '{path}' is not registered in the project.",
    ErrorCode.TEMPLATE_INVALID: "Invalid template '{path}': {detail}",
}

RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.MAPPING_SLOT_MISSING: [
        "Re-add the generated file to the template with 'stencil render'",
        "Check that .stencil/project.json was not edited by hand",
    ],
    ErrorCode.COLLISION_EXHAUSTED: [
        "Check the template's output_filename() for names shared by many sources",
    ],
    ErrorCode.MANIFEST_INVALID: [
        "Restore .stencil/project.json from version control",
    ],
    ErrorCode.TEMPLATE_NOT_FOUND: [
        "Register the template with 'stencil add-template {path}'",
    ],
    ErrorCode.TEMPLATE_INVALID: [
        "A template module must define render(source)",
    ],
}


def _fill(text: str, context: dict[str, Any]) -> str:
    try:
        return text.format(**context)
    except KeyError:
        return text


class StencilError(Exception):
    """Base class for stencil errors.

        >>> print(StencilError(ErrorCode.FILE_NOT_FOUND, {"path": "Foo.ts"}))
        [ST-3003] File not found: Foo.ts
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = dict(context) if context else {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def error_id(self) -> str:
        return f"ST-{self.code.value}"

    @property
    def message(self) -> str:
        return _fill(ERROR_MESSAGES.get(self.code, "An error occurred: {detail}"), self.context)

    @property
    def recovery_hints(self) -> list[str]:
        return [_fill(hint, self.context) for hint in RECOVERY_HINTS.get(self.code, ())]

    @property
    def category(self) -> str:
        return self.code.category

    @property
    def is_recoverable(self) -> bool:
        return self.code.is_recoverable

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form used by `--json` error output."""
        return dict(
            error_id=self.error_id,
            code=int(self.code),
            category=self.category,
            message=self.message,
            recoverable=self.is_recoverable,
            recovery_hints=self.recovery_hints,
            context=self.context,
        )


class IntegrityError(StencilError):
    """A required argument or attribute slot is missing."""


class CollisionExhaustedError(StencilError):
    """No free output name was found within the attempt bound."""


class ItemUnavailableError(StencilError):
    """A tracked item's metadata cannot currently be read."""


def mapping_slot_missing(attribute: str, path: str) -> IntegrityError:
    return IntegrityError(ErrorCode.MAPPING_SLOT_MISSING, {"attribute": attribute, "path": path})


def argument_missing(argument: str) -> IntegrityError:
    return IntegrityError(ErrorCode.ARGUMENT_MISSING, {"argument": argument})


def item_unavailable(path: str, cause: Exception | None = None) -> ItemUnavailableError:
    return ItemUnavailableError(ErrorCode.ITEM_UNAVAILABLE, {"path": path}, cause=cause)


def config_error(key: str, detail: str = "") -> StencilError:
    return StencilError(ErrorCode.CONFIG_INVALID, {"key": key, "detail": detail})


def template_error(code: ErrorCode, path: str, detail: str = "") -> StencilError:
    return StencilError(code, {"path": path, "detail": detail})
