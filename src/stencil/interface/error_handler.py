"""Terminal reporting for errors that end a CLI command."""

import json
import sys
from typing import NoReturn

from rich.console import Console
from rich.text import Text

from stencil.foundation.errors import StencilError

_stderr = Console(stderr=True)


def _as_json(error: BaseException) -> str:
    if not isinstance(error, StencilError):
        return json.dumps({"error_id": None, "message": str(error), "type": type(error).__name__})
    payload = error.to_dict()
    if error.cause is not None:
        payload["cause"] = str(error.cause)
    return json.dumps(payload)


def handle_error(error: StencilError | Exception, json_output: bool = False) -> NoReturn:
    """Print `error` to stderr and exit with status 1.

    StencilError gets its ST-code, message and numbered hints; anything else
    is shown by type and message. With `json_output`, one JSON object is
    printed instead.
    """
    if json_output:
        sys.stderr.write(_as_json(error) + "\n")
    elif isinstance(error, StencilError):
        _stderr.print(Text.assemble((error.error_id, "bold red"), " ", error.message))
        hints = error.recovery_hints
        if hints:
            _stderr.print("\n[bold]What you can do:[/]")
            for number, hint in enumerate(hints, 1):
                _stderr.print(f"  {number}. {hint}")
    else:
        _stderr.print(f"[bold red]Error:[/] {type(error).__name__}: {error}")
    sys.exit(1)
