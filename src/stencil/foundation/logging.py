"""Logging setup for the stencil command line.

The console stays at WARNING unless something asks for more. In order of
precedence:

    1. `level` argument
    2. STENCIL_LOG_LEVEL=<name or number>
    3. STENCIL_DEBUG=true
    4. `debug=True` (the --debug flag)
    5. `debug: true` in .stencil/config.yaml

With `persist=True`, every record (DEBUG included) also goes to a session
file under .stencil/logs/, of which the newest ten are kept.

    from stencil.foundation.logging import configure_logging
    configure_logging(debug=debug)
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_DEFAULT_FORMAT = "%(name)s: %(message)s"

_MAX_LOG_SESSIONS = 10

_TRUTHY = frozenset({"true", "1", "yes"})


def _stencil_dir(root: Path | None) -> Path:
    return (root or Path.cwd()) / ".stencil"


def _cleanup_old_logs(log_dir: Path, max_sessions: int = _MAX_LOG_SESSIONS) -> None:
    """Delete all but the `max_sessions` most recent session logs."""
    sessions = sorted(log_dir.glob("session_*.log"), key=os.path.getmtime)
    stale = sessions[:-max_sessions] if max_sessions else sessions
    for path in stale:
        path.unlink(missing_ok=True)


def _check_config_debug(root: Path | None = None) -> bool:
    """Whether .stencil/config.yaml sets `debug: true`.

    Scans for the top-level key by hand so logging is ready before the
    config module (and YAML) is loaded.
    """
    try:
        lines = (_stencil_dir(root) / "config.yaml").read_text().splitlines()
    except OSError:
        return False

    for line in lines:
        key, sep, value = line.partition(":")
        if sep and key == "debug":
            return value.strip().lower() in _TRUTHY
    return False


def _parse_level(level: int | str) -> int:
    """Level from a number or a name; unknown names mean WARNING."""
    if isinstance(level, int):
        return level
    if level.strip().isdigit():
        return int(level)
    named = logging.getLevelName(level.strip().upper())
    return named if isinstance(named, int) else logging.WARNING


def _resolve_level(level: int | str | None, debug: bool, root: Path | None) -> int:
    if level is not None:
        return _parse_level(level)

    env_level = os.environ.get("STENCIL_LOG_LEVEL")
    if env_level:
        return _parse_level(env_level)

    wants_debug = (
        os.environ.get("STENCIL_DEBUG", "").lower() in _TRUTHY
        or debug
        or _check_config_debug(root)
    )
    return logging.DEBUG if wants_debug else logging.WARNING


def _session_handler(root: Path | None) -> logging.Handler:
    log_dir = _stencil_dir(root) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_dir)

    started = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    handler = logging.FileHandler(log_dir / f"session_{started}.log", mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
    return handler


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: object = None,
    persist: bool = False,
    root: Path | None = None,
) -> None:
    """Replace the root logger's handlers with a console (and optional file) handler.

    Args:
        debug: DEBUG level with timestamps and logger names
        level: Explicit level, as an int or a name like "INFO"
        stream: Console stream, stderr by default
        persist: Also write a session log under .stencil/logs/
        root: Project root holding .stencil/ (default: cwd)
    """
    console_level = _resolve_level(level, debug, root)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_DEBUG_FORMAT if console_level <= logging.DEBUG else _DEFAULT_FORMAT)
    )
    handlers: list[logging.Handler] = [console]

    if persist:
        try:
            handlers.append(_session_handler(root))
        except OSError as e:
            sys.stderr.write(f"Warning: session log disabled: {e}\n")

    root_logger = logging.getLogger()
    root_logger.handlers[:] = handlers
    # the file handler needs DEBUG records even when the console is quieter
    root_logger.setLevel(logging.DEBUG if len(handlers) > 1 else console_level)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, persist=%s",
        logging.getLevelName(console_level),
        persist,
    )
