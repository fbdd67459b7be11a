"""Settings for stencil, read from YAML.

Later sources win: built-in defaults, ~/.stencil/config.yaml, the project's
.stencil/config.yaml, a file named explicitly, then STENCIL_<SECTION>_<KEY>
environment variables. The last loaded config is kept as a process-wide
instance behind a lock.
"""

from __future__ import annotations

import os
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from stencil.foundation.errors import config_error

DEFAULT_OUTPUT_EXTENSION = ".ts"
DEFAULT_SOURCE_PATTERN = "*.cs"

VCS_BACKENDS = ("git", "none")


@dataclass
class GenerationConfig:
    """Defaults applied to templates that don't set their own policy."""

    output_extension: str | None = None
    """Extension for generated files. Blank means .ts."""

    source_pattern: str = DEFAULT_SOURCE_PATTERN
    """Glob pattern selecting source units."""

    included_scopes: list[str] = field(default_factory=list)
    """Directories (relative to the project root) to take sources from. Empty means the root."""

    persist: bool = True
    """Save the project manifest after each render."""


@dataclass
class VcsConfig:
    """Version-control checkout before overwriting files."""

    enabled: bool = True
    """Whether to consult version control at all."""

    backend: str = "git"
    """One of: git, none."""


@dataclass
class StencilConfig:
    """Root configuration for Stencil."""

    generation: GenerationConfig = field(default_factory=GenerationConfig)
    vcs: VcsConfig = field(default_factory=VcsConfig)
    debug: bool = False


_config: StencilConfig | None = None
_config_lock = threading.Lock()


def _deep_update(base: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    """Coerce an environment string to bool/int/float/list where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict) -> dict:
    """Overlay STENCIL_<SECTION>_<KEY> variables onto known keys.

    Lists are comma-separated; other values go through _coerce:
        STENCIL_GENERATION_OUTPUT_EXTENSION=d.ts
        STENCIL_GENERATION_INCLUDED_SCOPES=src,lib
        STENCIL_VCS_ENABLED=false
    """
    prefix = "STENCIL_"
    sections = {
        name: set(values) for name, values in config_dict.items() if isinstance(values, dict)
    }

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        name = key[len(prefix):].lower()
        for section, keys in sections.items():
            if not name.startswith(section + "_"):
                continue
            option = name[len(section) + 1:]
            if option not in keys:
                break
            if isinstance(config_dict[section][option], list):
                config_dict[section][option] = [v.strip() for v in value.split(",") if v.strip()]
            else:
                config_dict[section][option] = _coerce(value)
            break

    return config_dict


def _dict_to_config(data: dict) -> StencilConfig:
    try:
        generation = GenerationConfig(**data.get("generation", {}))
        vcs = VcsConfig(**data.get("vcs", {}))
    except TypeError as e:
        raise config_error("config", str(e)) from e

    # YAML and env coercion turn a bare "1" into a number
    if generation.output_extension is not None:
        generation.output_extension = str(generation.output_extension)

    if vcs.backend not in VCS_BACKENDS:
        raise config_error("vcs.backend", f"expected one of {', '.join(VCS_BACKENDS)}")

    return StencilConfig(
        generation=generation,
        vcs=vcs,
        debug=bool(data.get("debug", False)),
    )


def load_config(path: str | Path | None = None, root: Path | None = None) -> StencilConfig:
    """Merge every config source and make the result the global config.

    `root` is where the project's .stencil/ lives (cwd if omitted); `path`
    names one more YAML file applied after it.
    """
    global _config

    config_dict: dict[str, Any] = asdict(StencilConfig())

    candidates = [Path.home(), root or Path.cwd()]
    sources = [base / ".stencil" / "config.yaml" for base in candidates]
    if path:
        sources.append(Path(path))

    for config_path in filter(Path.is_file, sources):
        try:
            file_config = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise config_error(str(config_path), f"YAML parse error: {e}") from e
        if not isinstance(file_config, dict):
            raise config_error(str(config_path), "top level must be a mapping")
        _deep_update(config_dict, file_config)

    config = _dict_to_config(_apply_env_overrides(config_dict))
    with _config_lock:
        _config = config
    return config


def get_config() -> StencilConfig:
    """Get the global config, loading it on first use."""
    with _config_lock:
        cached = _config
    return cached if cached is not None else load_config()


def reset_config() -> None:
    """Forget the global config so the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None


def save_default_config(path: str | Path) -> Path:
    """Dump the built-in defaults to `path` as YAML and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(asdict(StencilConfig()), sort_keys=False))
    return path
