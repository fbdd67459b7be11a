"""Foundation domain - Zero-dependency base types, config, errors, paths.

Everything else in stencil imports from here.
"""

from stencil.foundation.config import (
    GenerationConfig,
    StencilConfig,
    VcsConfig,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)
from stencil.foundation.errors import (
    CollisionExhaustedError,
    ErrorCode,
    IntegrityError,
    ItemUnavailableError,
    StencilError,
)
from stencil.foundation.paths import (
    normalize_path,
    relative_to_root,
    resolve_from_root,
    same_path,
)

__all__ = [
    # Config
    "GenerationConfig",
    "StencilConfig",
    "VcsConfig",
    "get_config",
    "load_config",
    "reset_config",
    "save_default_config",
    # Errors
    "CollisionExhaustedError",
    "ErrorCode",
    "IntegrityError",
    "ItemUnavailableError",
    "StencilError",
    # Paths
    "normalize_path",
    "relative_to_root",
    "resolve_from_root",
    "same_path",
]
