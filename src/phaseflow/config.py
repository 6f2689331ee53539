# src/phaseflow/config.py
from __future__ import annotations
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union
import os
import warnings

try:
    import tomllib  # type: ignore
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib  # type: ignore

from phaseflow.errors import ConfigError

__all__ = [
    "DEFAULT_STEPS",
    "SolverConfig",
    "load_config",
    "default_config",
    "validate_steps",
]

DEFAULT_STEPS = 250
DEFAULT_MAX_FORMULA_LENGTH = 1000

_ENV_CONFIG = "PHASEFLOW_CONFIG"

# section -> {toml key: SolverConfig field}
_KNOWN_KEYS: Dict[str, Dict[str, str]] = {
    "solver": {"steps": "steps"},
    "formula": {"max_length": "max_formula_length"},
    "library": {"path": "library_path"},
}


@dataclass(frozen=True)
class SolverConfig:
    steps: int = DEFAULT_STEPS
    max_formula_length: int = DEFAULT_MAX_FORMULA_LENGTH
    # None -> bundled examples
    library_path: Optional[Path] = None

    def __post_init__(self):
        validate_steps(self.steps)
        if (
            isinstance(self.max_formula_length, bool)
            or not isinstance(self.max_formula_length, int)
            or self.max_formula_length < 1
        ):
            raise ConfigError(
                f"max_formula_length must be a positive integer, got {self.max_formula_length!r}"
            )


def validate_steps(steps: Any) -> int:
    """Return steps unchanged if it is a positive int, else raise ConfigError."""
    if isinstance(steps, bool) or not isinstance(steps, int):
        raise ConfigError(f"Step count must be an integer, got {type(steps).__name__}: {steps!r}")
    if steps < 1:
        raise ConfigError(f"Step count must be positive, got {steps}")
    return steps


def _get_config_path() -> Optional[Path]:
    """Return the config file to read, or None when no file applies."""
    env = os.environ.get(_ENV_CONFIG)
    if env:
        return Path(env).expanduser()
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    candidate = Path(base) / "phaseflow" / "config.toml"
    if candidate.is_file():
        return candidate
    return None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}")


def _config_from_data(data: Dict[str, Any], source: Path) -> SolverConfig:
    updates: Dict[str, Any] = {}
    for section, body in data.items():
        if section not in _KNOWN_KEYS:
            warnings.warn(
                f"Unknown config section [{section}] in {source}; ignoring.",
                RuntimeWarning,
                stacklevel=3,
            )
            continue
        if not isinstance(body, dict):
            raise ConfigError(f"[{section}] in {source} must be a table")
        keys = _KNOWN_KEYS[section]
        for key, value in body.items():
            if key not in keys:
                warnings.warn(
                    f"Unknown config key [{section}].{key} in {source}; "
                    f"valid keys: {sorted(keys)}",
                    RuntimeWarning,
                    stacklevel=3,
                )
                continue
            updates[keys[key]] = value

    lib = updates.get("library_path")
    if lib is not None:
        if not isinstance(lib, str) or not lib.strip():
            raise ConfigError(f"[library].path in {source} must be a non-empty string")
        lib_path = Path(lib).expanduser()
        if not lib_path.is_absolute():
            lib_path = source.parent / lib_path
        updates["library_path"] = lib_path

    return replace(SolverConfig(), **updates)


def load_config(path: Optional[Union[str, Path]] = None) -> SolverConfig:
    """
    Load solver configuration.

    Resolution order:
      1. `path` argument (must exist)
      2. $PHASEFLOW_CONFIG (must exist)
      3. $XDG_CONFIG_HOME/phaseflow/config.toml (or ~/.config/...), if present
      4. built-in defaults

    Raises:
        ConfigError: unreadable file, TOML syntax error, or invalid values.
    """
    cfg_path = Path(path).expanduser() if path is not None else _get_config_path()
    if cfg_path is None:
        return SolverConfig()
    data = _read_toml(cfg_path)
    return _config_from_data(data, cfg_path)


@lru_cache(maxsize=1)
def default_config() -> SolverConfig:
    """Process-wide configuration, read once via load_config()."""
    return load_config()
