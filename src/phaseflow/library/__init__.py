# src/phaseflow/library/__init__.py
from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional, Tuple, Union
import warnings

try:
    import tomllib  # type: ignore
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11
    import tomli as tomllib  # type: ignore

from phaseflow.compiler.build import compile_formula, evaluate_constant
from phaseflow.config import SolverConfig, default_config
from phaseflow.dsl.spec import VectorFieldSpec
from phaseflow.errors import ConfigError, FormulaError, UnknownExampleError

__all__ = [
    "ExampleLibrary",
    "load_library",
    "builtin_library",
    "library_for",
    "default_library",
    "lookup_example",
    "example_names",
]

_FORMULA_KEYS = ("dxdt", "dydt")
_NUMBER_KEYS = ("x0", "y0", "t_min", "t_max")


@dataclass(frozen=True, eq=False)
class ExampleLibrary(Mapping):
    """Read-only mapping of example name -> VectorFieldSpec, in file order."""
    entries: Mapping
    default: str

    def __post_init__(self):
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))
        if self.default not in self.entries:
            raise ConfigError(
                f"Default example {self.default!r} is not defined; "
                f"available: {list(self.entries)}"
            )

    def __getitem__(self, name: str) -> VectorFieldSpec:
        try:
            return self.entries[name]
        except KeyError:
            raise UnknownExampleError(name, tuple(self.entries)) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.entries)

    def default_spec(self) -> VectorFieldSpec:
        return self.entries[self.default]


def _read_number(value: Any, where: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{where} must be a number or a constant formula, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return evaluate_constant(value, field=where)
        except FormulaError as e:
            raise ConfigError(str(e)) from None
    raise ConfigError(f"{where} must be a number or a constant formula, got {type(value).__name__}")


def _read_example(name: str, body: Any, source: str) -> VectorFieldSpec:
    if not isinstance(body, dict):
        raise ConfigError(f"[examples.{name}] in {source} must be a table")
    unknown = set(body) - set(_FORMULA_KEYS) - set(_NUMBER_KEYS)
    if unknown:
        warnings.warn(
            f"Unknown keys in [examples.{name}] of {source}: {sorted(unknown)}; ignoring.",
            RuntimeWarning,
            stacklevel=2,
        )
    missing = [k for k in _FORMULA_KEYS + ("x0", "y0", "t_max") if k not in body]
    if missing:
        raise ConfigError(f"[examples.{name}] in {source} is missing: {', '.join(missing)}")

    kwargs: Dict[str, Any] = {}
    for key in _FORMULA_KEYS:
        formula = body[key]
        if not isinstance(formula, str):
            raise ConfigError(f"[examples.{name}].{key} in {source} must be a string formula")
        try:
            compile_formula(formula, field=f"[examples.{name}].{key}")
        except FormulaError as e:
            raise ConfigError(str(e)) from None
        kwargs[key] = formula
    for key in _NUMBER_KEYS:
        if key in body:
            kwargs[key] = _read_number(body[key], f"[examples.{name}].{key}")
    return VectorFieldSpec(**kwargs)


def _library_from_data(data: Dict[str, Any], source: str) -> ExampleLibrary:
    examples = data.get("examples")
    if not isinstance(examples, dict) or not examples:
        raise ConfigError(f"{source} must define at least one [examples.<name>] table")
    entries = {name: _read_example(name, body, source) for name, body in examples.items()}
    default = data.get("default", next(iter(entries)))
    if not isinstance(default, str):
        raise ConfigError(f"'default' in {source} must be an example name")
    return ExampleLibrary(entries=entries, default=default)


def load_library(path: Union[str, Path]) -> ExampleLibrary:
    """
    Load an example library from a TOML file.

    Shape::

        default = "Spring"          # optional, first example otherwise

        [examples.Spring]
        dxdt = "y"
        dydt = "-x"
        x0 = 3.0
        y0 = 0.0
        t_min = 0.0                 # optional, 0.0 otherwise
        t_max = "2*pi"

    Raises:
        ConfigError: unreadable file, bad TOML, or invalid examples.
    """
    path = Path(path).expanduser()
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        raise ConfigError(f"Example library not found: {path}")
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse example library {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read example library {path}: {e}")
    return _library_from_data(data, str(path))


@lru_cache(maxsize=1)
def builtin_library() -> ExampleLibrary:
    """The examples bundled with phaseflow (loaded once per process)."""
    text = resources.files(__name__).joinpath("examples.toml").read_text(encoding="utf-8")
    return _library_from_data(tomllib.loads(text), "<builtin examples.toml>")


def library_for(config: Optional[SolverConfig] = None) -> ExampleLibrary:
    """Library named by `config.library_path`, or the built-in one."""
    if config is None or config.library_path is None:
        return builtin_library()
    return load_library(config.library_path)


@lru_cache(maxsize=1)
def default_library() -> ExampleLibrary:
    """Library selected by `default_config()` (loaded once per process)."""
    return library_for(default_config())


def lookup_example(name: str, *, library: Optional[ExampleLibrary] = None) -> VectorFieldSpec:
    """
    Return the spec stored under `name`.

    Raises:
        UnknownExampleError: `name` is not in the library.
    """
    lib = library if library is not None else default_library()
    return lib[name]


def example_names(library: Optional[ExampleLibrary] = None) -> Tuple[str, ...]:
    """Example names in file order (dropdown options)."""
    lib = library if library is not None else default_library()
    return lib.names
