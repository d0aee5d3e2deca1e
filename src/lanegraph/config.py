"""Configuration loading and management for lanegraph.

The layout engine takes a LayoutConfig argument and never looks at files or
the environment itself. load_config() is the discovery layer used by the
command line; sources are merged in priority order:
    1. Defaults (defined in LayoutConfig)
    2. Global config (~/.lanegraph.toml)
    3. Project config (./lanegraph.toml)
    4. Explicit config file
    5. Environment variables (LANEGRAPH_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(strategy="row-by-row")
    >>> config.strategy
    'row-by-row'
    >>> config.palette[0]
    '#60a5fa'
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

STRATEGY_NAMES = ("branch-first", "row-by-row")

DEFAULT_PALETTE: tuple[str, ...] = (
    "#60a5fa",  # blue-400
    "#34d399",  # emerald-400
    "#fb923c",  # orange-400
    "#c084fc",  # purple-400
    "#22d3ee",  # cyan-400
    "#fb7185",  # rose-400
    "#facc15",  # yellow-400
    "#a78bfa",  # violet-400
)


@dataclass(frozen=True)
class LayoutConfig:
    """Configuration for one layout computation.

    Attributes:
        Layout:
            strategy: "branch-first" (branch is the unit of layout) or
                "row-by-row" (commit is the unit of layout)
            palette: Lane colors; a lane's color is palette[lane % len(palette)]
            fallback_color: Color for renderers that meet a commit outside
                any palette lookup
            compact_lanes: Renumber branch-first lanes to remove gaps

        Mainline:
            default_branch: Explicit name of the mainline branch
            mainline_candidates: Names tried in order when default_branch
                is unset or absent from the refs

        History source:
            max_commits: Commit limit for the git reader

        Output control:
            verbosity: Logging verbosity level
    """

    strategy: str = "branch-first"
    palette: tuple[str, ...] = DEFAULT_PALETTE
    fallback_color: str = "#888888"
    compact_lanes: bool = True

    default_branch: Optional[str] = None
    mainline_candidates: tuple[str, ...] = field(default_factory=lambda: ("main", "master"))

    max_commits: int = 5000

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.strategy not in STRATEGY_NAMES:
            raise InvalidConfigError(
                "strategy", self.strategy, f"expected one of {', '.join(STRATEGY_NAMES)}"
            )
        if not self.palette:
            raise InvalidConfigError("palette", self.palette, "palette must not be empty")
        if any(not isinstance(c, str) or not c for c in self.palette):
            raise InvalidConfigError("palette", self.palette, "colors must be non-empty strings")
        if not self.mainline_candidates:
            raise InvalidConfigError(
                "mainline_candidates", self.mainline_candidates, "need at least one name"
            )
        if self.default_branch is not None and not self.default_branch.strip():
            raise InvalidConfigError("default_branch", self.default_branch, "must not be blank")
        if self.max_commits < 1:
            raise InvalidConfigError("max_commits", self.max_commits, "must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )

    @property
    def mainline_name(self) -> str:
        """Name used for the mainline when no branch ref names it."""
        return self.default_branch or self.mainline_candidates[0]

    def color_for_lane(self, lane: int) -> str:
        """Palette color of a lane."""
        if lane < 0:
            return self.fallback_color
        return self.palette[lane % len(self.palette)]


DEFAULT_CONFIG = LayoutConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> LayoutConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). None
            values are ignored so unset CLI options do not mask files.

    Returns:
        Validated LayoutConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a merged value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".lanegraph.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "lanegraph.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(
                f"Config file not found: {config_file}", details={"path": str(config_file)}
            )
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    for key in ("palette", "mainline_candidates"):
        if key in merged and isinstance(merged[key], list):
            merged[key] = tuple(merged[key])

    known = {f.name for f in fields(LayoutConfig)}
    unknown = sorted(set(merged) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            details={"known": ", ".join(sorted(known))},
        )

    return LayoutConfig(**merged)


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from LANEGRAPH_* environment variables.

    Supported environment variables:
        LANEGRAPH_STRATEGY: branch-first/row-by-row
        LANEGRAPH_PALETTE: comma-separated colors
        LANEGRAPH_FALLBACK_COLOR: str
        LANEGRAPH_COMPACT_LANES: bool (true/false/1/0)
        LANEGRAPH_DEFAULT_BRANCH: str
        LANEGRAPH_MAINLINE_CANDIDATES: comma-separated names
        LANEGRAPH_MAX_COMMITS: int
        LANEGRAPH_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any LANEGRAPH_* vars found.
    """
    type_hints = get_type_hints(LayoutConfig)

    result: dict[str, Any] = {}

    for field_name in LayoutConfig.__dataclass_fields__:
        env_key = f"LANEGRAPH_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(field_name, env_value, f"{env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return the [lanegraph] table or the whole document.

    Raises:
        ConfigurationError: If TOML support is missing or parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            # Fallback to tomli for Python 3.9-3.10
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}", details={"path": str(path)})

    section = data.get("lanegraph", data)
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Invalid config file '{path}': [lanegraph] must be a table",
            details={"path": str(path)},
        )
    return dict(section)
