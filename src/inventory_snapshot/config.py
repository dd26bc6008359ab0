"""Pipeline configuration.

Configuration is an immutable value built once at start-up from defaults,
an optional TOML file and CLI overrides, then passed to the pipeline.

Example inventory-snapshot.toml:
  [snapshot]
  repository = "https://github.com/mdn/content.git"
  repo_path = ".snapshot/content"
  ref = "origin/main"
  target_date = 2024-01-15
  clone_filter = "blob:none"
  install_dependencies = true
  cleanup = false
  output = "inventory.json"
"""

import dataclasses
import tomllib
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from inventory_snapshot.errors import ConfigError

CONFIG_FILENAME = "inventory-snapshot.toml"

DEFAULT_REPOSITORY = "https://github.com/mdn/content.git"
DEFAULT_INVENTORY_COMMAND = ("npm", "run", "--silent", "content", "inventory")
DEFAULT_INSTALL_COMMAND = ("npm", "ci")

_GITHUB_HTTPS_PREFIX = "https://github.com/"


@dataclass(frozen=True)
class SnapshotConfig:
    """Everything one pipeline run needs to know."""

    repository: str = DEFAULT_REPOSITORY
    use_ssh: bool = False
    repo_path: Path = Path(".snapshot/content")
    ref: str = "origin/main"
    target_date: date | None = None
    clone_filter: str = "blob:none"
    remote: str = "origin"
    inventory_command: tuple[str, ...] = DEFAULT_INVENTORY_COMMAND
    install_command: tuple[str, ...] = DEFAULT_INSTALL_COMMAND
    install_dependencies: bool = False
    redirects_path: str = "files/en-us/_redirects.txt"
    capture_redirects: bool = True
    cleanup: bool = False
    output: Path = Path("inventory.json")
    tool_timeout: float | None = 1800

    @property
    def repository_url(self) -> str:
        """Clone URL, rewritten to the SSH form when ``use_ssh`` is set."""
        if self.use_ssh and self.repository.startswith(_GITHUB_HTTPS_PREFIX):
            return "git@github.com:" + self.repository[len(_GITHUB_HTTPS_PREFIX) :]
        return self.repository


_PATH_FIELDS = {"repo_path", "output"}
_BOOL_FIELDS = {"use_ssh", "install_dependencies", "capture_redirects", "cleanup"}
_STR_FIELDS = {"repository", "ref", "clone_filter", "remote", "redirects_path"}
_COMMAND_FIELDS = {"inventory_command", "install_command"}
_KNOWN_FIELDS = (
    _PATH_FIELDS | _BOOL_FIELDS | _STR_FIELDS | _COMMAND_FIELDS | {"target_date", "tool_timeout"}
)


def parse_target_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD calendar date.

    Raises:
        ConfigError: If the value is not an ISO calendar date
    """
    if isinstance(value, datetime):
        raise ConfigError(f"Expected a calendar date, got a timestamp: {value.isoformat()}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"Invalid date {value!r}: expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid date '{value}': expected YYYY-MM-DD") from e


def _coerce(key: str, value: Any, *, base_dir: Path) -> Any:
    if key in _PATH_FIELDS:
        path = Path(str(value))
        return path if path.is_absolute() else base_dir / path
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be true or false, got {value!r}")
        return value
    if key in _STR_FIELDS:
        return str(value)
    if key in _COMMAND_FIELDS:
        if not isinstance(value, list | tuple) or not all(isinstance(x, str) for x in value):
            raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
        if not value:
            raise ConfigError(f"'{key}' must not be empty")
        return tuple(value)
    if key == "target_date":
        return parse_target_date(value)
    if key == "tool_timeout":
        if value is False or value == 0:
            return None
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ConfigError(f"'tool_timeout' must be a number of seconds, got {value!r}")
        return float(value)
    raise ConfigError(f"Unknown configuration key '{key}'")


def load_config_file(cfg_path: Path) -> dict[str, Any]:
    """Load the ``[snapshot]`` table of a TOML file.

    Relative paths in the file are resolved against the file's directory.

    Raises:
        ConfigError: If the file is unreadable, not valid TOML, or contains
            unknown keys or badly typed values
    """
    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {cfg_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {cfg_path}: {e}") from e

    table = data.get("snapshot", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[snapshot] in {cfg_path} must be a table")

    unknown = sorted(set(table) - _KNOWN_FIELDS)
    if unknown:
        raise ConfigError(f"Unknown keys in {cfg_path}: {', '.join(unknown)}")

    base_dir = cfg_path.parent
    return {key: _coerce(key, value, base_dir=base_dir) for key, value in table.items()}


def load_config(
    *,
    cwd: Path,
    config_path: Path | None,
    overrides: dict[str, Any],
) -> SnapshotConfig:
    """Build the effective configuration.

    Precedence (later wins): defaults, config file, overrides. Overrides whose
    value is None are ignored so unset CLI flags do not clobber the file.

    Args:
        cwd: Directory used to find ``inventory-snapshot.toml`` when
            ``config_path`` is None, and to resolve relative override paths
        config_path: Explicit config file, which must exist
        overrides: Field name -> value, typically from CLI flags

    Raises:
        ConfigError: On any invalid file or value
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        file_values = load_config_file(config_path)
    elif (cwd / CONFIG_FILENAME).exists():
        file_values = load_config_file(cwd / CONFIG_FILENAME)
    else:
        file_values = {}

    explicit = {
        key: _coerce(key, value, base_dir=cwd)
        for key, value in overrides.items()
        if value is not None
    }

    defaults = SnapshotConfig()
    merged = {**file_values, **explicit}
    if "repo_path" not in merged:
        merged["repo_path"] = cwd / defaults.repo_path
    if "output" not in merged:
        merged["output"] = cwd / defaults.output
    return dataclasses.replace(defaults, **merged)
