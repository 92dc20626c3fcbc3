"""Typed release configuration.

`release.toml` is parsed into `ReleaseSettings`, a frozen dataclass tree.
CLI flags are layered on top with `ReleaseSettings.with_overrides`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "ConfigError",
    "HookSettings",
    "ReleaseSettings",
    "DEFAULT_CONFIG_FILE",
    "HOOK_NAMES",
    "load_settings",
    "load_settings_or_default",
]

DEFAULT_CONFIG_FILE = "release.toml"
DEFAULT_BRANCH = "master"
DEFAULT_CHANGELOG = "CHANGELOG.md"
DEFAULT_VERSION_FILE = "package.json"

HOOK_NAMES = ("pre_commit", "pre_release", "post_release")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class HookSettings:
    """A templated shell command run at a fixed point of the release."""

    command: str
    silent: bool = False


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    """Everything a release run can be configured with, before resolution."""

    name: str | None = None
    old_version: str | None = None
    new_version: str | None = None
    release_type: str | None = None
    tag_prefix: str = "v"

    # [github]
    remote: str | None = None
    branch: str = DEFAULT_BRANCH
    strict_branch: bool = True
    user: str | None = None
    token_ref: str | None = None
    api_url: str | None = None
    assets: tuple[str, ...] = ()
    publish_release: bool = True

    # [changelog]
    changelog_path: str = DEFAULT_CHANGELOG
    update_changelog: bool = True
    release_notes: bool = True

    # [version_file]
    version_file: str = DEFAULT_VERSION_FILE
    update_version_file: bool = True

    hooks: Mapping[str, HookSettings] = field(default_factory=dict)
    confirm: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseSettings:
        """Create settings from a mapping (parsed TOML).

        Raises:
            TypeError: If a value has the wrong shape.
        """
        github: StrDict = get_table(data, "github") or {}
        changelog: StrDict = get_table(data, "changelog") or {}
        version_file: StrDict = get_table(data, "version_file") or {}
        prompts: StrDict = get_table(data, "prompts") or {}

        return cls(
            name=get_str(data, "name"),
            old_version=get_str(data, "old_version"),
            tag_prefix=_str_or_default(data, "tag_prefix", "v"),
            remote=get_str(github, "remote"),
            branch=get_str(github, "branch") or DEFAULT_BRANCH,
            strict_branch=_bool_or_default(github, "strict_branch", True),
            user=get_str(github, "user"),
            token_ref=get_str(github, "token_ref"),
            api_url=get_str(github, "api_url"),
            assets=get_str_list(github, "assets") or (),
            publish_release=_bool_or_default(github, "release", True),
            changelog_path=get_str(changelog, "path") or DEFAULT_CHANGELOG,
            update_changelog=_bool_or_default(changelog, "update", True),
            release_notes=_bool_or_default(changelog, "release_notes", True),
            version_file=get_str(version_file, "path") or DEFAULT_VERSION_FILE,
            update_version_file=_bool_or_default(version_file, "update", True),
            hooks=_parse_hooks(get_table(data, "hooks") or {}),
            confirm=get_str_list(prompts, "confirm") or (),
        )

    def with_overrides(self, **overrides: object) -> ReleaseSettings:
        """Layer CLI values on top; None and empty values leave a field alone."""
        changes = {k: v for k, v in overrides.items() if v is not None and v != ()}
        return replace(self, **changes)  # type: ignore[arg-type]


def _str_or_default(table: Mapping[str, object], key: str, default: str) -> str:
    value = table.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


def _bool_or_default(table: Mapping[str, object], key: str, default: bool) -> bool:
    if key not in table:
        return default
    value = get_bool(table, key)
    if value is None:
        raise TypeError(f"{key} must be true or false")
    return value


def _parse_hooks(table: StrDict) -> dict[str, HookSettings]:
    hooks: dict[str, HookSettings] = {}
    for name in HOOK_NAMES:
        entry = get_table(table, name)
        if entry is None:
            continue
        command = get_str(entry, "command")
        if command is None:
            continue
        hooks[name] = HookSettings(
            command=command,
            silent=_bool_or_default(entry, "silent", False),
        )
    unknown = sorted(set(table) - set(HOOK_NAMES))
    if unknown:
        raise TypeError(f"unknown hooks: {', '.join(unknown)}")
    return hooks


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_settings(path: Path) -> Result[ReleaseSettings, ConfigError]:
    """Load and parse release settings from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(ReleaseSettings) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseSettings.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_settings_or_default(path: Path) -> Result[ReleaseSettings, ConfigError]:
    """Like load_settings, but a missing file yields default settings."""
    if not path.exists():
        return Ok(ReleaseSettings())
    return load_settings(path)
