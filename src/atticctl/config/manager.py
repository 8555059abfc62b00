# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.12
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/config/manager.py

from __future__ import annotations

import os
import shlex
import socket
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Final, Mapping, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from atticctl.system.exceptions import ConfigError, MissingArchiveError


# ---- Constants ----

DEFAULT_PROFILE: Final = "config"
LOCK_FILENAME: Final = "lockfile"
ARCHIVE_DATE_FORMAT: Final = "%Y%m%d%H%M%S"
RETENTION_CLASSES: Final = ("hourly", "daily", "weekly", "monthly", "yearly")

# Profile field -> environment variable consulted when the profile leaves it unset
ENV_FALLBACKS: Final[dict[str, str]] = {
    "host": "HOST",
    "repository": "REPOSITORY",
    "backup_sources": "BACKUP_SOURCES",
    "hourly": "HOURLY",
    "daily": "DAILY",
    "weekly": "WEEKLY",
    "monthly": "MONTHLY",
    "yearly": "YEARLY",
    "engine": "ATTIC_ENGINE",
}

# Fields set by the loader, never read from a profile file
INTERNAL_FIELDS: Final[frozenset[str]] = frozenset({"name", "source_path", "migrated"})


def get_attic_dir() -> Path:
    """Return the base directory holding keys, profiles and exclude files.

    Evaluated at call time so ATTICCTL_HOME can be changed at runtime
    (important for test isolation).
    """
    override = os.getenv("ATTICCTL_HOME")
    if override:
        return Path(override)
    return Path.home() / ".attic"


def get_key_dir() -> Path:
    return get_attic_dir() / "keys"


def get_config_dir() -> Path:
    return get_attic_dir() / "configs"


def short_hostname() -> str:
    """Hostname without the domain part, like `hostname -s`."""
    return socket.gethostname().split(".")[0]


# ---- Legacy Profile Format ----

def parse_shell_assignments(text: str) -> dict[str, str]:
    """Parse a legacy profile written as shell variable assignments.

    Legacy profiles were sourced by a shell script, so they look like:

        REPOSITORY=/Backups/$HOST
        BACKUP_SOURCES="/ /home"
        export DAILY=14

    Quoting follows shell rules and `$VAR` / `${VAR}` references are
    expanded against earlier assignments and the environment. Anything
    that is not an assignment is rejected.

    Args:
        text: Raw profile file content

    Returns:
        Mapping of variable name to (unparsed) string value

    Raises:
        ConfigError: If a line is not a valid assignment
    """
    data: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        try:
            tokens = shlex.split(stripped, comments=True)
        except ValueError as e:
            raise ConfigError(f"line {lineno}: {e}") from e

        if tokens and tokens[0] == "export":
            tokens = tokens[1:]

        for token in tokens:
            key, sep, value = token.partition("=")
            if not sep or not key.isidentifier():
                raise ConfigError(f"line {lineno}: expected KEY=value, got {token!r}")
            data[key] = Template(value).safe_substitute({**os.environ, **data})

    return data


def read_profile_file(path: Path) -> tuple[dict, bool]:
    """Read a profile file in either YAML or legacy shell format.

    Returns:
        Tuple of (data with lower-cased keys, was_migrated_flag)
    """
    text = path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        data = None

    if isinstance(data, dict):
        return {str(key).lower(): value for key, value in data.items()}, False

    # Not a mapping: "KEY=value" lines read as a plain YAML scalar
    legacy = parse_shell_assignments(text)
    if legacy:
        logger.debug(f"Read {path} as a legacy shell-style profile")
    return {key.lower(): value for key, value in legacy.items()}, bool(legacy)


def _apply_environment(data: dict, environ: Mapping[str, str]) -> dict:
    """Fill fields the profile leaves unset from environment variables."""
    merged = {
        key: value for key, value in data.items()
        if value is not None and value != ""
    }
    for field_name, env_name in ENV_FALLBACKS.items():
        if field_name not in merged and environ.get(env_name):
            merged[field_name] = environ[env_name]
            logger.debug(f"Using {env_name} from environment for {field_name}")
    return merged


# ---- Profile Model ----

class Profile(BaseModel):
    """A resolved backup profile: where to back up from, to, and how long to keep it."""
    # YAML reads `host: 12345` as an int; shell-format profiles give a str
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = DEFAULT_PROFILE

    host: str = Field(default_factory=lambda: short_hostname())
    repository: Optional[str] = None  # Defaults to /Backups/<host>
    backup_sources: list[str] = Field(default_factory=lambda: ["/"])

    # Retention, forwarded to the engine's prune command
    hourly: int = Field(default=24, ge=0)
    daily: int = Field(default=7, ge=0)
    weekly: int = Field(default=4, ge=0)
    monthly: int = Field(default=12, ge=0)
    yearly: int = Field(default=10, ge=0)

    # Engine settings
    engine: str = "attic"
    encryption: str = "keyfile"
    checkpoint_interval: int = Field(default=300, gt=0)
    mount_point: Path = Field(default_factory=lambda: Path.home() / "mnt")

    # Optional logging directory
    local_log: Optional[Path] = None

    # Loader bookkeeping
    source_path: Optional[Path] = Field(default=None, exclude=True)
    migrated: bool = Field(default=False, exclude=True)

    @field_validator("backup_sources", mode="before")
    @classmethod
    def split_sources(cls, value):
        """Whitespace-separated strings become one source per word."""
        if isinstance(value, str):
            return value.split()
        return value

    @field_validator("host", "engine", "encryption")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("mount_point", "local_log")
    @classmethod
    def expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @model_validator(mode="after")
    def derive_defaults(self) -> "Profile":
        if not self.repository:
            self.repository = f"/Backups/{self.host}"
        if not self.backup_sources:
            raise ValueError("backup_sources must name at least one location")
        return self

    # ---- Derived names ----

    @property
    def lock_dir(self) -> Path:
        return Path(self.repository)

    @property
    def lock_file(self) -> Path:
        return self.lock_dir / LOCK_FILENAME

    @property
    def exclude_file(self) -> Path:
        """Per-repository exclude list, e.g. /Backups/web -> ~/.attic/Backups_web.exclude"""
        flattened = self.repository.removeprefix("/").replace("/", "_")
        return get_attic_dir() / f"{flattened}.exclude"

    @property
    def retention(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RETENTION_CLASSES}

    def archive_name(self, now: Optional[datetime] = None) -> str:
        """Name for a new archive: <host>-<YYYYmmddHHMMSS>."""
        timestamp = (now or datetime.now()).strftime(ARCHIVE_DATE_FORMAT)
        return f"{self.host}-{timestamp}"

    def archive_ref(self, archive: str) -> str:
        return f"{self.repository}::{archive}"

    def resolve_archive(self, ident: Optional[str]) -> str:
        """Turn a user-supplied archive ID into a full <repository>::<archive> reference.

        IDs that already mention the host are taken as complete archive
        names; anything else (usually a bare timestamp) gets the
        <host>- prefix backups are created with.

        Raises:
            MissingArchiveError: If no ID was given
        """
        if not ident:
            raise MissingArchiveError("Missing archive ID (list-repo gives a list of archives)")
        if self.host in ident:
            return self.archive_ref(ident)
        return self.archive_ref(f"{self.host}-{ident}")


# ---- Profile Loading ----

def find_profile_path(name: str = DEFAULT_PROFILE) -> Path:
    return get_config_dir() / name


def load_profile(name: str = DEFAULT_PROFILE,
                 environ: Optional[Mapping[str, str]] = None) -> Profile:
    """Load a named profile, falling back to environment and defaults.

    A missing profile file is not an error: every field has a default.

    Args:
        name: Profile file name under the configs directory
        environ: Environment to consult for unset fields (default: os.environ)

    Returns:
        Validated profile

    Raises:
        ConfigError: If the profile file cannot be read or fails validation
    """
    environ = os.environ if environ is None else environ
    path = find_profile_path(name)
    logger.debug(f"Using configuration in '{path}'")

    data: dict = {}
    migrated = False
    source_path = None
    if path.is_file():
        logger.info(f"Obtaining configuration from '{path}'")
        try:
            data, migrated = read_profile_file(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file '{path}': {e}") from e
        except ConfigError as e:
            raise ConfigError(f"Invalid configuration in '{path}': {e}") from e
        source_path = path
    else:
        logger.warning(f"Configuration file '{path}' not found. Trying default values")

    ignored = INTERNAL_FIELDS.intersection(data)
    if ignored:
        logger.warning(f"Ignoring reserved keys in '{path}': {', '.join(sorted(ignored))}")
    data = {key: value for key, value in data.items() if key not in INTERNAL_FIELDS}

    unknown = set(data) - set(Profile.model_fields)
    if unknown:
        logger.debug(f"Ignoring unknown keys in '{path}': {', '.join(sorted(unknown))}")

    merged = _apply_environment(data, environ)
    try:
        return Profile.model_validate({
            **merged,
            "name": name,
            "source_path": source_path,
            "migrated": migrated,
        })
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in '{path}': {e}") from e


def list_profiles() -> list[Path]:
    """All profile files directly under the configs directory, sorted by name."""
    config_dir = get_config_dir()
    if not config_dir.is_dir():
        return []
    return sorted(p for p in config_dir.iterdir() if p.is_file())


# done.
