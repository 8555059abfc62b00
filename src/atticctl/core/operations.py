# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.14
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/atticctl/core/operations.py

"""
Repository operations behind each CLI command.

Each function takes a resolved Profile and an Engine, runs the engine
command(s) for one subcommand and returns a summary dict. Failures are
raised as EngineError carrying the exit code for that subcommand;
mutating operations hold the repository lock for their whole run and
release it on every path out.
"""

import re
from contextlib import nullcontext
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from atticctl.config.manager import Profile, get_key_dir
from atticctl.core.engine import CheckScope, Engine
from atticctl.system.exceptions import (
    EXIT_ARCHIVE_FAILED,
    EXIT_BACKUP_FAILED,
    EXIT_INIT_FAILED,
    EXIT_MAINTENANCE_FAILED,
    AtticctlError,
    EngineError,
    KeyNotFoundError,
)
from atticctl.system.execution import CommandResult
from atticctl.system.locking import LockInfo, RepositoryLock

REPOSITORY_ID_PATTERN = re.compile(r"^\s*id = (\S+)\s*$", re.MULTILINE)


def _check(result: CommandResult, message: str, exit_code: Optional[int] = None) -> None:
    """Raise EngineError for a failed engine run; exit_code=None passes the engine's status through."""
    if not result.success:
        raise EngineError(message, returncode=result.returncode, exit_code=exit_code)


def repository_lock(profile: Profile, engine: Engine):
    """Lock for mutating operations; dry runs change nothing and skip it."""
    if engine.dry_run:
        return nullcontext()
    return RepositoryLock(profile.lock_file)


def ensure_exclude_file(profile: Profile, create: bool = True) -> Path:
    """Return the profile's exclude file, creating an empty one if missing.

    Raises:
        AtticctlError: If the exclude file cannot be created (backup exit code)
    """
    exclude_file = profile.exclude_file
    try:
        if exclude_file.exists():
            return exclude_file
        if not create:
            logger.warning(f"Exclude file '{exclude_file}' not found, would create empty one")
            return exclude_file
        logger.warning(f"Exclude file '{exclude_file}' not found, creating empty one")
        exclude_file.parent.mkdir(parents=True, exist_ok=True)
        exclude_file.touch()
    except OSError as e:
        raise AtticctlError(f"Cannot create exclude file '{exclude_file}': {e}",
                            exit_code=EXIT_BACKUP_FAILED) from e
    return exclude_file


# ---- Mutating operations ----

def init_repository(profile: Profile, engine: Engine) -> dict[str, Any]:
    with repository_lock(profile, engine):
        result = engine.init(profile.repository, encryption=profile.encryption)
        _check(result,
               f"Could not initialize {engine.binary} repository at {profile.repository}",
               EXIT_INIT_FAILED)

    return {
        'operation': 'init',
        'repository': profile.repository,
        'encryption': profile.encryption,
    }


def backup(profile: Profile, engine: Engine, verbose: bool = False,
           now: Optional[datetime] = None) -> dict[str, Any]:
    """Create a new archive of the profile's sources, then prune old archives.

    Pruning only runs once the new archive exists.
    """
    sources = " ".join(profile.backup_sources)
    logger.info(f"Beginning backup of the locations (not crossing mountpoints): "
                f"'{sources}' to '{profile.repository}'")

    exclude_file = ensure_exclude_file(profile, create=not engine.dry_run)
    archive_name = profile.archive_name(now)
    archive_ref = profile.archive_ref(archive_name)

    with repository_lock(profile, engine):
        result = engine.create(
            archive_ref,
            profile.backup_sources,
            exclude_file,
            checkpoint_interval=profile.checkpoint_interval,
            verbose=verbose,
        )
        _check(result, "Backup failed", EXIT_BACKUP_FAILED)

        logger.info("Backup completed, beginning purging of old backups")
        result = engine.prune(profile.repository, profile.retention)
        _check(result, "Pruning failed!", EXIT_MAINTENANCE_FAILED)

    logger.info(f"Purging of '{sources}' completed successfully")
    return {
        'operation': 'backup',
        'repository': profile.repository,
        'archive': archive_name,
        'sources': list(profile.backup_sources),
        'retention': profile.retention,
    }


def delete_archive(profile: Profile, engine: Engine, ident: Optional[str]) -> dict[str, Any]:
    archive_ref = profile.resolve_archive(ident)
    with repository_lock(profile, engine):
        logger.info(f"Removing {archive_ref}")
        result = engine.delete(archive_ref)
        _check(result,
               f"Could not delete archive {archive_ref} on repository {profile.repository}",
               EXIT_ARCHIVE_FAILED)

    return {'operation': 'delete', 'archive': archive_ref}


def repair_repository(profile: Profile, engine: Engine) -> dict[str, Any]:
    logger.info(f"Doing full repair on {profile.repository}")
    with repository_lock(profile, engine):
        result = engine.check(profile.repository, repair=True)
        _check(result, f"Could not repair {profile.repository}", EXIT_MAINTENANCE_FAILED)

    return {'operation': 'repair', 'repository': profile.repository}


# ---- Read-only operations ----

def list_repository(profile: Profile, engine: Engine) -> dict[str, Any]:
    logger.info(f"Obtaining archive list from {profile.repository}:")
    result = engine.list(profile.repository)
    _check(result, f"Could not list archives in {profile.repository}")
    return {'operation': 'list-repo', 'repository': profile.repository}


def list_archive(profile: Profile, engine: Engine, ident: Optional[str]) -> dict[str, Any]:
    archive_ref = profile.resolve_archive(ident)
    logger.info(f"Obtaining file list from {archive_ref}:")
    result = engine.list(archive_ref)
    _check(result,
           f"Could not obtain archive information for {archive_ref} on repository {profile.repository}",
           EXIT_ARCHIVE_FAILED)
    return {'operation': 'list-archive', 'archive': archive_ref}


def archive_info(profile: Profile, engine: Engine, ident: Optional[str]) -> dict[str, Any]:
    archive_ref = profile.resolve_archive(ident)
    logger.info(f"Obtaining archive information from {archive_ref}:")
    result = engine.info(archive_ref)
    _check(result,
           f"Could not obtain archive information for {archive_ref} on repository {profile.repository}",
           EXIT_ARCHIVE_FAILED)
    return {'operation': 'info', 'archive': archive_ref}


def mount_archive(profile: Profile, engine: Engine, ident: Optional[str]) -> dict[str, Any]:
    archive_ref = profile.resolve_archive(ident)
    logger.info(f"Mounting archive {archive_ref} on {profile.mount_point}:")
    result = engine.mount(archive_ref, profile.mount_point)
    _check(result,
           f"Could not mount {archive_ref} on repository {profile.repository}",
           EXIT_ARCHIVE_FAILED)
    return {'operation': 'mount', 'archive': archive_ref, 'mount_point': str(profile.mount_point)}


def restore_archive(profile: Profile, engine: Engine, ident: Optional[str],
                    apply: bool = False) -> dict[str, Any]:
    """Extract an archive into the current directory.

    Without apply the engine only walks the archive (extract -n), listing
    what would be restored.
    """
    archive_ref = profile.resolve_archive(ident)
    logger.info(f"Restoring everything from {archive_ref}:")
    if not apply:
        logger.debug("Listing only; pass --apply to write files")
    result = engine.extract(archive_ref, dry_run=not apply)
    _check(result,
           f"Could not restore from {archive_ref} on repository {profile.repository}",
           EXIT_ARCHIVE_FAILED)
    return {'operation': 'restore', 'archive': archive_ref, 'applied': apply}


VERIFY_MESSAGES: dict[str, str] = {
    "all": "Checking full metadata on {}",
    "repository": "Checking repository metadata on {}",
    "archives": "Checking archive metadata on {}",
}


def verify_repository(profile: Profile, engine: Engine, scope: CheckScope = "all") -> dict[str, Any]:
    logger.info(VERIFY_MESSAGES[scope].format(profile.repository))
    result = engine.check(profile.repository, scope=scope)
    _check(result, f"Verification of {profile.repository} failed")
    return {'operation': 'verify', 'scope': scope, 'repository': profile.repository}


# ---- Local operations (no engine) ----

def read_repository_id(repository: str) -> str:
    """Read the repository id from <repository>/config.

    Raises:
        KeyNotFoundError: If the config is missing or has no id line
    """
    config_path = Path(repository) / "config"
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise KeyNotFoundError(f"Cannot read repository config {config_path}: {e}") from e

    match = REPOSITORY_ID_PATTERN.search(text)
    if not match:
        raise KeyNotFoundError(f"No repository id found in {config_path}")
    return match.group(1)


def find_repository_keys(profile: Profile, key_dir: Optional[Path] = None) -> list[tuple[Path, str]]:
    """Find key files belonging to the profile's repository.

    Returns:
        (path, content) of every file in the key directory mentioning the repository id

    Raises:
        KeyNotFoundError: If no key file matches
    """
    key_dir = key_dir or get_key_dir()
    repository_id = read_repository_id(profile.repository)
    logger.debug(f"Looking for key {repository_id} in {key_dir}")

    matches = []
    if key_dir.is_dir():
        for keyfile in sorted(p for p in key_dir.iterdir() if p.is_file()):
            try:
                content = keyfile.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable key file {keyfile}: {e}")
                continue
            if repository_id in content:
                matches.append((keyfile, content))

    if not matches:
        raise KeyNotFoundError(f"No key file for repository {profile.repository} in {key_dir}")
    return matches


def break_repository_lock(profile: Profile) -> Optional[LockInfo]:
    return RepositoryLock(profile.lock_file).break_lock()
