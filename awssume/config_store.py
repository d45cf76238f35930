"""Configuration persistence for the Role registry.

The configuration lives in a single file whose extension selects its format:
``<path>.json``, ``<path>.yaml`` or ``<path>.toml``. Loading refuses to guess
when more than one of them exists, and creates an empty YAML file when none
does.

Usage:
    from awssume.config_store import load_config

    config = load_config("~/.config/awssume")
    config.roles.add(role)
    config.save()

Environment Variables:
    AWSSUME_CONFIG: Configuration path (without extension) overriding ~/.config/awssume
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
from pydantic import ValidationError

from .errors import (
    FileReadError,
    FileWriteError,
    MalformedIdentifierError,
    MultipleConfigsDetectedError,
    RoleExistsError,
    UnmarshalError,
)
from .filesystem import Filesystem, OsFilesystem
from .formats import Codec, ConfigFormat, get_codec
from .models import Role
from .registry import RoleRegistry

logger = structlog.get_logger(__name__)

CONFIG_PATH_ENV_VAR = "AWSSUME_CONFIG"

#: Formats probed on load, in the order they are checked
PROBE_ORDER = (ConfigFormat.JSON, ConfigFormat.YAML, ConfigFormat.TOML)

#: Format used when no configuration file exists yet
DEFAULT_FORMAT = ConfigFormat.YAML


def default_config_path() -> str:
    """Configuration path without extension.

    Returns:
        $AWSSUME_CONFIG if set, otherwise ~/.config/awssume
    """
    if configured := os.getenv(CONFIG_PATH_ENV_VAR):
        return str(Path(configured).expanduser())
    return str(Path.home() / ".config" / "awssume")


def strip_extension(path: Union[str, Path]) -> str:
    root, _ext = os.path.splitext(os.path.expanduser(str(path)))
    return root


def format_path(path: str, fmt: ConfigFormat) -> str:
    return f"{path}.{fmt.ext}"


@dataclass
class Config:
    """Configured Roles plus the path and format they are persisted with.

    Only ``roles`` is written to disk; ``path`` and ``format`` are bookkeeping.
    """

    path: str
    format: ConfigFormat = DEFAULT_FORMAT
    roles: RoleRegistry = field(default_factory=RoleRegistry)
    fs: Filesystem = field(default_factory=OsFilesystem, repr=False)

    @property
    def file_path(self) -> str:
        return format_path(self.path, self.format)

    def to_document(self) -> Dict[str, Any]:
        return {"roles": [role.to_document() for role in self.roles]}

    def save(self) -> None:
        """Serialize the configuration and overwrite its file in full.

        Raises:
            UnsupportedConfigFormatError: If the format is UNKNOWN
            MarshalError: If serialization fails
            FileWriteError: If the file cannot be written
        """
        codec = get_codec(self.format)
        data = codec.encode(self.to_document())

        target = self.file_path
        try:
            self.fs.write_bytes(target, data)
        except OSError as e:
            raise FileWriteError(target, e) from e

        logger.debug("Configuration saved", path=target, format=self.format.ext, roles=len(self.roles))

    def convert(self, new_format: ConfigFormat) -> None:
        """Save the configuration in ``new_format`` and remove the old file.

        Not transactional: if removing the old file fails after the new one
        was written, both files remain and the next load will refuse them.

        Raises:
            UnsupportedConfigFormatError: If ``new_format`` is UNKNOWN (nothing is written)
            MarshalError: If serialization fails
            FileWriteError: If writing the new file or removing the old one fails
        """
        get_codec(new_format)

        old_path = self.file_path
        if new_format == self.format:
            self.save()
            return

        self.format = new_format
        self.save()

        try:
            self.fs.remove(old_path)
        except OSError as e:
            raise FileWriteError(old_path, e) from e

        logger.info("Configuration converted", old_path=old_path, new_path=self.file_path)


def _detect_existing(fs: Filesystem, path: str) -> List[ConfigFormat]:
    existing = []
    for fmt in PROBE_ORDER:
        candidate = format_path(path, fmt)
        try:
            if fs.exists(candidate):
                existing.append(fmt)
        except OSError as e:
            raise FileReadError(candidate, e) from e
    return existing


def _read_or_create(fs: Filesystem, target: str) -> bytes:
    try:
        return fs.read_bytes(target)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FileReadError(target, e) from e

    try:
        fs.create(target)
    except OSError as e:
        raise FileWriteError(target, e) from e

    logger.info("Created empty configuration file", path=target)
    return b""


def _decode_roles(codec: Codec, document: Dict[str, Any]) -> RoleRegistry:
    entries = document.get("roles") or []
    if not isinstance(entries, list):
        raise UnmarshalError("error deserializing: 'roles' must be a list")

    roles = []
    seen = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise UnmarshalError("error deserializing: each role must be a mapping")
        try:
            role = Role(
                alias=entry.get("alias"),
                arn=codec.decode_arn(entry.get("arn")),
                session_name=entry.get("session_name"),
            )
        except (MalformedIdentifierError, ValidationError) as e:
            raise UnmarshalError(f"error deserializing: {e}") from e

        if role.alias in seen:
            raise UnmarshalError(f"error deserializing: {RoleExistsError(role.alias)}")
        seen.add(role.alias)
        roles.append(role)

    return RoleRegistry(roles)


def load_config(path: Optional[Union[str, Path]] = None, fs: Optional[Filesystem] = None) -> Config:
    """Load the configuration stored at ``path`` (extension ignored).

    Args:
        path: Configuration path; defaults to ``default_config_path()``
        fs: Filesystem to use; defaults to the OS filesystem

    Returns:
        Loaded Config

    Raises:
        MultipleConfigsDetectedError: If more than one of the json/yaml/toml files exists
        FileReadError: If a file cannot be probed or read
        FileWriteError: If the missing file cannot be created
        UnsupportedConfigFormatError: If the resolved format has no codec
        UnmarshalError: If the file content cannot be decoded
    """
    fs = fs or OsFilesystem()
    base = strip_extension(path if path is not None else default_config_path())

    existing = _detect_existing(fs, base)
    if len(existing) > 1:
        raise MultipleConfigsDetectedError(format_path(base, fmt) for fmt in existing)

    fmt = existing[0] if existing else DEFAULT_FORMAT

    target = format_path(base, fmt)
    data = _read_or_create(fs, target)

    codec = get_codec(fmt)
    roles = _decode_roles(codec, codec.decode(data))

    logger.debug("Configuration loaded", path=target, format=fmt.ext, roles=len(roles))
    return Config(path=base, format=fmt, roles=roles, fs=fs)
