"""Run configuration.

The configuration is read once at startup into a frozen ``CheckConfig`` and
handed explicitly to every component; nothing reads process-wide state.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import MAX_SYMLINK_DEPTH, SNAPSHOT_FILE
from .errors import ConfigError
from .hashing import Algorithm
from .ignore import validate_pattern


class CheckConfig(BaseModel):
    """Immutable settings for one fingerprinting run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    roots: List[str] = Field(default_factory=list)
    excludes: List[str] = Field(default_factory=list)
    follow_symlinks: bool = Field(
        False, validation_alias=AliasChoices("follow_symlinks", "followSymlinks")
    )
    cores: int = Field(0, ge=0, validation_alias=AliasChoices("cores", "batchCap", "batch_cap"))
    save_snapshot: bool = Field(
        False, validation_alias=AliasChoices("save_snapshot", "saveSnapshot")
    )
    snapshot_path: str = Field(
        SNAPSHOT_FILE, validation_alias=AliasChoices("snapshot_path", "snapshotPath")
    )
    verbose: bool = False
    strict: bool = False
    algorithm: Algorithm = Algorithm.XXH3
    salt_with_path: bool = Field(
        False, validation_alias=AliasChoices("salt_with_path", "saltWithPath")
    )
    max_symlink_depth: int = Field(
        MAX_SYMLINK_DEPTH,
        ge=1,
        validation_alias=AliasChoices("max_symlink_depth", "maxSymlinkDepth"),
    )

    @field_validator("roots")
    @classmethod
    def _dedupe_roots(cls, roots: List[str]) -> List[str]:
        # Order matters for the tree digest; keep first occurrence
        return list(dict.fromkeys(roots))

    @field_validator("excludes")
    @classmethod
    def _check_excludes(cls, excludes: List[str]) -> List[str]:
        for pattern in excludes:
            validate_pattern(pattern)
        return excludes

    def with_overrides(self, **overrides: Any) -> "CheckConfig":
        """Return a new config with non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return CheckConfig.model_validate({**self.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration override: {e}") from e


def _read_config_data(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(path.read_text()) or {}
    raise ConfigError(f"Unsupported config format '{suffix}' for {path} (use .toml or .yaml)")


def load_config(path: Union[str, Path]) -> CheckConfig:
    """Load configuration from a TOML or YAML file.

    Args:
        path: Config file; the format is chosen by suffix

    Returns:
        Frozen CheckConfig

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        raise ConfigError(f"Config file not found: {cfg_path}")

    try:
        data = _read_config_data(cfg_path)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Cannot parse config {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {cfg_path} must be a table of settings")

    # Allow settings nested under a [fastcheck] table
    data = data.get("fastcheck", data)

    try:
        return CheckConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {cfg_path}: {e}") from e
