"""
Hierarchical configuration management for lintbaseline.

Configuration sources, merged key by key:
1. CLI arguments
2. Project config (.lintbaseline.yml)
3. User config (~/.lintbaseline/config.yml)
4. Environment variables (LINTBASELINE_*), for keys none of the above set
5. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lintbaseline.baseline.manager import DEFAULT_BASELINE_FILE, STORAGE_MODES, BaselineConfig

PROJECT_CONFIG_NAME = ".lintbaseline.yml"


class StorageConfig(BaseModel):
    """Configuration for where and how the baseline is stored."""

    baseline_file: Path = Path(DEFAULT_BASELINE_FILE)
    mode: str = "single"
    allow_empty: bool = False

    @field_validator("baseline_file", mode="before")
    @classmethod
    def validate_baseline_file(cls, v: Any) -> Path:
        """Ensure baseline_file is a Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Validate storage mode is supported."""
        if v not in STORAGE_MODES:
            raise ValueError(f"Invalid storage mode: {v}. Must be one of {set(STORAGE_MODES)}")
        return v


class CheckConfig(BaseModel):
    """Configuration for check and update runs."""

    report_unmatched: bool = False
    unmatched_as_error: bool = False
    suppress_rules: list[str] = Field(default_factory=list)


class OutputConfig(BaseModel):
    """Configuration for console output."""

    color: bool = True
    verbose: bool = False


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "WARNING"
    file: Optional[Path] = None
    json_format: bool = False
    max_file_size_mb: int = 10
    backup_count: int = 5

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("max_file_size_mb", "backup_count")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Rotation limits must be positive."""
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v


class LintBaselineConfig(BaseSettings):
    """
    Main configuration model with hierarchical loading.

    ``load`` merges the user config, the project config and CLI arguments
    into init values. pydantic-settings then fills the keys those leave
    unset from LINTBASELINE_* environment variables, e.g.
    LINTBASELINE_STORAGE__MODE=split.
    """

    model_config = SettingsConfigDict(
        env_prefix="LINTBASELINE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    root: Path = Path(".")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("root", mode="before")
    @classmethod
    def validate_root(cls, v: Any) -> Path:
        """Ensure root is a Path."""
        if isinstance(v, str):
            return Path(v)
        return v

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        project_path: Optional[Path] = None,
    ) -> LintBaselineConfig:
        """
        Load configuration from multiple sources with priority.

        Args:
            cli_args: Command-line arguments (highest priority)
            project_path: Directory holding .lintbaseline.yml

        Returns:
            Merged configuration
        """
        config_dict: dict[str, Any] = {}
        project_path = project_path or Path.cwd()

        # 1. User config
        user_config_path = Path.home() / ".lintbaseline" / "config.yml"
        if user_config_path.exists():
            config_dict = _deep_merge(config_dict, _read_yaml(user_config_path))

        # 2. Project config
        project_config_path = project_path / PROJECT_CONFIG_NAME
        if project_config_path.exists():
            config_dict = _deep_merge(config_dict, _read_yaml(project_config_path))

        # 3. CLI arguments
        if cli_args:
            config_dict = _deep_merge(config_dict, _flatten_cli_args(cli_args))

        return cls(**config_dict)

    def to_baseline_config(self) -> BaselineConfig:
        """Build the engine configuration."""
        return BaselineConfig(
            root=self.root,
            baseline_file=self.storage.baseline_file,
            mode=self.storage.mode,
        )

    def to_yaml(self, path: Path) -> None:
        """Write configuration to YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values to override

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten_cli_args(args: dict[str, Any]) -> dict[str, Any]:
    """
    Convert flat CLI arguments to nested config structure.

    Flags that were not set map to None and leave lower-priority values alone.

    Examples:
        {"split_by_rule": True} -> {"storage": {"mode": "split"}}
        {"baseline_file": "b.json"} -> {"storage": {"baseline_file": Path("b.json")}}
    """
    result: dict[str, Any] = {}

    mappings = {
        "baseline_file": ("storage", "baseline_file", Path),
        "split_by_rule": ("storage", "mode", lambda v: "split" if v else None),
        "allow_empty": ("storage", "allow_empty", lambda v: True if v else None),
        "report_unmatched": ("check", "report_unmatched", lambda v: True if v else None),
        "unmatched_as_error": ("check", "unmatched_as_error", lambda v: True if v else None),
        "suppress_rule": ("check", "suppress_rules", lambda v: list(v) if v else None),
        "color": ("output", "color", bool),
        "verbose": ("output", "verbose", lambda v: True if v else None),
        "root": ("root", None, Path),
    }

    for key, value in args.items():
        if value is None:
            continue

        if key in mappings:
            section, subkey, transform = mappings[key]
            transformed = transform(value)
            if transformed is None:
                continue
            if subkey is None:
                result[section] = transformed
            else:
                result.setdefault(section, {})[subkey] = transformed
        else:
            result[key] = value

    return result


def get_default_config() -> LintBaselineConfig:
    """Get configuration with all defaults."""
    return LintBaselineConfig()


def validate_config(config: LintBaselineConfig) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Returns:
        List of warning messages (empty if all valid)
    """
    warnings: list[str] = []

    if config.check.unmatched_as_error and not config.check.report_unmatched:
        warnings.append("unmatched_as_error is set but report_unmatched is not; fixed entries will fail without details")

    if config.storage.baseline_file.suffix != ".json" and config.storage.mode == "split":
        warnings.append(
            f"Split storage uses '{config.storage.baseline_file}' as directory name because it has no .json suffix"
        )

    return warnings
