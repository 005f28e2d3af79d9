"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path
from typing import List, Sequence

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import TimeOfDay


class DefaultsConfig(BaseModel):
    """Default settings for availability queries."""
    day_start_hour: int = 9
    day_end_hour: int = 17
    slot_minutes: int = 30

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, value: int) -> int:
        """Ensure slot length is positive."""
        if value <= 0:
            raise ValueError("slot_minutes must be greater than zero")
        return value

    @field_validator("day_start_hour", "day_end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured day opens before it closes."""
        if self.day_end_hour <= self.day_start_hour:
            raise ValueError("day_end_hour must be later than day_start_hour")
        return self

    def get_start_time(self) -> TimeOfDay:
        """Get start of the default window."""
        return TimeOfDay(self.day_start_hour * 60)

    def get_end_time(self) -> TimeOfDay:
        """Get end of the default window."""
        return TimeOfDay(self.day_end_hour * 60)


class ConflictConfig(BaseModel):
    """Conflict detection policy."""
    ignore_availability: bool = True  # availability schedules never conflict


class Owner(BaseModel):
    """Schedule owner configuration."""
    name: str  # Used as alias
    id: str


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path = Path("schedules.json")
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig)
    owners: List[Owner] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("owners")
    @classmethod
    def validate_owners(cls, value: List[Owner]) -> List[Owner]:
        """Ensure owner aliases and ids are unique."""
        seen_names: set[str] = set()
        seen_ids: set[str] = set()
        for owner in value:
            name_key = owner.name.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate owner name detected: {owner.name}")
            if owner.id in seen_ids:
                raise ValueError(f"Duplicate owner id detected: {owner.id}")
            seen_names.add(name_key)
            seen_ids.add(owner.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config

    def find_owner_by_name(self, name: str) -> Owner | None:
        """Find an owner by their name (alias)."""
        for owner in self.owners:
            if owner.name.lower() == name.lower():
                return owner
        return None

    def resolve_owner(self, identifier: str) -> str:
        """
        Resolve an owner identifier (alias or id) to an owner id.

        Args:
            identifier: Configured owner name (alias) or owner id

        Returns:
            Owner id

        Raises:
            ValueError: If identifier matches no configured owner
        """
        owner = self.find_owner_by_name(identifier)
        if owner:
            return owner.id

        for owner in self.owners:
            if owner.id == identifier:
                return owner.id

        raise ValueError(
            f"Unknown owner identifier: '{identifier}'. "
            f"Use a configured name or owner id."
        )

    def resolve_owners(self, identifiers: Sequence[str]) -> List[str]:
        """Resolve multiple owner identifiers, dropping duplicates."""
        if not identifiers:
            raise ValueError("No owners provided.")

        resolved: List[str] = []
        for identifier in identifiers:
            owner_id = self.resolve_owner(identifier)
            if owner_id not in resolved:
                resolved.append(owner_id)
        return resolved


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
