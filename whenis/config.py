"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Sequence

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.configuration import Configuration
from .domain.exceptions import UnknownParticipantError


class Participant(BaseModel):
    """Participant configuration."""
    id: str
    name: str = ""

    def display_name(self) -> str:
        """Get display name, falling back to the id."""
        return self.name or self.id


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    locale: str = "en"
    settings: Configuration = Field(default_factory=Configuration)
    participants: List[Participant] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("participants")
    @classmethod
    def validate_participants(cls, value: List[Participant]) -> List[Participant]:
        """Ensure participant ids are unique."""
        seen_ids: set[str] = set()
        for participant in value:
            if participant.id in seen_ids:
                raise ValueError(f"Duplicate participant id detected: {participant.id}")
            seen_ids.add(participant.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        return cls(**data)

    def find_participant(self, identifier: str) -> Participant | None:
        """Find a participant by id or display name (case-insensitive)."""
        for participant in self.participants:
            if participant.id == identifier:
                return participant
        for participant in self.participants:
            if participant.display_name().lower() == identifier.lower():
                return participant
        return None

    def name(self, user_id: str) -> str:
        """Display name for ``user_id``; unknown users show their id."""
        for participant in self.participants:
            if participant.id == user_id:
                return participant.display_name()
        return user_id

    def resolve_participants(self, identifiers: Sequence[str]) -> List[str]:
        """
        Resolve participant names or ids to unique participant ids.

        Raises:
            UnknownParticipantError: If any identifier cannot be resolved
        """
        resolved_ids: List[str] = []
        unknown_identifiers: List[str] = []

        for identifier in identifiers:
            participant = self.find_participant(identifier)
            if participant is None:
                unknown_identifiers.append(identifier)
                continue

            if participant.id not in resolved_ids:
                resolved_ids.append(participant.id)

        if unknown_identifiers:
            missing = ", ".join(sorted(set(unknown_identifiers)))
            raise UnknownParticipantError(
                f"Unknown participant identifier(s): {missing}. "
                "Ensure they exist in the configuration."
            )

        return resolved_ids


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of whenis/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
