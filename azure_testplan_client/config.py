"""Connection settings for the Azure DevOps test plan client."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union


class ConfigurationError(ValueError):
    """Raised when required connection settings are missing or invalid."""

    pass


SUPPORTED_PROTOCOLS = ("http", "https")


@dataclass(frozen=True)
class ClientConfig:
    """Settings every request is built from.

    All string values except the token are substituted into URL templates.
    """

    organization: str
    project_name: str
    pat: Optional[str] = None
    team: str = ""
    instance: str = "dev.azure.com"
    protocol: str = "https"
    api_version: str = "6.0"

    def __post_init__(self) -> None:
        if not self.organization:
            raise ConfigurationError("organization is required")
        if not self.project_name:
            raise ConfigurationError("project_name is required")
        if not self.instance:
            raise ConfigurationError("instance is required")
        if self.protocol not in SUPPORTED_PROTOCOLS:
            raise ConfigurationError(
                f"Unsupported protocol '{self.protocol}', expected one of {SUPPORTED_PROTOCOLS}"
            )

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create ClientConfig from environment variables."""
        org = os.environ.get("AZURE_DEVOPS_ORG")
        if not org:
            raise ConfigurationError(
                "AZURE_DEVOPS_ORG environment variable is required"
            )
        project = os.environ.get("AZURE_DEVOPS_PROJECT")
        if not project:
            raise ConfigurationError(
                "AZURE_DEVOPS_PROJECT environment variable is required"
            )

        return cls(
            organization=org,
            project_name=project,
            pat=os.environ.get("AZURE_DEVOPS_PAT"),
            team=os.environ.get("AZURE_DEVOPS_TEAM", ""),
            instance=os.environ.get("AZURE_DEVOPS_INSTANCE", "dev.azure.com"),
            protocol=os.environ.get("AZURE_DEVOPS_PROTOCOL", "https"),
            api_version=os.environ.get("AZURE_DEVOPS_API_VERSION", "6.0"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ClientConfig":
        """Create ClientConfig from a settings section.

        Args:
            data: Mapping with the keys Protocol, ApiVersion, Instance,
                Organization, PAT, ProjectName and Team.
        """
        kwargs: dict[str, Any] = {
            "organization": data.get("Organization", ""),
            "project_name": data.get("ProjectName", ""),
            "pat": data.get("PAT"),
            "team": data.get("Team") or "",
        }
        # Absent keys keep the dataclass defaults
        if data.get("Instance"):
            kwargs["instance"] = data["Instance"]
        if data.get("Protocol"):
            kwargs["protocol"] = data["Protocol"]
        if data.get("ApiVersion"):
            kwargs["api_version"] = str(data["ApiVersion"])
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ClientConfig":
        """Create ClientConfig from a JSON settings file.

        Args:
            path: Path to a JSON document holding the settings keys at the top
                level or under an "AzureDevOps" section.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot load settings from {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings in {path} must be a JSON object")
        section = raw.get("AzureDevOps", raw)
        return cls.from_mapping(section)
