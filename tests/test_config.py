"""Tests for loading connection settings."""

import dataclasses
import json

import pytest

from azure_testplan_client.config import ClientConfig, ConfigurationError

ENV_VARS = (
    "AZURE_DEVOPS_ORG",
    "AZURE_DEVOPS_PROJECT",
    "AZURE_DEVOPS_PAT",
    "AZURE_DEVOPS_TEAM",
    "AZURE_DEVOPS_INSTANCE",
    "AZURE_DEVOPS_PROTOCOL",
    "AZURE_DEVOPS_API_VERSION",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults():
    config = ClientConfig(organization="org", project_name="proj")
    assert config.protocol == "https"
    assert config.api_version == "6.0"
    assert config.instance == "dev.azure.com"


def test_config_is_immutable():
    config = ClientConfig(organization="org", project_name="proj")
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.organization = "other"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"organization": "", "project_name": "proj"},
        {"organization": "org", "project_name": ""},
        {"organization": "org", "project_name": "proj", "protocol": "ftp"},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        ClientConfig(**kwargs)


def test_from_env(clean_env):
    clean_env.setenv("AZURE_DEVOPS_ORG", "org")
    clean_env.setenv("AZURE_DEVOPS_PROJECT", "My Project")
    clean_env.setenv("AZURE_DEVOPS_PAT", "token")
    clean_env.setenv("AZURE_DEVOPS_PROTOCOL", "http")

    config = ClientConfig.from_env()

    assert config.project_name == "My Project"
    assert config.pat == "token"
    assert config.protocol == "http"
    assert config.api_version == "6.0"


def test_from_env_requires_organization(clean_env):
    clean_env.setenv("AZURE_DEVOPS_PROJECT", "proj")
    with pytest.raises(ConfigurationError, match="AZURE_DEVOPS_ORG"):
        ClientConfig.from_env()


def test_from_file_with_section(tmp_path):
    path = tmp_path / "appsettings.json"
    path.write_text(
        json.dumps(
            {
                "AzureDevOps": {
                    "Protocol": "https",
                    "ApiVersion": "7.0",
                    "Instance": "tfs.example.com",
                    "Organization": "DefaultCollection",
                    "PAT": "token",
                    "ProjectName": "Web Shop",
                    "Team": "Web Shop Team",
                }
            }
        )
    )

    config = ClientConfig.from_file(path)

    assert config == ClientConfig(
        organization="DefaultCollection",
        project_name="Web Shop",
        pat="token",
        team="Web Shop Team",
        instance="tfs.example.com",
        protocol="https",
        api_version="7.0",
    )


def test_from_mapping_keeps_defaults_for_missing_keys():
    config = ClientConfig.from_mapping({"Organization": "org", "ProjectName": "proj"})
    assert config.instance == "dev.azure.com"
    assert config.api_version == "6.0"
    assert config.team == ""


def test_from_file_with_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        ClientConfig.from_file(path)
