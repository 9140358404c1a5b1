# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from DCMIGRATE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DCMIGRATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Legacy DeploymentConfig API (apps.openshift.io)
    legacy_crd_group: str = "apps.openshift.io"
    legacy_crd_version: str = "v1"
    legacy_plural: str = "deploymentconfigs"

    # Label put on every ReplicationController rolled out by a DeploymentConfig.
    # TODO: read these from the openshift apps API constants once they are published there
    deployment_config_name_label: str = "openshift.io/deployment-config.name"
    # Revision number of the DeploymentConfig when the ReplicationController was created
    deployment_config_version_annotation: str = "openshift.io/deployment-config.latest-version"

    # Cluster access
    kubeconfig: Optional[str] = None
    default_namespace: Optional[str] = None

    # Checked and applied by the command line, not here
    log_level: str = "INFO"

    @property
    def legacy_api_version(self) -> str:
        return f"{self.legacy_crd_group}/{self.legacy_crd_version}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
