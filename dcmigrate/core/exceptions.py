# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Errors raised while migrating DeploymentConfigs.

Every error is fatal to the run. The resource kind, namespace/name and the
migration step are carried along so an operator can resume or clean up by
hand.
"""

from typing import Optional


class MigrationError(Exception):
    """Base class for all migration failures."""

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        namespace: Optional[str] = None,
        name: Optional[str] = None,
        step: Optional[str] = None,
        config: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.step = step
        # "namespace/name" of the DeploymentConfig being migrated, when it is not the failing resource
        self.config = config

    @property
    def resource(self) -> Optional[str]:
        if not self.name:
            return None
        ref = f"{self.namespace}/{self.name}" if self.namespace else self.name
        return f"{self.kind} {ref}" if self.kind else ref

    def __str__(self) -> str:
        parts = []
        if self.step:
            parts.append(f"[{self.step}]")
        if self.resource:
            parts.append(f"{self.resource}:")
        parts.append(self.message)
        if self.config:
            parts.append(f"(deployment config {self.config})")
        return " ".join(parts)


class NotFoundError(MigrationError):
    """The referenced resource does not exist."""


class AlreadyExistsError(MigrationError):
    """The target resource already exists (already migrated, or a name collision)."""


class ConflictError(MigrationError):
    """The resource was modified concurrently; the update was rejected."""


class UnsupportedStrategyError(MigrationError):
    """The DeploymentConfig uses a trigger or strategy with no Deployment equivalent."""


class TransportError(MigrationError):
    """The API server could not be reached or returned an unexpected error."""


class ResourceValidationError(MigrationError):
    """The API server rejected the resource as malformed."""
