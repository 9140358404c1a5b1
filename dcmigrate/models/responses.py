# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models describing the outcome of a migration run.
"""

from typing import List, Optional

from pydantic import BaseModel


class RevisionSummary(BaseModel):
    """A ReplicaSet created (or planned) from a ReplicationController."""

    name: str
    revision: int
    sourceName: str
    sourceRevision: int


class MigrationResult(BaseModel):
    """Outcome of migrating a single DeploymentConfig."""

    name: str
    namespace: str
    deployment: str
    deploymentConfigPaused: bool
    deploymentPaused: bool
    revisions: List[RevisionSummary] = []
    dryRun: bool = False
    deploymentUid: Optional[str] = None


class MigrationRunResponse(BaseModel):
    """Summary of a whole run, printed by the CLI with --json."""

    namespace: str
    dryRun: bool
    total: int
    results: List[MigrationResult]
