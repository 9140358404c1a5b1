# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Migration of DeploymentConfigs to paused Deployments with their revision history.

For each DeploymentConfig, in the order given:

1. fetch it,
2. pause it so the DeploymentConfig controller stops scaling its pods,
3. convert it to a Deployment,
4. force the Deployment paused so it cannot roll out before history is attached,
5. create the Deployment,
6. list its ReplicationControllers by label selector,
7. create one zero-replica ReplicaSet per ReplicationController.

Any error stops the whole run. Nothing already applied is rolled back: the
DeploymentConfig may stay paused without a Deployment. Re-pausing is harmless
on retry; creates are not and surface AlreadyExistsError.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterator, List, Optional, Sequence

from dcmigrate.core.constants import DEPLOYMENT_KIND, LEGACY_KIND
from dcmigrate.core.exceptions import AlreadyExistsError, MigrationError
from dcmigrate.models.resources import (
    LegacyRolloutConfig,
    NativeDeployment,
    NativeRevisionArtifact,
    RevisionSnapshot,
)
from dcmigrate.models.responses import MigrationResult, RevisionSummary
from dcmigrate.services.converter import convert_deployment_config
from dcmigrate.services.history import migrate_history

logger = logging.getLogger(__name__)

ConvertFunc = Callable[[LegacyRolloutConfig], NativeDeployment]
MigrateHistoryFunc = Callable[[NativeDeployment, List[RevisionSnapshot]], List[NativeRevisionArtifact]]


class MigrationStep(str, Enum):
    """Steps of a single DeploymentConfig migration, attached to errors."""

    FETCH = "fetch"
    PAUSE = "pause"
    CONVERT = "convert"
    CREATE_DEPLOYMENT = "create-deployment"
    LIST_HISTORY = "list-history"
    MIGRATE_HISTORY = "migrate-history"


@contextmanager
def _step(step: MigrationStep, namespace: str, name: str) -> Iterator[None]:
    """Attach the step and the DeploymentConfig being migrated to a failing MigrationError."""
    try:
        yield
    except MigrationError as e:
        if e.step is None:
            e.step = step.value
        if e.name is None and e.kind is None:
            e.kind = LEGACY_KIND
            e.namespace = namespace
            e.name = name
        elif not (e.kind == LEGACY_KIND and e.namespace == namespace and e.name == name):
            e.config = e.config or f"{namespace}/{name}"
        raise


class MigrationOrchestrator:
    """
    Drives DeploymentConfig migrations against a resource gateway.

    The gateway must provide get_deployment_config, update_deployment_config,
    create_deployment, deployment_exists, list_replication_controllers and
    create_replica_set (see KubernetesGateway).
    """

    def __init__(
        self,
        gateway,
        convert: ConvertFunc = convert_deployment_config,
        migrate_history: MigrateHistoryFunc = migrate_history,
        dry_run: bool = False,
    ):
        self.gateway = gateway
        self.convert = convert
        self.migrate_history = migrate_history
        self.dry_run = dry_run

    def run(self, namespace: str, names: Sequence[str]) -> List[MigrationResult]:
        """Migrate each named DeploymentConfig in order, stopping at the first error."""
        results = []
        for name in names:
            results.append(self.migrate(namespace, name))
        return results

    def migrate(self, namespace: str, name: str) -> MigrationResult:
        """Migrate a single DeploymentConfig."""
        ref = f"{namespace}/{name}"
        logger.info(f"--> processing deployment config '{ref}' ...")

        with _step(MigrationStep.FETCH, namespace, name):
            config = self.gateway.get_deployment_config(namespace, name)

        with _step(MigrationStep.PAUSE, namespace, name):
            if self.dry_run:
                logger.info(f"--> would pause deployment config '{ref}'")
            else:
                logger.info(f"--> pausing deployment config '{ref}' ...")
                config.paused = True
                config = self.gateway.update_deployment_config(config)

        with _step(MigrationStep.CONVERT, namespace, name):
            logger.info(f"--> converting deployment config '{ref}' to kubernetes deployment ...")
            deployment = self.convert(config)

        # Paused until history is attached; activation is left to the operator
        deployment = deployment.model_copy(update={"paused": True})

        with _step(MigrationStep.CREATE_DEPLOYMENT, namespace, name):
            created = self._create_deployment(deployment)

        with _step(MigrationStep.LIST_HISTORY, namespace, name):
            snapshots = self.gateway.list_replication_controllers(namespace, config.name)

        if snapshots:
            logger.info(
                f"--> found {len(snapshots)} replication controllers managed by '{ref}':"
            )
            for snapshot in snapshots:
                logger.info(f"  --> {snapshot.name}")
        else:
            logger.info(f"--> no replication controllers found for '{ref}'")

        with _step(MigrationStep.MIGRATE_HISTORY, namespace, name):
            artifacts = self.migrate_history(created, snapshots)
            for artifact in artifacts:
                self._create_replica_set(artifact)

        return MigrationResult(
            name=name,
            namespace=namespace,
            deployment=created.name,
            deploymentConfigPaused=config.paused,
            deploymentPaused=created.paused,
            revisions=[
                RevisionSummary(
                    name=artifact.name,
                    revision=artifact.revision,
                    sourceName=artifact.sourceName,
                    sourceRevision=artifact.sourceRevision,
                )
                for artifact in artifacts
            ],
            dryRun=self.dry_run,
            deploymentUid=created.uid,
        )

    def _create_deployment(self, deployment: NativeDeployment) -> NativeDeployment:
        ref = f"{deployment.namespace}/{deployment.name}"
        if self.dry_run:
            if self.gateway.deployment_exists(deployment.namespace, deployment.name):
                raise AlreadyExistsError(
                    "deployment already exists",
                    kind=DEPLOYMENT_KIND,
                    namespace=deployment.namespace,
                    name=deployment.name,
                )
            logger.info(f"--> would create paused deployment '{ref}'")
            return deployment

        logger.info(f"--> creating paused deployment '{ref}' ...")
        return self.gateway.create_deployment(deployment)

    def _create_replica_set(self, artifact: NativeRevisionArtifact) -> Optional[NativeRevisionArtifact]:
        ref = f"{artifact.namespace}/{artifact.name}"
        if self.dry_run:
            logger.info(
                f"--> would create replica set '{ref}' (revision {artifact.revision}) "
                f"from '{artifact.sourceName}'"
            )
            return None

        logger.info(
            f"--> creating replica set '{ref}' (revision {artifact.revision}) "
            f"from '{artifact.sourceName}' ..."
        )
        return self.gateway.create_replica_set(artifact)
