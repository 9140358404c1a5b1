# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Shared fixtures: manifest factories and an in-memory resource gateway.
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

import pytest

from dcmigrate.core.exceptions import AlreadyExistsError, NotFoundError
from dcmigrate.models.resources import (
    LegacyRolloutConfig,
    NativeDeployment,
    NativeRevisionArtifact,
    RevisionSnapshot,
)


def make_pod_template(name: str, image: str, extra_labels: Optional[Dict[str, str]] = None) -> Dict:
    labels = {"app": name, "deploymentconfig": name}
    labels.update(extra_labels or {})
    return {
        "metadata": {"labels": labels},
        "spec": {"containers": [{"name": name, "image": image}]},
    }


def make_deployment_config(
    name: str = "web",
    namespace: str = "demo",
    replicas: int = 3,
    paused: bool = False,
    strategy: Optional[Dict[str, Any]] = None,
    triggers: Optional[List[Dict[str, Any]]] = None,
    image: str = "quay.io/example/web:v2",
) -> Dict[str, Any]:
    return {
        "apiVersion": "apps.openshift.io/v1",
        "kind": "DeploymentConfig",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {"app": name},
            "annotations": {"owner": "team-a"},
            "resourceVersion": "1001",
            "uid": "dc-uid-1",
        },
        "spec": {
            "paused": paused,
            "replicas": replicas,
            "selector": {"app": name, "deploymentconfig": name},
            "strategy": strategy
            if strategy is not None
            else {
                "type": "Rolling",
                "rollingParams": {"maxSurge": 1, "maxUnavailable": "10%", "timeoutSeconds": 300},
            },
            "triggers": triggers if triggers is not None else [{"type": "ConfigChange"}],
            "template": make_pod_template(name, image),
        },
    }


def make_replication_controller(
    config_name: str,
    revision: Any,
    namespace: str = "demo",
    replicas: int = 0,
    created: str = "2024-01-01T00:00:00Z",
    name: Optional[str] = None,
    image: Optional[str] = None,
) -> Dict[str, Any]:
    rc_name = name or f"{config_name}-{revision}"
    annotations = {}
    if revision is not None:
        annotations["openshift.io/deployment-config.latest-version"] = str(revision)
    return {
        "apiVersion": "v1",
        "kind": "ReplicationController",
        "metadata": {
            "name": rc_name,
            "namespace": namespace,
            "labels": {"openshift.io/deployment-config.name": config_name},
            "annotations": annotations,
            "creationTimestamp": created,
        },
        "spec": {
            "replicas": replicas,
            "selector": {"deployment": rc_name, "deploymentconfig": config_name},
            "template": make_pod_template(
                config_name,
                image or f"quay.io/example/{config_name}:v{revision}",
                {"deployment": rc_name},
            ),
        },
    }


class FakeGateway:
    """In-memory gateway recording every write in call order."""

    def __init__(self):
        self.configs: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.deployments: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.replication_controllers: List[Dict[str, Any]] = []
        self.replica_sets: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.calls: List[Tuple[str, str]] = []

    def add_config(self, manifest: Dict[str, Any]) -> None:
        metadata = manifest["metadata"]
        self.configs[(metadata["namespace"], metadata["name"])] = copy.deepcopy(manifest)

    def add_deployment(self, namespace: str, name: str) -> None:
        self.deployments[(namespace, name)] = {"metadata": {"name": name, "namespace": namespace}}

    def get_deployment_config(self, namespace: str, name: str) -> LegacyRolloutConfig:
        self.calls.append(("get_deployment_config", name))
        if (namespace, name) not in self.configs:
            raise NotFoundError("not found", kind="DeploymentConfig", namespace=namespace, name=name)
        return LegacyRolloutConfig.from_manifest(self.configs[(namespace, name)])

    def update_deployment_config(self, config: LegacyRolloutConfig) -> LegacyRolloutConfig:
        self.calls.append(("update_deployment_config", config.name))
        key = (config.namespace, config.name)
        if key not in self.configs:
            raise NotFoundError(
                "not found", kind="DeploymentConfig", namespace=config.namespace, name=config.name
            )
        self.configs[key] = config.to_manifest()
        return LegacyRolloutConfig.from_manifest(self.configs[key])

    def deployment_exists(self, namespace: str, name: str) -> bool:
        self.calls.append(("deployment_exists", name))
        return (namespace, name) in self.deployments

    def create_deployment(self, deployment: NativeDeployment) -> NativeDeployment:
        self.calls.append(("create_deployment", deployment.name))
        key = (deployment.namespace, deployment.name)
        if key in self.deployments:
            raise AlreadyExistsError(
                "already exists", kind="Deployment", namespace=deployment.namespace, name=deployment.name
            )
        manifest = deployment.to_manifest()
        manifest["metadata"]["uid"] = f"uid-{deployment.name}"
        self.deployments[key] = manifest
        return NativeDeployment.from_manifest(manifest)

    def list_replication_controllers(self, namespace: str, config_name: str) -> List[RevisionSnapshot]:
        self.calls.append(("list_replication_controllers", config_name))
        return [
            RevisionSnapshot.from_manifest(rc)
            for rc in self.replication_controllers
            if rc["metadata"]["namespace"] == namespace
            and rc["metadata"]["labels"].get("openshift.io/deployment-config.name") == config_name
        ]

    def create_replica_set(self, artifact: NativeRevisionArtifact) -> NativeRevisionArtifact:
        self.calls.append(("create_replica_set", artifact.name))
        key = (artifact.namespace, artifact.name)
        if key in self.replica_sets:
            raise AlreadyExistsError(
                "already exists", kind="ReplicaSet", namespace=artifact.namespace, name=artifact.name
            )
        self.replica_sets[key] = artifact.to_manifest()
        return artifact

    def writes(self) -> List[Tuple[str, str]]:
        return [call for call in self.calls if call[0].startswith(("update", "create"))]


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def web_gateway(gateway):
    """Namespace 'demo' with an unpaused 'web' DeploymentConfig and two rollouts."""
    gateway.add_config(make_deployment_config())
    gateway.replication_controllers.extend(
        [
            make_replication_controller("web", 2, replicas=3, created="2024-02-01T00:00:00Z"),
            make_replication_controller("web", 1, replicas=0, created="2024-01-01T00:00:00Z"),
        ]
    )
    return gateway
