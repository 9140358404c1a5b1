# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for the resources touched by a migration.

Each model is parsed from, and rendered back to, the plain manifest dictionaries
returned by the Kubernetes API (camelCase keys). Pod templates are kept as raw
dictionaries so nothing in them is lost across the conversion.
"""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from dcmigrate.core.constants import (
    APPS_API_VERSION,
    DEPLOYMENT_CONFIG_VERSION_ANNOTATION,
    DEPLOYMENT_KIND,
    DEPLOYMENT_REVISION_ANNOTATION,
    LEGACY_API_VERSION,
    LEGACY_KIND,
    LEGACY_STRATEGY_ROLLING,
    REPLICA_SET_KIND,
    STRATEGY_ROLLING_UPDATE,
)

IntOrString = Union[int, str]


def _parse_revision(value: Optional[str]) -> int:
    """Parse a revision annotation; missing or malformed values count as 0."""
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


# ---------------------------------------------------------------------------
# Legacy side: DeploymentConfig and its ReplicationControllers
# ---------------------------------------------------------------------------


class LegacyTrigger(BaseModel):
    """A DeploymentConfig trigger (ConfigChange, ImageChange)."""

    type: str
    params: Optional[Dict[str, Any]] = None

    @classmethod
    def from_manifest(cls, trigger: Dict[str, Any]) -> "LegacyTrigger":
        return cls(
            type=trigger.get("type", ""),
            params=trigger.get("imageChangeParams"),
        )


class RollingParams(BaseModel):
    maxSurge: Optional[IntOrString] = None
    maxUnavailable: Optional[IntOrString] = None
    timeoutSeconds: Optional[int] = None
    updatePeriodSeconds: Optional[int] = None
    intervalSeconds: Optional[int] = None
    pre: Optional[Dict[str, Any]] = None
    post: Optional[Dict[str, Any]] = None


class RecreateParams(BaseModel):
    timeoutSeconds: Optional[int] = None
    pre: Optional[Dict[str, Any]] = None
    mid: Optional[Dict[str, Any]] = None
    post: Optional[Dict[str, Any]] = None


class LegacyStrategy(BaseModel):
    """DeploymentConfig rollout strategy (Rolling, Recreate or Custom)."""

    type: str = LEGACY_STRATEGY_ROLLING
    rollingParams: Optional[RollingParams] = None
    recreateParams: Optional[RecreateParams] = None
    customParams: Optional[Dict[str, Any]] = None

    @property
    def hooks(self) -> List[str]:
        """Names of the lifecycle hooks configured on this strategy."""
        names = []
        if self.rollingParams is not None:
            names += [h for h in ("pre", "post") if getattr(self.rollingParams, h)]
        if self.recreateParams is not None:
            names += [h for h in ("pre", "mid", "post") if getattr(self.recreateParams, h)]
        return names

    @property
    def timeout_seconds(self) -> Optional[int]:
        if self.rollingParams is not None and self.rollingParams.timeoutSeconds:
            return self.rollingParams.timeoutSeconds
        if self.recreateParams is not None and self.recreateParams.timeoutSeconds:
            return self.recreateParams.timeoutSeconds
        return None


class LegacyRolloutConfig(BaseModel):
    """An OpenShift DeploymentConfig."""

    name: str
    namespace: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    paused: bool = False
    replicas: int = 0
    selector: Dict[str, str] = Field(default_factory=dict)
    template: Dict[str, Any] = Field(default_factory=dict)
    strategy: LegacyStrategy = Field(default_factory=LegacyStrategy)
    triggers: List[LegacyTrigger] = Field(default_factory=list)
    test: bool = False
    minReadySeconds: int = 0
    revisionHistoryLimit: Optional[int] = None

    # Fetched object, kept so an update round-trips fields this model ignores
    manifest: Dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "LegacyRolloutConfig":
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
            paused=bool(spec.get("paused", False)),
            replicas=spec.get("replicas") or 0,
            selector=spec.get("selector") or {},
            template=spec.get("template") or {},
            strategy=LegacyStrategy.model_validate(spec.get("strategy") or {}),
            triggers=[LegacyTrigger.from_manifest(t) for t in spec.get("triggers") or []],
            test=bool(spec.get("test", False)),
            minReadySeconds=spec.get("minReadySeconds") or 0,
            revisionHistoryLimit=spec.get("revisionHistoryLimit"),
            manifest=copy.deepcopy(manifest),
        )

    def to_manifest(self) -> Dict[str, Any]:
        manifest = copy.deepcopy(self.manifest)
        manifest.setdefault("apiVersion", LEGACY_API_VERSION)
        manifest.setdefault("kind", LEGACY_KIND)
        metadata = manifest.setdefault("metadata", {})
        metadata["name"] = self.name
        metadata["namespace"] = self.namespace
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        spec = manifest.setdefault("spec", {})
        spec["paused"] = self.paused
        spec["replicas"] = self.replicas
        return manifest


class RevisionSnapshot(BaseModel):
    """A ReplicationController created by a DeploymentConfig rollout."""

    name: str
    namespace: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    revision: int = 0
    replicas: int = 0
    selector: Dict[str, str] = Field(default_factory=dict)
    template: Dict[str, Any] = Field(default_factory=dict)
    creationTimestamp: Optional[datetime] = None

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "RevisionSnapshot":
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        annotations = metadata.get("annotations") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            labels=metadata.get("labels") or {},
            annotations=annotations,
            revision=_parse_revision(annotations.get(DEPLOYMENT_CONFIG_VERSION_ANNOTATION)),
            replicas=spec.get("replicas") or 0,
            selector=spec.get("selector") or {},
            template=spec.get("template") or {},
            creationTimestamp=metadata.get("creationTimestamp"),
        )


# ---------------------------------------------------------------------------
# Native side: Deployment and its ReplicaSets
# ---------------------------------------------------------------------------


class NativeStrategy(BaseModel):
    """Deployment strategy (RollingUpdate or Recreate)."""

    type: str = STRATEGY_ROLLING_UPDATE
    maxSurge: Optional[IntOrString] = None
    maxUnavailable: Optional[IntOrString] = None

    def to_manifest(self) -> Dict[str, Any]:
        strategy: Dict[str, Any] = {"type": self.type}
        if self.type == STRATEGY_ROLLING_UPDATE:
            strategy["rollingUpdate"] = _drop_none(
                {"maxSurge": self.maxSurge, "maxUnavailable": self.maxUnavailable}
            )
        return strategy

    @classmethod
    def from_manifest(cls, strategy: Dict[str, Any]) -> "NativeStrategy":
        rolling = strategy.get("rollingUpdate") or {}
        return cls(
            type=strategy.get("type", STRATEGY_ROLLING_UPDATE),
            maxSurge=rolling.get("maxSurge"),
            maxUnavailable=rolling.get("maxUnavailable"),
        )


class NativeDeployment(BaseModel):
    """A Kubernetes apps/v1 Deployment."""

    name: str
    namespace: str
    uid: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    paused: bool = False
    replicas: int = 1
    selector: Dict[str, str] = Field(default_factory=dict)
    template: Dict[str, Any] = Field(default_factory=dict)
    strategy: NativeStrategy = Field(default_factory=NativeStrategy)
    minReadySeconds: int = 0
    revisionHistoryLimit: Optional[int] = None
    progressDeadlineSeconds: Optional[int] = None

    def to_manifest(self) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)

        spec: Dict[str, Any] = {
            "paused": self.paused,
            "replicas": self.replicas,
            "selector": {"matchLabels": dict(self.selector)},
            "template": copy.deepcopy(self.template),
            "strategy": self.strategy.to_manifest(),
        }
        if self.minReadySeconds:
            spec["minReadySeconds"] = self.minReadySeconds
        spec.update(
            _drop_none(
                {
                    "revisionHistoryLimit": self.revisionHistoryLimit,
                    "progressDeadlineSeconds": self.progressDeadlineSeconds,
                }
            )
        )

        return {
            "apiVersion": APPS_API_VERSION,
            "kind": DEPLOYMENT_KIND,
            "metadata": metadata,
            "spec": spec,
        }

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "NativeDeployment":
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        selector = spec.get("selector") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            uid=metadata.get("uid"),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
            paused=bool(spec.get("paused", False)),
            replicas=spec.get("replicas", 1),
            selector=selector.get("matchLabels") or {},
            template=spec.get("template") or {},
            strategy=NativeStrategy.from_manifest(spec.get("strategy") or {}),
            minReadySeconds=spec.get("minReadySeconds") or 0,
            revisionHistoryLimit=spec.get("revisionHistoryLimit"),
            progressDeadlineSeconds=spec.get("progressDeadlineSeconds"),
        )


class NativeRevisionArtifact(BaseModel):
    """A zero-replica ReplicaSet carrying one historical revision of a Deployment."""

    name: str
    namespace: str
    revision: int
    replicas: int = 0
    podTemplateHash: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    selector: Dict[str, str] = Field(default_factory=dict)
    template: Dict[str, Any] = Field(default_factory=dict)
    ownerName: str
    ownerUid: Optional[str] = None
    sourceName: str
    sourceRevision: int = 0

    def to_manifest(self) -> Dict[str, Any]:
        annotations = dict(self.annotations)
        annotations[DEPLOYMENT_REVISION_ANNOTATION] = str(self.revision)

        metadata: Dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
            "annotations": annotations,
        }
        if self.ownerUid:
            metadata["ownerReferences"] = [
                {
                    "apiVersion": APPS_API_VERSION,
                    "kind": DEPLOYMENT_KIND,
                    "name": self.ownerName,
                    "uid": self.ownerUid,
                    "controller": True,
                    "blockOwnerDeletion": True,
                }
            ]

        return {
            "apiVersion": APPS_API_VERSION,
            "kind": REPLICA_SET_KIND,
            "metadata": metadata,
            "spec": {
                "replicas": self.replicas,
                "selector": {"matchLabels": dict(self.selector)},
                "template": copy.deepcopy(self.template),
            },
        }
