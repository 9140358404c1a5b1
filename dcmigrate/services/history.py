# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Rebuilds Deployment revision history from DeploymentConfig ReplicationControllers.

Each ReplicationController becomes a zero-replica ReplicaSet labelled and named
the way the Deployment controller names its own ReplicaSets, so the new
Deployment adopts them as its history and `kubectl rollout undo` can use them.
"""

import copy
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from dcmigrate.core.constants import (
    MIGRATION_SOURCE_ANNOTATION,
    MIGRATION_SOURCE_REVISION_ANNOTATION,
    POD_TEMPLATE_HASH_LABEL,
    REPLICA_SET_KIND,
)
from dcmigrate.core.exceptions import AlreadyExistsError
from dcmigrate.models.resources import (
    NativeDeployment,
    NativeRevisionArtifact,
    RevisionSnapshot,
)

logger = logging.getLogger(__name__)

# Alphabet of k8s.io/apimachinery/pkg/util/rand.SafeEncodeString (no vowels, no 0/1/3)
_SAFE_ALPHANUMS = "bcdfghjklmnpqrstvwxz2456789"

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _fnv32a(data: bytes) -> int:
    value = _FNV32_OFFSET
    for byte in data:
        value ^= byte
        value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return value


def _safe_encode(value: str) -> str:
    return "".join(_SAFE_ALPHANUMS[ord(char) % len(_SAFE_ALPHANUMS)] for char in value)


def pod_template_hash(template: Dict[str, Any]) -> str:
    """Stable, DNS-safe hash of a pod template, in the pod-template-hash label format."""
    canonical = json.dumps(template, sort_keys=True, separators=(",", ":"))
    return _safe_encode(str(_fnv32a(canonical.encode("utf-8"))))


def _sort_key(snapshot: RevisionSnapshot) -> Tuple[int, datetime, str]:
    created = snapshot.creationTimestamp or _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return snapshot.revision, created, snapshot.name


def migrate_history(
    target: NativeDeployment, snapshots: List[RevisionSnapshot]
) -> List[NativeRevisionArtifact]:
    """
    Plan one ReplicaSet per ReplicationController of a migrated DeploymentConfig.

    ReplicationControllers are ordered by their DeploymentConfig revision, then
    creation time, then name. The resulting ReplicaSets are numbered 1..N in
    that order, regardless of the DeploymentConfig revision numbers.

    Args:
        target: The Deployment the history belongs to (as created, so its UID
            can be used for owner references).
        snapshots: ReplicationControllers in any order.

    Returns:
        ReplicaSets to create, in revision order. Empty for empty input.

    Raises:
        AlreadyExistsError: Two ReplicationControllers map to the same ReplicaSet name.
    """
    artifacts: List[NativeRevisionArtifact] = []
    planned: Dict[str, RevisionSnapshot] = {}

    for ordinal, snapshot in enumerate(sorted(snapshots, key=_sort_key), start=1):
        template = copy.deepcopy(snapshot.template)
        template_hash = pod_template_hash(template)
        name = f"{target.name}-{template_hash}"

        if name in planned:
            raise AlreadyExistsError(
                f"ReplicationControllers '{planned[name].name}' and '{snapshot.name}' "
                f"both map to ReplicaSet '{name}'",
                kind=REPLICA_SET_KIND,
                namespace=target.namespace,
                name=name,
            )
        planned[name] = snapshot

        template_metadata = template.setdefault("metadata", {})
        template_labels = dict(template_metadata.get("labels") or {})
        template_labels[POD_TEMPLATE_HASH_LABEL] = template_hash
        template_metadata["labels"] = template_labels

        selector = dict(target.selector)
        selector[POD_TEMPLATE_HASH_LABEL] = template_hash

        artifacts.append(
            NativeRevisionArtifact(
                name=name,
                namespace=target.namespace,
                revision=ordinal,
                replicas=0,
                podTemplateHash=template_hash,
                labels=dict(template_labels),
                annotations={
                    MIGRATION_SOURCE_ANNOTATION: snapshot.name,
                    MIGRATION_SOURCE_REVISION_ANNOTATION: str(snapshot.revision),
                },
                selector=selector,
                template=template,
                ownerName=target.name,
                ownerUid=target.uid,
                sourceName=snapshot.name,
                sourceRevision=snapshot.revision,
            )
        )
        logger.debug(
            f"Planned ReplicaSet '{name}' revision {ordinal} from '{snapshot.name}' "
            f"(revision {snapshot.revision})"
        )

    return artifacts
