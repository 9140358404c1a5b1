# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Kubernetes access for the migration.

KubernetesGateway wraps the official client and speaks in resource models.
ApiException and connection failures are translated into the MigrationError
taxonomy so callers never deal with HTTP status codes.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import kubernetes
import kubernetes.client
import kubernetes.config
from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from dcmigrate.core.constants import (
    DEFAULT_NAMESPACE,
    DEPLOYMENT_KIND,
    LEGACY_CRD_GROUP,
    LEGACY_CRD_VERSION,
    LEGACY_KIND,
    LEGACY_PLURAL,
    REPLICA_SET_KIND,
    SERVICE_ACCOUNT_NAMESPACE_FILE,
    history_label_selector,
)
from dcmigrate.core.exceptions import (
    AlreadyExistsError,
    ConflictError,
    MigrationError,
    NotFoundError,
    ResourceValidationError,
    TransportError,
)
from dcmigrate.models.resources import (
    LegacyRolloutConfig,
    NativeDeployment,
    NativeRevisionArtifact,
    RevisionSnapshot,
)

logger = logging.getLogger(__name__)

REPLICATION_CONTROLLER_KIND = "ReplicationController"


def load_kubernetes_config(kubeconfig: Optional[str] = None) -> None:
    """Load in-cluster configuration, falling back to a kubeconfig file."""
    if kubeconfig is None:
        try:
            kubernetes.config.load_incluster_config()
            logger.info("Using in-cluster Kubernetes configuration")
            return
        except kubernetes.config.ConfigException:
            pass
    kubernetes.config.load_kube_config(config_file=kubeconfig)
    logger.info("Using kubeconfig for Kubernetes configuration")


def resolve_namespace(namespace: Optional[str] = None, kubeconfig: Optional[str] = None) -> str:
    """
    Pick the namespace to migrate in.

    An explicit namespace wins. Otherwise the namespace of the active kubeconfig
    context is used, then the service account namespace when running in a pod,
    then "default".
    """
    if namespace:
        return namespace

    try:
        _, active_context = kubernetes.config.list_kube_config_contexts(config_file=kubeconfig)
        context_namespace = (active_context or {}).get("context", {}).get("namespace")
        if context_namespace:
            return context_namespace
    except (kubernetes.config.ConfigException, OSError) as e:
        logger.debug(f"No kubeconfig context namespace: {e}")

    if os.path.exists(SERVICE_ACCOUNT_NAMESPACE_FILE):
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, encoding="utf-8") as f:
            service_account_namespace = f.read().strip()
        if service_account_namespace:
            return service_account_namespace

    return DEFAULT_NAMESPACE


def translate_api_exception(
    e: ApiException, kind: str, namespace: str, name: Optional[str], operation: str
) -> MigrationError:
    """Map an ApiException onto the migration error taxonomy."""
    context = {"kind": kind, "namespace": namespace, "name": name}
    reason = e.reason or "unknown error"

    if e.status == 404:
        return NotFoundError(f"not found ({reason})", **context)
    if e.status == 409:
        if operation == "create":
            return AlreadyExistsError(f"already exists ({reason})", **context)
        return ConflictError(f"modified concurrently, {operation} rejected ({reason})", **context)
    if e.status in (400, 422):
        return ResourceValidationError(f"rejected as invalid ({reason}): {e.body}", **context)
    return TransportError(f"{operation} failed with status {e.status} ({reason})", **context)


class KubernetesGateway:
    """Reads and writes DeploymentConfigs, Deployments, ReplicationControllers and ReplicaSets."""

    def __init__(self, api_client: Optional[kubernetes.client.ApiClient] = None):
        self.api_client = api_client or kubernetes.client.ApiClient()
        self.custom_api = kubernetes.client.CustomObjectsApi(self.api_client)
        self.apps_api = kubernetes.client.AppsV1Api(self.api_client)
        self.core_api = kubernetes.client.CoreV1Api(self.api_client)

    @classmethod
    def from_kubeconfig(cls, kubeconfig: Optional[str] = None) -> "KubernetesGateway":
        load_kubernetes_config(kubeconfig)
        return cls()

    def _call(
        self,
        ref_kind: str,
        ref_namespace: str,
        ref_name: Optional[str],
        operation: str,
        func,
        **kwargs,
    ):
        # ref_* only describe the resource for errors; kwargs go to the client untouched
        try:
            return func(**kwargs)
        except ApiException as e:
            logger.debug(
                f"{operation} {ref_kind} {ref_namespace}/{ref_name} failed: {e.status} {e.reason}"
            )
            raise translate_api_exception(e, ref_kind, ref_namespace, ref_name, operation) from e
        except HTTPError as e:
            raise TransportError(
                f"{operation} failed: {e}", kind=ref_kind, namespace=ref_namespace, name=ref_name
            ) from e

    def _to_dict(self, obj: Any) -> Dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self.api_client.sanitize_for_serialization(obj)

    # -- DeploymentConfigs -------------------------------------------------

    def get_deployment_config(self, namespace: str, name: str) -> LegacyRolloutConfig:
        """Get a DeploymentConfig. Raises NotFoundError if absent."""
        manifest = self._call(
            LEGACY_KIND,
            namespace,
            name,
            "get",
            self.custom_api.get_namespaced_custom_object,
            group=LEGACY_CRD_GROUP,
            version=LEGACY_CRD_VERSION,
            namespace=namespace,
            plural=LEGACY_PLURAL,
            name=name,
        )
        return LegacyRolloutConfig.from_manifest(manifest)

    def update_deployment_config(self, config: LegacyRolloutConfig) -> LegacyRolloutConfig:
        """Replace a DeploymentConfig. Raises ConflictError on a stale resourceVersion."""
        manifest = self._call(
            LEGACY_KIND,
            config.namespace,
            config.name,
            "update",
            self.custom_api.replace_namespaced_custom_object,
            group=LEGACY_CRD_GROUP,
            version=LEGACY_CRD_VERSION,
            namespace=config.namespace,
            plural=LEGACY_PLURAL,
            name=config.name,
            body=config.to_manifest(),
        )
        return LegacyRolloutConfig.from_manifest(manifest)

    # -- Deployments -------------------------------------------------------

    def deployment_exists(self, namespace: str, name: str) -> bool:
        """Check if a Deployment exists."""
        try:
            self._call(
                DEPLOYMENT_KIND,
                namespace,
                name,
                "get",
                self.apps_api.read_namespaced_deployment,
                name=name,
                namespace=namespace,
            )
            return True
        except NotFoundError:
            return False

    def create_deployment(self, deployment: NativeDeployment) -> NativeDeployment:
        """Create a Deployment. Raises AlreadyExistsError if the name is taken."""
        result = self._call(
            DEPLOYMENT_KIND,
            deployment.namespace,
            deployment.name,
            "create",
            self.apps_api.create_namespaced_deployment,
            namespace=deployment.namespace,
            body=deployment.to_manifest(),
        )
        return NativeDeployment.from_manifest(self._to_dict(result))

    # -- ReplicationControllers / ReplicaSets ------------------------------

    def list_replication_controllers(self, namespace: str, config_name: str) -> List[RevisionSnapshot]:
        """List the ReplicationControllers rolled out by a DeploymentConfig, in API order."""
        result = self._call(
            REPLICATION_CONTROLLER_KIND,
            namespace,
            None,
            "list",
            self.core_api.list_namespaced_replication_controller,
            namespace=namespace,
            label_selector=history_label_selector(config_name),
        )
        items = self._to_dict(result).get("items") or []
        return [RevisionSnapshot.from_manifest(item) for item in items]

    def create_replica_set(self, artifact: NativeRevisionArtifact) -> NativeRevisionArtifact:
        """Create a ReplicaSet. Raises AlreadyExistsError if the name is taken."""
        self._call(
            REPLICA_SET_KIND,
            artifact.namespace,
            artifact.name,
            "create",
            self.apps_api.create_namespaced_replica_set,
            namespace=artifact.namespace,
            body=artifact.to_manifest(),
        )
        return artifact
