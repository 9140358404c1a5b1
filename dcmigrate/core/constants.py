# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Constants shared across the application.
"""

from dcmigrate.core.config import settings

# OpenShift DeploymentConfig API (apps.openshift.io)
LEGACY_CRD_GROUP = settings.legacy_crd_group
LEGACY_CRD_VERSION = settings.legacy_crd_version
LEGACY_PLURAL = settings.legacy_plural
LEGACY_API_VERSION = settings.legacy_api_version
LEGACY_KIND = "DeploymentConfig"

# Labels and annotations written by the DeploymentConfig controller
DEPLOYMENT_CONFIG_NAME_LABEL = settings.deployment_config_name_label
DEPLOYMENT_CONFIG_VERSION_ANNOTATION = settings.deployment_config_version_annotation

# Legacy trigger types
TRIGGER_CONFIG_CHANGE = "ConfigChange"
TRIGGER_IMAGE_CHANGE = "ImageChange"
SUPPORTED_TRIGGER_TYPES = [TRIGGER_CONFIG_CHANGE]

# Legacy strategy types
LEGACY_STRATEGY_ROLLING = "Rolling"
LEGACY_STRATEGY_RECREATE = "Recreate"
LEGACY_STRATEGY_CUSTOM = "Custom"

# Defaults applied by the DeploymentConfig API server when rollingParams are unset
LEGACY_DEFAULT_MAX_SURGE = "25%"
LEGACY_DEFAULT_MAX_UNAVAILABLE = "25%"

# Kubernetes apps/v1
APPS_API_VERSION = "apps/v1"
DEPLOYMENT_KIND = "Deployment"
REPLICA_SET_KIND = "ReplicaSet"
STRATEGY_ROLLING_UPDATE = "RollingUpdate"
STRATEGY_RECREATE = "Recreate"

# Written by the Deployment controller; used to adopt migrated history
POD_TEMPLATE_HASH_LABEL = "pod-template-hash"
DEPLOYMENT_REVISION_ANNOTATION = "deployment.kubernetes.io/revision"

# Migration provenance annotations
MIGRATION_SOURCE_ANNOTATION = "dcmigrate.io/migrated-from"
MIGRATION_SOURCE_REVISION_ANNOTATION = "dcmigrate.io/source-revision"
MIGRATION_SOURCE_DEPLOYMENT_CONFIG = "deploymentconfig"

# Namespace of the pod when running in-cluster
SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"
DEFAULT_NAMESPACE = "default"


def history_label_selector(config_name: str) -> str:
    """Label selector matching every ReplicationController of a DeploymentConfig."""
    return f"{DEPLOYMENT_CONFIG_NAME_LABEL}={config_name}"
