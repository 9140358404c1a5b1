# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""Migrate OpenShift DeploymentConfigs to Kubernetes Deployments."""

__version__ = "0.1.0"
