# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Conversion of an OpenShift DeploymentConfig spec into a Kubernetes Deployment.

The mapping is total: every trigger and strategy either has a defined
Deployment equivalent or the conversion fails with UnsupportedStrategyError.
Nothing is dropped silently.
"""

import copy
import logging

from dcmigrate.core.constants import (
    LEGACY_DEFAULT_MAX_SURGE,
    LEGACY_DEFAULT_MAX_UNAVAILABLE,
    LEGACY_KIND,
    LEGACY_STRATEGY_RECREATE,
    LEGACY_STRATEGY_ROLLING,
    MIGRATION_SOURCE_ANNOTATION,
    MIGRATION_SOURCE_DEPLOYMENT_CONFIG,
    STRATEGY_RECREATE,
    STRATEGY_ROLLING_UPDATE,
    SUPPORTED_TRIGGER_TYPES,
)
from dcmigrate.core.exceptions import UnsupportedStrategyError
from dcmigrate.models.resources import (
    LegacyRolloutConfig,
    LegacyStrategy,
    NativeDeployment,
    NativeStrategy,
)

logger = logging.getLogger(__name__)


def _unsupported(config: LegacyRolloutConfig, message: str) -> UnsupportedStrategyError:
    return UnsupportedStrategyError(
        message,
        kind=LEGACY_KIND,
        namespace=config.namespace,
        name=config.name,
    )


def _convert_strategy(config: LegacyRolloutConfig) -> NativeStrategy:
    strategy: LegacyStrategy = config.strategy

    if strategy.hooks:
        raise _unsupported(
            config,
            f"lifecycle hooks ({', '.join(strategy.hooks)}) have no Deployment equivalent",
        )

    if strategy.type == LEGACY_STRATEGY_ROLLING:
        params = strategy.rollingParams
        max_surge = params.maxSurge if params else None
        max_unavailable = params.maxUnavailable if params else None
        return NativeStrategy(
            type=STRATEGY_ROLLING_UPDATE,
            maxSurge=LEGACY_DEFAULT_MAX_SURGE if max_surge is None else max_surge,
            maxUnavailable=(
                LEGACY_DEFAULT_MAX_UNAVAILABLE if max_unavailable is None else max_unavailable
            ),
        )

    if strategy.type == LEGACY_STRATEGY_RECREATE:
        return NativeStrategy(type=STRATEGY_RECREATE)

    raise _unsupported(config, f"strategy type '{strategy.type}' has no Deployment equivalent")


def convert_deployment_config(config: LegacyRolloutConfig) -> NativeDeployment:
    """
    Build a Deployment equivalent to a DeploymentConfig.

    The pod template, replica count and selector are copied unchanged. The
    returned Deployment is not paused; pausing it is the caller's decision.

    Args:
        config: The DeploymentConfig to convert.

    Returns:
        A new NativeDeployment with the same name and namespace.

    Raises:
        UnsupportedStrategyError: A trigger, strategy or hook cannot be
            expressed by a Deployment.
    """
    for trigger in config.triggers:
        if trigger.type not in SUPPORTED_TRIGGER_TYPES:
            raise _unsupported(
                config, f"trigger type '{trigger.type}' has no Deployment equivalent"
            )

    if config.test:
        raise _unsupported(config, "test deployments have no Deployment equivalent")

    strategy = _convert_strategy(config)

    annotations = dict(config.annotations)
    annotations[MIGRATION_SOURCE_ANNOTATION] = MIGRATION_SOURCE_DEPLOYMENT_CONFIG

    deployment = NativeDeployment(
        name=config.name,
        namespace=config.namespace,
        labels=dict(config.labels),
        annotations=annotations,
        paused=False,
        replicas=config.replicas,
        selector=dict(config.selector),
        template=copy.deepcopy(config.template),
        strategy=strategy,
        minReadySeconds=config.minReadySeconds,
        revisionHistoryLimit=config.revisionHistoryLimit,
        progressDeadlineSeconds=config.strategy.timeout_seconds,
    )
    logger.debug(f"Converted {config.namespace}/{config.name} with strategy {strategy.type}")
    return deployment
