# Copyright 2025 IBM Corp.
# Licensed under the Apache License, Version 2.0

"""
Command line entry point for migrating DeploymentConfigs to Deployments.

Usage:
    # Preview what would happen, without changing anything
    dcmigrate --namespace demo --dry-run web

    # Migrate two DeploymentConfigs
    dcmigrate --namespace demo web dc/api

    # Output results as JSON
    dcmigrate --namespace demo --json web
"""

import argparse
import logging
import sys
from typing import List, Optional

from dcmigrate.core.config import get_settings
from dcmigrate.core.exceptions import MigrationError
from dcmigrate.models.responses import MigrationResult, MigrationRunResponse
from dcmigrate.services.kubernetes import KubernetesGateway, resolve_namespace
from dcmigrate.services.migration import MigrationOrchestrator

logger = logging.getLogger(__name__)

_NAME_PREFIXES = ("dc/", "deploymentconfig/", "deploymentconfigs/")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def normalize_name(name: str) -> str:
    """Strip a 'dc/' style resource prefix from a DeploymentConfig name."""
    for prefix in _NAME_PREFIXES:
        if name.lower().startswith(prefix):
            return name[len(prefix):]
    return name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dcmigrate",
        description="Migrate OpenShift DeploymentConfigs to Kubernetes Deployments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each DeploymentConfig is paused and a paused Deployment is created with its
revision history. Resume the Deployment once satisfied:

  kubectl -n <namespace> rollout resume deployment/<name>

Examples:
  dcmigrate --namespace demo --dry-run web
  dcmigrate --namespace demo dc/web dc/api
        """,
    )
    parser.add_argument(
        "names",
        nargs="+",
        metavar="NAME",
        help="DeploymentConfig name(s) to migrate, e.g. web or dc/web",
    )
    parser.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="Namespace to use (default: current namespace)",
    )
    parser.add_argument(
        "--kubeconfig",
        default=None,
        help="Path to the kubeconfig file (default: in-cluster config or ~/.kube/config)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Show what would be done without making changes",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output results as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Enable verbose logging",
    )
    return parser


def _print_result(result: MigrationResult) -> None:
    mode = " (dry-run)" if result.dryRun else ""
    print(f"{result.namespace}/{result.name}{mode}")
    print(f"   - deployment config paused: {result.deploymentConfigPaused}")
    print(f"   - deployment '{result.deployment}' paused: {result.deploymentPaused}")
    for revision in result.revisions:
        print(
            f"   - revision {revision.revision}: {revision.name} "
            f"(from {revision.sourceName}, revision {revision.sourceRevision})"
        )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the migration command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    log_level = settings.log_level.upper()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_level not in _LOG_LEVELS:
        logger.error(
            f"Invalid DCMIGRATE_LOG_LEVEL '{settings.log_level}', "
            f"expected one of: {', '.join(_LOG_LEVELS)}"
        )
        sys.exit(1)

    kubeconfig = args.kubeconfig or settings.kubeconfig
    names = [normalize_name(name) for name in args.names]

    try:
        gateway = KubernetesGateway.from_kubeconfig(kubeconfig)
        namespace = resolve_namespace(args.namespace or settings.default_namespace, kubeconfig)
    except Exception as e:
        logger.error(f"Failed to initialize Kubernetes client: {e}")
        sys.exit(1)

    orchestrator = MigrationOrchestrator(gateway, dry_run=args.dry_run)
    try:
        results = orchestrator.run(namespace, names)
    except MigrationError as e:
        logger.error(str(e))
        sys.exit(1)

    if args.json:
        response = MigrationRunResponse(
            namespace=namespace,
            dryRun=args.dry_run,
            total=len(results),
            results=results,
        )
        print(response.model_dump_json(indent=2))
        return

    for result in results:
        _print_result(result)
    if not args.dry_run:
        print(
            "\nDeployments were created paused. Resume them with "
            "'kubectl rollout resume deployment/<name>' once satisfied."
        )
