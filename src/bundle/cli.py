"""CLI handlers for bundle verbs (instantiate, destroy, validate, list).

Usage:
    kubebundle bundle instantiate --bundle <id> --region <region> --namespace <ns> [--json-output]
    kubebundle bundle destroy --instance <id> [--json-output]
    kubebundle bundle validate --bundle <id>
    kubebundle bundle list

Instance records are needed for destroy, so instantiate and destroy are only
useful together with a persistent store (database_type: file).
"""

import argparse
import json
import logging
import sys
import time
from typing import Any, Optional

from bundle.lifecycle import BundleLifecycleManager
from config import ConfigError, OrchestratorConfig, load_config
from errors import NotFoundError, OrchestratorError
from kube import load_kube_client
from plugins.registry import PluginRegistry
from records import ConnectivityClient, Instance, InstanceClient
from store import KeyedStore, create_store

logger = logging.getLogger(__name__)


def _common_parser(verb: str, description: str) -> argparse.ArgumentParser:
    """Build argument parser with options shared by all bundle verbs."""
    parser = argparse.ArgumentParser(
        prog=f'kubebundle bundle {verb}',
        description=description,
    )
    parser.add_argument(
        '--config', '-c',
        help='Config file (default: $KUBEBUNDLE_CONFIG or /usr/local/etc/kubebundle/config.yaml)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging',
    )
    parser.add_argument(
        '--json-output',
        action='store_true',
        help='Output structured JSON to stdout (logs to stderr)',
    )
    return parser


def _setup_logging(verbose: bool, json_output: bool) -> None:
    """Configure logging based on flags."""
    if json_output:
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        root_logger.addHandler(stderr_handler)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _emit_json(verb: str, success: bool, duration: float, **fields: Any) -> None:
    """Emit structured JSON output."""
    output = {
        'verb': verb,
        'success': success,
        'duration_seconds': round(duration, 2),
    }
    output.update(fields)
    print(json.dumps(output, indent=2))


def _load_runtime(args) -> tuple[OrchestratorConfig, KeyedStore, BundleLifecycleManager]:
    """Load config, store and lifecycle manager from parsed args.

    Raises:
        ConfigError: On bad configuration
        OrchestratorError: If plugins cannot be loaded
    """
    config = load_config(args.config)
    store = create_store(config)
    registry = PluginRegistry.from_config(config)
    return config, store, BundleLifecycleManager.from_config(config, registry)


def _kube_client(store: KeyedStore, config: OrchestratorConfig, cloud_region_id: str):
    """Client for a region: its connectivity record, else the default kubeconfig."""
    try:
        return ConnectivityClient(store).kube_client(cloud_region_id)
    except NotFoundError:
        logger.debug(f"No connectivity record for {cloud_region_id}, using default kubeconfig")
        return load_kube_client(kubeconfig=config.kubeconfig)


def _report_error(e: Exception) -> None:
    print(f"Error: {e}", file=sys.stderr)
    partial = getattr(e, 'partial_resources', None)
    if partial:
        print("Resources left in place:", file=sys.stderr)
        for rtype, names in partial.items():
            for name in names:
                print(f"  {rtype}: {name}", file=sys.stderr)
    remaining = getattr(e, 'remaining_resources', None)
    if remaining:
        print("Resources not deleted:", file=sys.stderr)
        for rtype, names in remaining.items():
            for name in names:
                print(f"  {rtype}: {name}", file=sys.stderr)


def instantiate_main(argv: list) -> int:
    """Handle 'bundle instantiate' verb."""
    parser = _common_parser('instantiate', 'Create every resource of a bundle')
    parser.add_argument('--bundle', '-b', required=True, help='Bundle ID (directory in csar_dir)')
    parser.add_argument('--region', '-r', required=True, help='Cloud region ID')
    parser.add_argument('--namespace', '-n', default='default', help='Target namespace')
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.json_output)

    start = time.time()
    lifecycle: Optional[BundleLifecycleManager] = None
    try:
        config, store, lifecycle = _load_runtime(args)
        client = _kube_client(store, config, args.region)
        external_id, resources = lifecycle.instantiate(
            args.bundle, args.region, args.namespace, client
        )
        state = lifecycle.last_state
        instance = Instance(
            id=state.internal_id if state and state.internal_id else external_id,
            external_id=external_id,
            bundle_id=args.bundle,
            cloud_region_id=args.region,
            namespace=args.namespace,
            resources=resources,
        )
        try:
            InstanceClient(store).create(instance)
        except OrchestratorError as e:
            # The resources exist on the cluster even though no record does
            e.partial_resources = resources
            raise
    except (ConfigError, OrchestratorError) as e:
        _report_error(e)
        if args.json_output:
            state = lifecycle.last_state if lifecycle else None
            _emit_json(
                'instantiate', False, time.time() - start,
                error=str(e),
                code=getattr(e, 'code', None),
                stage=state.describe() if state else None,
                partial_resources=getattr(e, 'partial_resources', {}),
            )
        return 1

    logger.info(f"Instance {instance.id} created (external ID {external_id})")
    if args.json_output:
        _emit_json(
            'instantiate', True, time.time() - start,
            instance=instance.id,
            external_id=external_id,
            resources=resources,
        )
    else:
        print(f"{instance.id} {external_id}")
    return 0


def destroy_main(argv: list) -> int:
    """Handle 'bundle destroy' verb."""
    parser = _common_parser('destroy', 'Delete every resource of a bundle instance')
    parser.add_argument('--instance', '-i', required=True, help='Instance ID')
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.json_output)

    start = time.time()
    try:
        config, store, lifecycle = _load_runtime(args)
        instances = InstanceClient(store)
        instance = instances.get(args.instance)
        client = _kube_client(store, config, instance.cloud_region_id)
        lifecycle.destroy(instance.resources, instance.namespace, client)
        instances.delete(instance.id)
    except (ConfigError, OrchestratorError) as e:
        _report_error(e)
        if args.json_output:
            _emit_json(
                'destroy', False, time.time() - start,
                error=str(e),
                code=getattr(e, 'code', None),
                remaining_resources=getattr(e, 'remaining_resources', {}),
            )
        return 1

    logger.info(f"Instance {args.instance} destroyed")
    if args.json_output:
        _emit_json('destroy', True, time.time() - start, instance=args.instance)
    return 0


def validate_main(argv: list) -> int:
    """Handle 'bundle validate' verb.

    Checks the manifest, that every listed file exists, and that every
    resource type has a plugin. No cluster is contacted.
    """
    parser = _common_parser('validate', 'Validate a bundle without instantiating it')
    parser.add_argument('--bundle', '-b', required=True, help='Bundle ID (directory in csar_dir)')
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.json_output)

    try:
        _, _, lifecycle = _load_runtime(args)
    except (ConfigError, OrchestratorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    errors = lifecycle.validate(args.bundle)
    if args.json_output:
        print(json.dumps({'bundle': args.bundle, 'valid': not errors, 'errors': errors}, indent=2))
    elif errors:
        print(f"Bundle '{args.bundle}' is invalid:")
        for error in errors:
            print(f"  ✗ {error}")
    else:
        print(f"Bundle '{args.bundle}' is valid")
    return 1 if errors else 0


def list_main(argv: list) -> int:
    """Handle 'bundle list' verb."""
    parser = _common_parser('list', 'List bundles in the CSAR directory')
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.json_output)

    try:
        _, _, lifecycle = _load_runtime(args)
    except (ConfigError, OrchestratorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    bundles = lifecycle.loader.list_bundles()
    if args.json_output:
        print(json.dumps({'bundles': bundles}, indent=2))
    else:
        for bundle_id in bundles:
            print(bundle_id)
    return 0
