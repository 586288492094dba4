#!/usr/bin/env python3
"""CLI entry point for kubebundle.

Noun-action subcommands:
- bundle: Bundle lifecycle (instantiate/destroy/validate/list)
- placement: Placement intent resolution (resolve)
- plugin: Resource-type plugins (list)
- project: Project records (create/get/delete/list)
"""

import argparse
import logging
import subprocess
import sys
from pathlib import Path

# Noun commands (noun-action subcommands)
NOUN_COMMANDS = {
    "bundle": "Bundle lifecycle (instantiate/destroy/validate/list)",
    "placement": "Placement intent resolution (resolve)",
    "plugin": "Resource-type plugins (list)",
    "project": "Project records (create/get/delete/list)",
}

BUNDLE_ACTIONS = {
    "instantiate": "Create every resource of a bundle",
    "destroy": "Delete every resource of an instance",
    "validate": "Check a bundle's manifest, files and plugins",
    "list": "List bundles in the CSAR directory",
}


def _print_actions(noun: str, actions: dict) -> None:
    print(f"Usage: kubebundle {noun} <action> [options]")
    print()
    print("Actions:")
    for action, desc in actions.items():
        print(f"  {action:<12} {desc}")
    print()
    print(f"Run 'kubebundle {noun} <action> --help' for action-specific options.")


def dispatch_bundle(argv: list) -> int:
    """Dispatch 'bundle' noun to action-specific handler.

    Args:
        argv: Arguments after 'bundle' (e.g., ['instantiate', '--bundle', 'b1', ...])

    Returns:
        Exit code
    """
    if not argv or argv[0].startswith('-'):
        _print_actions('bundle', BUNDLE_ACTIONS)
        return 1 if not argv else 0

    action = argv[0]
    rest = argv[1:]

    if action == "instantiate":
        from bundle.cli import instantiate_main
        rc: int = instantiate_main(rest)
        return rc
    if action == "destroy":
        from bundle.cli import destroy_main
        rc = destroy_main(rest)
        return rc
    if action == "validate":
        from bundle.cli import validate_main
        rc = validate_main(rest)
        return rc
    if action == "list":
        from bundle.cli import list_main
        rc = list_main(rest)
        return rc

    print(f"Error: Unknown bundle action '{action}'")
    print(f"Available actions: {', '.join(BUNDLE_ACTIONS)}")
    return 1


def plugin_main(argv: list) -> int:
    """Handle 'plugin list'."""
    from config import ConfigError, load_config
    from errors import OrchestratorError
    from plugins.registry import PluginRegistry

    parser = argparse.ArgumentParser(prog='kubebundle plugin', description='Resource-type plugins')
    parser.add_argument('action', choices=('list',))
    parser.add_argument('--config', '-c', help='Config file')
    args = parser.parse_args(argv)

    try:
        registry = PluginRegistry.from_config(load_config(args.config))
    except (ConfigError, OrchestratorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for name in registry.names():
        handle = registry.require(name)
        missing = handle.missing_capabilities()
        note = f" (missing: {', '.join(missing)})" if missing else ''
        print(f"  {name:<12} {handle.source}{note}")
    return 0


def dispatch_noun(noun: str, argv: list) -> int:
    """Dispatch to noun-specific CLI handler.

    Args:
        noun: The noun command (e.g., "bundle", "project")
        argv: Remaining command line arguments

    Returns:
        Exit code
    """
    if noun == "bundle":
        return dispatch_bundle(argv)

    if noun == "placement":
        if not argv or argv[0] != 'resolve':
            _print_actions('placement', {"resolve": "Resolve a placement intent into cluster sets"})
            return 1
        from placement.cli import resolve_main
        rc: int = resolve_main(argv[1:])
        return rc

    if noun == "plugin":
        return plugin_main(argv)

    if noun == "project":
        from records.cli import project_main
        rc = project_main(argv)
        return rc

    print(f"Error: Unknown command '{noun}'")
    return 1


def get_version():
    """Get version from git tags."""
    try:
        result = subprocess.run(
            ['git', 'describe', '--tags', '--abbrev=0'],
            capture_output=True, text=True,
            cwd=Path(__file__).parent,
            check=False,
        )
        return result.stdout.strip() if result.returncode == 0 else 'dev'
    except OSError:
        return 'dev'


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def print_usage():
    """Print top-level usage showing noun commands."""
    print(f"kubebundle {get_version()}")
    print()
    print("Usage: kubebundle <noun> <action> [options]")
    print()
    print("Commands:")
    for noun, desc in NOUN_COMMANDS.items():
        print(f"  {noun:<12} {desc}")
    print()
    print("Run 'kubebundle <noun> --help' for command-specific options.")
    print()
    print("Examples:")
    print("  kubebundle bundle instantiate --bundle vnf1 --region cloud1 --namespace ns1")
    print("  kubebundle bundle destroy --instance cloud1-ns1-1a2b")
    print("  kubebundle placement resolve --intent-file intent.yaml --groups")
    print("  kubebundle project create --name p1")


def main(argv=None) -> int:
    """CLI entry point: dispatch to noun-action handlers."""
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0] in ('--help', '-h'):
        print_usage()
        return 0 if argv else 1

    if argv[0] == '--version':
        print(f"kubebundle {get_version()}")
        return 0

    if argv[0] in NOUN_COMMANDS:
        return dispatch_noun(argv[0], argv[1:])

    print(f"Error: Unknown command '{argv[0]}'", file=sys.stderr)
    print_usage()
    return 1


if __name__ == '__main__':
    sys.exit(main())
