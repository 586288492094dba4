"""CLI handler for 'placement resolve'.

Usage:
    kubebundle placement resolve --intent-file <file> [--groups] [--labels <file>]

The intent file is YAML or JSON in the allOf/anyOf wire form. --labels
points at an inventory file used to expand labels:

    <provider>:
      <label>: [cluster1, cluster2]
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from errors import InvalidIntentError, OrchestratorError
from placement.intent import IntentSpec
from placement.resolver import LabelLookup, PlacementIntentResolver

logger = logging.getLogger(__name__)


def _read_yaml(path: Path, what: str):
    if not path.is_file():
        raise InvalidIntentError(f"{what} not found: {path}")
    try:
        with open(path, encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidIntentError(f"Invalid YAML in {path}: {e}")


def label_lookup_from_file(path: Path) -> LabelLookup:
    """Build a label lookup from a provider -> label -> clusters file."""
    inventory = _read_yaml(path, 'Label inventory') or {}
    if not isinstance(inventory, dict):
        raise InvalidIntentError(f"Label inventory {path} must be a YAML object (dict)")

    def lookup(provider: str, label: str) -> list[str]:
        return list((inventory.get(provider) or {}).get(label) or [])

    return lookup


def resolve_main(argv: list) -> int:
    """Handle 'placement resolve' verb."""
    parser = argparse.ArgumentParser(
        prog='kubebundle placement resolve',
        description='Resolve a placement intent into cluster sets',
    )
    parser.add_argument('--intent-file', '-f', required=True, help='Intent file (YAML or JSON)')
    parser.add_argument(
        '--groups',
        action='store_true',
        help='Show mandatory clusters and numbered optional groups',
    )
    parser.add_argument('--labels', help='Label inventory file used to expand labels')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        intent = IntentSpec.from_dict(_read_yaml(Path(args.intent_file), 'Intent file'))
        label_lookup: Optional[LabelLookup] = None
        if args.labels:
            label_lookup = label_lookup_from_file(Path(args.labels))
        resolver = PlacementIntentResolver(label_lookup)
        if args.groups:
            output = resolver.resolve_groups(intent).to_dict()
        else:
            resolved = resolver.resolve_intent(intent)
            output = resolved.to_dict()
            if label_lookup is not None:
                output['clusters-from-labels'] = [
                    c.to_dict() for c in resolved.expand_labels(label_lookup)
                ]
    except OrchestratorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0
