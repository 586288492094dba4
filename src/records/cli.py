"""CLI handlers for project records.

Usage:
    kubebundle project create --name <name> [--description <text>]
    kubebundle project get --name <name>
    kubebundle project delete --name <name>
    kubebundle project list
"""

import argparse
import json
import logging
import sys

from config import ConfigError, load_config
from errors import OrchestratorError
from records.project import Project, ProjectClient
from store import create_store

logger = logging.getLogger(__name__)

PROJECT_ACTIONS = ('create', 'get', 'delete', 'list')


def project_main(argv: list) -> int:
    """Handle 'project <action>'."""
    parser = argparse.ArgumentParser(prog='kubebundle project', description='Manage projects')
    parser.add_argument('action', choices=PROJECT_ACTIONS)
    parser.add_argument('--name', help='Project name (create, get, delete)')
    parser.add_argument('--description', default='', help='Project description (create)')
    parser.add_argument('--config', '-c', help='Config file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.action != 'list' and not args.name:
        print(f"Error: project {args.action} requires --name", file=sys.stderr)
        return 1

    try:
        projects = ProjectClient(create_store(load_config(args.config)))
        if args.action == 'create':
            project = projects.create(Project(name=args.name, description=args.description))
            print(json.dumps(project.to_dict(), indent=2))
        elif args.action == 'get':
            print(json.dumps(projects.get(args.name).to_dict(), indent=2))
        elif args.action == 'delete':
            projects.delete(args.name)
            print(f"Deleted project {args.name}")
        else:
            for project in projects.list():
                print(project.name)
    except (ConfigError, OrchestratorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
