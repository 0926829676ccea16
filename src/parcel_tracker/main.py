"""
Parcel Tracker administrative CLI.

Simple command-line interface for inspecting the status workflow and
driving packages through it. No UI required - designed for operators and
scripted use.

Usage Examples:
    # Create tables in the configured database
    parcel-tracker init-db

    # Print the manager vocabulary, its transitions and projections
    parcel-tracker workflow --role manager

    # Show a package as the client sees it
    parcel-tracker show PKG-1718000000000-AB12 --role client

    # Relay a package to its logist
    parcel-tracker act 42 manager send_to_logist
"""

import argparse
import logging
import sys
from typing import Optional

from parcel_tracker.models import WorkflowRole
from parcel_tracker.services import package_service
from parcel_tracker.services.database import initialize_app_database, session_scope
from parcel_tracker.services.exceptions import ServiceError
from parcel_tracker.services.workflow import (
    PROJECTIONS,
    actions_for,
    get_statuses_for_role,
    get_status_info,
    next_status,
)
from parcel_tracker.utils.config import get_config

ROLE_CHOICES = ["client", "logist", "manager", "admin"]


def init_db() -> int:
    """Create all tables in the configured database."""
    config = get_config()
    print(f"Initializing database at {config.database_url}...")
    initialize_app_database()
    print("Database ready")
    return 0


def print_workflow(role: Optional[str] = None) -> int:
    """Print vocabulary, interactive flags, transitions and projections."""
    roles = [WorkflowRole.from_role(role)] if role else list(WorkflowRole)
    for workflow_role in roles:
        print(f"\n[{workflow_role.value}]")
        for status in get_statuses_for_role(workflow_role):
            info = get_status_info(workflow_role, status)
            marker = "*" if info.interactive else " "
            print(f"  {marker} {status.value:<22} {info.label}")
            for action in actions_for(status, workflow_role):
                target = next_status(status, action, workflow_role)
                print(f"        --{action.value}--> {target.value}")
            for other, projected in PROJECTIONS.get((workflow_role, status), {}).items():
                print(f"        => {other.value}: {projected.value}")
    print("\n(* = role acts at this status)")
    return 0


def show_package(identifier: str, role: str) -> int:
    """Print a package as one role sees it."""
    with session_scope() as session:
        if identifier.isdigit():
            package = package_service.get_package(int(identifier), session=session)
        else:
            package = package_service.get_package_by_tracking_code(identifier, session=session)
        summary = package_service.describe_package(package, role)
        statuses = {r.value: (s.value if s is not None else None) for r, s in package.sub_statuses().items()}

    print(f"Package {summary['tracking_code']} (id {summary['id']}, version {summary['version']})")
    print(f"  Viewing as: {summary['role']}")
    print(f"  Status: {summary['status_label']} - {summary['status_description']}")
    actions = summary["available_actions"]
    print(f"  Available actions: {', '.join(actions) if actions else 'none (waiting)'}")
    print(f"  Sub-statuses: {statuses}")
    return 0


def act(
    package_id: int,
    role: str,
    action: str,
    expected_version: Optional[int] = None,
    comment: Optional[str] = None,
) -> int:
    """Apply one action and print the resulting sub-statuses."""
    package = package_service.apply_action(
        package_id, role, action, expected_version=expected_version, comment=comment
    )
    print(f"Applied '{action}' as {role} to package {package.tracking_code}")
    print(f"  client:  {package.client_status.value}")
    print(f"  logist:  {package.logist_status.value if package.logist_status else '-'}")
    print(f"  manager: {package.manager_status.value}")
    print(f"  version: {package.version}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Administrative utility for Parcel Tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  parcel-tracker init-db
  parcel-tracker workflow --role logist
  parcel-tracker show 42 --role manager
  parcel-tracker act 42 client confirm --expected-version 4
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    config = get_config()
    parser.add_argument(
        "--version", action="version", version=f"{config.app_name} {config.app_version}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create database tables")

    workflow_parser = subparsers.add_parser("workflow", help="Print the status workflow")
    workflow_parser.add_argument("--role", choices=ROLE_CHOICES, help="Only this role")

    show_parser = subparsers.add_parser("show", help="Show a package as one role sees it")
    show_parser.add_argument("package", help="Package ID or tracking code")
    show_parser.add_argument("--role", choices=ROLE_CHOICES, default="manager")

    act_parser = subparsers.add_parser("act", help="Apply a workflow action")
    act_parser.add_argument("package_id", type=int, help="Package ID")
    act_parser.add_argument("role", choices=ROLE_CHOICES, help="Acting role")
    act_parser.add_argument("action", help="Action name (e.g. send_to_logist)")
    act_parser.add_argument(
        "--expected-version",
        type=int,
        dest="expected_version",
        help="Reject if the package version differs",
    )
    act_parser.add_argument("--comment", help="Manager comment stored on the package")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "init-db":
            return init_db()
        elif args.command == "workflow":
            return print_workflow(args.role)
        elif args.command == "show":
            return show_package(args.package, args.role)
        elif args.command == "act":
            return act(
                args.package_id,
                args.role,
                args.action,
                expected_version=args.expected_version,
                comment=args.comment,
            )
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except ServiceError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
