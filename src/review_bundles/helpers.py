"""Helper functions for review_bundles CLI."""

from __future__ import annotations

import argparse

from task_db.models import Bundle, BundleStatus

# Review commands and the status each one records.
REVIEW_ACTIONS = {
    "confirm": BundleStatus.CONFIRMED,
    "reject": BundleStatus.REJECTED,
    "reopen": BundleStatus.SUGGESTED,
}


def parse_review_bundles_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for review_bundles."""

    parser = argparse.ArgumentParser(description="List and review suggested task bundles.")
    parser.add_argument("--config", default=None, help="Config name under configs/")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List bundles, newest first")
    list_parser.add_argument(
        "--status",
        type=BundleStatus,
        choices=list(BundleStatus),
        default=None,
        help="Only list bundles with this status",
    )

    show_parser = subparsers.add_parser("show", help="Show one bundle and its tasks")
    show_parser.add_argument("bundle_id")

    for action, status in REVIEW_ACTIONS.items():
        action_parser = subparsers.add_parser(action, help=f"Mark a bundle as {status.value}")
        action_parser.add_argument("bundle_id")

    delete_parser = subparsers.add_parser("delete", help="Delete a bundle")
    delete_parser.add_argument("bundle_id")

    return parser.parse_args(argv)


def format_bundle(bundle: Bundle, with_members: bool = False) -> str:
    """One-line summary of a bundle, optionally followed by its member tasks."""
    line = (
        f"{bundle.id}  {bundle.status.value:<9}  {bundle.similarity_score:.3f}  "
        f"{len(bundle.members)} tasks  {bundle.auto_label}"
    )
    if not with_members:
        return line
    members = [f"    - {member.task_id}  {member.task.title}" for member in bundle.members]
    return "\n".join([line, *members])
