"""Helper functions for bundle_tasks CLI."""

from __future__ import annotations

import argparse

from common.config import validate_threshold


def _threshold_arg(value: str) -> float:
    try:
        return validate_threshold(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_bundle_tasks_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for bundle_tasks."""

    parser = argparse.ArgumentParser(description="Suggest bundles of similar open tasks.")

    # Input options
    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ (default: CONFIG_ENV or 'default')",
    )
    parser.add_argument("--init-db", action="store_true", help="Create missing tables before running")

    # Clustering options
    parser.add_argument(
        "--threshold",
        type=_threshold_arg,
        default=None,
        help="Cosine similarity threshold in (0, 1] (default: from config, 0.82)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Concurrent embedding requests (default: from config)",
    )

    # Output options
    parser.add_argument("--load-local", action="store_true", help="Save the run result to a local file")

    return parser.parse_args(argv)
