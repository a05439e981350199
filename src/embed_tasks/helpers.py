"""Helper functions for embed_tasks CLI."""

from __future__ import annotations

import argparse


def parse_embed_tasks_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for embed_tasks."""

    parser = argparse.ArgumentParser(description="Compute embeddings for open tasks.")

    parser.add_argument(
        "--config",
        default=None,
        help="Config name under configs/ (default: CONFIG_ENV or 'default')",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Re-embed tasks that already have a stored vector",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Embedding model (default: from config)",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Concurrent embedding requests (default: from config)",
    )
    parser.add_argument("--init-db", action="store_true", help="Create missing tables before running")

    return parser.parse_args(argv)
