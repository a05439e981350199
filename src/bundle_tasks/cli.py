"""CLI for running bundle analysis over open tasks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from dotenv import load_dotenv

from bundle_tasks.bundle_tasks import run_bundle_analysis
from bundle_tasks.helpers import parse_bundle_tasks_args
from common.cli_helpers import save_jsonl_local, setup_logging
from common.config import get_config, load_config, set_config
from common.serialization import serialize_dataclass
from embed_tasks.embeddings import OpenAIEmbeddingProvider
from task_db.connection import get_engine, get_session, init_db

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    args = parse_bundle_tasks_args(argv)
    if args.config is not None:
        set_config(load_config(args.config))
    config = get_config()

    threshold = args.threshold if args.threshold is not None else config.bundling.similarity_threshold
    max_workers = args.max_workers or config.bundling.embed_max_workers

    engine = get_engine(config.database.url)
    if args.init_db:
        init_db(engine)

    provider = OpenAIEmbeddingProvider(
        model=config.embedding.model,
        max_chars=config.embedding.max_chars,
        timeout=config.embedding.timeout,
    )
    if not provider.configured:
        logger.warning("OPENAI_API_KEY is not set; only tasks with stored embeddings can be bundled")

    with get_session(engine) as session:
        result = run_bundle_analysis(session, provider, threshold=threshold, max_workers=max_workers)

    for bundle in result.bundles:
        logger.info("  [%.3f] %s (%d tasks)", bundle.similarity_score, bundle.auto_label, len(bundle.task_ids))

    if args.load_local:
        now = datetime.now(timezone.utc)
        filepath = save_jsonl_local([serialize_dataclass(result)], "bundle_analysis", now)
        logger.info("Saved bundle analysis to %s", filepath)


if __name__ == "__main__":
    main()
