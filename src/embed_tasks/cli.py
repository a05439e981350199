"""CLI for backfilling task embeddings."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from common.cli_helpers import setup_logging
from common.config import get_config, load_config, set_config
from embed_tasks.embed_tasks import resolve_embeddings
from embed_tasks.embeddings import OpenAIEmbeddingProvider
from embed_tasks.helpers import parse_embed_tasks_args
from task_db.connection import get_engine, get_session, init_db
from task_db.stores import load_eligible_tasks, save_task_embedding

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    args = parse_embed_tasks_args(argv)
    if args.config is not None:
        set_config(load_config(args.config))
    config = get_config()

    engine = get_engine(config.database.url)
    if args.init_db:
        init_db(engine)

    provider = OpenAIEmbeddingProvider(
        model=args.model or config.embedding.model,
        max_chars=config.embedding.max_chars,
        timeout=config.embedding.timeout,
    )
    if not provider.configured:
        logger.warning("OPENAI_API_KEY is not set; no embeddings can be computed")
        return

    with get_session(engine) as session:
        tasks = load_eligible_tasks(session)
        if not args.overwrite:
            tasks = [task for task in tasks if not task.embedding]
        if not tasks:
            logger.warning("No tasks to embed")
            return

        vectors = resolve_embeddings(
            tasks,
            provider,
            max_workers=args.max_workers or config.bundling.embed_max_workers,
        )

        saved = 0
        for task_id, vector in vectors.items():
            try:
                save_task_embedding(session, task_id, vector)
                saved += 1
            except (SQLAlchemyError, LookupError):
                session.rollback()
                logger.exception("Failed to save embedding for task %s", task_id)

    logger.info("Saved %d embeddings (%d tasks without a vector)", saved, len(tasks) - saved)


if __name__ == "__main__":
    main()
