"""CLI for reviewing suggested bundles."""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from common.cli_helpers import setup_logging
from common.config import get_config, load_config, set_config
from review_bundles.helpers import REVIEW_ACTIONS, format_bundle, parse_review_bundles_args
from task_db.connection import get_engine, get_session
from task_db.stores import delete_bundle, get_bundle, list_bundles, set_bundle_status

load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    args = parse_review_bundles_args(argv)
    if args.config is not None:
        set_config(load_config(args.config))
    config = get_config()
    engine = get_engine(config.database.url)

    with get_session(engine) as session:
        if args.command == "list":
            bundles = list_bundles(session, status=args.status)
            if not bundles:
                logger.info("No bundles found")
            for bundle in bundles:
                print(format_bundle(bundle))
            return 0

        if args.command == "show":
            bundle = get_bundle(session, args.bundle_id)
            if bundle is None:
                logger.error("Bundle not found: %s", args.bundle_id)
                return 1
            print(format_bundle(bundle, with_members=True))
            return 0

        try:
            if args.command == "delete":
                delete_bundle(session, args.bundle_id)
            else:
                bundle = set_bundle_status(session, args.bundle_id, REVIEW_ACTIONS[args.command])
                print(format_bundle(bundle))
        except LookupError as e:
            logger.error("%s", e)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
