"""
Seed the community catalog from data/communities.json.

Every record is relabelled with classifier.classify before insert. Existing
communities are deleted first, so running this twice leaves one copy.

    python seed.py [path/to/communities.json]
"""
import json
import sys
from collections import Counter
from typing import Any, Dict, List

from pymongo.database import Database

import config
import database
from classifier import classify
from logging_config import get_logger, setup_logging
from schemas import Community

logger = get_logger(__name__)


def load_seed(path: str) -> List[Dict[str, Any]]:
    with open(path, encoding="utf-8") as fh:
        records = json.load(fh)
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of communities")
    return records


def prepare(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    prepared = []
    for record in records:
        community = Community(**{**record, "tech_stack": classify(record)})
        prepared.append(database.stamp(community.model_dump()))
    return prepared


def seed(db: Database, records: List[Dict[str, Any]]) -> Dict[str, int]:
    docs = prepare(records)
    collection = db["community"]

    deleted = collection.delete_many({}).deleted_count
    logger.info("communities_cleared", deleted=deleted)
    if docs:
        collection.insert_many(docs)

    distribution = dict(Counter(d["tech_stack"] for d in docs))
    logger.info("seed_completed", inserted=len(docs), distribution=distribution)
    return distribution


def main(argv: List[str]) -> int:
    setup_logging()
    path = argv[1] if len(argv) > 1 else config.SEED_FILE

    if database.db is None:
        logger.error("seed_failed", reason="DATABASE_URL is not set")
        return 1
    try:
        seed(database.db, load_seed(path))
    except Exception:
        logger.exception("seed_failed", path=path)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
