"""
CLI entrypoint for the data retention job. Run from cron, e.g.:

  python -m jobtracker.retention

Or hourly: 0 * * * * cd /path/to/jobtracker && .venv/bin/python -m jobtracker.retention
"""

import logging
import sys

from dotenv import load_dotenv

from jobtracker.core.config import get_settings
from jobtracker.core.database import build_engine, build_session_factory
from jobtracker.services.retention import run_retention
from jobtracker.services.storage import build_object_storage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: purge expired sessions and attachments of long-archived tasks."""
    load_dotenv()
    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        result = run_retention(db, build_object_storage(settings), settings)
        if result.cleanup is None:
            logger.info("Retention completed: sessions_deleted=%s", result.sessions_deleted)
        else:
            logger.info(
                "Retention completed: sessions_deleted=%s, deleted_objects=%s, tasks_updated=%s",
                result.sessions_deleted,
                result.cleanup.deleted_objects,
                result.cleanup.tasks_updated,
            )
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
