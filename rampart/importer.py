"""
CLI entrypoint for importing export files from disk, e.g. from a drop folder:

  python -m rampart.importer exports/Secureworks_Alerts_20250827.csv exports/*.csv

Files go through the same routing, logging and reconciliation as uploads.
Exit status is 0 when every file was ingested, 1 otherwise.
"""

import argparse
import logging
import os
import sys

from rampart.core.config import get_settings
from rampart.core.database import SessionLocal
from rampart.services.errors import IngestionError, UnrecognizedFormat
from rampart.services.format_router import route_filename
from rampart.services.ingestion import ingest_file, record_rejected_upload

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def import_path(db, path: str, app_settings) -> bool:
    """Ingest one file; True on SUCCESS or PARTIAL."""
    filename = os.path.basename(path)
    try:
        routed = route_filename(filename)
    except UnrecognizedFormat as e:
        logger.error("Skipping %s: %s", path, e.message)
        record_rejected_upload(db, filename, None, e.message)
        return False

    with open(path, "rb") as fh:
        content = fh.read()
    if len(content) > app_settings.MAX_UPLOAD_FILE_BYTES:
        logger.error("Skipping %s: %s bytes exceeds MAX_UPLOAD_FILE_BYTES", path, len(content))
        return False

    try:
        result = ingest_file(db, filename, content, app_settings=app_settings, routed=routed)
    except IngestionError as e:
        logger.error("Import of %s failed: %s", path, e.message)
        return False
    logger.info(
        "Imported %s as %s: status=%s rows_processed=%s errors=%s",
        path,
        routed.profile.name,
        result.status,
        result.rows_processed,
        result.outcome.errors.count,
    )
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import security export files into Rampart.")
    parser.add_argument("paths", nargs="+", help="CSV or PDF files named like the upload convention")
    args = parser.parse_args(argv)

    settings = get_settings()
    db = SessionLocal()
    failures = 0
    try:
        for path in args.paths:
            if not os.path.isfile(path):
                logger.error("Not a file: %s", path)
                failures += 1
                continue
            if not import_path(db, path, settings):
                failures += 1
    except Exception as e:
        logger.exception("Import job failed: %s", e)
        return 1
    finally:
        db.close()
    logger.info("Import completed: files=%s failed=%s", len(args.paths), failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
