from __future__ import annotations

import argparse
from pathlib import Path

import anyio
from sqlmodel import Session

from app.db.init_db import init_db
from app.db.session import engine
from app.services.evidence_storage import get_evidence_storage
from app.services.feed_service import FeedDistributor
from app.services.report_seed import load_seed_reports, seed_reports


def main() -> None:
    parser = argparse.ArgumentParser(description='Seed demo reports from a JSON file.')
    parser.add_argument('--path', required=True, help='Path to a JSON array of report submissions')
    parser.add_argument('--dry-run', action='store_true', help='Validate only, do not write to DB')
    args = parser.parse_args()

    submissions = load_seed_reports(Path(args.path).expanduser())
    if args.dry_run:
        print(f"validated {len(submissions)} reports")
        return

    init_db()
    with Session(engine) as session:
        summary = anyio.run(
            lambda: seed_reports(session, submissions, storage=get_evidence_storage(), feed=FeedDistributor())
        )
    print(f"seeded reports: created={len(summary.references)} skipped={summary.skipped}")


if __name__ == '__main__':
    main()
