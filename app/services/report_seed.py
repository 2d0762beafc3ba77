from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from loguru import logger
from sqlmodel import Session

from app.core.errors import ReportServiceError
from app.schemas.report import ReportSubmission
from app.services.evidence_storage import EvidenceStorage
from app.services.feed_service import FeedDistributor
from app.services.submission_service import submit_report


@dataclass
class SeedSummary:
    references: list[str] = field(default_factory=list)
    skipped: int = 0


def _parse_payload(raw: Any) -> list[ReportSubmission]:
    if isinstance(raw, dict):
        raw = raw.get('reports')
    if not isinstance(raw, list):
        raise ValueError('Seed file must contain a JSON array of reports or {"reports": [...]}')
    return [ReportSubmission.model_validate(item) for item in raw]


def load_seed_reports(path: Path) -> list[ReportSubmission]:
    return _parse_payload(json.loads(path.read_text(encoding='utf-8')))


async def seed_reports(
    session: Session,
    submissions: Iterable[ReportSubmission],
    *,
    storage: EvidenceStorage,
    feed: FeedDistributor,
) -> SeedSummary:
    """Submit each report anonymously. Invalid entries are logged and skipped."""
    summary = SeedSummary()
    for submission in submissions:
        try:
            result = await submit_report(session, submission, None, anonymous=True, storage=storage, feed=feed)
        except ReportServiceError as exc:
            logger.warning('seed.report_skipped', title=submission.title, error=str(exc))
            summary.skipped += 1
            continue
        summary.references.append(result.report.reference_id)
    return summary
