from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import anyio
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import AuthorizationRequired, EvidenceTooLarge, UploadError, ValidationError
from app.models.deepfake import DeepfakeMeta
from app.models.enums import ReportCategory
from app.models.report import Report
from app.schemas.report import ReportSubmission
from app.services.auth_service import Identity
from app.services.entity_service import normalize_entities
from app.services.evidence_storage import EvidenceFile, EvidenceStorage, evidence_path
from app.services.feed_service import FeedDistributor
from app.services.lookup_index import index_entities
from app.services.reference_id import ReferenceFactory, generate_reference_id
from app.services.report_service import attach_evidence_url, insert_report

REQUIRED_FIELDS = ('category', 'title', 'description')


@dataclass
class SubmissionResult:
    report: Report
    warnings: list[str] = field(default_factory=list)


def resolve_submitter(identity: Optional[Identity], anonymous: bool) -> Optional[str]:
    if identity is not None:
        return identity.id
    if anonymous:
        return None
    raise AuthorizationRequired('Please sign in or choose anonymous reporting')


def check_evidence_size(evidence: Optional[EvidenceFile], limit: Optional[int] = None) -> None:
    max_bytes = limit or settings.EVIDENCE_MAX_BYTES
    if evidence is not None and evidence.size > max_bytes:
        raise EvidenceTooLarge(evidence.size, max_bytes)


def validate_submission(submission: ReportSubmission) -> ReportCategory:
    missing = [name for name in REQUIRED_FIELDS if not (getattr(submission, name) or '').strip()]
    if missing:
        raise ValidationError.missing(missing)
    try:
        return ReportCategory(submission.category.strip().lower())
    except ValueError as exc:
        allowed = ', '.join(item.value for item in ReportCategory)
        raise ValidationError(f'category must be one of: {allowed}', ['category']) from exc


async def _upload_evidence(storage: EvidenceStorage, report: Report, evidence: EvidenceFile) -> str:
    path = evidence_path(report.id, evidence)
    try:
        return await anyio.to_thread.run_sync(storage.put, path, evidence.data, evidence.content_type)
    except Exception as exc:  # noqa: BLE001
        raise UploadError(f'Evidence upload failed: {exc}') from exc


def _record_deepfake(session: Session, report: Report, evidence: EvidenceFile, file_url: Optional[str]) -> DeepfakeMeta:
    record = DeepfakeMeta(
        report_id=report.id,
        file_url=file_url or '',
        file_name=evidence.filename,
        file_size=evidence.size,
        file_type=evidence.content_type,
        file_metadata={
            'upload_date': datetime.now(timezone.utc).isoformat(),
            'original_name': evidence.filename,
        },
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


async def submit_report(
    session: Session,
    submission: ReportSubmission,
    identity: Optional[Identity],
    anonymous: bool = False,
    evidence: Optional[EvidenceFile] = None,
    *,
    storage: EvidenceStorage,
    feed: FeedDistributor,
    reference_factory: ReferenceFactory = generate_reference_id,
) -> SubmissionResult:
    """Create a report and everything hanging off it.

    Steps run in a fixed order because the evidence path and the lookup rows
    need the report id. Only a failure to write the report row itself aborts
    the submission; later failures are logged and returned as warnings, and
    the report stays in place.
    """
    user_id = resolve_submitter(identity, anonymous)
    check_evidence_size(evidence)
    category = validate_submission(submission)

    record = Report(
        reference_id='',
        user_id=user_id,
        category=category,
        title=submission.title.strip(),
        description=submission.description.strip(),
        location=submission.location.strip() if submission.location else None,
        incident_date=submission.incident_date,
    )
    report = insert_report(session, record, reference_factory=reference_factory)
    logger.info(
        'report.submit.created',
        report_id=report.id,
        reference_id=report.reference_id,
        category=report.category.value,
        anonymous=report.is_anonymous,
    )
    result = SubmissionResult(report=report)

    file_url: Optional[str] = None
    if evidence is not None:
        try:
            file_url = await _upload_evidence(storage, report, evidence)
        except UploadError as exc:
            logger.warning('report.submit.upload_failed', report_id=report.id, error=str(exc))
            result.warnings.append(str(exc))
        else:
            try:
                attach_evidence_url(session, report, file_url)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.warning('report.submit.attach_failed', report_id=report.id, error=str(exc))
                result.warnings.append('Evidence was stored but could not be linked to the report')

        if report.category == ReportCategory.DEEPFAKE:
            try:
                _record_deepfake(session, report, evidence, file_url)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.warning('report.submit.deepfake_failed', report_id=report.id, error=str(exc))
                result.warnings.append('Deepfake details could not be saved')

    entities = normalize_entities(submission.entities)
    if entities:
        indexed = index_entities(session, report.id, entities)
        if indexed.failed:
            result.warnings.append(f'{len(indexed.failed)} lookup entities could not be saved')

    session.refresh(report)
    await feed.publish(report)
    return result
