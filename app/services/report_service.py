from typing import Optional
from loguru import logger
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select
from app.core.config import settings
from app.core.errors import StorageError
from app.models.deepfake import DeepfakeMeta
from app.models.enums import ReportCategory
from app.models.report import Report
from app.schemas.report import ReportOut, ReportUpdate
from app.services.evidence_storage import EvidenceStorage, evidence_path_from_url
from app.services.lookup_index import delete_entities
from app.services.reference_id import ReferenceFactory, generate_reference_id


def to_report_out(record: Report) -> ReportOut:
    return ReportOut(
        id=record.id,
        reference_id=record.reference_id,
        category=record.category,
        title=record.title,
        description=record.description,
        location=record.location,
        incident_date=record.incident_date,
        evidence_url=record.evidence_url,
        status=record.status,
        is_anonymous=record.is_anonymous,
        created_at=record.created_at,
    )


def insert_report(
    session: Session,
    record: Report,
    reference_factory: ReferenceFactory = generate_reference_id,
    max_attempts: Optional[int] = None,
) -> Report:
    """Insert a new report, drawing a fresh reference id on every attempt.

    A unique-constraint violation is retried with a new reference id up to
    ``max_attempts`` times. Exhausting the attempts, or any other database
    failure, raises ``StorageError``.
    """
    attempts = max_attempts or settings.REFERENCE_ID_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        record.reference_id = reference_factory(record.category)
        session.add(record)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.warning(
                'report.insert.collision',
                reference_id=record.reference_id,
                attempt=attempt,
                error=str(exc.orig),
            )
            continue
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError('Report could not be saved') from exc
        session.refresh(record)
        return record
    raise StorageError(f'Could not allocate a unique reference id after {attempts} attempts')


def list_reports(
    session: Session,
    category: Optional[ReportCategory] = None,
    user_id: Optional[str] = None,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> list[Report]:
    statement = select(Report)
    if category is not None:
        statement = statement.where(Report.category == category)
    if user_id is not None:
        statement = statement.where(Report.user_id == user_id)
    statement = statement.order_by(Report.created_at.desc())
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def get_report(session: Session, report_id: str) -> Optional[Report]:
    return session.exec(select(Report).where(Report.id == report_id)).first()


def get_report_by_reference(session: Session, reference_id: str) -> Optional[Report]:
    return session.exec(select(Report).where(Report.reference_id == reference_id)).first()


def attach_evidence_url(session: Session, record: Report, url: str) -> Report:
    record.evidence_url = url
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def get_deepfake_meta(session: Session, report_id: str) -> Optional[DeepfakeMeta]:
    return session.exec(select(DeepfakeMeta).where(DeepfakeMeta.report_id == report_id)).first()


def update_report(session: Session, record: Report, payload: ReportUpdate) -> Report:
    data = payload.model_dump(exclude_unset=True)
    for key in ('title', 'description', 'category', 'status'):
        if key in data and data[key] is None:
            data.pop(key)
    for key, value in data.items():
        setattr(record, key, value)
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def delete_report(session: Session, record: Report, storage: Optional[EvidenceStorage] = None) -> None:
    """Delete a report with its entities and deepfake metadata.

    When a storage adapter is given the evidence file is removed after the
    rows are gone. A failed removal is logged and leaves the file behind.
    """
    report_id = record.id
    evidence_url = record.evidence_url
    delete_entities(session, report_id, commit=False)
    session.exec(delete(DeepfakeMeta).where(DeepfakeMeta.report_id == report_id))
    session.delete(record)
    session.commit()

    if storage is None or not evidence_url:
        return
    path = evidence_path_from_url(evidence_url)
    try:
        storage.delete(path)
    except (OSError, ValueError) as exc:
        logger.warning('report.delete.evidence_cleanup_failed', report_id=report_id, path=path, error=str(exc))
