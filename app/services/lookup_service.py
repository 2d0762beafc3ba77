from typing import Optional, Union
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from app.core.config import settings
from app.core.errors import EntityLookupError
from app.models.enums import EntityType
from app.models.lookup_entity import LookupEntity
from app.models.report import Report
from app.schemas.lookup import LookupResultOut, ReportSummaryOut

LookupMatch = tuple[LookupEntity, Report]


def find_reports(
    session: Session,
    entity_type: Union[EntityType, str],
    query: str,
    limit: Optional[int] = None,
) -> list[LookupMatch]:
    """Entities of ``entity_type`` whose value contains ``query``, newest first.

    Matching is a case-insensitive substring test, so a partial domain such as
    ``example.com`` also finds ``scam@example.com``. No match is an empty
    list; a failing query raises ``EntityLookupError``.
    """
    term = (query or '').strip()
    if not term:
        return []
    statement = (
        select(LookupEntity, Report)
        .join(Report, Report.id == LookupEntity.report_id)
        .where(LookupEntity.entity_type == EntityType(entity_type))
        .where(LookupEntity.entity_value.icontains(term, autoescape=True))
        .order_by(LookupEntity.created_at.desc())
        .limit(limit or settings.LOOKUP_RESULT_LIMIT)
    )
    try:
        rows = session.exec(statement).all()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error('lookup.query_failed', entity_type=str(entity_type), error=str(exc))
        raise EntityLookupError('Lookup is temporarily unavailable') from exc
    return [(entity, report) for entity, report in rows]


def to_lookup_out(match: LookupMatch) -> LookupResultOut:
    entity, report = match
    return LookupResultOut(
        id=entity.id,
        entity_type=entity.entity_type,
        entity_value=entity.entity_value,
        created_at=entity.created_at,
        report=ReportSummaryOut(
            reference_id=report.reference_id,
            title=report.title,
            category=report.category,
            location=report.location,
            status=report.status,
            created_at=report.created_at,
        ),
    )
