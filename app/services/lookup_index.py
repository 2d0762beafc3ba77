from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.lookup_entity import LookupEntity
from app.services.entity_service import NormalizedEntity


@dataclass
class IndexResult:
    inserted: list[LookupEntity] = field(default_factory=list)
    failed: list[NormalizedEntity] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


def _to_row(report_id: str, entity: NormalizedEntity) -> LookupEntity:
    return LookupEntity(report_id=report_id, entity_type=entity.entity_type, entity_value=entity.value)


def _insert_one(session: Session, report_id: str, entity: NormalizedEntity) -> LookupEntity:
    row = _to_row(report_id, entity)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def index_entities(session: Session, report_id: str, entities: Iterable[NormalizedEntity]) -> IndexResult:
    """Insert lookup rows for a report in one batch.

    When the batch is rejected each entity is retried on its own, so one bad
    row does not drop the others. Rows already written are never rolled back.
    """
    pending = list(entities)
    result = IndexResult()
    if not pending:
        return result

    rows = [_to_row(report_id, entity) for entity in pending]
    try:
        session.add_all(rows)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning('lookup.index.batch_failed', report_id=report_id, count=len(pending), error=str(exc))
    else:
        for row in rows:
            session.refresh(row)
        result.inserted = rows
        return result

    for entity in pending:
        try:
            result.inserted.append(_insert_one(session, report_id, entity))
        except SQLAlchemyError as exc:
            session.rollback()
            result.failed.append(entity)
            logger.warning(
                'lookup.index.entity_failed',
                report_id=report_id,
                entity_type=entity.entity_type.value,
                error=str(exc),
            )
    return result


def list_entities(session: Session, report_id: str) -> list[LookupEntity]:
    statement = (
        select(LookupEntity)
        .where(LookupEntity.report_id == report_id)
        .order_by(LookupEntity.created_at)
    )
    return list(session.exec(statement).all())


def delete_entities(session: Session, report_id: str, commit: bool = True) -> None:
    session.exec(delete(LookupEntity).where(LookupEntity.report_id == report_id))
    if commit:
        session.commit()


def replace_entities(session: Session, report_id: str, entities: Iterable[NormalizedEntity]) -> IndexResult:
    delete_entities(session, report_id)
    return index_entities(session, report_id, entities)
