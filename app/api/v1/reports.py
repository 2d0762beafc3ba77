import json
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlmodel import Session
from app.core.config import settings
from app.core.errors import (
    AuthorizationRequired,
    EvidenceTooLarge,
    StorageError,
    ValidationError,
)
from app.db.session import get_session
from app.models.enums import ReportCategory
from app.models.report import Report
from app.models.user import User
from app.schemas.report import (
    EntityReplace,
    LookupEntityIn,
    LookupEntityOut,
    ReportOut,
    ReportSubmission,
    ReportSubmitOut,
    ReportUpdate,
)
from app.services.auth_service import Identity, get_current_identity, get_current_user
from app.services.entity_service import normalize_entities
from app.services.evidence_storage import EvidenceFile, EvidenceStorage, get_evidence_storage
from app.services.feed_service import FeedDistributor, get_feed_distributor
from app.services.lookup_index import list_entities, replace_entities
from app.services.reference_id import is_reference_id
from app.services.report_service import (
    delete_report,
    get_report,
    get_report_by_reference,
    list_reports,
    to_report_out,
    update_report,
)
from app.services.submission_service import check_evidence_size, submit_report

router = APIRouter(prefix='/reports', tags=['reports'])

_entities_adapter = TypeAdapter(list[LookupEntityIn])


def _ensure_owner(record: Report, user: User) -> None:
    if record.user_id is None or record.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not allowed')


def _get_owned_report(session: Session, report_id: str, user: User) -> Report:
    record = get_report(session, report_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Report not found')
    _ensure_owner(record, user)
    return record


def _to_entity_out(record) -> LookupEntityOut:
    return LookupEntityOut(
        id=record.id,
        report_id=record.report_id,
        entity_type=record.entity_type,
        entity_value=record.entity_value,
        created_at=record.created_at,
    )


def _parse_entities(raw: str) -> list[LookupEntityIn]:
    if not raw or not raw.strip():
        return []
    try:
        return _entities_adapter.validate_python(json.loads(raw))
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail='entities must be a JSON list of {entity_type, value} objects',
        ) from exc


async def _read_evidence(upload: Optional[UploadFile]) -> Optional[EvidenceFile]:
    if upload is None or not upload.filename:
        return None
    limit = settings.EVIDENCE_MAX_BYTES
    if upload.size is not None and upload.size > limit:
        raise EvidenceTooLarge(upload.size, limit)
    data = await upload.read(limit + 1)
    evidence = EvidenceFile(filename=upload.filename, content_type=upload.content_type, data=data)
    check_evidence_size(evidence, limit)
    return evidence


@router.post('', response_model=ReportSubmitOut, status_code=status.HTTP_201_CREATED)
async def submit_report_endpoint(
    category: str = Form(''),
    title: str = Form(''),
    description: str = Form(''),
    location: Optional[str] = Form(None),
    incident_date: Optional[str] = Form(None),
    anonymous: bool = Form(False),
    entities: str = Form('[]'),
    evidence: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    identity: Optional[Identity] = Depends(get_current_identity),
    storage: EvidenceStorage = Depends(get_evidence_storage),
    feed: FeedDistributor = Depends(get_feed_distributor),
) -> ReportSubmitOut:
    try:
        submission = ReportSubmission(
            category=category,
            title=title,
            description=description,
            location=location,
            incident_date=incident_date,
            entities=_parse_entities(entities),
        )
    except PydanticValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail='Invalid incident_date') from exc

    try:
        evidence_file = await _read_evidence(evidence)
        result = await submit_report(
            session,
            submission,
            identity,
            anonymous=anonymous,
            evidence=evidence_file,
            storage=storage,
            feed=feed,
        )
    except AuthorizationRequired as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except EvidenceTooLarge as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    out = to_report_out(result.report)
    return ReportSubmitOut(**out.model_dump(), warnings=result.warnings)


@router.get('', response_model=list[ReportOut])
def list_reports_endpoint(
    category: Optional[ReportCategory] = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
) -> list[ReportOut]:
    reports = list_reports(session, category=category, limit=min(limit, 200), offset=offset)
    return [to_report_out(record) for record in reports]


@router.get('/ref/{reference_id}', response_model=ReportOut)
def get_report_by_reference_endpoint(
    reference_id: str,
    session: Session = Depends(get_session),
) -> ReportOut:
    value = reference_id.strip().upper()
    record = get_report_by_reference(session, value) if is_reference_id(value) else None
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Report not found')
    return to_report_out(record)


@router.get('/{report_id}/entities', response_model=list[LookupEntityOut])
def list_report_entities(
    report_id: str,
    session: Session = Depends(get_session),
) -> list[LookupEntityOut]:
    if not get_report(session, report_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Report not found')
    return [_to_entity_out(record) for record in list_entities(session, report_id)]


@router.put('/{report_id}/entities', response_model=list[LookupEntityOut])
def replace_report_entities(
    report_id: str,
    payload: EntityReplace,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[LookupEntityOut]:
    record = _get_owned_report(session, report_id, user)
    result = replace_entities(session, record.id, normalize_entities(payload.entities))
    if result.failed:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f'{len(result.failed)} lookup entities could not be saved',
        )
    return [_to_entity_out(item) for item in result.inserted]


@router.patch('/{report_id}', response_model=ReportOut)
def update_report_endpoint(
    report_id: str,
    payload: ReportUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    record = _get_owned_report(session, report_id, user)
    record = update_report(session, record, payload)
    return to_report_out(record)


@router.delete('/{report_id}')
def delete_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
    storage: EvidenceStorage = Depends(get_evidence_storage),
) -> dict:
    record = _get_owned_report(session, report_id, user)
    delete_report(session, record, storage=storage)
    return {'status': 'ok'}
