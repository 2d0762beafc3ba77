from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from app.core.errors import EntityLookupError
from app.db.session import get_session
from app.models.enums import EntityType
from app.schemas.lookup import LookupResultOut
from app.services.lookup_service import find_reports, to_lookup_out

router = APIRouter(prefix='/lookup', tags=['lookup'])


@router.get('', response_model=list[LookupResultOut])
def lookup_entity(
    entity_type: EntityType,
    q: str = Query(..., min_length=1),
    limit: int = Query(100, ge=1, le=500),
    session: Session = Depends(get_session),
) -> list[LookupResultOut]:
    try:
        matches = find_reports(session, entity_type, q, limit=limit)
    except EntityLookupError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return [to_lookup_out(match) for match in matches]
