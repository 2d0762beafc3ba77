from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from app.db.session import get_session
from app.models.enums import ReportCategory
from app.models.user import User
from app.schemas.article import ArticleOut
from app.schemas.report import ReportOut
from app.schemas.user import UserOut, UserUpdate
from app.services.article_service import list_articles, to_article_out
from app.services.auth_service import get_current_user
from app.services.report_service import list_reports, to_report_out
from app.services.user_service import to_user_out, update_user

router = APIRouter(prefix='/me', tags=['me'])


@router.get('', response_model=UserOut)
def get_me(user: User = Depends(get_current_user)) -> UserOut:
    return to_user_out(user)


@router.patch('', response_model=UserOut)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> UserOut:
    try:
        record = update_user(session, user, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return to_user_out(record)


@router.get('/reports', response_model=list[ReportOut])
def list_my_reports(
    category: Optional[ReportCategory] = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[ReportOut]:
    reports = list_reports(session, category=category, user_id=user.id, limit=limit, offset=offset)
    return [to_report_out(record) for record in reports]


@router.get('/articles', response_model=list[ArticleOut])
def list_my_articles(
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[ArticleOut]:
    records = list_articles(session, viewer_id=user.id, user_id=user.id, limit=limit, offset=offset)
    return [to_article_out(record) for record in records]
