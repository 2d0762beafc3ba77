from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from app.db.session import get_session
from app.models.article import Article
from app.models.user import User
from app.schemas.article import ArticleCreate, ArticleOut, ArticleUpdate
from app.services.article_service import (
    can_view,
    create_article,
    delete_article,
    get_article,
    list_articles,
    to_article_out,
    update_article,
)
from app.services.auth_service import Identity, get_current_identity, get_current_user, to_identity

router = APIRouter(prefix='/articles', tags=['articles'])


def _get_owned_article(session: Session, article_id: str, user: User) -> Article:
    record = get_article(session, article_id)
    if not record or not can_view(record, user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Article not found')
    if record.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not allowed')
    return record


@router.get('', response_model=list[ArticleOut])
def list_articles_endpoint(
    author_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
    identity: Optional[Identity] = Depends(get_current_identity),
) -> list[ArticleOut]:
    records = list_articles(
        session,
        viewer_id=identity.id if identity else None,
        user_id=author_id,
        limit=min(limit, 200),
        offset=offset,
    )
    return [to_article_out(record) for record in records]


@router.get('/{article_id}', response_model=ArticleOut)
def get_article_endpoint(
    article_id: str,
    session: Session = Depends(get_session),
    identity: Optional[Identity] = Depends(get_current_identity),
) -> ArticleOut:
    record = get_article(session, article_id)
    if not record or not can_view(record, identity.id if identity else None):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Article not found')
    return to_article_out(record)


@router.post('', response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
def create_article_endpoint(
    payload: ArticleCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ArticleOut:
    record = create_article(session, payload, to_identity(user))
    return to_article_out(record)


@router.patch('/{article_id}', response_model=ArticleOut)
def update_article_endpoint(
    article_id: str,
    payload: ArticleUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ArticleOut:
    record = _get_owned_article(session, article_id, user)
    record = update_article(session, record, payload)
    return to_article_out(record)


@router.delete('/{article_id}')
def delete_article_endpoint(
    article_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    record = _get_owned_article(session, article_id, user)
    delete_article(session, record)
    return {'status': 'ok'}
