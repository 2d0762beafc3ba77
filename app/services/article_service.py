from typing import Optional
from sqlmodel import Session, select
from app.models.article import Article
from app.schemas.article import ArticleCreate, ArticleOut, ArticleUpdate
from app.services.auth_service import Identity


def to_article_out(record: Article) -> ArticleOut:
    return ArticleOut(
        id=record.id,
        user_id=record.user_id,
        title=record.title,
        author=record.author,
        content=record.content,
        published=record.published,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def can_view(record: Article, viewer_id: Optional[str]) -> bool:
    return record.published or (viewer_id is not None and record.user_id == viewer_id)


def create_article(session: Session, payload: ArticleCreate, identity: Identity) -> Article:
    record = Article(
        user_id=identity.id,
        title=payload.title,
        author=payload.author or identity.display_name or identity.email,
        content=payload.content,
        published=payload.published,
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def list_articles(
    session: Session,
    viewer_id: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Article]:
    """Newest first. Visitors get published articles, signed-in viewers also their own drafts."""
    statement = select(Article)
    if viewer_id is None:
        statement = statement.where(Article.published.is_(True))
    else:
        statement = statement.where((Article.published.is_(True)) | (Article.user_id == viewer_id))
    if user_id is not None:
        statement = statement.where(Article.user_id == user_id)
    statement = statement.order_by(Article.created_at.desc()).offset(offset).limit(limit)
    return list(session.exec(statement).all())


def get_article(session: Session, article_id: str) -> Optional[Article]:
    return session.exec(select(Article).where(Article.id == article_id)).first()


def update_article(session: Session, record: Article, payload: ArticleUpdate) -> Article:
    data = payload.model_dump(exclude_unset=True)
    for key in ('title', 'content', 'published'):
        if key in data and data[key] is None:
            data.pop(key)
    for key, value in data.items():
        setattr(record, key, value)
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def delete_article(session: Session, record: Article) -> None:
    session.delete(record)
    session.commit()
