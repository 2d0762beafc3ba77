from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.db.session import get_session
from app.services.feed_service import FeedDistributor, get_feed_distributor

router = APIRouter()


@router.get('/health')
def health(
    session: Session = Depends(get_session),
    feed: FeedDistributor = Depends(get_feed_distributor),
) -> dict:
    try:
        session.exec(text('SELECT 1'))
        database = 'ok'
    except SQLAlchemyError:
        database = 'unavailable'
    return {'status': 'ok', 'database': database, 'feed_subscribers': feed.subscriber_count}
