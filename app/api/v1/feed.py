import json
import anyio
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from loguru import logger
from sqlmodel import Session

from app.db.session import engine
from app.models.enums import ReportCategory
from app.schemas.report import ReportOut
from app.services.feed_service import FeedDistributor, FeedViewer, get_feed_distributor
from app.services.report_service import list_reports, to_report_out

router = APIRouter(prefix='/feed', tags=['feed'])


def _load_history(category: Optional[ReportCategory], limit: int) -> list[ReportOut]:
    with Session(engine) as session:
        return [to_report_out(record) for record in list_reports(session, category=category, limit=limit)]


async def load_feed_history(category: Optional[ReportCategory], limit: int) -> list[ReportOut]:
    return await anyio.to_thread.run_sync(_load_history, category, limit)


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.get('/stream')
async def stream_feed(
    category: Optional[ReportCategory] = None,
    feed: FeedDistributor = Depends(get_feed_distributor),
):
    async def event_stream():
        async with FeedViewer(feed, load_feed_history) as viewer:
            window = await viewer.open(category)
            logger.info('feed.stream.open', category=category.value if category else None, loaded=len(window))
            yield _sse(
                {
                    'type': 'snapshot',
                    'category': category.value if category else None,
                    'reports': [item.model_dump(mode='json') for item in window.items],
                }
            )
            async for report in viewer:
                yield _sse({'type': 'report', 'report': report.model_dump(mode='json')})
        logger.info('feed.stream.closed', category=category.value if category else None)

    return StreamingResponse(event_stream(), media_type='text/event-stream')
