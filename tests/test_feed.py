import json
from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlmodel import Session

from app.api.v1.feed import stream_feed
from app.db.init_db import init_db
from app.db.session import engine
from app.models.enums import ReportCategory, ReportStatus
from app.models.report import Report
from app.schemas.report import ReportOut
from app.services.feed_service import FeedDistributor, FeedViewer, FeedWindow
from app.services.report_service import insert_report


def _report(category: ReportCategory, title: str = 'report') -> ReportOut:
    return ReportOut(
        id=str(uuid4()),
        reference_id=f"FR-2026-{uuid4().hex[:8].upper()}",
        category=category,
        title=title,
        description='details',
        status=ReportStatus.PENDING,
        is_anonymous=True,
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.anyio
async def test_subscriber_only_receives_matching_category_in_order():
    feed = FeedDistributor()
    subscription = await feed.subscribe(ReportCategory.PHISHING)

    first = _report(ReportCategory.PHISHING, 'first')
    await feed.publish(_report(ReportCategory.FRAUD, 'fraud'))
    await feed.publish(first)
    second = _report(ReportCategory.PHISHING, 'second')
    await feed.publish(second)

    assert await subscription.get(timeout=1) == first
    assert await subscription.get(timeout=1) == second
    assert await subscription.get(timeout=0.05) is None
    subscription.cancel()


@pytest.mark.anyio
async def test_unfiltered_subscriber_receives_everything():
    feed = FeedDistributor()
    async with feed.listen() as subscription:
        delivered = await feed.publish(_report(ReportCategory.DEEPFAKE))
        assert delivered == 1
        event = await subscription.get(timeout=1)
        assert event.category == ReportCategory.DEEPFAKE


@pytest.mark.anyio
async def test_no_replay_for_late_subscribers():
    feed = FeedDistributor()
    assert await feed.publish(_report(ReportCategory.FRAUD)) == 0
    async with feed.listen(ReportCategory.FRAUD) as subscription:
        assert await subscription.get(timeout=0.05) is None


@pytest.mark.anyio
async def test_listen_cancels_subscription_on_exit():
    feed = FeedDistributor()
    async with feed.listen(ReportCategory.FRAUD) as subscription:
        assert feed.subscriber_count == 1
    assert feed.subscriber_count == 0
    assert subscription.closed
    assert await feed.publish(_report(ReportCategory.FRAUD)) == 0


@pytest.mark.anyio
async def test_cancelled_subscription_stops_iteration():
    feed = FeedDistributor()
    subscription = await feed.subscribe()
    report = _report(ReportCategory.HARASSMENT)
    await feed.publish(report)
    subscription.cancel()

    received = [item async for item in subscription]
    assert received == [report]


def test_window_prepends_and_evicts_oldest():
    window = FeedWindow(ReportCategory.FRAUD, capacity=3)
    history = [_report(ReportCategory.FRAUD, f"old-{index}") for index in range(3)]
    window.load(history)

    newest = _report(ReportCategory.FRAUD, 'newest')
    assert window.push(newest) is True
    assert [item.title for item in window.items] == ['newest', 'old-0', 'old-1']
    assert len(window) == 3


def test_window_ignores_other_categories_and_duplicates():
    window = FeedWindow(ReportCategory.PHISHING, capacity=5)
    report = _report(ReportCategory.PHISHING)
    assert window.push(_report(ReportCategory.FRAUD)) is False
    assert window.push(report) is True
    assert window.push(report) is False
    assert window.items == [report]


def test_window_defaults_to_configured_size():
    window = FeedWindow()
    for index in range(60):
        window.push(_report(ReportCategory.FRAUD, f"r{index}"))
    assert len(window) == 50
    assert window.items[0].title == 'r59'


@pytest.mark.anyio
async def test_viewer_reloads_history_and_resubscribes_on_filter_change():
    feed = FeedDistributor()
    stored = [
        _report(ReportCategory.FRAUD, 'fraud-history'),
        _report(ReportCategory.PHISHING, 'phishing-history'),
    ]
    loads = []

    def loader(category, limit):
        loads.append((category, limit))
        return [item for item in stored if category is None or item.category == category]

    async with FeedViewer(feed, loader, capacity=10) as viewer:
        window = await viewer.open(ReportCategory.FRAUD)
        assert [item.title for item in window.items] == ['fraud-history']
        first_subscription = viewer.subscription

        window = await viewer.change_filter(ReportCategory.PHISHING)
        assert first_subscription.closed
        assert viewer.subscription is not first_subscription
        assert [item.title for item in window.items] == ['phishing-history']
        assert loads == [(ReportCategory.FRAUD, 10), (ReportCategory.PHISHING, 10)]
        assert feed.subscriber_count == 1

        await feed.publish(_report(ReportCategory.FRAUD, 'ignored'))
        live = _report(ReportCategory.PHISHING, 'live')
        await feed.publish(live)
        assert await viewer.next_event(timeout=1) == live
        assert [item.title for item in viewer.window.items] == ['live', 'phishing-history']

    assert feed.subscriber_count == 0


@pytest.mark.anyio
async def test_viewer_skips_reports_already_in_history():
    feed = FeedDistributor()
    existing = _report(ReportCategory.FRAUD, 'existing')

    async def loader(category, limit):
        return [existing]

    async with FeedViewer(feed, loader) as viewer:
        await viewer.open()
        await feed.publish(existing)
        assert await viewer.next_event(timeout=0.05) is None
        assert len(viewer.window) == 1


def _decode_event(chunk: str) -> dict:
    assert chunk.startswith('data: ') and chunk.endswith('\n\n')
    return json.loads(chunk[len('data: '):])


@pytest.mark.anyio
async def test_stream_sends_snapshot_then_matching_reports_and_unsubscribes():
    init_db(drop_all=True)
    feed = FeedDistributor()
    with Session(engine) as session:
        insert_report(
            session,
            Report(reference_id='', category=ReportCategory.PHISHING, title='Earlier phish', description='details'),
        )
        insert_report(
            session,
            Report(reference_id='', category=ReportCategory.FRAUD, title='Earlier fraud', description='details'),
        )

    response = await stream_feed(category=ReportCategory.PHISHING, feed=feed)
    assert response.media_type == 'text/event-stream'
    events = response.body_iterator
    try:
        snapshot = _decode_event(await events.__anext__())
        assert snapshot['type'] == 'snapshot'
        assert snapshot['category'] == 'phishing'
        assert [item['title'] for item in snapshot['reports']] == ['Earlier phish']
        assert feed.subscriber_count == 1

        assert await feed.publish(_report(ReportCategory.FRAUD, 'live fraud')) == 0
        assert await feed.publish(_report(ReportCategory.PHISHING, 'live phish')) == 1

        event = _decode_event(await events.__anext__())
        assert event['type'] == 'report'
        assert event['report']['title'] == 'live phish'
        assert event['report']['category'] == 'phishing'
    finally:
        await events.aclose()

    assert feed.subscriber_count == 0
