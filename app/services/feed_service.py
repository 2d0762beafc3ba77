from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

from loguru import logger

from app.core.config import settings
from app.models.enums import ReportCategory
from app.models.report import Report
from app.schemas.report import ReportOut
from app.services.report_service import to_report_out

HistoryLoader = Callable[
    [Optional[ReportCategory], int],
    Union[list[ReportOut], Awaitable[list[ReportOut]]],
]


def matches_category(report: ReportOut, category: Optional[ReportCategory]) -> bool:
    return category is None or report.category == category


class FeedSubscription:
    """One viewer's push channel. Iterate it for events, call ``cancel()`` to leave."""

    def __init__(self, distributor: FeedDistributor, category: Optional[ReportCategory]) -> None:
        self.category = category
        self._distributor = distributor
        self._queue: asyncio.Queue[Optional[ReportOut]] = asyncio.Queue()
        self.closed = False

    def matches(self, report: ReportOut) -> bool:
        return matches_category(report, self.category)

    def deliver(self, report: ReportOut) -> None:
        if not self.closed:
            self._queue.put_nowait(report)

    def cancel(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._distributor.discard(self)
        self._queue.put_nowait(None)

    async def get(self, timeout: Optional[float] = None) -> Optional[ReportOut]:
        """Next event, or ``None`` once cancelled or when ``timeout`` elapses."""
        if self.closed and self._queue.empty():
            return None
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def __aiter__(self) -> FeedSubscription:
        return self

    async def __anext__(self) -> ReportOut:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item


class FeedDistributor:
    """In-process broadcast of newly created reports.

    Delivery is best effort with no replay: a subscription only sees reports
    published while it is open, in publish order.
    """

    def __init__(self) -> None:
        self._subscriptions: set[FeedSubscription] = set()
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def subscribe(self, category: Optional[ReportCategory] = None) -> FeedSubscription:
        subscription = FeedSubscription(self, category)
        async with self._lock:
            self._subscriptions.add(subscription)
        logger.debug('feed.subscribe', category=category.value if category else None)
        return subscription

    def discard(self, subscription: FeedSubscription) -> None:
        self._subscriptions.discard(subscription)

    @asynccontextmanager
    async def listen(self, category: Optional[ReportCategory] = None) -> AsyncIterator[FeedSubscription]:
        subscription = await self.subscribe(category)
        try:
            yield subscription
        finally:
            subscription.cancel()

    async def publish(self, report: Union[Report, ReportOut]) -> int:
        event = report if isinstance(report, ReportOut) else to_report_out(report)
        delivered = 0
        async with self._lock:
            for subscription in list(self._subscriptions):
                if subscription.matches(event):
                    subscription.deliver(event)
                    delivered += 1
        logger.debug('feed.publish', reference_id=event.reference_id, delivered=delivered)
        return delivered

    async def close(self) -> None:
        async with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.cancel()


class FeedWindow:
    """Most-recent-first window of reports held by a single viewer."""

    def __init__(self, category: Optional[ReportCategory] = None, capacity: Optional[int] = None) -> None:
        self.category = category
        self.capacity = capacity or settings.FEED_WINDOW_SIZE
        self._items: list[ReportOut] = []

    @property
    def items(self) -> list[ReportOut]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def accepts(self, report: ReportOut) -> bool:
        return matches_category(report, self.category)

    def load(self, reports: list[ReportOut]) -> None:
        self._items = [report for report in reports if self.accepts(report)][: self.capacity]

    def push(self, report: ReportOut) -> bool:
        if not self.accepts(report):
            return False
        if any(item.id == report.id for item in self._items):
            return False
        self._items.insert(0, report)
        del self._items[self.capacity :]
        return True


class FeedViewer:
    """Keeps a ``FeedWindow`` in sync with a ``FeedDistributor``.

    Opening (or changing the filter) drops any previous subscription,
    subscribes with the new filter and reloads history. The subscription is
    taken before the history load so nothing published in between is lost;
    duplicates are ignored by the window.
    """

    def __init__(
        self,
        distributor: FeedDistributor,
        loader: HistoryLoader,
        capacity: Optional[int] = None,
    ) -> None:
        self._distributor = distributor
        self._loader = loader
        self._capacity = capacity
        self._subscription: Optional[FeedSubscription] = None
        self.window: Optional[FeedWindow] = None

    @property
    def subscription(self) -> Optional[FeedSubscription]:
        return self._subscription

    async def _load(self, category: Optional[ReportCategory], limit: int) -> list[ReportOut]:
        result = self._loader(category, limit)
        if inspect.isawaitable(result):
            result = await result
        return list(result)

    async def open(self, category: Optional[ReportCategory] = None) -> FeedWindow:
        await self.close()
        self._subscription = await self._distributor.subscribe(category)
        window = FeedWindow(category, self._capacity)
        window.load(await self._load(category, window.capacity))
        self.window = window
        return window

    async def change_filter(self, category: Optional[ReportCategory]) -> FeedWindow:
        return await self.open(category)

    async def next_event(self, timeout: Optional[float] = None) -> Optional[ReportOut]:
        if self._subscription is None or self.window is None:
            return None
        while True:
            report = await self._subscription.get(timeout)
            if report is None:
                return None
            if self.window.push(report):
                return report

    async def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    async def __aenter__(self) -> FeedViewer:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __aiter__(self) -> FeedViewer:
        return self

    async def __anext__(self) -> ReportOut:
        report = await self.next_event()
        if report is None:
            raise StopAsyncIteration
        return report


feed_distributor = FeedDistributor()


def get_feed_distributor() -> FeedDistributor:
    return feed_distributor
