"""
Live reserved-date updates for open calendars.

Each consumer owns its ``ReservedDatesSubscription``: it is acquired when a
calendar is opened and released when the calendar goes away. The feed keeps
no module-level state, so every application instance builds its own.
"""
import logging
import threading
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

ReservedDatesLoader = Callable[[str], Iterable[str]]
ReservedDatesCallback = Callable[[list[str]], None]


class ReservedDatesSubscription:
    def __init__(
        self,
        feed: "ReservedDatesFeed",
        equipment_id: str,
        callback: ReservedDatesCallback,
    ):
        self._feed = feed
        self.equipment_id = equipment_id
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def close(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._detach(self)

    def __enter__(self) -> "ReservedDatesSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ReservedDatesFeed:
    def __init__(self, loader: ReservedDatesLoader):
        self._loader = loader
        self._snapshots: dict[str, list[str]] = {}
        self._subscriptions: dict[str, list[ReservedDatesSubscription]] = {}
        self._lock = threading.Lock()

    def snapshot(self, equipment_id: str) -> list[str]:
        with self._lock:
            cached = self._snapshots.get(equipment_id)
        if cached is not None:
            return list(cached)

        dates = sorted(self._loader(equipment_id))
        with self._lock:
            self._snapshots[equipment_id] = dates
        return list(dates)

    def refresh(self, equipment_id: str) -> list[str]:
        dates = sorted(self._loader(equipment_id))
        self.publish(equipment_id, dates)
        return dates

    def publish(self, equipment_id: str, dates: Iterable[str]) -> None:
        snapshot = sorted(dates)
        with self._lock:
            self._snapshots[equipment_id] = snapshot
            subscribers = list(self._subscriptions.get(equipment_id, []))

        logger.debug(
            "Publishing %d reserved dates for %s to %d subscribers",
            len(snapshot),
            equipment_id,
            len(subscribers),
        )
        for subscription in subscribers:
            self._deliver(subscription, snapshot)

    def subscribe(
        self, equipment_id: str, callback: ReservedDatesCallback
    ) -> ReservedDatesSubscription:
        """Register ``callback`` and hand it the current snapshot right away."""
        subscription = ReservedDatesSubscription(self, equipment_id, callback)
        with self._lock:
            self._subscriptions.setdefault(equipment_id, []).append(subscription)

        self._deliver(subscription, self.snapshot(equipment_id))
        return subscription

    def subscriber_count(self, equipment_id: str) -> int:
        with self._lock:
            return len(self._subscriptions.get(equipment_id, []))

    def close(self) -> None:
        with self._lock:
            subscriptions = [
                s for subs in self._subscriptions.values() for s in subs
            ]
        for subscription in subscriptions:
            subscription.close()
        logger.info("Reserved dates feed closed (%d subscriptions)", len(subscriptions))

    def _detach(self, subscription: ReservedDatesSubscription) -> None:
        with self._lock:
            subs = self._subscriptions.get(subscription.equipment_id, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscriptions.pop(subscription.equipment_id, None)

    @staticmethod
    def _deliver(subscription: ReservedDatesSubscription, dates: list[str]) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(list(dates))
        except Exception:
            logger.exception(
                "Reserved dates subscriber for %s failed", subscription.equipment_id
            )
