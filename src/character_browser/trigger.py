"""Viewport-proximity trigger for infinite-scroll loading."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

ProximityCallback = Callable[[], Any]


class Subscription:
    """Handle for one sensor subscriber; closing it stops delivery."""

    def __init__(self, sensor: ProximitySensor, callback: ProximityCallback) -> None:
        self._sensor: ProximitySensor | None = sensor
        self.callback = callback

    @property
    def closed(self) -> bool:
        return self._sensor is None

    def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        sensor = self._sensor
        self._sensor = None
        if sensor is not None:
            sensor._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ProximitySensor:
    """Turns sentinel visibility observations into crossing events.

    Subscribers fire once per not-visible -> visible transition. A sentinel
    that stays visible does not fire again until it leaves the viewport, or
    until ``rearm()`` forgets the last observation.
    """

    def __init__(self) -> None:
        self._visible = False
        self._subscriptions: list[Subscription] = []

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: ProximityCallback) -> Subscription:
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass

    def rearm(self) -> None:
        """Treat the sentinel as out of view so the next visible observation fires."""
        self._visible = False

    def observe(self, visible: bool) -> bool:
        """Record the sentinel's visibility. Returns True when subscribers fired."""
        crossed = visible and not self._visible
        self._visible = visible
        if not crossed:
            return False
        logger.debug("Sentinel entered viewport (%d subscribers)", len(self._subscriptions))
        for subscription in list(self._subscriptions):
            subscription.callback()
        return True


__all__ = ["ProximityCallback", "ProximitySensor", "Subscription"]
