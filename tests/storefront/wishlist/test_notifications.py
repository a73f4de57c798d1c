"""Tests for the notification sinks used by the wishlist store."""

from __future__ import annotations

import logging

import pytest

from storefront.schemas.wishlist import NotificationLevel
from storefront.services.wishlist import (
    ADD_FAILED,
    ADDED,
    REMOVE_FAILED,
    REMOVED,
    BufferedNotifier,
    CompositeNotifier,
    LoggingNotifier,
    Notifier,
)


def test_toast_messages() -> None:
    assert ADDED.title == "Added to wishlist"
    assert REMOVED.title == "Removed from wishlist"
    assert ADD_FAILED.level is NotificationLevel.ERROR
    assert ADD_FAILED.description == "Failed to add to wishlist."
    assert REMOVE_FAILED.description == "Failed to remove from wishlist."


def test_buffered_notifier_drains_in_order() -> None:
    notifier = BufferedNotifier()
    notifier.notify(ADDED)
    notifier.notify(ADD_FAILED)

    assert notifier.drain() == [ADDED, ADD_FAILED]
    assert notifier.drain() == []


def test_buffered_notifier_drops_oldest_when_full() -> None:
    notifier = BufferedNotifier(max_size=2)
    for notification in (ADDED, REMOVED, ADD_FAILED):
        notifier.notify(notification)

    assert notifier.drain() == [REMOVED, ADD_FAILED]


def test_logging_notifier_levels(caplog: pytest.LogCaptureFixture) -> None:
    notifier = LoggingNotifier()

    with caplog.at_level(logging.INFO):
        notifier.notify(ADDED)
        notifier.notify(REMOVE_FAILED)

    levels = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert (logging.INFO, "Added to wishlist") in levels
    assert (logging.WARNING, "Error: Failed to remove from wishlist.") in levels


def test_composite_notifier_fans_out() -> None:
    first, second = BufferedNotifier(), BufferedNotifier()
    composite = CompositeNotifier([first, second])

    composite.notify(ADDED)

    assert isinstance(composite, Notifier)
    assert first.drain() == second.drain() == [ADDED]
