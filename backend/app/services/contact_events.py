"""Refresh notifications for views that depend on a contact's status.

Mutating services publish after a successful commit; subscribers (cache
invalidation, push channels) re-pull the header badge and timeline.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[int, str], None]


class ContactRefreshNotifier:
    def __init__(self) -> None:
        self._subscribers: list[RefreshCallback] = []

    def subscribe(self, callback: RefreshCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: RefreshCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, contact_id: int, reason: str) -> None:
        # The mutation is already committed; a broken subscriber must not undo it.
        for callback in list(self._subscribers):
            try:
                callback(contact_id, reason)
            except Exception:
                logger.exception("Contact refresh subscriber failed for contact %s (%s)", contact_id, reason)


refresh_notifier = ContactRefreshNotifier()
