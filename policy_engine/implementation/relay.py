"""
Event Relay — re-publishes scheduler events to subscribers.

The scheduler returns its events as data. Host applications that prefer a
publish/subscribe style wire a relay at the integration boundary: each event
is published on a named channel and every handler subscribed to that
channel (or to the ``*`` wildcard) is called with the event.

Channel names follow the game's established vocabulary so existing UI and
media listeners keep working.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Iterable

from policy_engine.domain.schema import (
    EventType,
    PolicyTemplate,
    SchedulerEvent,
    SubmissionResult,
)

logger = logging.getLogger(__name__)

WILDCARD = "*"
REJECTED_CHANNEL = "policy:rejected"

# Admissions fan out to several channels.
EVENT_CHANNELS: dict[EventType, tuple[str, ...]] = {
    EventType.POLICY_ADMITTED: (
        "policy:implementation_started",
        "policy:immediate_effects",
        "opposition:policy_notification",
    ),
    EventType.PHASE_CHANGED: ("policy:phase_change",),
    EventType.ONGOING_EFFECTS_COMPUTED: ("policy:ongoing_effects",),
    EventType.OPPOSITION_CHALLENGE_RAISED: ("policy:opposition_challenge",),
    EventType.POLICY_COMPLETED: ("policy:completed",),
}

Handler = Callable[[str, object], None]


class EventRelay:
    """Routes scheduler events and rejections to channel subscribers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, channel: str, handler: Handler) -> Callable[[], None]:
        """
        Subscribe ``handler`` to ``channel``.

        Returns:
            A callable that removes the subscription.
        """
        self._handlers[channel].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[channel]:
                self._handlers[channel].remove(handler)

        return unsubscribe

    def publish(self, event: SchedulerEvent) -> int:
        """
        Publish one event on every channel mapped to its type.

        Wildcard subscribers are called once per channel.

        Returns:
            The number of handler calls made.
        """
        return sum(self._dispatch(channel, event) for channel in EVENT_CHANNELS[event.event])

    def publish_all(self, events: Iterable[SchedulerEvent]) -> int:
        return sum(self.publish(event) for event in events)

    def publish_submission(self, template: PolicyTemplate, result: SubmissionResult) -> int:
        """
        Publish the outcome of a submission.

        Admissions republish their events; any other outcome goes out on the
        rejection channel with the result as payload.
        """
        if result.is_admitted:
            return self.publish_all(result.events)
        logger.debug("Relaying rejection of %s (%s)", template.id, result.outcome.value)
        return self._dispatch(REJECTED_CHANNEL, result)

    def _dispatch(self, channel: str, payload: object) -> int:
        handlers = [*self._handlers.get(channel, ()), *self._handlers.get(WILDCARD, ())]
        for handler in handlers:
            handler(channel, payload)
        return len(handlers)
