"""Resolve chooser selections to notification actions."""

import logging
import sys
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, TextIO

from notimenu.models import ActionInvocation, Notification

logger = logging.getLogger(__name__)


class ActionTransport(Protocol):
    """Delivers an invoked action back to the notifying client."""

    def notify(self, notification: Notification, action_identifier: str) -> None:
        ...


class LoggingActionTransport:
    """Transport that only logs invoked actions."""

    def notify(self, notification: Notification, action_identifier: str) -> None:
        logger.info(
            f"Action '{action_identifier}' invoked on notification "
            f"{notification.id} ({notification.appname})"
        )


class StreamActionTransport:
    """Transport that writes each invocation as a JSON line to a stream."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        """Initialize transport.

        Args:
            stream: Output stream (default: sys.stdout)
        """
        self.stream = stream

    def notify(self, notification: Notification, action_identifier: str) -> None:
        invocation = ActionInvocation(
            notification_id=notification.id,
            appname=notification.appname,
            action=action_identifier,
        )
        stream = self.stream or sys.stdout
        stream.write(invocation.model_dump_json() + "\n")
        stream.flush()


@dataclass
class ActionMatch:
    """A selection resolved to one action of one notification."""

    notification: Notification
    action_identifier: str


def parse_action_name(selection: str) -> Optional[str]:
    """Get the text after the first '(' of a selection, or None if missing."""
    _, paren, name = selection.partition("(")
    if not paren:
        return None
    return name


def resolve_action(
    selection: str, notifications: Iterable[Notification]
) -> Optional[ActionMatch]:
    """Find the action a chooser selection refers to.

    The selection looks like "<appname> (<action name>)". Notifications are
    searched in display order; one qualifies if its appname is a prefix of
    the selection. Within it, the first action whose name is a prefix of
    the text after '(' matches. The first match found wins.

    Args:
        selection: Line returned by the chooser
        notifications: Displayed notifications, in order

    Returns:
        ActionMatch, or None if the selection is invalid or matches nothing
    """
    name_begin = parse_action_name(selection)
    if name_begin is None:
        logger.warning(f"Invalid action: {selection}")
        return None

    for notification in notifications:
        if not selection.startswith(notification.appname):
            continue
        if not notification.actions:
            continue

        for entry in notification.actions.entries():
            if name_begin.startswith(entry.name):
                return ActionMatch(notification=notification, action_identifier=entry.identifier)

    return None


def invoke_action(
    selection: str,
    notifications: Iterable[Notification],
    transport: ActionTransport,
) -> Optional[ActionMatch]:
    """Resolve a selection and tell the owning client its action was invoked.

    Args:
        selection: Line returned by the chooser
        notifications: Displayed notifications, in order
        transport: Delivers the invocation to the client

    Returns:
        The match that was delivered, or None
    """
    match = resolve_action(selection, notifications)
    if match is None:
        if parse_action_name(selection) is not None:
            logger.info(f"No action matches selection: {selection}")
        return None

    transport.notify(match.notification, match.action_identifier)
    return match
