"""Context menu: build the menu, run the chooser and dispatch the selection."""

import logging
import threading
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from notimenu.config import Settings, get_settings
from notimenu.menu.actions import ActionTransport, invoke_action, parse_action_name
from notimenu.menu.browser import open_browser
from notimenu.menu.chooser import run_chooser
from notimenu.menu.urls import iter_urls
from notimenu.models import Notification
from notimenu.notifications import send_notification
from notimenu.store import NotificationStore

logger = logging.getLogger(__name__)


class MenuOutcome(str, Enum):
    """What a menu invocation ended with."""
    EMPTY = "empty"
    NO_SELECTION = "no-selection"
    BROWSER = "browser"
    BROWSER_FAILED = "browser-failed"
    ACTION = "action"
    NO_MATCH = "no-match"
    INVALID = "invalid"


def build_menu_input(notifications: Iterable[Notification]) -> str:
    """Collect URLs and action lines of all notifications into menu text.

    Args:
        notifications: Displayed notifications, in order

    Returns:
        Newline-separated menu, empty if there is nothing to choose
    """
    parts = []
    for notification in notifications:
        if notification.urls:
            parts.append(notification.urls)
        if notification.actions and notification.actions.display_block:
            parts.append(notification.actions.display_block)
    return "\n".join(parts)


def dispatch_menu_result(
    selection: str,
    notifications: Iterable[Notification],
    transport: ActionTransport,
    browser: Union[str, Sequence[str]],
) -> MenuOutcome:
    """Route a chooser selection to the browser or to an action.

    A selection containing a URL always goes to the browser, even if it
    also reads like an action line.

    Args:
        selection: Line returned by the chooser
        notifications: Displayed notifications, in order
        transport: Delivers invoked actions
        browser: Browser argv or command string

    Returns:
        MenuOutcome describing what was done
    """
    urls = list(iter_urls(selection))
    if urls:
        if len(urls) > 1:
            logger.debug(f"Selection holds {len(urls)} URLs, opening the first: {urls[1:]}")
        if open_browser(urls[0], browser):
            return MenuOutcome.BROWSER
        return MenuOutcome.BROWSER_FAILED

    if invoke_action(selection, notifications, transport) is not None:
        return MenuOutcome.ACTION
    if parse_action_name(selection) is None:
        return MenuOutcome.INVALID
    return MenuOutcome.NO_MATCH


class ContextMenu:
    """Entry point the daemon calls when the user asks for the menu."""

    def __init__(
        self,
        store: NotificationStore,
        transport: ActionTransport,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize context menu.

        Args:
            store: Displayed notifications
            transport: Delivers invoked actions to clients
            settings: Menu settings (default: global settings)
        """
        self.store = store
        self.transport = transport
        self.settings = settings or get_settings()
        self._lock = threading.Lock()

    def open(self) -> MenuOutcome:
        """Show the menu and act on the selection.

        Blocks until the chooser returns. A second caller waits for the
        running invocation to finish first.

        Returns:
            MenuOutcome describing what was done
        """
        with self._lock:
            notifications = self.store.displayed()
            menu_text = build_menu_input(notifications)
            if not menu_text:
                logger.debug("No URLs or actions to offer")
                return MenuOutcome.EMPTY

            try:
                command = self.settings.dmenu_command
            except ValueError as e:
                logger.error(f"Cannot parse chooser command {self.settings.dmenu!r}: {e}")
                return MenuOutcome.NO_SELECTION

            selection = run_chooser(
                menu_text,
                command,
                timeout=self.settings.chooser_timeout,
                max_length=self.settings.chooser_max_line,
            )
            if selection is None:
                return MenuOutcome.NO_SELECTION

            return self.dispatch(selection, notifications)

    def dispatch(self, selection: str, notifications: Optional[Iterable[Notification]] = None) -> MenuOutcome:
        """Dispatch a selection against the displayed notifications.

        Args:
            selection: Chooser line
            notifications: Snapshot to resolve against (default: current store)

        Returns:
            MenuOutcome describing what was done
        """
        if notifications is None:
            notifications = self.store.displayed()

        try:
            browser = self.settings.browser_command
        except ValueError as e:
            logger.error(f"Cannot parse browser command {self.settings.browser!r}: {e}")
            browser = []

        outcome = dispatch_menu_result(selection, notifications, self.transport, browser)

        if outcome in (MenuOutcome.NO_MATCH, MenuOutcome.INVALID) and self.settings.notify_on_no_match:
            send_notification("No such action", selection)

        return outcome
