#!/usr/bin/env python3
"""Command-line interface for the notification action menu."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from notimenu.config import Settings
from notimenu.menu.actions import StreamActionTransport
from notimenu.menu.dispatcher import ContextMenu, MenuOutcome, build_menu_input
from notimenu.menu.urls import iter_urls
from notimenu.store import NotificationStore

logger = logging.getLogger(__name__)


class MenuCLI:
    """CLI for running the context menu over a set of notifications."""

    def __init__(self, settings: Settings) -> None:
        """Initialize CLI.

        Args:
            settings: Menu settings
        """
        self.settings = settings

    def _load_store(self, path: Path) -> NotificationStore:
        try:
            return NotificationStore.from_json(path)
        except (OSError, ValueError) as e:
            print(f"Error: Cannot load notifications from {path} ({e})", file=sys.stderr)
            sys.exit(1)

    def _menu(self, store: NotificationStore) -> ContextMenu:
        return ContextMenu(store, StreamActionTransport(sys.stdout), settings=self.settings)

    def open(self, notifications: Path) -> MenuOutcome:
        """Show the context menu and act on the selection.

        Args:
            notifications: JSON file with displayed notifications
        """
        store = self._load_store(notifications)
        outcome = self._menu(store).open()
        logger.info(f"Menu finished: {outcome.value}")
        return outcome

    def dispatch(self, selection: str, notifications: Path) -> MenuOutcome:
        """Dispatch a selection without running the chooser.

        Args:
            selection: Menu line to act on
            notifications: JSON file with displayed notifications
        """
        store = self._load_store(notifications)
        outcome = self._menu(store).dispatch(selection)
        logger.info(f"Dispatch finished: {outcome.value}")
        return outcome

    def menu(self, notifications: Path) -> None:
        """Print the menu text that would be sent to the chooser.

        Args:
            notifications: JSON file with displayed notifications
        """
        store = self._load_store(notifications)
        menu_text = build_menu_input(store.displayed())
        if not menu_text:
            print("No URLs or actions available", file=sys.stderr)
            return
        print(menu_text)

    def urls(self, text: Optional[str] = None) -> int:
        """Print URLs found in text (or stdin), one per line.

        Args:
            text: Text to scan; read from stdin if None

        Returns:
            Number of URLs printed
        """
        if text is None:
            text = sys.stdin.read()

        count = 0
        for url in iter_urls(text):
            print(url)
            count += 1
        return count


def setup_logging(level: str) -> None:
    """Configure logging to stderr (stdout carries action output)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def build_settings(args: argparse.Namespace) -> Settings:
    """Create settings, applying command-line overrides."""
    overrides = {}
    if args.browser is not None:
        overrides["browser"] = args.browser
    if args.dmenu is not None:
        overrides["dmenu"] = args.dmenu
    if args.timeout is not None:
        overrides["chooser_timeout"] = args.timeout
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Notification action menu",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pick a URL or action from the displayed notifications
  notimenu open --notifications displayed.json

  # Use rofi instead of dmenu, give up after a minute
  notimenu --dmenu "rofi -dmenu" --timeout 60 open --notifications displayed.json

  # Act on a selection directly
  notimenu dispatch "Firefox (Reply)" --notifications displayed.json

  # List URLs in some text
  echo "see http://example.com" | notimenu urls
        """,
    )
    parser.add_argument("--browser", help="Browser command (default: from settings)")
    parser.add_argument("--dmenu", help="Chooser command (default: from settings)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait for a selection")
    parser.add_argument("--log-level", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Open command
    open_parser = subparsers.add_parser("open", help="Show the context menu")
    open_parser.add_argument("--notifications", type=Path, required=True,
                             help="JSON file with displayed notifications")

    # Dispatch command
    dispatch_parser = subparsers.add_parser("dispatch", help="Act on a selection")
    dispatch_parser.add_argument("selection", help="Menu line to act on")
    dispatch_parser.add_argument("--notifications", type=Path, required=True,
                                 help="JSON file with displayed notifications")

    # Menu command
    menu_parser = subparsers.add_parser("menu", help="Print the menu text")
    menu_parser.add_argument("--notifications", type=Path, required=True,
                             help="JSON file with displayed notifications")

    # URLs command
    urls_parser = subparsers.add_parser("urls", help="Extract URLs from text")
    urls_parser.add_argument("text", nargs="?", help="Text to scan (default: stdin)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = build_settings(args)
    except ValidationError as e:
        print(f"Error: Invalid settings: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    cli = MenuCLI(settings)

    if args.command == "open":
        cli.open(args.notifications)
    elif args.command == "dispatch":
        cli.dispatch(args.selection, args.notifications)
    elif args.command == "menu":
        cli.menu(args.notifications)
    elif args.command == "urls":
        if cli.urls(args.text) == 0:
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
