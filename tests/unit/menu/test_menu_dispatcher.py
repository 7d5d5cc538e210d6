"""Tests for menu building, dispatch and the context menu entry point."""

import sys
import threading
import time
from unittest.mock import patch

from notimenu.config import Settings
from notimenu.menu.dispatcher import (
    ContextMenu,
    MenuOutcome,
    build_menu_input,
    dispatch_menu_result,
)
from notimenu.models import Notification
from notimenu.store import NotificationStore


def test_build_menu_input(sample_notifications):
    """Test URLs and action lines are collected in display order."""
    menu = build_menu_input(sample_notifications)

    assert menu.split("\n") == [
        "https://example.com/file.tar.gz",
        "Firefox (Reply)",
        "Firefox (Open)",
        "Thunderbird (Archive)",
        "www.b.org/x",
    ]


def test_build_menu_input_empty():
    """Test notifications without URLs or actions give an empty menu."""
    assert build_menu_input([]) == ""
    assert build_menu_input([Notification.create(id=1, appname="cron", body="done")]) == ""


@patch('notimenu.menu.dispatcher.invoke_action')
@patch('notimenu.menu.dispatcher.open_browser')
def test_dispatch_url_opens_browser(mock_browser, mock_invoke, sample_notifications, transport):
    """Test a URL selection goes to the browser and never to the resolver."""
    mock_browser.return_value = True

    outcome = dispatch_menu_result(
        "https://example.com/file.tar.gz", sample_notifications, transport, "firefox -new-tab"
    )

    assert outcome == MenuOutcome.BROWSER
    mock_browser.assert_called_once_with("https://example.com/file.tar.gz", "firefox -new-tab")
    assert not mock_invoke.called


@patch('notimenu.menu.dispatcher.invoke_action')
@patch('notimenu.menu.dispatcher.open_browser')
def test_dispatch_url_wins_over_action(mock_browser, mock_invoke, transport):
    """Test a selection that looks like both is treated as a URL."""
    n = Notification.create(id=1, appname="site.com", actions=["x", "Go"])

    outcome = dispatch_menu_result("site.com (Go)", [n], transport, "browser")

    assert outcome in (MenuOutcome.BROWSER, MenuOutcome.BROWSER_FAILED)
    mock_browser.assert_called_once_with("site.com", "browser")
    assert not mock_invoke.called


@patch('notimenu.menu.dispatcher.open_browser')
def test_dispatch_first_of_several_urls(mock_browser, transport):
    """Test only the first URL of a selection is opened."""
    dispatch_menu_result("a.com and b.com", [], transport, "browser")

    mock_browser.assert_called_once_with("a.com", "browser")


@patch('notimenu.menu.dispatcher.open_browser')
def test_dispatch_browser_failure(mock_browser, transport):
    """Test a failed browser launch is reported in the outcome."""
    mock_browser.return_value = False

    assert dispatch_menu_result("a.com", [], transport, "browser") == MenuOutcome.BROWSER_FAILED


@patch('notimenu.menu.dispatcher.open_browser')
@patch('notimenu.menu.dispatcher.invoke_action')
def test_dispatch_action_gets_raw_text(mock_invoke, mock_browser, sample_notifications, transport):
    """Test a non-URL selection is passed unchanged to the resolver."""
    dispatch_menu_result("Firefox (Reply)", sample_notifications, transport, "browser")

    mock_invoke.assert_called_once_with("Firefox (Reply)", sample_notifications, transport)
    assert not mock_browser.called


def test_dispatch_outcomes(sample_notifications, transport):
    """Test action, no-match and invalid selections."""
    assert dispatch_menu_result(
        "Firefox (Reply)", sample_notifications, transport, "browser"
    ) == MenuOutcome.ACTION
    transport.notify.assert_called_once_with(sample_notifications[0], "id1")

    assert dispatch_menu_result(
        "Firefox (Delete)", sample_notifications, transport, "browser"
    ) == MenuOutcome.NO_MATCH
    assert dispatch_menu_result(
        "garbage", sample_notifications, transport, "browser"
    ) == MenuOutcome.INVALID
    assert transport.notify.call_count == 1


@patch('notimenu.menu.dispatcher.run_chooser')
def test_open_empty_menu_skips_chooser(mock_chooser, transport, settings):
    """Test nothing is shown when there are no URLs or actions."""
    store = NotificationStore([Notification.create(id=1, appname="cron", body="done")])

    assert ContextMenu(store, transport, settings).open() == MenuOutcome.EMPTY
    assert not mock_chooser.called


@patch('notimenu.menu.dispatcher.run_chooser')
def test_open_passes_settings_to_chooser(mock_chooser, store, transport):
    """Test chooser command, timeout and line limit come from settings."""
    mock_chooser.return_value = None
    settings = Settings(dmenu="rofi -dmenu -p 'pick one'", chooser_timeout=5, chooser_max_line=200)

    assert ContextMenu(store, transport, settings).open() == MenuOutcome.NO_SELECTION

    args, kwargs = mock_chooser.call_args
    assert args[0] == build_menu_input(store.displayed())
    assert args[1] == ["rofi", "-dmenu", "-p", "pick one"]
    assert kwargs == {"timeout": 5, "max_length": 200}
    assert not transport.notify.called


def test_open_end_to_end_action(store, transport):
    """Test a real chooser picking an action line reaches the transport."""
    settings = Settings(
        dmenu=f'{sys.executable} -c "import sys; print(sys.stdin.read().splitlines()[2])"',
        chooser_timeout=10,
    )

    assert ContextMenu(store, transport, settings).open() == MenuOutcome.ACTION
    transport.notify.assert_called_once_with(store.get(1), "id2")


@patch('notimenu.menu.dispatcher.open_browser')
def test_open_end_to_end_url(mock_browser, store, transport, settings):
    """Test a real chooser picking the first line opens it in the browser."""
    mock_browser.return_value = True

    assert ContextMenu(store, transport, settings).open() == MenuOutcome.BROWSER
    mock_browser.assert_called_once_with("https://example.com/file.tar.gz", settings.browser_command)


@patch('notimenu.menu.dispatcher.send_notification')
def test_no_match_feedback(mock_send, store, transport):
    """Test desktop feedback for unmatched selections when enabled."""
    quiet = ContextMenu(store, transport, Settings(notify_on_no_match=False))
    assert quiet.dispatch("Firefox (Delete)") == MenuOutcome.NO_MATCH
    assert not mock_send.called

    loud = ContextMenu(store, transport, Settings(notify_on_no_match=True))
    assert loud.dispatch("Firefox (Delete)") == MenuOutcome.NO_MATCH
    mock_send.assert_called_once_with("No such action", "Firefox (Delete)")


@patch('notimenu.menu.dispatcher.run_chooser')
def test_open_is_serialized(mock_chooser, store, transport, settings):
    """Test a second menu waits until the first invocation is done."""
    active = []
    overlaps = []

    def slow_chooser(*args, **kwargs):
        active.append(1)
        if len(active) > 1:
            overlaps.append(True)
        time.sleep(0.2)
        active.pop()
        return None

    mock_chooser.side_effect = slow_chooser
    menu = ContextMenu(store, transport, settings)

    threads = [threading.Thread(target=menu.open) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert mock_chooser.call_count == 2
    assert overlaps == []


@patch('subprocess.Popen')
def test_dispatch_unparsable_browser_command(mock_popen, store, transport):
    """Test a browser command with an unbalanced quote fails the launch softly."""
    settings = Settings()
    settings.browser = 'firefox "'

    outcome = ContextMenu(store, transport, settings).dispatch("http://a.com")

    assert outcome == MenuOutcome.BROWSER_FAILED
    assert not mock_popen.called


def test_dispatch_unparsable_browser_command_still_resolves_actions(store, transport):
    """Test a broken browser command does not affect action selections."""
    settings = Settings()
    settings.browser = 'firefox "'

    assert ContextMenu(store, transport, settings).dispatch("Firefox (Reply)") == MenuOutcome.ACTION
    transport.notify.assert_called_once_with(store.get(1), "id1")


@patch('notimenu.menu.dispatcher.run_chooser')
def test_open_unparsable_chooser_command(mock_chooser, store, transport):
    """Test a chooser command with an unbalanced quote ends the menu quietly."""
    settings = Settings()
    settings.dmenu = "dmenu -p 'x"

    assert ContextMenu(store, transport, settings).open() == MenuOutcome.NO_SELECTION
    assert not mock_chooser.called
    assert not transport.notify.called
