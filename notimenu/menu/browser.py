"""Open URLs in the configured browser without waiting on it."""

import logging
import shlex
import subprocess
import threading
from typing import List, Sequence, Union

logger = logging.getLogger(__name__)


def build_browser_command(browser: Union[str, Sequence[str]], url: str) -> List[str]:
    """Build browser argv: the configured command followed by the URL.

    Raises:
        ValueError: If a command string cannot be split (unbalanced quotes)
    """
    if isinstance(browser, str):
        browser = shlex.split(browser)
    return list(browser) + [url]


def open_browser(url: str, browser: Union[str, Sequence[str]]) -> bool:
    """Launch the browser on url, fully detached.

    The browser runs in its own session with stdio on /dev/null. A daemon
    thread reaps it when it exits, so the caller never blocks on it.

    Args:
        url: URL to open
        browser: Browser argv, or a command string such as "firefox -new-tab"

    Returns:
        True if the browser process was started
    """
    try:
        cmd = build_browser_command(browser, url)
        if len(cmd) < 2:
            logger.error("No browser command configured")
            return False

        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        logger.error(f"Failed to launch browser {browser!r}: {e}")
        return False

    threading.Thread(
        target=process.wait,
        name=f"browser-reaper-{process.pid}",
        daemon=True,
    ).start()

    logger.info(f"Opened {url} with {cmd[0]} (pid={process.pid})")
    return True
