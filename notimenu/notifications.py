"""Desktop feedback for menu selections."""

import logging
import subprocess

logger = logging.getLogger(__name__)

NOTIFY_SEND_TIMEOUT = 5


def send_notification(title: str, message: str) -> None:
    """Show a desktop notification through notify-send.

    Failures are logged only; feedback never ends a menu invocation.

    Args:
        title: Notification title
        message: Notification message
    """
    cmd = ["notify-send", "--app-name=notimenu", title, message]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            timeout=NOTIFY_SEND_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.error(f"notify-send failed: {e}")
        return

    if result.returncode != 0:
        logger.warning(f"notify-send exited with status {result.returncode}")
    else:
        logger.debug(f"Sent notification: {title}")
