"""
Desktop notifications for workboard.

Uses notify-send (freedesktop compliant). Silently skipped where it isn't
installed; the TUI shows its own in-app toasts either way.
"""

import logging
import shutil
import subprocess

logger = logging.getLogger(__name__)


VALID_URGENCIES = ("low", "normal", "critical")
APP_NAME = "Workboard"
NOTIFY_TIMEOUT_SECONDS = 5
MAX_NOTIFICATION_LENGTH = 200


def notify(title: str, message: str, urgency: str = "normal") -> None:
    """
    Send desktop notification.

    Args:
        title: Notification title
        message: Notification body
        urgency: One of "low", "normal", "critical"
    """
    if urgency not in VALID_URGENCIES:
        logger.warning(f"Invalid urgency '{urgency}', using 'normal'")
        urgency = "normal"

    if not shutil.which("notify-send"):
        logger.debug("notify-send not found, skipping notification")
        return

    if len(message) > MAX_NOTIFICATION_LENGTH:
        message = message[:MAX_NOTIFICATION_LENGTH] + "..."

    try:
        result = subprocess.run([
            "notify-send",
            "--urgency", urgency,
            "--app-name", APP_NAME,
            title,
            message,
        ], capture_output=True, text=True, timeout=NOTIFY_TIMEOUT_SECONDS)

        if result.returncode != 0:
            logger.warning(f"notify-send failed (exit {result.returncode}): {result.stderr}")
    except subprocess.TimeoutExpired:
        logger.warning("notify-send timed out")
    except OSError as e:
        logger.warning(f"Failed to run notify-send: {e}")


def notify_estimation_complete(job_id: str) -> None:
    """The active job has used up its estimate."""
    notify(
        f"Workboard: {job_id}",
        "Estimation completed",
        "normal",
    )


def notify_fetch_failed(reason: str) -> None:
    """The board could not refresh and is showing stale data."""
    notify(
        "Workboard",
        f"Refresh failed: {reason}",
        "critical",
    )
