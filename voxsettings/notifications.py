"""Desktop notifications for settings page outcomes.

Shown through plyer's notification facade. On platforms without a
notification backend every call degrades to a single logged warning.

Privacy Note:
    Notification text passes through _redact() first: anything shaped like
    an API key is masked, and the text is flattened to one short line.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

APP_NAME = "voxsettings"

# Error and info text longer than this is cut
MAX_MESSAGE_LENGTH = 200

# sk-..., sk-or-v1-..., pv_... and other long opaque tokens
_KEY_PATTERN = re.compile(r"\b(?:sk-|or-|pv_)[A-Za-z0-9_\-]{6,}|\b[A-Za-z0-9]{32,}\b")

# Track if we've already warned about notification issues
_notification_warned = False

# Last error shown, to drop identical repeats
_last_error: str | None = None


def _warn_once(message: str, *args: object) -> None:
    global _notification_warned
    if not _notification_warned:
        logger.warning(message, *args)
        _notification_warned = True


def _redact(message: str) -> str:
    """Mask API keys and flatten a message to a single bounded line."""
    text = _KEY_PATTERN.sub("****", message)
    text = " ".join(text.split())
    if len(text) > MAX_MESSAGE_LENGTH:
        text = text[: MAX_MESSAGE_LENGTH - 3] + "..."
    return text


def show_notification(title: str, message: str, timeout: int = 5) -> bool:
    """Show a toast notification.

    Args:
        title: Notification title.
        message: Notification message body (shown as given).
        timeout: Display duration in seconds.

    Returns:
        True if the notification was handed to the platform.
    """
    try:
        from plyer import notification
    except ImportError:
        _warn_once("notifications: plyer not available")
        return False

    try:
        notification.notify(
            title=title,
            message=message,
            app_name=APP_NAME,
            timeout=timeout,
        )
    except Exception as e:
        _warn_once("notifications: platform backend failed, error_type=%s", type(e).__name__)
        return False

    logger.debug("notifications: shown, title=%s", title)
    return True


def show_saved() -> bool:
    """Confirm a successful save."""
    global _last_error
    _last_error = None
    return show_notification(APP_NAME, "Settings saved", timeout=3)


def show_error(message: str) -> bool:
    """Report a failed user action.

    The same error twice in a row is only shown once; any save
    confirmation in between resets this.

    Returns:
        True if a notification was shown.
    """
    global _last_error
    safe_message = _redact(message)
    if safe_message == _last_error:
        logger.debug("notifications: repeated error suppressed")
        return False
    _last_error = safe_message
    return show_notification(f"{APP_NAME} - Error", safe_message)


def show_message(message: str) -> bool:
    """Show an informational message such as an AI test reply."""
    return show_notification(APP_NAME, _redact(message))


def reset() -> None:
    """Forget the last error and any earlier backend warning (for testing)."""
    global _last_error, _notification_warned
    _last_error = None
    _notification_warned = False
