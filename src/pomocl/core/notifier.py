"""Desktop notifications."""

from plyer import notification

from pomocl.logging import get_logger

logger = get_logger(__name__)

APP_NAME = "pomocl"


def notify(title: str, message: str, timeout: int = 10) -> None:
    """Show a desktop notification; failures are logged and ignored."""
    try:
        notification.notify(
            title=title, message=message, app_name=APP_NAME, timeout=timeout
        )
    except Exception as e:  # noqa: BLE001 - backends raise anything
        logger.warning("notification_failed", title=title, error=str(e))
    else:
        logger.debug("notification_sent", title=title)
