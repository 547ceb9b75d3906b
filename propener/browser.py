"""Opening URLs in the user's browser."""

from __future__ import annotations

import logging
import webbrowser

from propener.errors import ProError

logger = logging.getLogger(__name__)


class BrowserLaunchError(ProError):
    """Raised when no browser could be launched."""


def open_browser(url: str) -> None:
    """Open ``url`` with the platform's default browser."""
    logger.debug("Launching browser for %s", url)
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserLaunchError(f"Unable to open browser: {e}") from e
    if not opened:
        raise BrowserLaunchError("Unable to open browser: no runnable browser found")
