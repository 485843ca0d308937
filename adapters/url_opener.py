"""URL opener adapters used when the user accepts an update."""

from __future__ import annotations

import logging
import webbrowser
from typing import Protocol

logger = logging.getLogger(__name__)


class UrlOpener(Protocol):
    """Interface for handing a URL to the platform."""

    def open(self, url: str) -> bool:
        """Return ``True`` when a handler accepted ``url``."""


class WebBrowserUrlOpener:
    """Open store pages with :mod:`webbrowser`."""

    def open(self, url: str) -> bool:
        try:
            opened = webbrowser.open(url, new=1, autoraise=True)
        except webbrowser.Error:
            logger.exception("Unable to open store page", extra={"url": url})
            return False
        if not opened:
            logger.warning("Store page URL did not open", extra={"url": url})
        return bool(opened)


__all__ = ["UrlOpener", "WebBrowserUrlOpener"]
