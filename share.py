#!/usr/bin/env python3
"""Best-effort link sharing with a clipboard fallback."""

from __future__ import annotations

import logging
from typing import Callable

from timers import Scheduler, TimerHandle


logger = logging.getLogger(__name__)

COPY_INDICATOR_MS = 2000


class ShareService:
    """
    Shares the session address through a native share hook when one exists,
    otherwise copies it to the clipboard and raises a short-lived indicator.

    Platform failures are logged and swallowed; the viewer never sees them.
    """

    def __init__(
        self,
        url: str,
        scheduler: Scheduler,
        title: str = "YS Story",
        native_share: Callable[[str, str], object] | None = None,
        clipboard: Callable[[str], object] | None = None,
        indicator_ms: int = COPY_INDICATOR_MS,
    ) -> None:
        self.url = url
        self.title = title
        self.scheduler = scheduler
        self.native_share = native_share
        self.clipboard = clipboard
        self.indicator_ms = max(0, int(indicator_ms))
        self.copy_success = False
        self._indicator_timer: TimerHandle | None = None

    @property
    def label(self) -> str:
        return "Share Link" if self.native_share is not None else "Copy Link"

    def share(self) -> bool:
        if self.native_share is not None:
            try:
                self.native_share(self.title, self.url)
                logger.info("Shared %s", self.url)
                return True
            except Exception as exc:
                logger.warning("Native share failed (%s); copying link instead", exc)
        return self.copy_link()

    def copy_link(self) -> bool:
        if self.clipboard is None:
            logger.warning("No clipboard available; link not copied")
            return False
        try:
            self.clipboard(self.url)
        except Exception as exc:
            logger.warning("Clipboard copy failed: %s", exc)
            return False

        self.copy_success = True
        self.scheduler.cancel(self._indicator_timer)
        self._indicator_timer = self.scheduler.call_later(self.indicator_ms, self._clear_indicator)
        return True

    def _clear_indicator(self) -> None:
        self.copy_success = False
        self._indicator_timer = None

    def close(self) -> None:
        self.scheduler.cancel(self._indicator_timer)
        self._indicator_timer = None
