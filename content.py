#!/usr/bin/env python3
"""Static narrative content: timeline entries and the reveal message pool."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, Mapping


logger = logging.getLogger(__name__)

CONTENT_PATH = Path("content.json")
DEFAULT_RECIPIENT = "Murugesa"
DEFAULT_SHARE_TITLE = "YS Story"
TIMELINE_STAGGER_MS = 300


@dataclass(frozen=True)
class TimelineEntry:
    title: str
    text: str


DEFAULT_TIMELINE = (
    TimelineEntry("2022 · Grenoble", "Two strangers, one city, and a story that had no idea it was starting."),
    TimelineEntry("The First Match", "Badminton was the excuse. You were the reason I kept showing up."),
    TimelineEntry("Every Day Since", "Good days, stressful days, and every laugh in between."),
)

DEFAULT_MESSAGES = (
    "You make ordinary days feel like the best ones.",
    "You are my favourite teammate, on and off the court.",
    "You stayed, even on the hard days.",
)


class ContentProvider:
    """Loads read-only content once; falls back to built-in defaults."""

    def __init__(self, content_path: str | Path = CONTENT_PATH) -> None:
        self.content_path = Path(content_path)
        self.recipient = DEFAULT_RECIPIENT
        self.share_title = DEFAULT_SHARE_TITLE
        self.timeline: tuple[TimelineEntry, ...] = DEFAULT_TIMELINE
        self.messages: tuple[str, ...] = DEFAULT_MESSAGES

    def load(self) -> "ContentProvider":
        data: Any = None
        if self.content_path.exists():
            try:
                data = json.loads(self.content_path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Could not read %s (%s); using built-in content", self.content_path, exc)
                data = None
        else:
            logger.warning("Content file %s not found; using built-in content", self.content_path)

        if not isinstance(data, Mapping):
            data = {}

        self.recipient = str(data.get("recipient", "")).strip() or DEFAULT_RECIPIENT
        self.share_title = str(data.get("share_title", "")).strip() or DEFAULT_SHARE_TITLE

        timeline = self._normalize_timeline(data.get("timeline"))
        if not timeline:
            if data:
                logger.warning("No usable timeline entries in %s; using defaults", self.content_path)
            timeline = DEFAULT_TIMELINE
        self.timeline = timeline

        messages = self._normalize_messages(data.get("messages"))
        if not messages:
            if data:
                logger.warning("Empty message pool in %s; using defaults", self.content_path)
            messages = DEFAULT_MESSAGES
        self.messages = messages

        logger.debug(
            "Loaded content: %d timeline entries, %d messages", len(self.timeline), len(self.messages)
        )
        return self

    @staticmethod
    def _normalize_timeline(raw: Any) -> tuple[TimelineEntry, ...]:
        if not isinstance(raw, list):
            return ()
        entries: list[TimelineEntry] = []
        for item in raw:
            if not isinstance(item, Mapping):
                continue
            title = str(item.get("title", "")).strip()
            text = str(item.get("text", "")).strip()
            if not title and not text:
                continue
            entries.append(TimelineEntry(title=title or "Untitled", text=text))
        return tuple(entries)

    @staticmethod
    def _normalize_messages(raw: Any) -> tuple[str, ...]:
        if not isinstance(raw, list):
            return ()
        return tuple(s for s in (str(m).strip() for m in raw if isinstance(m, str)) if s)

    @classmethod
    def from_data(
        cls,
        timeline: list[TimelineEntry] | tuple[TimelineEntry, ...],
        messages: list[str] | tuple[str, ...],
        recipient: str = DEFAULT_RECIPIENT,
    ) -> "ContentProvider":
        provider = cls()
        provider.timeline = tuple(timeline)
        provider.messages = tuple(messages)
        provider.recipient = recipient
        return provider


def staggered(entries: tuple[TimelineEntry, ...] | list[TimelineEntry], step_ms: int = TIMELINE_STAGGER_MS) -> list[tuple[TimelineEntry, int]]:
    """Pair each entry with its reveal delay; the delay grows linearly with the index."""
    return [(entry, idx * max(0, int(step_ms))) for idx, entry in enumerate(entries)]
