#!/usr/bin/env python3
"""UI primitives for text input, delayed reveals, and choice selection."""

from __future__ import annotations

from dataclasses import dataclass

import pygame


@dataclass
class MenuCursor:
    """Cursor state for linear selectable menus."""

    index: int = 0

    def move(self, delta: int, total: int) -> None:
        if total <= 0:
            self.index = 0
            return
        self.index = (self.index + delta) % total


@dataclass
class TextInputField:
    """Blinking-cursor text input; `digits_only` mimics a numeric keypad field."""

    text: str = ""
    max_length: int = 24
    placeholder: str = ""
    digits_only: bool = False
    _cursor_timer_ms: int = 0
    _cursor_visible: bool = True

    def update(self, delta_ms: int) -> None:
        self._cursor_timer_ms += max(0, int(delta_ms))
        if self._cursor_timer_ms >= 450:
            self._cursor_timer_ms = 0
            self._cursor_visible = not self._cursor_visible

    def clear(self) -> None:
        self.text = ""
        self._cursor_timer_ms = 0
        self._cursor_visible = True

    def accepts(self, char: str) -> bool:
        if not char or not char.isprintable() or char in "\r\n\t":
            return False
        if self.digits_only:
            return char.isdigit()
        return True

    def type_text(self, text: str) -> int:
        """Append characters one by one, as if typed. Returns how many were kept."""
        kept = 0
        for char in text:
            if len(self.text) >= self.max_length or not self.accepts(char):
                continue
            self.text += char
            kept += 1
        return kept

    def handle_key(self, event: pygame.event.Event) -> bool:
        if event.type != pygame.KEYDOWN:
            return False
        if event.key == pygame.K_BACKSPACE:
            self.text = self.text[:-1]
            return True
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_ESCAPE):
            return False
        if len(self.text) >= self.max_length:
            return False
        return self.type_text(event.unicode or "") > 0

    @property
    def value(self) -> str:
        return self.text

    @property
    def cursor_visible(self) -> bool:
        return self._cursor_visible


@dataclass
class FadeIn:
    """Fade-and-rise entrance that starts after `delay_ms`."""

    delay_ms: int = 0
    duration_ms: int = 1000
    rise_px: int = 16
    elapsed_ms: int = 0

    def restart(self) -> None:
        self.elapsed_ms = 0

    def update(self, delta_ms: int) -> None:
        self.elapsed_ms += max(0, int(delta_ms))

    @property
    def started(self) -> bool:
        return self.elapsed_ms >= self.delay_ms

    @property
    def progress(self) -> float:
        if not self.started:
            return 0.0
        duration = max(1, self.duration_ms)
        return min(1.0, (self.elapsed_ms - self.delay_ms) / duration)

    @property
    def finished(self) -> bool:
        return self.progress >= 1.0

    @property
    def alpha(self) -> int:
        return int(self.progress * 255)

    @property
    def offset_y(self) -> int:
        return int(round((1.0 - self.progress) * self.rise_px))


def stagger(count: int, step_ms: int, start_ms: int = 0, duration_ms: int = 1000) -> list[FadeIn]:
    """One FadeIn per item, each delayed `step_ms` more than the one before."""
    return [FadeIn(delay_ms=start_ms + idx * step_ms, duration_ms=duration_ms) for idx in range(max(0, count))]
