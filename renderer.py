#!/usr/bin/env python3
"""Soft pastel renderer for the gate, story screens, hearts, and confetti."""

from __future__ import annotations

from dataclasses import dataclass
import math
import random
from typing import Any

import pygame

from particles import BurstParticle, FloatingParticle


@dataclass
class ConfettiPiece:
    x: float
    y: float
    vx: float
    vy: float
    color: pygame.Color
    wobble: float
    tick: int = 0


class ConfettiLayer:
    """Moves burst particles after emission: velocity decay plus gravity."""

    START_VELOCITY = 18.0
    GRAVITY = 1.2
    DECAY = 0.92
    TICKS = 120
    MAX_PIECES = 900

    def __init__(self, width: int, height: int, rng: random.Random | None = None) -> None:
        self.width = width
        self.height = height
        self.rng = rng or random.Random()
        self.pieces: list[ConfettiPiece] = []

    def add(self, particles: list[BurstParticle]) -> None:
        for p in particles:
            rad = math.radians(p.heading)
            velocity = self.START_VELOCITY * p.speed
            self.pieces.append(
                ConfettiPiece(
                    x=p.origin_x * self.width,
                    y=self.height * 0.5,
                    vx=math.cos(rad) * velocity,
                    vy=-math.sin(rad) * velocity,
                    color=pygame.Color(p.color),
                    wobble=self.rng.random() * math.tau,
                )
            )
        if len(self.pieces) > self.MAX_PIECES:
            del self.pieces[: len(self.pieces) - self.MAX_PIECES]

    def update(self) -> None:
        alive: list[ConfettiPiece] = []
        for piece in self.pieces:
            piece.x += piece.vx
            piece.y += piece.vy + self.GRAVITY
            piece.vx *= self.DECAY
            piece.vy *= self.DECAY
            piece.wobble += 0.2
            piece.tick += 1
            if piece.tick < self.TICKS and piece.y < self.height + 20:
                alive.append(piece)
        self.pieces = alive

    def draw(self, canvas: pygame.Surface) -> None:
        for piece in self.pieces:
            remaining = 1.0 - piece.tick / self.TICKS
            w = max(2, int(8 * remaining))
            h = max(2, int(8 * remaining * abs(math.cos(piece.wobble))) + 1)
            pygame.draw.rect(canvas, piece.color, pygame.Rect(int(piece.x), int(piece.y), w, h))


class Renderer:
    """Centralized drawing module for all screens."""

    WIDTH = 480
    HEIGHT = 800

    COLOR_BG = pygame.Color("#FFF5F7")
    COLOR_TEXT = pygame.Color("#1F2937")
    COLOR_MUTED = pygame.Color("#6B7280")
    COLOR_FAINT = pygame.Color("#9CA3AF")
    COLOR_PINK = pygame.Color("#F472B6")
    COLOR_PINK_DEEP = pygame.Color("#EC4899")
    COLOR_PINK_SOFT = pygame.Color("#FCE7F3")
    COLOR_PINK_PALE = pygame.Color("#FBCFE8")
    COLOR_HEART = pygame.Color("#F9A8D4")
    COLOR_ERROR = pygame.Color("#F87171")
    COLOR_SUCCESS = pygame.Color("#22C55E")
    COLOR_CARD = pygame.Color("#FFFFFF")

    MARGIN = 32
    PRIMARY_BUTTON_RECT = pygame.Rect(72, 640, 336, 64)
    GATE_BUTTON_RECT = pygame.Rect(72, 520, 336, 60)
    GATE_INPUT_RECT = pygame.Rect(72, 380, 336, 70)
    SHARE_RECT = pygame.Rect(WIDTH - 72, 24, 48, 48)
    HEART_CENTER = (WIDTH // 2, 300)
    HEART_RADIUS = 90
    TIMELINE_TOP = 60
    TIMELINE_TITLE = "Our Journey"

    def __init__(self) -> None:
        self.serif_font = self._load_font(("georgia", "timesnewroman", "dejavuserif"), 26, italic=True)
        self.title_font = self._load_font(("georgia", "timesnewroman", "dejavuserif"), 40)
        self.body_font = self._load_font(("helvetica", "arial", "dejavusans"), 18)
        self.small_font = self._load_font(("helvetica", "arial", "dejavusans"), 13, bold=True)
        self.line_height = int(self.body_font.get_linesize() * 1.4)
        self.frame_surface = pygame.Surface((self.WIDTH, self.HEIGHT))
        self.dim_surface = pygame.Surface((self.WIDTH, self.HEIGHT), pygame.SRCALPHA)
        self.confetti = ConfettiLayer(self.WIDTH, self.HEIGHT)
        self._heart_cache: dict[tuple[int, tuple[int, int, int]], pygame.Surface] = {}
        self._wrap_cache: dict[tuple[str, int, int], list[str]] = {}
        self._wrap_cache_order: list[tuple[str, int, int]] = []

    @staticmethod
    def _load_font(names: tuple[str, ...], size: int, bold: bool = False, italic: bool = False) -> pygame.font.Font:
        return pygame.font.SysFont(",".join(names), size, bold=bold, italic=italic)

    @staticmethod
    def _renderable(text: str) -> str:
        # System fonts rarely carry emoji; drop astral-plane glyphs instead of drawing tofu.
        return "".join(ch for ch in text if ord(ch) <= 0xFFFF and ch != "\ufe0f").strip()

    def _wrap_text(self, text: str, font: pygame.font.Font, max_width: int) -> list[str]:
        cache_key = (text, id(font), max_width)
        cached = self._wrap_cache.get(cache_key)
        if cached is not None:
            return list(cached)

        lines: list[str] = []
        for para in self._renderable(text).split("\n"):
            current = ""
            for word in para.split(" "):
                if not word:
                    continue
                candidate = f"{current} {word}".strip()
                if font.size(candidate)[0] <= max_width or not current:
                    current = candidate
                else:
                    lines.append(current)
                    current = word
            if current:
                lines.append(current)

        self._wrap_cache[cache_key] = list(lines)
        self._wrap_cache_order.append(cache_key)
        if len(self._wrap_cache_order) > 256:
            old_key = self._wrap_cache_order.pop(0)
            self._wrap_cache.pop(old_key, None)
        return lines

    # -- hitboxes ---------------------------------------------------------

    def heart_hitbox(self) -> pygame.Rect:
        cx, cy = self.HEART_CENTER
        r = self.HEART_RADIUS
        return pygame.Rect(cx - r, cy - r, r * 2, r * 2)

    def choice_hitboxes(self, count: int) -> list[pygame.Rect]:
        return [pygame.Rect(72, 560 + idx * 84, 336, 64) for idx in range(max(0, count))]

    def share_hitbox(self) -> pygame.Rect:
        return self.SHARE_RECT

    def _timeline_card_height(self, text: str) -> int:
        card_width = self.WIDTH - self.MARGIN * 2
        return 80 + len(self._wrap_text(text, self.body_font, card_width - 48)) * self.line_height

    def timeline_max_scroll(self, texts: list[str]) -> int:
        """Scroll offset at which the last card sits just above the forward button."""
        bottom = self.TIMELINE_TOP + self.title_font.size(self.TIMELINE_TITLE)[1] + 40
        for text in texts:
            bottom += self._timeline_card_height(text) + 32
        return max(0, bottom - (self.PRIMARY_BUTTON_RECT.top - 24))

    # -- primitives -------------------------------------------------------

    def _heart_surface(self, size: int, color: pygame.Color) -> pygame.Surface:
        key = (size, (color.r, color.g, color.b))
        cached = self._heart_cache.get(key)
        if cached is not None:
            return cached
        surf = pygame.Surface((size, size), pygame.SRCALPHA)
        r = size / 4.0
        pygame.draw.circle(surf, color, (int(r), int(r * 1.3)), int(r) + 1)
        pygame.draw.circle(surf, color, (int(size - r), int(r * 1.3)), int(r) + 1)
        pygame.draw.polygon(surf, color, [(0, int(r * 1.5)), (size, int(r * 1.5)), (size // 2, size)])
        if len(self._heart_cache) > 128:
            self._heart_cache.clear()
        self._heart_cache[key] = surf
        return surf

    def _blit_heart(
        self,
        canvas: pygame.Surface,
        center: tuple[int, int],
        size: int,
        color: pygame.Color,
        alpha: int = 255,
        angle: float = 0.0,
    ) -> None:
        surf = self._heart_surface(max(4, size), color)
        if angle:
            surf = pygame.transform.rotate(surf, angle)
        if alpha < 255:
            surf = surf.copy()
            surf.set_alpha(max(0, alpha))
        canvas.blit(surf, surf.get_rect(center=center))

    def _blit_text(
        self,
        canvas: pygame.Surface,
        text: str,
        font: pygame.font.Font,
        color: pygame.Color,
        center_x: int,
        y: int,
        alpha: int = 255,
    ) -> int:
        surf = font.render(self._renderable(text), True, color)
        if alpha < 255:
            surf.set_alpha(max(0, alpha))
        canvas.blit(surf, (center_x - surf.get_width() // 2, y))
        return surf.get_height()

    def _blit_paragraph(
        self,
        canvas: pygame.Surface,
        text: str,
        font: pygame.font.Font,
        color: pygame.Color,
        y: int,
        width: int,
        alpha: int = 255,
    ) -> int:
        for line in self._wrap_text(text, font, width):
            self._blit_text(canvas, line, font, color, self.WIDTH // 2, y, alpha)
            y += int(font.get_linesize() * 1.3)
        return y

    def _draw_button(
        self,
        canvas: pygame.Surface,
        rect: pygame.Rect,
        label: str,
        filled: bool = True,
        selected: bool = False,
        alpha: int = 255,
    ) -> None:
        layer = pygame.Surface(rect.size, pygame.SRCALPHA)
        local = layer.get_rect()
        if filled:
            pygame.draw.rect(layer, self.COLOR_PINK, local, border_radius=rect.height // 2)
            text_color = self.COLOR_CARD
        else:
            pygame.draw.rect(layer, self.COLOR_CARD, local, border_radius=rect.height // 2)
            pygame.draw.rect(layer, self.COLOR_PINK, local, width=3, border_radius=rect.height // 2)
            text_color = self.COLOR_PINK_DEEP
        if selected:
            pygame.draw.rect(layer, self.COLOR_PINK_DEEP, local, width=4, border_radius=rect.height // 2)
        label_surf = self.body_font.render(self._renderable(label), True, text_color)
        layer.blit(label_surf, label_surf.get_rect(center=local.center))
        layer.set_alpha(max(0, alpha))
        canvas.blit(layer, rect.topleft)

    def _draw_card(self, canvas: pygame.Surface, rect: pygame.Rect, alpha: int = 255) -> None:
        layer = pygame.Surface(rect.size, pygame.SRCALPHA)
        pygame.draw.rect(layer, self.COLOR_CARD, layer.get_rect(), border_radius=28)
        pygame.draw.rect(layer, self.COLOR_PINK_SOFT, layer.get_rect(), width=2, border_radius=28)
        layer.set_alpha(max(0, alpha))
        canvas.blit(layer, rect.topleft)

    # -- frame ------------------------------------------------------------

    def draw(self, screen: pygame.Surface, frame: dict[str, Any]) -> None:
        canvas = self.frame_surface
        canvas.fill(self.COLOR_BG)
        now_ms = int(frame.get("now_ms", 0))
        self._draw_floating_hearts(canvas, frame.get("hearts", []), now_ms)

        if frame.get("dim", False):
            self.dim_surface.fill((0, 0, 0, 60))
            canvas.blit(self.dim_surface, (0, 0))

        scene = frame.get("screen", "gate")
        if scene == "gate":
            self._draw_gate(canvas, frame)
        elif scene == "unlocked":
            self._draw_unlocked(canvas, frame)
        elif scene == "welcome":
            self._draw_welcome(canvas, frame)
        elif scene == "timeline":
            self._draw_timeline(canvas, frame)
        elif scene == "reveal":
            self._draw_reveal(canvas, frame)
        elif scene == "proposal":
            self._draw_proposal(canvas, frame)
        else:
            self._draw_answered(canvas, frame)

        self.confetti.draw(canvas)

        share_label = frame.get("share_label")
        if share_label:
            self._draw_share(canvas, str(share_label), bool(frame.get("copy_success", False)))

        screen.fill(self.COLOR_BG)
        screen.blit(canvas, (0, 0))

    def _draw_floating_hearts(
        self, canvas: pygame.Surface, hearts: list[FloatingParticle], now_ms: int
    ) -> None:
        for heart in hearts:
            t = heart.progress(now_ms)
            if t <= 0.0 or t >= 1.0:
                continue
            if t < 0.1:
                fade = t / 0.1
            elif t > 0.9:
                fade = (1.0 - t) / 0.1
            else:
                fade = 1.0
            x = int(heart.left / 100.0 * self.WIDTH)
            y = int(self.HEIGHT - t * self.HEIGHT * 1.1)
            alpha = int(255 * heart.opacity * fade)
            self._blit_heart(canvas, (x, y), int(heart.size), self.COLOR_HEART, alpha, angle=-360.0 * t)

    def _draw_share(self, canvas: pygame.Surface, label: str, copied: bool) -> None:
        rect = self.SHARE_RECT
        pygame.draw.circle(canvas, self.COLOR_CARD, rect.center, rect.width // 2)
        pygame.draw.circle(canvas, self.COLOR_PINK_SOFT, rect.center, rect.width // 2, width=2)
        glyph = self.small_font.render("S", True, self.COLOR_PINK)
        canvas.blit(glyph, glyph.get_rect(center=rect.center))
        hint = self.small_font.render(f"{label} (Ctrl+S)", True, self.COLOR_FAINT)
        canvas.blit(hint, (rect.right - hint.get_width(), rect.bottom + 6))
        if copied:
            done = self.small_font.render("Link Copied!", True, self.COLOR_SUCCESS)
            canvas.blit(done, (rect.right - done.get_width(), rect.bottom + 24))

    def _draw_gate(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        alpha = int(frame.get("fade_alpha", 255))
        dy = int(frame.get("fade_offset", 0))
        width = self.WIDTH - self.MARGIN * 2

        y = self._blit_paragraph(
            canvas, "“Only one person can enter this story…”", self.serif_font, self.COLOR_TEXT, 130 + dy, width, alpha
        )
        self._blit_text(
            canvas, "THIS SPACE BELONGS TO US", self.small_font, self.COLOR_PINK, self.WIDTH // 2, y + 8 + dy, alpha
        )

        card = pygame.Rect(self.MARGIN, 280 + dy, self.WIDTH - self.MARGIN * 2, 340)
        self._draw_card(canvas, card, alpha)
        self._blit_paragraph(
            canvas, str(frame.get("prompt", "")), self.body_font, self.COLOR_MUTED, 320 + dy, card.width - 40, alpha
        )

        box = self.GATE_INPUT_RECT.move(0, dy)
        pygame.draw.rect(canvas, self.COLOR_PINK_SOFT, box, border_radius=18)
        pygame.draw.rect(canvas, self.COLOR_PINK_PALE, box, width=2, border_radius=18)
        text = str(frame.get("input_text", ""))
        color = self.COLOR_TEXT
        if not text:
            text = str(frame.get("input_placeholder", ""))
            color = self.COLOR_PINK_PALE
        if frame.get("input_cursor_visible", False):
            text = f"{text}|" if frame.get("input_text") else f"|{text}"
        surf = self.serif_font.render(self._renderable(text), True, color)
        canvas.blit(surf, surf.get_rect(center=box.center))

        error = str(frame.get("gate_error", ""))
        if error:
            self._blit_paragraph(canvas, error, self.small_font, self.COLOR_ERROR, box.bottom + 16, card.width - 40)

        self._draw_button(canvas, self.GATE_BUTTON_RECT.move(0, dy), "Continue", alpha=alpha)

    def _draw_unlocked(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        cx = self.WIDTH // 2
        pulse = float(frame.get("pulse", 0.0))
        radius = int(64 + 4 * pulse)
        pygame.draw.circle(canvas, self.COLOR_PINK_PALE, (cx, 240), radius + int(10 * pulse))
        pygame.draw.circle(canvas, self.COLOR_CARD, (cx, 240), radius)
        self._blit_heart(canvas, (cx, 240), 56, self.COLOR_PINK)

        recipient = str(frame.get("recipient", ""))
        y = 360
        y += self._blit_text(canvas, f"Access granted to {recipient}", self.serif_font, self.COLOR_CARD, cx, y)
        self._blit_text(canvas, "Lifetime membership approved.", self.body_font, self.COLOR_CARD, cx, y + 12)
        y += 80
        for text, alpha in frame.get("lines", []):
            self._blit_text(canvas, str(text), self.serif_font, self.COLOR_CARD, cx, y, int(alpha))
            y += 40

    def _draw_welcome(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        alpha = int(frame.get("fade_alpha", 255))
        dy = int(frame.get("fade_offset", 0))
        cx = self.WIDTH // 2
        y = 170 + dy
        y += self._blit_text(canvas, str(frame.get("title", "")), self.title_font, self.COLOR_TEXT, cx, y, alpha) + 48
        lines = list(frame.get("lines", []))
        for idx, line in enumerate(lines):
            last = idx == len(lines) - 1
            font = self.serif_font if last else self.body_font
            color = self.COLOR_PINK if last else self.COLOR_MUTED
            y = self._blit_paragraph(canvas, str(line), font, color, y, self.WIDTH - 96, alpha) + 14
        self._draw_button(canvas, self.PRIMARY_BUTTON_RECT.move(0, dy), str(frame.get("button", "")), alpha=alpha)

    def _draw_timeline(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        alpha = int(frame.get("fade_alpha", 255))
        scroll = int(frame.get("scroll", 0))
        cx = self.WIDTH // 2
        y = self.TIMELINE_TOP - scroll
        y += self._blit_text(canvas, self.TIMELINE_TITLE, self.title_font, self.COLOR_TEXT, cx, y, alpha) + 40
        card_width = self.WIDTH - self.MARGIN * 2
        for entry in frame.get("entries", []):
            text_lines = self._wrap_text(str(entry["text"]), self.body_font, card_width - 48)
            height = self._timeline_card_height(str(entry["text"]))
            card = pygame.Rect(self.MARGIN, y + int(entry["offset"]), card_width, height)
            entry_alpha = min(alpha, int(entry["alpha"]))
            if entry_alpha > 0 and card.bottom > 0 and card.top < self.HEIGHT:
                self._draw_card(canvas, card, entry_alpha)
                badge = (card.x + 14, card.y + 6)
                pygame.draw.circle(canvas, self.COLOR_PINK_SOFT, badge, 20)
                num = self.serif_font.render(str(entry["index"] + 1), True, self.COLOR_PINK)
                num.set_alpha(entry_alpha)
                canvas.blit(num, num.get_rect(center=badge))
                self._blit_text(canvas, str(entry["title"]), self.serif_font, self.COLOR_PINK, cx, card.y + 22, entry_alpha)
                ty = card.y + 64
                for line in text_lines:
                    self._blit_text(canvas, line, self.body_font, self.COLOR_MUTED, cx, ty, entry_alpha)
                    ty += self.line_height
            y += height + 32
        button = self.PRIMARY_BUTTON_RECT
        pygame.draw.rect(canvas, self.COLOR_BG, pygame.Rect(0, button.top - 24, self.WIDTH, self.HEIGHT - button.top + 24))
        self._draw_button(canvas, button, "Why I Love You", alpha=alpha)

    def _draw_reveal(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        alpha = int(frame.get("fade_alpha", 255))
        cx, cy = self.HEART_CENTER
        pygame.draw.circle(canvas, self.COLOR_CARD, (cx, cy), self.HEART_RADIUS)
        pygame.draw.circle(canvas, self.COLOR_PINK_SOFT, (cx, cy), self.HEART_RADIUS, width=2)
        filled = bool(frame.get("message"))
        self._blit_heart(canvas, (cx, cy + 6), 96, self.COLOR_PINK_DEEP if filled else self.COLOR_PINK_SOFT)

        self._blit_text(
            canvas, "TAP THE HEART TO REVEAL", self.small_font, self.COLOR_PINK_PALE, cx, cy + self.HEART_RADIUS + 24, alpha
        )
        message = frame.get("message")
        if message:
            msg_alpha = int(frame.get("message_alpha", 255))
            self._blit_paragraph(
                canvas, f"“{message}”", self.serif_font, self.COLOR_TEXT, 470, self.WIDTH - 80, min(alpha, msg_alpha)
            )
        self._draw_button(canvas, self.PRIMARY_BUTTON_RECT, "One More Thing…", filled=False, alpha=alpha)

    def _draw_proposal(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        cx = self.WIDTH // 2
        y = 90
        lines = list(frame.get("lines", []))
        for idx, (text, alpha) in enumerate(lines):
            last = idx == len(lines) - 1
            font = self.serif_font if last else self.body_font
            color = self.COLOR_PINK_DEEP if last else self.COLOR_MUTED
            if last:
                y += 16
            y += self._blit_text(canvas, str(text), font, color, cx, y, int(alpha)) + 12

        question_alpha = int(frame.get("question_alpha", 255))
        y += 24
        y = self._blit_paragraph(
            canvas, "Will you be my Valentine?", self.serif_font, self.COLOR_TEXT, y, self.WIDTH - 64, question_alpha
        )
        self._blit_paragraph(
            canvas,
            "And my forever teammate in life?",
            self.body_font,
            self.COLOR_FAINT,
            y + 6,
            self.WIDTH - 64,
            question_alpha,
        )

        choices_alpha = int(frame.get("choices_alpha", 255))
        selected = int(frame.get("selected_choice_index", 0))
        for idx, (rect, choice) in enumerate(zip(self.choice_hitboxes(2), frame.get("choices", []))):
            self._draw_button(
                canvas, rect, str(choice), filled=idx == 1, selected=idx == selected, alpha=choices_alpha
            )

    def _draw_answered(self, canvas: pygame.Surface, frame: dict[str, Any]) -> None:
        cx = self.WIDTH // 2
        pulse = float(frame.get("pulse", 0.0))
        pygame.draw.circle(canvas, self.COLOR_CARD, (cx, 260), 70)
        self._blit_heart(canvas, (cx, 266), int(64 + 8 * pulse), self.COLOR_PINK_DEEP)
        self._blit_text(canvas, "Best decision of my life.", self.serif_font, self.COLOR_PINK_DEEP, cx, 380)
        self._blit_text(canvas, "SINCE 2022. OURS FOREVER.", self.small_font, self.COLOR_FAINT, cx, 430)
        phase = float(frame.get("dots_phase", 0.0))
        for i in range(5):
            bounce = abs(math.sin(phase + i * 0.6)) * 10
            pygame.draw.circle(canvas, self.COLOR_PINK_PALE, (cx - 48 + i * 24, int(500 - bounce)), 5)

    @staticmethod
    def pulse(ticks_ms: int, period_ms: float = 2000.0) -> float:
        return (math.sin(ticks_ms / period_ms * math.tau) + 1.0) / 2.0
