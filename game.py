#!/usr/bin/env python3
"""Runtime loop: input handling, timers, particles, and frame building."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable

import pygame

from content import ContentProvider
from narrative import NarrativeSession, ProposalOutcome, Screen
from particles import BurstEmitter, ParticleField
from renderer import Renderer
from share import ShareService
from timers import Scheduler
from ui import FadeIn, MenuCursor, TextInputField, stagger


logger = logging.getLogger(__name__)

FPS = 30
DEFAULT_SHARE_URL = "https://ys-story.example/"

YEAR_PROMPT = "Since what year have we been writing our story?"
CITY_PROMPT = "Where did our story begin?"
UNLOCK_LINES = ("Since 2022.", "Since Grenoble.", "Since you.")
WELCOME_LINES = (
    "Since 2022… my life has been different.",
    "Better. Softer. Happier.",
    "I didn’t just build this app.",
    "I built this for you.",
)
PROPOSAL_LINES = (
    "{recipient}…",
    "From 2022 in Grenoble,",
    "to every badminton match,",
    "to every stressful day,",
    "to every laugh we share…",
    "You are my best decision.",
)
PROPOSAL_CHOICES = (("YES 💖", ProposalOutcome.YES), ("ALWAYS ♾️", ProposalOutcome.ALWAYS))
FORWARD_LABELS = {
    Screen.WELCOME: "Begin Our Story",
    Screen.TIMELINE: "Why I Love You",
    Screen.REVEAL: "One More Thing…",
}

TIMELINE_SCROLL_STEP = 60
AUTOPLAY_STEP_MS = 600


def pygame_clipboard(text: str) -> None:
    """Copy through SDL's clipboard; raises pygame.error when unavailable."""
    if not pygame.scrap.get_init():
        pygame.scrap.init()
    pygame.scrap.put_text(text)


class Game:
    """Owns the session, its timers and particle systems, and delegates drawing."""

    def __init__(
        self,
        smoke: bool = False,
        max_frames: int = 90,
        autoplay: bool = False,
        content_path: str = "content.json",
        seed: int | None = None,
        share_url: str = DEFAULT_SHARE_URL,
        native_share: Callable[[str, str], object] | None = None,
    ) -> None:
        self.renderer = Renderer()
        self.screen = pygame.display.set_mode((Renderer.WIDTH, Renderer.HEIGHT))
        self.clock = pygame.time.Clock()
        self.running = True
        self.smoke = smoke
        self.max_frames = max(1, int(max_frames))
        self.autoplay = autoplay
        self.frame_count = 0
        self.rng = random.Random(seed)

        self.scheduler = Scheduler()
        self.content = ContentProvider(content_path).load()
        self.burst = BurstEmitter(
            time_source=self.scheduler.now, rng=self.rng, sink=self.renderer.confetti.add
        )
        self.field = ParticleField(self.scheduler, rng=self.rng)
        self.field_timer = self.field.start()
        self.session = NarrativeSession(self.content, self.scheduler, rng=self.rng, burst=self.burst)
        self.share = ShareService(
            share_url,
            self.scheduler,
            title=self.content.share_title,
            native_share=native_share,
            clipboard=pygame_clipboard,
        )

        self.year_input = TextInputField(max_length=8, placeholder="YYYY", digits_only=True)
        self.city_input = TextInputField(max_length=32, placeholder="City name...")
        self.choice_cursor = MenuCursor(0)

        self.entrance = FadeIn()
        self.unlock_lines = stagger(len(UNLOCK_LINES), 500, start_ms=500, duration_ms=800)
        self.timeline_fades: list[FadeIn] = []
        self.timeline_scroll = 0
        self.message_fade = FadeIn(duration_ms=500)
        self.proposal_lines = stagger(len(PROPOSAL_LINES), 500, duration_ms=1000)
        self.question_fade = FadeIn(delay_ms=3500)
        self.choices_fade = FadeIn(delay_ms=4500)

        self.last_screen = self.session.screen
        self.autoplay_cooldown_ms = 0

    # -- helpers ----------------------------------------------------------

    @property
    def active_input(self) -> TextInputField:
        return self.year_input if self.session.gate.step == 1 else self.city_input

    def _sync_gate_inputs(self) -> None:
        self.session.gate.year_input = self.year_input.value
        self.session.gate.city_input = self.city_input.value

    def _submit_gate(self) -> None:
        self._sync_gate_inputs()
        self.session.submit_gate()

    def _go_forward(self) -> None:
        if self.session.screen in FORWARD_LABELS:
            self.session.advance_next()

    def _reveal(self) -> None:
        self.session.reveal()
        self.message_fade.restart()

    def _choose(self, idx: int) -> None:
        if self.session.answered or not 0 <= idx < len(PROPOSAL_CHOICES):
            return
        self.session.choose(PROPOSAL_CHOICES[idx][1])

    def _on_screen_changed(self, screen: Screen) -> None:
        self.entrance.restart()
        if screen == Screen.TIMELINE:
            self.timeline_fades = [
                FadeIn(delay_ms=delay, duration_ms=1000) for _, delay in self.session.timeline_schedule()
            ]
            self.timeline_scroll = 0
        elif screen == Screen.PROPOSAL:
            for fade in (*self.proposal_lines, self.question_fade, self.choices_fade):
                fade.restart()

    # -- events -----------------------------------------------------------

    def _handle_gate_event(self, event: pygame.event.Event) -> None:
        if self.session.gate.unlocked:
            return
        if event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._submit_gate()
                return
            self.active_input.handle_key(event)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.renderer.GATE_BUTTON_RECT.collidepoint(event.pos):
                self._submit_gate()

    def _handle_reveal_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                self._reveal()
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._go_forward()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.renderer.heart_hitbox().collidepoint(event.pos):
                self._reveal()
            elif self.renderer.PRIMARY_BUTTON_RECT.collidepoint(event.pos):
                self._go_forward()

    def _handle_timeline_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_UP:
                self._scroll_timeline(-TIMELINE_SCROLL_STEP)
                return
            if event.key == pygame.K_DOWN:
                self._scroll_timeline(TIMELINE_SCROLL_STEP)
                return
        elif event.type == pygame.MOUSEWHEEL:
            self._scroll_timeline(-event.y * TIMELINE_SCROLL_STEP)
            return
        self._handle_forward_event(event)

    def _scroll_timeline(self, delta: int) -> None:
        limit = self.renderer.timeline_max_scroll([entry.text for entry in self.content.timeline])
        self.timeline_scroll = max(0, min(self.timeline_scroll + delta, limit))

    def _handle_forward_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._go_forward()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.renderer.PRIMARY_BUTTON_RECT.collidepoint(event.pos):
                self._go_forward()

    def _handle_proposal_event(self, event: pygame.event.Event) -> None:
        if self.session.answered:
            return
        total = len(PROPOSAL_CHOICES)
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_UP:
                self.choice_cursor.move(-1, total)
            elif event.key == pygame.K_DOWN:
                self.choice_cursor.move(1, total)
            elif event.key == pygame.K_y:
                self._choose(0)
            elif event.key == pygame.K_a:
                self._choose(1)
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._choose(self.choice_cursor.index)
        elif event.type == pygame.MOUSEMOTION:
            for idx, rect in enumerate(self.renderer.choice_hitboxes(total)):
                if rect.collidepoint(event.pos):
                    self.choice_cursor.index = idx
                    break
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for idx, rect in enumerate(self.renderer.choice_hitboxes(total)):
                if rect.collidepoint(event.pos):
                    self._choose(idx)
                    break

    def _share_available(self) -> bool:
        return self.session.screen == Screen.GATE and not self.session.gate.unlocked

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                continue
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False
                continue

            if self._share_available():
                if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    if self.renderer.share_hitbox().collidepoint(event.pos):
                        self.share.share()
                        continue
                if event.type == pygame.KEYDOWN and event.key == pygame.K_s and pygame.key.get_mods() & pygame.KMOD_CTRL:
                    self.share.share()
                    continue

            screen = self.session.screen
            if screen == Screen.GATE:
                self._handle_gate_event(event)
            elif screen == Screen.TIMELINE:
                self._handle_timeline_event(event)
            elif screen == Screen.REVEAL:
                self._handle_reveal_event(event)
            elif screen == Screen.PROPOSAL:
                self._handle_proposal_event(event)
            else:
                self._handle_forward_event(event)

    # -- update -----------------------------------------------------------

    def _update_autoplay(self, delta_ms: int) -> None:
        if not self.autoplay:
            return
        self.autoplay_cooldown_ms = max(0, self.autoplay_cooldown_ms - delta_ms)
        if self.autoplay_cooldown_ms > 0:
            return
        self.autoplay_cooldown_ms = AUTOPLAY_STEP_MS

        screen = self.session.screen
        gate = self.session.gate
        if screen == Screen.GATE:
            if gate.unlocked:
                return
            if gate.step == 1:
                self.year_input.clear()
                self.year_input.type_text("2022")
            else:
                self.city_input.clear()
                self.city_input.type_text("Grenoble")
            self._submit_gate()
        elif screen == Screen.REVEAL and self.session.reveal_selection is None:
            self._reveal()
        elif screen == Screen.PROPOSAL:
            if not self.session.answered:
                self._choose(1)
            elif not self.burst.active and self.smoke:
                self.running = False
        else:
            self._go_forward()

    def _update(self, delta_ms: int) -> None:
        # Bursts emit at the frame start; one triggered by this frame's input has already emitted.
        self.burst.tick()
        self.scheduler.advance(delta_ms)
        self.renderer.confetti.update()

        if self.session.screen != self.last_screen:
            self.last_screen = self.session.screen
            self._on_screen_changed(self.session.screen)

        self.active_input.update(delta_ms)
        fades = [self.entrance, self.message_fade, *self.timeline_fades]
        if self.session.celebrating:
            fades.extend(self.unlock_lines)
        if self.session.screen == Screen.PROPOSAL:
            fades.extend((*self.proposal_lines, self.question_fade, self.choices_fade))
        for fade in fades:
            fade.update(delta_ms)

        self._update_autoplay(delta_ms)

    # -- frame ------------------------------------------------------------

    def _build_frame(self) -> dict[str, Any]:
        now_ms = self.scheduler.now()
        state = self.session.snapshot()
        screen = state["screen"]
        gate = state["gate"]
        celebrating = screen == Screen.GATE and gate["unlocked"]
        frame: dict[str, Any] = {
            "now_ms": now_ms,
            "hearts": self.field.particles,
            "fade_alpha": self.entrance.alpha,
            "fade_offset": self.entrance.offset_y,
            "dim": celebrating,
            "share_label": self.share.label if self._share_available() else "",
            "copy_success": self.share.copy_success,
        }

        if celebrating:
            frame.update(
                screen="unlocked",
                recipient=self.content.recipient,
                lines=[(text, fade.alpha) for text, fade in zip(UNLOCK_LINES, self.unlock_lines)],
                pulse=self.renderer.pulse(now_ms),
            )
        elif screen == Screen.GATE:
            field = self.active_input
            frame.update(
                screen="gate",
                prompt=YEAR_PROMPT if gate["step"] == 1 else CITY_PROMPT,
                input_text=field.text,
                input_placeholder=field.placeholder,
                input_cursor_visible=field.cursor_visible,
                gate_error=gate["error"],
            )
        elif screen == Screen.WELCOME:
            frame.update(
                screen="welcome",
                title=f"Hi {self.content.recipient} 🌷",
                lines=list(WELCOME_LINES),
                button=FORWARD_LABELS[Screen.WELCOME],
            )
        elif screen == Screen.TIMELINE:
            entries = [
                {
                    "index": idx,
                    "title": entry.title,
                    "text": entry.text,
                    "alpha": fade.alpha,
                    "offset": fade.offset_y,
                }
                for idx, (entry, fade) in enumerate(zip(self.content.timeline, self.timeline_fades))
            ]
            frame.update(screen="timeline", entries=entries, scroll=self.timeline_scroll)
        elif screen == Screen.REVEAL:
            frame.update(
                screen="reveal",
                message=state["reveal_selection"],
                message_alpha=self.message_fade.alpha,
            )
        elif state["outcome"] == ProposalOutcome.PENDING:
            lines = [text.format(recipient=self.content.recipient) for text in PROPOSAL_LINES]
            frame.update(
                screen="proposal",
                lines=[(text, fade.alpha) for text, fade in zip(lines, self.proposal_lines)],
                question_alpha=self.question_fade.alpha,
                choices=[label for label, _ in PROPOSAL_CHOICES],
                choices_alpha=self.choices_fade.alpha,
                selected_choice_index=self.choice_cursor.index,
            )
        else:
            frame.update(
                screen="answered",
                pulse=self.renderer.pulse(now_ms, period_ms=1000.0),
                dots_phase=now_ms / 150.0,
            )
        return frame

    def close(self) -> None:
        self.session.close()
        self.share.close()
        self.field.stop(self.field_timer)
        self.burst.cancel_all()
        self.scheduler.cancel_all()

    def run(self) -> None:
        try:
            while self.running:
                delta_ms = self.clock.tick(FPS)
                self._handle_events()
                self._update(delta_ms)
                frame = self._build_frame()
                self.renderer.draw(self.screen, frame)
                pygame.display.flip()

                self.frame_count += 1
                if self.smoke and self.frame_count >= self.max_frames:
                    self.running = False
        finally:
            self.close()
            logger.info("Session closed after %d frames", self.frame_count)
