"""
Game Smoke Tests - the pygame loop on the SDL dummy driver.

Run with: pytest tests/test_game.py -v
"""
from pathlib import Path

import pygame
import pytest

from narrative import UNLOCK_DELAY_MS, ProposalOutcome, Screen
from particles import BURST_PARTICLES_PER_ORIGIN


CONTENT = Path(__file__).parent.parent / "content.json"


@pytest.fixture
def game():
    try:
        pygame.init()
        from game import Game

        instance = Game(smoke=True, max_frames=2000, autoplay=True, content_path=str(CONTENT), seed=7)
    except pygame.error as exc:
        pytest.skip(f"No display backend: {exc}")
    yield instance
    instance.close()
    pygame.quit()


def step(game, frames, delta_ms=33):
    for _ in range(frames):
        game._update(delta_ms)
        game.renderer.draw(game.screen, game._build_frame())


def walk_to(game, target):
    game.autoplay = False
    game.year_input.type_text("2022")
    game._submit_gate()
    game.city_input.type_text("Grenoble")
    game._submit_gate()
    game.scheduler.advance(UNLOCK_DELAY_MS)
    while game.session.screen < target:
        game.session.advance_next()
    game._update(33)


class TestGameSmoke:
    """End-to-end walk through every screen."""

    def test_autoplay_reaches_answered_proposal(self, game):
        step(game, 600)

        assert game.session.screen == Screen.PROPOSAL
        assert game.session.outcome == ProposalOutcome.ALWAYS
        assert game.session.reveal_selection in game.content.messages
        assert game.running is False

    def test_hearts_accumulate_and_stay_capped(self, game):
        game.autoplay = False
        step(game, 1200)

        assert 0 < len(game.field.particles) <= 16

    def test_gate_frame_before_unlock(self, game):
        game.autoplay = False
        frame = game._build_frame()

        assert frame["screen"] == "gate"
        assert frame["share_label"] == "Copy Link"
        assert frame["gate_error"] == ""

    def test_wrong_year_shows_error(self, game):
        game.autoplay = False
        game.year_input.type_text("1999")
        game._submit_gate()

        assert game._build_frame()["gate_error"]

    def test_close_cancels_timers(self, game):
        step(game, 30)
        game.close()

        assert game.scheduler.pending == 0

    def test_run_loop_exits_in_smoke_mode(self, game):
        game.autoplay = False
        game.max_frames = 5
        game.run()

        assert game.frame_count == 5


class TestGameFrames:
    """Per-frame behaviour on individual screens."""

    def test_choice_frame_emits_a_single_batch(self, game):
        walk_to(game, Screen.PROPOSAL)
        batches = []
        game.burst.sink = batches.append

        game._choose(0)
        game._update(33)

        assert len(batches) == 1
        assert len(batches[0]) == BURST_PARTICLES_PER_ORIGIN * 2

        game._update(33)
        assert len(batches) == 2

    def test_timeline_scroll_is_bounded(self, game):
        walk_to(game, Screen.TIMELINE)
        down = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_DOWN, unicode="", mod=0)
        limit = game.renderer.timeline_max_scroll([entry.text for entry in game.content.timeline])

        for _ in range(200):
            game._handle_timeline_event(down)

        assert game.timeline_scroll == limit
        assert game._build_frame()["scroll"] == limit

        up = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_UP, unicode="", mod=0)
        for _ in range(200):
            game._handle_timeline_event(up)
        assert game.timeline_scroll == 0

    def test_frame_follows_session_snapshot(self, game):
        walk_to(game, Screen.REVEAL)
        game._reveal()
        frame = game._build_frame()

        assert frame["screen"] == "reveal"
        assert frame["message"] == game.session.snapshot()["reveal_selection"]

        game.session.advance_next()
        game._choose(1)
        assert game._build_frame()["screen"] == "answered"
