"""
UI Primitive Tests - text input, delayed fades, and the choice cursor.

Run with: pytest tests/test_ui.py -v
"""
import pygame
import pytest

from ui import FadeIn, MenuCursor, TextInputField, stagger


def key_event(key, unicode=""):
    return pygame.event.Event(pygame.KEYDOWN, key=key, unicode=unicode, mod=0)


class TestTextInputField:
    """Typing, filtering, and cursor blink."""

    def test_digits_only_rejects_letters(self):
        field = TextInputField(digits_only=True)

        assert field.handle_key(key_event(pygame.K_2, "2")) is True
        assert field.handle_key(key_event(pygame.K_a, "a")) is False
        assert field.value == "2"

    def test_backspace_and_max_length(self):
        field = TextInputField(max_length=3)
        field.type_text("abcdef")

        assert field.value == "abc"
        field.handle_key(key_event(pygame.K_BACKSPACE))
        assert field.value == "ab"

    def test_enter_is_not_text(self):
        field = TextInputField()

        assert field.handle_key(key_event(pygame.K_RETURN, "\r")) is False
        assert field.value == ""

    def test_value_is_raw_and_ignores_placeholder(self):
        field = TextInputField(placeholder="YYYY")

        assert field.value == ""
        field.type_text(" 2022 ")
        assert field.value == " 2022 "

    def test_cursor_blinks(self):
        field = TextInputField()
        assert field.cursor_visible is True
        field.update(450)
        assert field.cursor_visible is False
        field.clear()
        assert field.cursor_visible is True


class TestFadeIn:
    """Delayed entrance timing."""

    def test_hidden_until_delay(self):
        fade = FadeIn(delay_ms=300, duration_ms=1000)
        fade.update(299)

        assert fade.alpha == 0
        assert fade.started is False

    def test_ramps_then_finishes(self):
        fade = FadeIn(delay_ms=0, duration_ms=1000, rise_px=16)
        fade.update(500)

        assert 0 < fade.alpha < 255
        assert fade.offset_y == 8
        fade.update(500)
        assert fade.finished is True
        assert fade.alpha == 255
        assert fade.offset_y == 0

    def test_restart(self):
        fade = FadeIn(duration_ms=10)
        fade.update(10)
        fade.restart()

        assert fade.alpha == 0

    def test_stagger_delays(self):
        fades = stagger(3, 300, start_ms=100)

        assert [f.delay_ms for f in fades] == [100, 400, 700]


class TestMenuCursor:
    """Wrapping selection."""

    @pytest.mark.parametrize("delta,expected", [(1, 1), (-1, 1), (2, 0)])
    def test_move_wraps(self, delta, expected):
        cursor = MenuCursor(0)
        cursor.move(delta, 2)
        assert cursor.index == expected
