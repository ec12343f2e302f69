#!/usr/bin/env python3
"""Gate validation and the forward-only narrative state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
import logging
import random
from typing import Any

from content import ContentProvider, TimelineEntry, staggered
from particles import BurstEmitter
from timers import Scheduler, TimerHandle


logger = logging.getLogger(__name__)

SECRET_YEAR = "2022"
SECRET_CITY = "grenoble"
YEAR_ERROR = "Hmm… try again. Think about when everything changed 🌸"
CITY_ERROR = "Not quite… think about the city where destiny worked overtime 🚲"
UNLOCK_DELAY_MS = 3500


class Screen(IntEnum):
    GATE = 1
    WELCOME = 2
    TIMELINE = 3
    REVEAL = 4
    PROPOSAL = 5


class ProposalOutcome(str, Enum):
    PENDING = "pending"
    YES = "yes"
    ALWAYS = "always"


class NarrativeError(ValueError):
    """Raised when a caller requests an action the current state does not offer."""


@dataclass
class GateState:
    step: int = 1
    year_input: str = ""
    city_input: str = ""
    error: str = ""
    unlocked: bool = False


@dataclass(frozen=True)
class GateResult:
    next_step: int
    unlocked: bool
    error: str


class GateValidator:
    """Pure two-step check; holds no state of its own."""

    def __init__(self, secret_year: str = SECRET_YEAR, secret_city: str = SECRET_CITY) -> None:
        self.secret_year = secret_year
        self.secret_city = secret_city.strip().lower()

    def submit(self, current_step: int, year_input: str, city_input: str) -> GateResult:
        if current_step == 1:
            if (year_input or "").strip() == self.secret_year:
                return GateResult(next_step=2, unlocked=False, error="")
            return GateResult(next_step=1, unlocked=False, error=YEAR_ERROR)
        if current_step == 2:
            if (city_input or "").strip().lower() == self.secret_city:
                return GateResult(next_step=2, unlocked=True, error="")
            return GateResult(next_step=2, unlocked=False, error=CITY_ERROR)
        raise NarrativeError(f"Unknown gate step: {current_step}")


class NarrativeSession:
    """Owns the screen pointer and per-screen state for one viewing session."""

    def __init__(
        self,
        content: ContentProvider,
        scheduler: Scheduler,
        rng: random.Random | None = None,
        burst: BurstEmitter | None = None,
        validator: GateValidator | None = None,
        unlock_delay_ms: int = UNLOCK_DELAY_MS,
    ) -> None:
        self.content = content
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.burst = burst
        self.validator = validator or GateValidator()
        self.unlock_delay_ms = max(0, int(unlock_delay_ms))

        self.screen = Screen.GATE
        self.gate = GateState()
        self.reveal_selection: str | None = None
        self.outcome = ProposalOutcome.PENDING
        self._unlock_timer: TimerHandle | None = None

    # -- gate -------------------------------------------------------------

    def submit_gate(self) -> GateResult:
        gate = self.gate
        if gate.unlocked:
            return GateResult(next_step=gate.step, unlocked=True, error="")

        gate.error = ""
        result = self.validator.submit(gate.step, gate.year_input, gate.city_input)
        if result.error:
            logger.debug("Gate step %d rejected", gate.step)
        elif result.next_step > gate.step:
            logger.debug("Gate step %d accepted", gate.step)
        gate.step = max(gate.step, result.next_step)
        gate.error = result.error

        if result.unlocked:
            gate.unlocked = True
            self._unlock_timer = self.scheduler.call_later(self.unlock_delay_ms, self._enter_welcome)
            logger.info("Gate unlocked; welcome screen in %d ms", self.unlock_delay_ms)
        return result

    def _enter_welcome(self) -> None:
        self._unlock_timer = None
        if self.screen == Screen.GATE:
            self._set_screen(Screen.WELCOME)

    @property
    def celebrating(self) -> bool:
        """True between unlock and the automatic move to the welcome screen."""
        return self.gate.unlocked and self.screen == Screen.GATE

    # -- transitions ------------------------------------------------------

    def can_advance(self, target: Screen) -> bool:
        return self.gate.unlocked and int(target) == int(self.screen) + 1

    def advance(self, target: Screen) -> Screen:
        target = Screen(target)
        if not self.gate.unlocked:
            raise NarrativeError("The story is still locked")
        if int(target) != int(self.screen) + 1:
            raise NarrativeError(f"Cannot move from {self.screen.name} to {target.name}")
        self._set_screen(target)
        return self.screen

    def advance_next(self) -> Screen:
        if self.screen == Screen.PROPOSAL:
            raise NarrativeError("Already on the last screen")
        return self.advance(Screen(int(self.screen) + 1))

    def _set_screen(self, target: Screen) -> None:
        logger.info("Screen %s -> %s", self.screen.name, target.name)
        self.screen = target

    # -- per-screen actions ----------------------------------------------

    def timeline_schedule(self) -> list[tuple[TimelineEntry, int]]:
        return staggered(self.content.timeline)

    def reveal(self) -> str:
        if self.screen != Screen.REVEAL:
            raise NarrativeError("Messages can only be revealed on the reveal screen")
        if not self.content.messages:
            raise NarrativeError("The message pool is empty")
        self.reveal_selection = self.rng.choice(self.content.messages)
        logger.debug("Revealed message #%d", self.content.messages.index(self.reveal_selection))
        return self.reveal_selection

    def choose(self, option: str | ProposalOutcome) -> ProposalOutcome:
        if self.screen != Screen.PROPOSAL:
            raise NarrativeError("Nothing to choose before the proposal")
        try:
            choice = ProposalOutcome(option)
        except ValueError:
            raise NarrativeError(f"Unknown option: {option!r}") from None
        if choice == ProposalOutcome.PENDING:
            raise NarrativeError("Pending is not a choice")
        if self.outcome != ProposalOutcome.PENDING:
            return self.outcome

        self.outcome = choice
        logger.info("Proposal answered: %s", choice.value)
        if self.burst is not None:
            self.burst.trigger(amplified=choice == ProposalOutcome.ALWAYS)
        return self.outcome

    @property
    def answered(self) -> bool:
        return self.outcome != ProposalOutcome.PENDING

    # -- lifecycle --------------------------------------------------------

    def close(self) -> None:
        if self._unlock_timer is not None:
            self.scheduler.cancel(self._unlock_timer)
            self._unlock_timer = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "screen": self.screen,
            "gate": {
                "step": self.gate.step,
                "year_input": self.gate.year_input,
                "city_input": self.gate.city_input,
                "error": self.gate.error,
                "unlocked": self.gate.unlocked,
            },
            "reveal_selection": self.reveal_selection,
            "outcome": self.outcome,
        }
