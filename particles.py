#!/usr/bin/env python3
"""Ambient floating-heart field and the two-origin celebration burst."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
import random
from typing import Callable

from timers import Scheduler, TimerHandle


logger = logging.getLogger(__name__)

FIELD_INTERVAL_MS = 2000
FIELD_MAX_LIVE = 16

BURST_SHORT_MS = 2000
BURST_LONG_MS = 5000
BURST_PARTICLES_PER_ORIGIN = 3
BURST_SPREAD_DEG = 55.0
BURST_COLORS = ("#f472b6", "#fbcfe8", "#ffffff")
# (side, horizontal origin as a fraction of the width, launch angle)
BURST_ORIGINS = (("left", 0.0, 60.0), ("right", 1.0, 120.0))


@dataclass(frozen=True)
class FloatingParticle:
    """One rising heart. Expiry is visual only; the field evicts by age order."""

    id: int
    created_ms: int
    left: float
    duration_s: float
    size: float
    opacity: float

    def progress(self, now_ms: int) -> float:
        """Fraction of the visual lifetime elapsed, clamped to [0, 1]."""
        span = max(1.0, self.duration_s * 1000.0)
        return max(0.0, min(1.0, (now_ms - self.created_ms) / span))


class ParticleField:
    """Spawns a particle every interval into a bounded FIFO."""

    def __init__(
        self,
        scheduler: Scheduler,
        rng: random.Random | None = None,
        interval_ms: int = FIELD_INTERVAL_MS,
        max_live: int = FIELD_MAX_LIVE,
    ) -> None:
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.interval_ms = max(1, int(interval_ms))
        self._particles: deque[FloatingParticle] = deque(maxlen=max(1, int(max_live)))
        self._last_id = -1

    @property
    def particles(self) -> list[FloatingParticle]:
        return list(self._particles)

    def start(self) -> TimerHandle:
        logger.debug("Particle field started (every %d ms)", self.interval_ms)
        return self.scheduler.call_every(self.interval_ms, self.spawn)

    def stop(self, handle: TimerHandle | None) -> None:
        self.scheduler.cancel(handle)

    def _next_id(self, now_ms: int) -> int:
        candidate = max(int(now_ms), self._last_id + 1)
        self._last_id = candidate
        return candidate

    def spawn(self) -> FloatingParticle:
        now_ms = self.scheduler.now()
        particle = FloatingParticle(
            id=self._next_id(now_ms),
            created_ms=now_ms,
            left=self.rng.random() * 100,
            duration_s=5 + self.rng.random() * 10,
            size=10 + self.rng.random() * 20,
            opacity=0.2 + self.rng.random() * 0.4,
        )
        # deque(maxlen) drops the oldest once the cap is reached.
        self._particles.append(particle)
        return particle


@dataclass(frozen=True)
class BurstParticle:
    side: str
    origin_x: float
    angle: float
    spread: float
    color: str
    # Launch direction within the spread cone and a relative speed in [0.5, 1).
    heading: float
    speed: float


@dataclass
class Burst:
    ends_ms: int
    amplified: bool
    frames: int = 0
    last_emit_ms: int | None = None


def burst_duration_ms(amplified: bool) -> int:
    return BURST_LONG_MS if amplified else BURST_SHORT_MS


@dataclass
class BurstEmitter:
    """
    Emits confetti from both screen edges on every frame until a deadline.

    Each trigger owns its own deadline, so overlapping bursts simply add up.
    Emitted particles are returned and passed to `sink`; they are never kept here.
    """

    time_source: Callable[[], int]
    rng: random.Random = field(default_factory=random.Random)
    sink: Callable[[list[BurstParticle]], object] | None = None
    _bursts: list[Burst] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return bool(self._bursts)

    @property
    def active_count(self) -> int:
        return len(self._bursts)

    def trigger(self, amplified: bool) -> list[BurstParticle]:
        duration = burst_duration_ms(amplified)
        burst = Burst(ends_ms=self.time_source() + duration, amplified=amplified)
        self._bursts.append(burst)
        logger.info("Burst triggered (%s, %d ms)", "amplified" if amplified else "short", duration)
        return self._step([burst])

    def tick(self) -> list[BurstParticle]:
        """Emit one animation frame for every running burst."""
        if not self._bursts:
            return []
        return self._step(list(self._bursts))

    def cancel_all(self) -> None:
        self._bursts.clear()

    def _step(self, bursts: list[Burst]) -> list[BurstParticle]:
        now_ms = self.time_source()
        emitted: list[BurstParticle] = []
        for burst in bursts:
            # One frame per burst per clock reading, even if tick() follows trigger().
            if burst.last_emit_ms == now_ms:
                continue
            burst.last_emit_ms = now_ms
            emitted.extend(self._frame())
            burst.frames += 1
            if now_ms >= burst.ends_ms:
                self._bursts.remove(burst)
                logger.debug("Burst finished after %d frames", burst.frames)
        if emitted and self.sink is not None:
            self.sink(emitted)
        return emitted

    def _frame(self) -> list[BurstParticle]:
        out: list[BurstParticle] = []
        half = BURST_SPREAD_DEG / 2.0
        for side, origin_x, angle in BURST_ORIGINS:
            for _ in range(BURST_PARTICLES_PER_ORIGIN):
                out.append(
                    BurstParticle(
                        side=side,
                        origin_x=origin_x,
                        angle=angle,
                        spread=BURST_SPREAD_DEG,
                        color=self.rng.choice(BURST_COLORS),
                        heading=angle + self.rng.uniform(-half, half),
                        speed=0.5 + self.rng.random() * 0.5,
                    )
                )
        return out
