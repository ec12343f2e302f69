"""
Particle Tests - floating field FIFO and the celebration burst.

Run with: pytest tests/test_particles.py -v
"""
import random

import pytest

from particles import (
    BURST_COLORS,
    BURST_LONG_MS,
    BURST_PARTICLES_PER_ORIGIN,
    BURST_SHORT_MS,
    BURST_SPREAD_DEG,
    FIELD_INTERVAL_MS,
    FIELD_MAX_LIVE,
    BurstEmitter,
    ParticleField,
    burst_duration_ms,
)


# =============================================================================
# Particle Field
# =============================================================================

class TestParticleField:
    """Periodic generation into a bounded FIFO."""

    def test_spawns_one_per_interval(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        field.start()

        scheduler.advance(FIELD_INTERVAL_MS - 1)
        assert field.particles == []

        scheduler.advance(1)
        assert len(field.particles) == 1

        scheduler.advance(FIELD_INTERVAL_MS * 3)
        assert len(field.particles) == 4

    def test_parameters_within_ranges(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        for _ in range(500):
            scheduler.advance(1)
            p = field.spawn()
            assert 0 <= p.left < 100
            assert 5 <= p.duration_s < 15
            assert 10 <= p.size < 30
            assert 0.2 <= p.opacity < 0.6

    def test_cap_evicts_oldest(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        field.start()

        scheduler.advance(FIELD_INTERVAL_MS)
        first = field.particles[0]
        scheduler.advance(FIELD_INTERVAL_MS * 16)

        live = field.particles
        assert len(live) == FIELD_MAX_LIVE
        assert first not in live
        assert [p.created_ms for p in live] == sorted(p.created_ms for p in live)

    def test_never_exceeds_cap(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        field.start()
        for _ in range(100):
            scheduler.advance(FIELD_INTERVAL_MS)
            assert len(field.particles) <= FIELD_MAX_LIVE

    def test_ids_unique_and_time_derived(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        a = field.spawn()
        b = field.spawn()
        scheduler.advance(5000)
        c = field.spawn()

        assert len({a.id, b.id, c.id}) == 3
        assert c.id == 5000

    def test_expired_particles_stay_until_evicted(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        field.start()
        scheduler.advance(FIELD_INTERVAL_MS)
        p = field.particles[0]

        scheduler.advance(20_000 - FIELD_INTERVAL_MS)

        assert p.progress(scheduler.now()) == 1.0
        assert p in field.particles

    def test_stop_cancels_interval(self, scheduler, rng):
        field = ParticleField(scheduler, rng=rng)
        handle = field.start()
        scheduler.advance(FIELD_INTERVAL_MS * 2)
        field.stop(handle)
        scheduler.advance(FIELD_INTERVAL_MS * 10)

        assert len(field.particles) == 2
        assert scheduler.pending == 0


# =============================================================================
# Burst Emitter
# =============================================================================

class TestBurstEmitter:
    """Two-origin, deadline-bounded emission."""

    def test_durations(self):
        assert burst_duration_ms(False) == BURST_SHORT_MS == 2000
        assert burst_duration_ms(True) == BURST_LONG_MS == 5000

    def test_trigger_emits_first_frame_from_both_edges(self, scheduler, rng):
        emitter = BurstEmitter(time_source=scheduler.now, rng=rng)

        frame = emitter.trigger(amplified=False)

        assert len(frame) == BURST_PARTICLES_PER_ORIGIN * 2
        left = [p for p in frame if p.side == "left"]
        right = [p for p in frame if p.side == "right"]
        assert len(left) == len(right) == BURST_PARTICLES_PER_ORIGIN
        assert all(p.angle == 60 and p.origin_x == 0.0 for p in left)
        assert all(p.angle == 120 and p.origin_x == 1.0 for p in right)
        for p in frame:
            assert p.spread == BURST_SPREAD_DEG
            assert p.color in BURST_COLORS
            assert abs(p.heading - p.angle) <= BURST_SPREAD_DEG / 2

    @pytest.mark.parametrize("amplified,duration", [(False, BURST_SHORT_MS), (True, BURST_LONG_MS)])
    def test_stops_after_deadline(self, scheduler, rng, amplified, duration):
        emitter = BurstEmitter(time_source=scheduler.now, rng=rng)
        emitter.trigger(amplified)

        scheduler.advance(duration - 1)
        assert emitter.tick()
        assert emitter.active

        scheduler.advance(1)
        assert emitter.tick()
        assert not emitter.active
        assert emitter.tick() == []

    def test_overlapping_bursts_are_additive(self, scheduler, rng):
        emitter = BurstEmitter(time_source=scheduler.now, rng=rng)
        emitter.trigger(False)
        scheduler.advance(1000)
        emitter.trigger(True)
        scheduler.advance(16)

        assert len(emitter.tick()) == BURST_PARTICLES_PER_ORIGIN * 2 * 2

        scheduler.advance(1000)
        emitter.tick()
        assert emitter.active_count == 1

        scheduler.advance(BURST_LONG_MS)
        emitter.tick()
        assert emitter.active_count == 0

    def test_sink_receives_every_frame(self, scheduler, rng):
        received = []
        emitter = BurstEmitter(time_source=scheduler.now, rng=rng, sink=received.append)
        emitter.trigger(False)
        scheduler.advance(16)
        emitter.tick()

        assert len(received) == 2
        assert all(len(batch) == BURST_PARTICLES_PER_ORIGIN * 2 for batch in received)

    def test_cancel_all(self, scheduler):
        emitter = BurstEmitter(time_source=scheduler.now, rng=random.Random(0))
        emitter.trigger(True)
        emitter.cancel_all()

        assert not emitter.active
        assert emitter.tick() == []

    def test_one_frame_per_clock_reading(self, scheduler, rng):
        received = []
        emitter = BurstEmitter(time_source=scheduler.now, rng=rng, sink=received.append)
        emitter.trigger(False)

        assert emitter.tick() == []
        assert len(received) == 1

        scheduler.advance(33)
        assert len(emitter.tick()) == BURST_PARTICLES_PER_ORIGIN * 2
        assert len(received) == 2
