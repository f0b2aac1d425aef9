"""Tests for the Animation driver, its configuration surface and the Timer."""
import logging

import numpy
import pytest

from chaoscloud import Animation, Timer
from chaoscloud._config import DEFAULTS, sanitize_count, sanitize_duration


class FakeClock:
    """Deterministic time source advanced by hand."""

    def __init__(self, t=100.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def anim(clock):
    a = Animation(point_count=1000, transform_count=3, color=True, seed=5,
                  timer=Timer(clock))
    yield a
    a.close()


# --- configuration boundary ---

class TestSanitize:

    def test_in_range(self):
        assert sanitize_count('point_count', 20000) == 20000
        assert sanitize_count('transform_count', numpy.int64(4)) == 4

    def test_clamped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert sanitize_count('point_count', 600000) == 500000
            assert sanitize_count('transform_count', 9) == 5
        assert "outside the supported range" in caplog.text

    def test_small_point_count_kept(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert sanitize_count('point_count', 4) == 4
            assert sanitize_count('point_count', 1) == 1
        assert caplog.text == ""

    @pytest.mark.parametrize("value", [0, -3, 2.5, "10", None, True])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            sanitize_count('transform_count', value)

    def test_unknown_setting(self):
        with pytest.raises(ValueError):
            sanitize_count('colour', 3)

    def test_duration(self):
        assert sanitize_duration(5) == 5.0
        for bad in (0, -1.0, float('inf'), float('nan'), "x"):
            with pytest.raises(ValueError):
                sanitize_duration(bad)


# --- Animation ---

class TestAnimation:

    def test_defaults(self):
        with Animation(timer=Timer(FakeClock())) as a:
            assert a.point_count == DEFAULTS['point_count']
            assert a.transform_count == DEFAULTS['transform_count']
            assert a.colors is None
            assert a.positions.shape == (DEFAULTS['point_count'], 3)

    def test_step_uses_timer(self, anim, clock):
        clock.t += 2.0
        anim.step()
        assert anim.now == pytest.approx(2.0)
        assert anim.frame == 1
        assert anim.dirty

    def test_step_explicit_time(self, anim):
        pool = anim.step(now=1.0)
        assert len(pool) == 3
        assert anim.now == 1.0

    def test_buffers_stay_finite(self, anim):
        for now in numpy.arange(0.0, 30.0, 0.25):
            anim.step(now)
            assert numpy.all(numpy.isfinite(anim.positions))
            assert numpy.all((anim.colors >= 0.0) & (anim.colors <= 1.0))

    def test_point_count_reallocates(self, anim):
        anim.step(1.0)
        anim.point_count = 2500
        assert anim.positions.shape == (2500, 3)
        assert anim.colors.shape == (2500, 3)
        assert numpy.all(numpy.abs(anim.positions) <= 1.0)

    def test_transform_count_regenerates(self, anim):
        anim.step(1.0)
        anim.transform_count = 5
        interp = anim.interpolator
        assert len(interp.current) == 5
        assert len(interp.new) == 5
        assert interp.start_time == 1.0
        assert len(anim.step(2.0)) == 5

    def test_invalid_setting_leaves_state(self, anim):
        with pytest.raises(ValueError):
            anim.point_count = 0
        assert anim.point_count == 1000
        assert anim.positions.shape == (1000, 3)

    def test_reshuffle(self, anim):
        anim.step(2.0)
        target = anim.interpolator.new
        current = anim.interpolator.current
        anim.reshuffle()
        assert anim.interpolator.start_time == 2.0
        assert anim.interpolator.old == current
        assert anim.interpolator.new != target

    def test_seeded_runs_identical(self, clock):
        runs = []
        for _ in range(2):
            with Animation(point_count=1000, seed=11, color=True,
                           timer=Timer(FakeClock())) as a:
                for now in (0.5, 1.0, 6.0):
                    a.step(now)
                runs.append((a.positions.copy(), a.colors.copy()))
        numpy.testing.assert_array_equal(runs[0][0], runs[1][0])
        numpy.testing.assert_array_equal(runs[0][1], runs[1][1])

    def test_multiprocessing_backend(self, clock):
        with Animation(point_count=1000, backend="multiprocessing",
                       workers=2, seed=1, timer=Timer(clock)) as a:
            a.step(1.0)
            assert numpy.all(numpy.isfinite(a.positions))

    def test_step_validates_buffers(self, anim, monkeypatch):
        calls = []
        validate = anim.field.validate

        def counting_validate():
            calls.append(anim.frame)
            return validate()

        monkeypatch.setattr(anim.field, 'validate', counting_validate)
        for now in (0.5, 1.0, 1.5):
            anim.step(now)
        assert calls == [0, 1, 2]


class TestSmallCloud:
    """Four points, three transforms: old at 0, a blend at 2.5, new at 5."""

    def run(self):
        with Animation(point_count=4, transform_count=3, seed=21,
                       timer=Timer(FakeClock())) as a:
            assert a.point_count == 4
            old, new = a.interpolator.old, a.interpolator.new
            pools, positions = [], []
            for now in (0.0, 2.5, 5.0):
                pools.append(a.step(now))
                positions.append(a.positions.copy())
        return old, new, pools, positions

    def test_pools_follow_cycle(self):
        old, new, (p0, p_mid, p5), _ = self.run()
        assert p0 == old
        assert p5 == new
        assert p_mid != old
        assert p_mid != new

    def test_positions_shape_and_finite(self):
        *_, positions = self.run()
        for p in positions:
            assert p.shape == (4, 3)
            assert numpy.all(numpy.isfinite(p))

    def test_bit_identical_across_runs(self):
        _, _, pools_a, pos_a = self.run()
        _, _, pools_b, pos_b = self.run()
        for pa, pb in zip(pools_a, pools_b):
            assert pa == pb
        for xa, xb in zip(pos_a, pos_b):
            numpy.testing.assert_array_equal(xa, xb)


# --- Timer ---

class TestTimer:

    def test_elapsed(self):
        clock = FakeClock(10.0)
        timer = Timer(clock)
        assert timer.elapsed == 0.0
        clock.t = 12.5
        assert timer.update() == 2.5
        assert timer.delta == 2.5

    def test_monotonic(self):
        clock = FakeClock(10.0)
        timer = Timer(clock)
        clock.t = 13.0
        timer.update()
        clock.t = 11.0
        assert timer.update() == 3.0
        assert timer.delta == 0.0

    def test_reset(self):
        clock = FakeClock(10.0)
        timer = Timer(clock)
        clock.t = 20.0
        timer.update()
        timer.reset()
        assert timer.elapsed == 0.0
        clock.t = 21.0
        assert timer.update() == 1.0
