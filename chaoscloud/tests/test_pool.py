"""Tests for TransformPool and TransformPoolFactory."""
import logging

import numpy
import pytest

from chaoscloud._attributes import IDENTITY_QUATERNION, RigidAttributes
from chaoscloud._pool import TransformPool, TransformPoolFactory


class TestFactory:
    """Random pool generation."""

    def test_count(self):
        pool = TransformPoolFactory(0).create(4)
        assert len(pool) == 4

    def test_unit_quaternions(self):
        pool = TransformPoolFactory(1).create(5)
        for a in pool:
            assert numpy.linalg.norm(a.rotation) == pytest.approx(1.0,
                                                                  abs=1e-6)

    def test_bounded_parameters(self):
        factory = TransformPoolFactory(2)
        for _ in range(50):
            a = factory.attributes()
            assert numpy.all((a.scale >= 0.1) & (a.scale <= 1.0))
            assert numpy.all((a.translation >= -1.0) & (a.translation <= 1.0))

    def test_seeded_reproducible(self):
        assert TransformPoolFactory(42).create(3) == \
            TransformPoolFactory(42).create(3)

    def test_accepts_generator(self):
        rng = numpy.random.default_rng(9)
        assert TransformPoolFactory(rng).rng is rng

    def test_degenerate_quaternion_falls_back_to_identity(self, caplog):
        factory = TransformPoolFactory(0, rotation_range=(0.0, 0.0))
        with caplog.at_level(logging.WARNING):
            a = factory.attributes()
        numpy.testing.assert_array_equal(a.rotation, IDENTITY_QUATERNION)
        assert "identity" in caplog.text

    @pytest.mark.parametrize("count", [0, 1])
    def test_invalid_count(self, count):
        """A pool needs at least two transforms to choose between."""
        with pytest.raises(ValueError):
            TransformPoolFactory(0).create(count)

    def test_minimum_count(self):
        assert len(TransformPoolFactory(0).create(2)) == 2

    def test_nonpositive_scale_range_rejected(self):
        with pytest.raises(ValueError):
            TransformPoolFactory(0, scale_range=(0.0, 1.0))


class TestPool:
    """Pool container semantics."""

    def setup_method(self):
        self.pool = TransformPoolFactory(7).create(3)

    def test_copy_is_deep(self):
        c = self.pool.copy()
        assert c == self.pool
        for a, b in zip(c, self.pool):
            assert not numpy.shares_memory(a.scale, b.scale)

    def test_matrices(self):
        M = self.pool.matrices()
        assert M.shape == (3, 4, 4)
        numpy.testing.assert_array_equal(M[1], self.pool[1].compose())

    def test_blend_size_mismatch(self):
        other = TransformPoolFactory(8).create(4)
        with pytest.raises(ValueError):
            self.pool.blend(other, 0.5)

    def test_rejects_non_attributes(self):
        with pytest.raises(TypeError):
            TransformPool([numpy.eye(4)])

    def test_allclose(self):
        shifted = TransformPool(
            RigidAttributes(a.rotation, a.scale, a.translation + 1e-9)
            for a in self.pool)
        assert shifted != self.pool
        assert shifted.allclose(self.pool)
