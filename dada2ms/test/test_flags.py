"""Tests for :mod:`dada2ms.flags`."""

import numpy as np
import pytest

from dada2ms.flags import pack_bools, unpack_bools
from dada2ms.errors import SizeMismatchError


class TestPackBools(object):
    def test_round_trip(self):
        """Packing then unpacking must reproduce the flags, for any length"""
        rs = np.random.RandomState(1)
        for n in [0, 1, 37]:
            flags = rs.randint(0, 2, size=n).astype(bool)
            packed = pack_bools(flags)
            assert packed.dtype == np.uint8
            np.testing.assert_array_equal(flags, unpack_bools(packed))

    def test_c_order(self):
        """Multi-dimensional flags are packed with the last axis varying fastest"""
        flags = np.array([[True, False, False], [False, False, True]])
        np.testing.assert_array_equal([1, 0, 0, 0, 0, 1], pack_bools(flags))

    def test_into_buffer(self):
        """A pre-sized destination is filled in place"""
        out = np.full(4, 7, np.uint8)
        result = pack_bools([True, False, True, True], out)
        assert result is out
        np.testing.assert_array_equal([1, 0, 1, 1], out)

    def test_unpack_into_shaped_buffer(self):
        out = np.zeros((2, 2), bool)
        unpack_bools(np.array([0, 1, 2, 0], np.uint8), out)
        np.testing.assert_array_equal([[False, True], [True, False]], out)

    def test_pack_size_mismatch(self):
        """Must raise :exc:`SizeMismatchError` if the destination is the wrong size"""
        with pytest.raises(SizeMismatchError):
            pack_bools([True, False], np.zeros(3, np.uint8))

    def test_unpack_size_mismatch(self):
        """Must raise :exc:`SizeMismatchError` if the destination is the wrong size"""
        with pytest.raises(SizeMismatchError):
            unpack_bools(np.zeros(3, np.uint8), np.zeros(2, bool))
