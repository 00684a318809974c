"""Tests for :mod:`dada2ms.geodetic`."""

import math
import os
import tempfile

import numpy as np
import katpoint
import pytest

from dada2ms import geodetic
from dada2ms.errors import StructureError


# Array reference near the OVRO long wavelength array
REF_LON = -118.2817
REF_LAT = 37.2397
REF_ALT = 1183.0


class TestSeaLevelRadius(object):
    def test_equator(self):
        assert geodetic.sea_level_radius(0.0) == pytest.approx(geodetic.MAJOR_AXIS)

    def test_pole(self):
        assert geodetic.sea_level_radius(90.0) == pytest.approx(geodetic.MINOR_AXIS)
        assert geodetic.sea_level_radius(-90.0) == pytest.approx(geodetic.MINOR_AXIS)

    def test_between(self):
        radius = geodetic.sea_level_radius(REF_LAT)
        assert geodetic.MINOR_AXIS < radius < geodetic.MAJOR_AXIS


class TestRotationMatrix(object):
    def test_orthogonal(self):
        for axis in range(3):
            m = geodetic.rotation_matrix(axis, 0.3)
            np.testing.assert_allclose(np.identity(3), m @ m.T, atol=1e-15)

    def test_z_quarter_turn(self):
        """Rotating the X axis by 90 degrees about Z gives the Y axis"""
        m = geodetic.rotation_matrix(2, math.pi / 2)
        np.testing.assert_allclose([0, 1, 0], m @ [1, 0, 0], atol=1e-15)

    def test_bad_axis(self):
        with pytest.raises(ValueError):
            geodetic.rotation_matrix(3, 0.0)


class TestItrfPositions(object):
    def test_reference(self):
        """An antenna with zero offset is at the reference position"""
        itrf = geodetic.itrf_positions([[0.0, 0.0, 0.0]], REF_LON, REF_LAT, REF_ALT)
        assert itrf.shape == (1, 3)
        expected = katpoint.lla_to_ecef(
            math.radians(REF_LAT), math.radians(REF_LON), REF_ALT)
        np.testing.assert_allclose(expected, itrf[0], rtol=0, atol=1e-2)

    def test_offsets(self):
        """Antenna separations are preserved"""
        offsets = [[0.0, 0.0, 0.0], [100.0, 0.0, 0.0], [0.0, 100.0, 0.0], [0.0, 0.0, 10.0]]
        itrf = geodetic.itrf_positions(offsets, REF_LON, REF_LAT, REF_ALT)
        distances = np.linalg.norm(itrf[1:] - itrf[0], axis=1)
        np.testing.assert_allclose([100.0, 100.0, 10.0], distances, rtol=1e-2)
        # Height offset moves the antenna away from the centre of the earth
        assert np.linalg.norm(itrf[3]) > np.linalg.norm(itrf[0])

    def test_no_antennas(self):
        itrf = geodetic.itrf_positions(np.zeros((0, 3)), REF_LON, REF_LAT, REF_ALT)
        assert itrf.shape == (0, 3)


class TestReadAntennaOffsets(object):
    def setup_method(self):
        fd, self.filename = tempfile.mkstemp(suffix='.txt')
        os.close(fd)

    def teardown_method(self):
        os.remove(self.filename)

    def _write(self, text):
        with open(self.filename, 'w') as f:
            f.write(text)

    def test_simple(self):
        self._write('1.0 2.0 3.0\n-4.5 5 0\n\n7 8 9\n')
        offsets = geodetic.read_antenna_offsets(self.filename, 2)
        np.testing.assert_array_equal([[1.0, 2.0, 3.0], [-4.5, 5.0, 0.0]], offsets)

    def test_too_few(self):
        """Must raise :exc:`StructureError` if the file has too few antennas"""
        self._write('1 2 3\n')
        with pytest.raises(StructureError):
            geodetic.read_antenna_offsets(self.filename, 2)

    def test_wrong_columns(self):
        """Must raise :exc:`StructureError` if a line has the wrong number of values"""
        self._write('1 2 3\n4 5\n')
        with pytest.raises(StructureError):
            geodetic.read_antenna_offsets(self.filename, 2)


class TestZenithUvws(object):
    def test_order(self):
        positions = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]])
        uvw = geodetic.zenith_uvws(positions)
        expected = [
            [0, 0, 0], [-1, 0, 0], [0, -2, 0],
            [0, 0, 0], [1, -2, 0],
            [0, 0, 0]
        ]
        np.testing.assert_array_equal(expected, uvw)
