"""Antenna array geometry: local offsets to ITRF positions, and baselines.

The local frame used here has its origin at the centre of the earth, with

- X towards latitude 0, longitude 0;
- Y towards latitude 0, longitude 90E;
- Z towards the north pole.

An antenna offset (east, north, height) is first placed at latitude 0,
longitude 0 and then rotated to the array position.
"""

import logging
import math

import numpy as np
from casacore.measures import measures

from .errors import ConversionError, StructureError


logger = logging.getLogger(__name__)

#: WGS84 semi-major axis (equator), in metres
MAJOR_AXIS = 6378137.0
#: WGS84 semi-minor axis (poles), in metres
MINOR_AXIS = 6356752.3142


def sea_level_radius(latitude):
    """Distance from the centre of the earth to WGS84 sea level.

    This is an approximation: the geocentric radius of the ellipsoid is
    evaluated at the geodetic latitude.

    Parameters
    ----------
    latitude : float
        Latitude in degrees

    Returns
    -------
    radius : float
        Distance in metres
    """
    lat = math.radians(latitude)
    return math.hypot(MAJOR_AXIS * math.cos(lat), MINOR_AXIS * math.sin(lat))


def rotation_matrix(axis, angle):
    """Matrix for a rotation by `angle` radians about `axis` (0, 1 or 2).

    The convention matches casacore's ``Rot3D``.
    """
    c = math.cos(angle)
    s = math.sin(angle)
    if axis == 0:
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
    elif axis == 1:
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    elif axis == 2:
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    else:
        raise ValueError('axis must be 0, 1 or 2')


def itrf_positions(offsets, longitude, latitude, altitude):
    """Calculate ITRF positions for antennas.

    Parameters
    ----------
    offsets : array-like, shape (N, 3)
        East, north and height offsets in metres from the array reference
    longitude, latitude : float
        Array reference position, in degrees
    altitude : float
        Array reference altitude above sea level, in metres

    Returns
    -------
    itrf : ndarray, shape (N, 3)
        ITRF X, Y, Z positions in metres

    Raises
    ------
    ConversionError
        if casacore cannot convert a WGS84 position to ITRF
    """
    offsets = np.asarray(offsets, dtype=np.float64).reshape(-1, 3)
    # Negative latitude to rotate towards the north pole
    rotation = rotation_matrix(2, math.radians(longitude)) @ rotation_matrix(1, -math.radians(latitude))
    sea_level = sea_level_radius(latitude)
    # Offsets are E, N, height. We want X, Y, Z as defined above.
    local = offsets[:, [2, 0, 1]]
    local[:, 0] += sea_level + altitude
    rotated = local @ rotation.T

    dm = measures()
    itrf = np.empty_like(rotated)
    for i, (x, y, z) in enumerate(rotated):
        # WGS84 height is relative to sea level, so subtract it out
        height = math.sqrt(x * x + y * y + z * z) - sea_level
        lon = math.atan2(y, x)
        lat = math.atan2(z, math.hypot(x, y))
        wgs84 = dm.position('WGS84', '%.12frad' % lon, '%.12frad' % lat, '%.6fm' % height)
        try:
            converted = dm.measure(wgs84, 'ITRF')
        except RuntimeError as error:
            raise ConversionError(
                'Could not convert antenna {} to ITRF: {}'.format(i, error)) from error
        lon = converted['m0']['value']
        lat = converted['m1']['value']
        radius = converted['m2']['value']
        itrf[i] = [radius * math.cos(lat) * math.cos(lon),
                   radius * math.cos(lat) * math.sin(lon),
                   radius * math.sin(lat)]
    logger.debug('Computed ITRF positions for %d antennas', len(itrf))
    return itrf


def read_antenna_offsets(filename, n_antennas):
    """Read antenna offsets from a text file with three numbers per line
    (east, north, height in metres). Lines beyond `n_antennas` are ignored.

    Returns
    -------
    offsets : ndarray, shape (n_antennas, 3)

    Raises
    ------
    StructureError
        if the file has fewer than `n_antennas` lines or a line does not
        have exactly three values
    """
    with open(filename) as f:
        rows = [line.split() for line in f if line.strip()]
    if len(rows) < n_antennas:
        raise StructureError('{} has {} antennas, expected {}'.format(
            filename, len(rows), n_antennas))
    rows = rows[:n_antennas]
    for i, row in enumerate(rows):
        if len(row) != 3:
            raise StructureError('{}: antenna {} has {} values, expected 3'.format(
                filename, i, len(row)))
    return np.array(rows, dtype=np.float64).reshape(n_antennas, 3)


def zenith_uvws(positions):
    """Baseline vectors for a phase centre at zenith.

    Parameters
    ----------
    positions : array-like, shape (N, 3)
        Antenna positions

    Returns
    -------
    uvw : ndarray, shape (N * (N + 1) // 2, 3)
        ``positions[i] - positions[j]`` for each pair with ``i <= j``, in
        the order (0, 0), (0, 1), ..., (1, 1), (1, 2), ...
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    first, second = np.triu_indices(len(positions))
    return positions[first] - positions[second]
