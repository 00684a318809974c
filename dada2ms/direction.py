"""Sky directions, and resolution of the local zenith into a sky-fixed frame."""

import logging
import math
from collections import namedtuple

from casacore.measures import measures

from .epoch import mjd_seconds
from .errors import ConversionError


logger = logging.getLogger(__name__)


#: An angle pair in radians, tagged with a casacore direction reference
#: (e.g. ``'AZEL'`` or ``'J2000'``).
Direction = namedtuple('Direction', ['frame', 'longitude', 'latitude'])

#: Local zenith in the horizon frame
ZENITH_AZEL = Direction('AZEL', 0.0, math.pi / 2)


def position_measure(dm, itrf):
    """Create a casacore position measure from ITRF cartesian coordinates.

    Parameters
    ----------
    dm : :class:`casacore.measures.measures`
        Measures server
    itrf : sequence of 3 floats
        X, Y, Z in metres
    """
    return dm.position('ITRF', *['%.6fm' % v for v in itrf])


def epoch_measure(dm, timestamp):
    """Create a casacore UTC epoch measure from a :class:`katpoint.Timestamp`."""
    return dm.epoch('UTC', '%.6fs' % mjd_seconds(timestamp))


def zenith_direction(itrf, timestamp):
    """Direction of the local zenith in J2000, as seen by an observer.

    Parameters
    ----------
    itrf : sequence of 3 floats
        Observer position (ITRF X, Y, Z in metres)
    timestamp : :class:`katpoint.Timestamp`
        Time of observation

    Returns
    -------
    direction : :class:`Direction`
        Right ascension and declination of the zenith

    Raises
    ------
    ConversionError
        if the frame could not be set up or the conversion failed
    """
    dm = measures()
    zenith = dm.direction(ZENITH_AZEL.frame, '0deg', '90deg')
    try:
        framed = (dm.doframe(position_measure(dm, itrf))
                  and dm.doframe(epoch_measure(dm, timestamp)))
        if framed:
            pointing = dm.measure(zenith, 'J2000')
    except RuntimeError as error:
        raise ConversionError('Error getting zenith position: {}'.format(error)) from error
    if not framed:
        raise ConversionError('Could not set observer position and epoch in measures frame')
    direction = Direction('J2000', pointing['m0']['value'], pointing['m1']['value'])
    logger.debug('Zenith at %s is RA %.6f rad, Dec %.6f rad',
                 timestamp, direction.longitude, direction.latitude)
    return direction
