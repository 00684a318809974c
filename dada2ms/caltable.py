"""Reading of per-antenna gain calibration tables."""

import logging

import numpy as np
from casacore import tables

from .errors import StructureError
from .flags import pack_bools


logger = logging.getLogger(__name__)


def read_cal_table(filename):
    """Read the gains and flags from a "simple" calibration table, which has
    exactly one row per antenna, in antenna order.

    The outputs are flat, with the row (antenna) dimension outermost and
    the cell dimensions in the order casacore presents them, so that they
    can be reshaped to ``(n_antennas,) + cell_shape``.

    Parameters
    ----------
    filename : str
        Calibration table with ``CPARAM``, ``FLAG`` and ``ANTENNA1`` columns.
        It is opened read-only.

    Returns
    -------
    gain : ndarray of complex64
        Complex gains
    flag : ndarray of uint8
        Flags, packed one per byte with :func:`~dada2ms.flags.pack_bools`

    Raises
    ------
    StructureError
        if row `i` does not belong to antenna `i`
    SizeMismatchError
        if the ``FLAG`` column does not have the same number of elements as
        ``CPARAM``
    """
    with tables.table(filename, readonly=True, ack=False) as cal:
        n_rows = cal.nrows()
        antenna1 = np.asarray(cal.getcol('ANTENNA1')) if n_rows else np.zeros(0, np.int32)
        if not np.array_equal(antenna1, np.arange(n_rows)):
            raise StructureError(
                'Cal table {} not expected shape (one row per antenna)'.format(filename))
        if n_rows == 0:
            return np.zeros(0, np.complex64), np.zeros(0, np.uint8)
        shape = (n_rows,) + np.shape(cal.getcell('CPARAM', 0))
        gain = np.empty(shape, np.complex64)
        cal.getcolnp('CPARAM', gain)
        flag = pack_bools(cal.getcol('FLAG'), np.empty(gain.size, np.uint8))
    logger.debug('Read %s gains of shape %s from %s', gain.size, shape, filename)
    return gain.reshape(-1), flag
