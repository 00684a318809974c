"""Creation and filling of the Measurement Set metadata sub-tables.

There is one function per sub-table. Each takes an open, writable
:class:`casacore.tables.table` for that sub-table, appends its rows, and
returns the number of rows added (tables with one row per antenna) or the
index of the row added (everything else). Column names and types are those
of the standard Measurement Set description provided by casacore; this
module only decides the values.

No consistency between sub-tables is enforced here: the caller must fill
the ANTENNA, FEED and POINTING tables with the same number of antennas.

Times are Modified Julian Dates in seconds (see
:func:`dada2ms.epoch.mjd_seconds`).
"""

import logging
import os
import shutil
from collections import namedtuple

import numpy as np
from casacore import tables

from .direction import ZENITH_AZEL
from .errors import SchemaFrozenError


logger = logging.getLogger(__name__)


# Measurement set stokes codes for the linear correlation products, in
# the order they are stored.
CORRELATIONS = ['XX', 'XY', 'YX', 'YY']
STOKES_CODES = {'XX': 9, 'XY': 10, 'YX': 11, 'YY': 12}
# Receptor pairs making up each correlation product
CORRELATION_PRODUCTS = [(0, 0), (0, 1), (1, 0), (1, 1)]
# Validity interval for parameters that apply to the whole observation
UNBOUNDED_INTERVAL = 1e30
# Index of LSRK in the MEAS_FREQ_REF code table
FREQ_REF_LSRK = 1

_FIELD_DIR_COLUMNS = ('DELAY_DIR', 'PHASE_DIR', 'REFERENCE_DIR')
_POINTING_DIR_COLUMNS = ('DIRECTION', 'TARGET')
_SOURCE_DIR_COLUMNS = ('DIRECTION',)


FrequencyPlan = namedtuple('FrequencyPlan', ['n_channels', 'center_frequency', 'bandwidth'])


class TimeRange(namedtuple('TimeRange', ['start', 'finish'])):
    """Start and finish of the observed span, in MJD seconds."""
    __slots__ = ()

    @property
    def midpoint(self):
        return (self.start + self.finish) / 2

    @property
    def duration(self):
        return self.finish - self.start


# Optional SOURCE columns not present in the required description
OPTIONAL_SOURCE_COLUMNS = {
    'TRANSITION': tables.makearrcoldesc(
        'TRANSITION', '', 1,
        comment='Line Transition name'),
    'REST_FREQUENCY': tables.makearrcoldesc(
        'REST_FREQUENCY', 1.0, 1,
        comment='Line rest frequency',
        keywords={'QuantumUnits': ['Hz'],
                  'MEASINFO': {'type': 'frequency', 'Ref': 'LSRK'}}),
    'SYSVEL': tables.makearrcoldesc(
        'SYSVEL', 1.0, 1,
        comment='Systemic velocity at reference',
        keywords={'QuantumUnits': ['m/s'],
                  'MEASINFO': {'type': 'radialvelocity', 'Ref': 'LSRK'}})
}


def create_archive(filename, overwrite=False):
    """Create an empty Measurement Set with all the required sub-tables.

    The optional SOURCE table is not created: see :class:`SourceTableSchema`.

    Raises
    ------
    FileExistsError
        if `filename` exists and `overwrite` is false
    """
    if os.path.exists(filename):
        if not overwrite:
            raise FileExistsError("File '%s' already exists" % filename)
        shutil.rmtree(filename)
    with tables.default_ms(filename):
        pass
    logger.info('Created measurement set %s', filename)


def open_subtable(filename, name, readonly=False):
    """Open sub-table `name` (e.g. ``'ANTENNA'``) of the Measurement Set `filename`."""
    return tables.table(os.path.join(filename, name), readonly=readonly, ack=False)


class SourceTableSchema(object):
    """Two-phase construction of the SOURCE sub-table.

    The SOURCE table is optional in a Measurement Set, and the columns for
    spectral lines are optional within it. They must all be declared
    (with :meth:`add_optional_column`) before the table is created (with
    :meth:`create`); after that the schema is frozen and rows may be
    added with :func:`fill_source_table`.

    Attributes
    ----------
    columns : list of str
        Optional columns declared so far
    created : bool
        Whether :meth:`create` has been called
    """
    def __init__(self):
        self.columns = []
        self.created = False

    def add_optional_column(self, name):
        """Declare an optional column, which must be one of
        :const:`OPTIONAL_SOURCE_COLUMNS`.

        Raises
        ------
        SchemaFrozenError
            if the table has already been created
        ValueError
            if `name` is not an optional SOURCE column
        """
        if self.created:
            raise SchemaFrozenError('cannot add column {} after creating the SOURCE table'.format(name))
        if name not in OPTIONAL_SOURCE_COLUMNS:
            raise ValueError('{} is not an optional SOURCE column'.format(name))
        if name not in self.columns:
            self.columns.append(name)

    def create(self, filename):
        """Create the SOURCE table in the Measurement Set `filename` and
        register it in the main table keywords.

        Returns
        -------
        path : str
            Absolute path of the new table

        Raises
        ------
        SchemaFrozenError
            if the table has already been created
        """
        if self.created:
            raise SchemaFrozenError('SOURCE table has already been created')
        path = os.path.join(os.path.abspath(filename), 'SOURCE')
        if self.columns:
            desc = tables.maketabdesc([OPTIONAL_SOURCE_COLUMNS[name] for name in self.columns])
        else:
            desc = None
        with tables.default_ms_subtable('SOURCE', path, desc):
            pass
        with tables.table(filename, readonly=False, ack=False) as ms:
            ms.putkeyword('SOURCE', 'Table: ' + path)
        self.created = True
        logger.debug('Created SOURCE table with optional columns %s', self.columns)
        return path


def add_source_table(filename):
    """Create the SOURCE table with all of the spectral line columns."""
    schema = SourceTableSchema()
    for name in ('TRANSITION', 'REST_FREQUENCY', 'SYSVEL'):
        schema.add_optional_column(name)
    return schema.create(filename)


def _resolve_direction(table, columns, direction):
    """Pick the direction to write into `columns`.

    If `direction` is ``None`` the zenith is used, and the reference frame
    of each column is changed to AZEL. Otherwise the column frames are left
    alone.
    """
    if direction is None:
        for column in columns:
            measinfo = table.getcolkeyword(column, 'MEASINFO')
            measinfo['Ref'] = ZENITH_AZEL.frame
            table.putcolkeyword(column, 'MEASINFO', measinfo)
        return ZENITH_AZEL
    ref = table.getcolkeyword(columns[0], 'MEASINFO').get('Ref')
    if ref != direction.frame:
        logger.warning('Writing %s direction into %s column with reference %s',
                       direction.frame, columns[0], ref)
    return direction


def fill_antenna_table(table, positions, config):
    """Add one row per antenna to the ANTENNA table.

    Parameters
    ----------
    table : :class:`casacore.tables.table`
        ANTENNA table
    positions : array-like, shape (N, 3)
        ITRF positions in metres
    config : :class:`~dada2ms.config.ArchiveConfig`
        Names and antenna properties

    Returns
    -------
    n_antennas : int
        Number of rows added
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    n = len(positions)
    if n == 0:
        return 0
    start = table.nrows()
    table.addrows(n)
    table.putcol('NAME', [config.antenna_name(i) for i in range(n)], start, n)
    table.putcol('STATION', [config.station] * n, start, n)
    table.putcol('TYPE', [config.antenna_type] * n, start, n)
    table.putcol('MOUNT', [config.antenna_mount] * n, start, n)
    table.putcol('OFFSET', np.zeros((n, 3)), start, n)
    table.putcol('DISH_DIAMETER', [float(config.dish_diameter)] * n, start, n)
    table.putcol('POSITION', positions, start, n)
    logger.debug('Added %d antennas', n)
    return n


def fill_feed_table(table, n_antennas):
    """Add one dual linear feed per antenna to the FEED table.

    The feeds apply to all spectral windows and the whole observation.

    Returns
    -------
    n_antennas : int
        Number of rows added
    """
    n = n_antennas
    if n == 0:
        return 0
    start = table.nrows()
    table.addrows(n)
    table.putcol('POSITION', np.zeros((n, 3)), start, n)
    table.putcol('BEAM_OFFSET', np.zeros((n, 2, 2)), start, n)
    table.putcol('POLARIZATION_TYPE', np.array([['X', 'Y']] * n, dtype='S'), start, n)
    table.putcol('POL_RESPONSE', np.tile(np.identity(2, np.complex64), (n, 1, 1)), start, n)
    table.putcol('RECEPTOR_ANGLE', np.zeros((n, 2)), start, n)
    table.putcol('ANTENNA_ID', list(range(n)), start, n)
    table.putcol('BEAM_ID', [-1] * n, start, n)
    table.putcol('FEED_ID', [0] * n, start, n)
    table.putcol('INTERVAL', [UNBOUNDED_INTERVAL] * n, start, n)
    table.putcol('NUM_RECEPTORS', [2] * n, start, n)
    table.putcol('SPECTRAL_WINDOW_ID', [-1] * n, start, n)
    table.putcol('TIME', [0.0] * n, start, n)
    logger.debug('Added %d feeds', n)
    return n


def add_field(table, name, direction=None):
    """Append a field to the FIELD table.

    Parameters
    ----------
    table : :class:`casacore.tables.table`
        FIELD table
    name : str
        Field name
    direction : :class:`~dada2ms.direction.Direction`, optional
        Delay, phase and reference direction. If not given, the zenith is
        used and the direction columns are switched to the AZEL frame.

    Returns
    -------
    row : int
        Index of the new field
    """
    direction = _resolve_direction(table, _FIELD_DIR_COLUMNS, direction)
    value = np.array([[direction.longitude, direction.latitude]])
    row = table.nrows()
    table.addrows(1)
    table.putcell('NAME', row, name)
    for column in _FIELD_DIR_COLUMNS:
        table.putcell(column, row, value)
    table.putcell('SOURCE_ID', row, 0)
    logger.debug('Added field %d (%s) at %s', row, name, direction)
    return row


def fill_field_table(table, config, direction=None):
    """Add the observed field, named after `config.field_name`. See :func:`add_field`."""
    return add_field(table, config.field_name, direction)


def fill_observation_table(table, start, finish, config):
    """Add the single row of the OBSERVATION table.

    Returns
    -------
    row : int
        Index of the row added
    """
    row = table.nrows()
    table.addrows(1)
    table.putcell('TIME_RANGE', row, np.array(TimeRange(start, finish)))
    table.putcell('OBSERVER', row, config.observer)
    table.putcell('PROJECT', row, config.project)
    table.putcell('TELESCOPE_NAME', row, config.telescope_name)
    logger.debug('Added observation %d', row)
    return row


def update_observation_table(table, start, finish):
    """Rewrite the time range of the observation, leaving everything else alone."""
    table.putcell('TIME_RANGE', 0, np.array(TimeRange(start, finish)))
    logger.info('Observation time range is now %.3f to %.3f', start, finish)


def fill_pointing_table(table, n_antennas, time, direction=None):
    """Add one static, non-tracking pointing per antenna.

    Parameters
    ----------
    table : :class:`casacore.tables.table`
        POINTING table
    n_antennas : int
        Number of antennas
    time : float
        Time origin of the pointing
    direction : :class:`~dada2ms.direction.Direction`, optional
        Pointing direction for all antennas. If not given, the zenith is
        used and the direction columns are switched to the AZEL frame.

    Returns
    -------
    n_antennas : int
        Number of rows added
    """
    direction = _resolve_direction(table, _POINTING_DIR_COLUMNS, direction)
    n = n_antennas
    if n == 0:
        return 0
    value = np.tile([[direction.longitude, direction.latitude]], (n, 1, 1))
    start = table.nrows()
    table.addrows(n)
    for column in _POINTING_DIR_COLUMNS:
        table.putcol(column, value, start, n)
    table.putcol('ANTENNA_ID', list(range(n)), start, n)
    table.putcol('INTERVAL', [UNBOUNDED_INTERVAL] * n, start, n)
    table.putcol('NUM_POLY', [0] * n, start, n)
    table.putcol('TIME', [0.0] * n, start, n)
    table.putcol('TIME_ORIGIN', [time] * n, start, n)
    table.putcol('TRACKING', [False] * n, start, n)
    logger.debug('Added pointing for %d antennas at %s', n, direction)
    return n


def fill_polarization_table(table):
    """Add the linear dual-polarization setup to the POLARIZATION table.

    Returns
    -------
    row : int
        Index of the row added
    """
    row = table.nrows()
    table.addrows(1)
    table.putcell('NUM_CORR', row, len(CORRELATIONS))
    table.putcell('CORR_TYPE', row,
                  np.array([STOKES_CODES[c] for c in CORRELATIONS], dtype=np.int32))
    table.putcell('CORR_PRODUCT', row, np.array(CORRELATION_PRODUCTS, dtype=np.int32))
    return row


def fill_processor_table(table, config):
    """Add the correlator to the PROCESSOR table.

    Returns
    -------
    row : int
        Index of the row added
    """
    row = table.nrows()
    table.addrows(1)
    table.putcell('TYPE', row, 'CORRELATOR')
    table.putcell('SUB_TYPE', row, config.correlator_name)
    return row


def channel_frequencies(n_channels, center_frequency, bandwidth):
    """Channelisation of a band into equal channels.

    Returns
    -------
    ref_frequency : float
        Frequency of the lower band edge, in Hz
    channel_width : float
        Width of each channel, in Hz
    chan_freq : ndarray
        Centre frequency of each channel, in Hz
    """
    ref_frequency = center_frequency - bandwidth / 2
    channel_width = bandwidth / n_channels if n_channels else 0.0
    chan_freq = ref_frequency + (np.arange(n_channels) + 0.5) * channel_width
    return ref_frequency, channel_width, chan_freq


def fill_spectral_window_table(table, n_channels, center_frequency, bandwidth):
    """Append a spectral window. This may be called once per window.

    Parameters
    ----------
    table : :class:`casacore.tables.table`
        SPECTRAL_WINDOW table
    n_channels : int
        Number of channels
    center_frequency : float
        Frequency at the centre of the band, in Hz
    bandwidth : float
        Total bandwidth, in Hz

    Returns
    -------
    row : int
        Index of the new spectral window
    """
    ref_frequency, channel_width, chan_freq = channel_frequencies(
        n_channels, center_frequency, bandwidth)
    widths = np.full(n_channels, channel_width)
    row = table.nrows()
    table.addrows(1)
    table.putcell('MEAS_FREQ_REF', row, FREQ_REF_LSRK)
    table.putcell('CHAN_FREQ', row, chan_freq)
    table.putcell('REF_FREQUENCY', row, ref_frequency)
    table.putcell('CHAN_WIDTH', row, widths)
    table.putcell('EFFECTIVE_BW', row, widths)
    table.putcell('RESOLUTION', row, widths)
    table.putcell('FREQ_GROUP_NAME', row, 'Group 1')
    table.putcell('NAME', row, '{:g}'.format(center_frequency))
    table.putcell('NET_SIDEBAND', row, 1)
    table.putcell('NUM_CHAN', row, n_channels)
    table.putcell('TOTAL_BANDWIDTH', row, bandwidth)
    logger.debug('Added spectral window %d: %d channels centred on %g Hz',
                 row, n_channels, center_frequency)
    return row


def fill_source_table(table, start, finish, config, direction=None):
    """Add the single source to a SOURCE table created by
    :class:`SourceTableSchema`.

    Parameters
    ----------
    table : :class:`casacore.tables.table`
        SOURCE table
    start, finish : float
        Observed time span
    config : :class:`~dada2ms.config.ArchiveConfig`
        Provides the source name
    direction : :class:`~dada2ms.direction.Direction`, optional
        Source direction. If not given, the zenith is used and the
        direction column is switched to the AZEL frame.

    Returns
    -------
    row : int
        Index of the row added
    """
    direction = _resolve_direction(table, _SOURCE_DIR_COLUMNS, direction)
    time_range = TimeRange(start, finish)
    row = table.nrows()
    table.addrows(1)
    table.putcell('SOURCE_ID', row, 0)
    table.putcell('TIME', row, time_range.midpoint)
    table.putcell('INTERVAL', row, time_range.duration)
    table.putcell('SPECTRAL_WINDOW_ID', row, -1)
    table.putcell('NUM_LINES', row, 0)
    table.putcell('NAME', row, config.field_name)
    table.putcell('CALIBRATION_GROUP', row, 0)
    table.putcell('CODE', row, '')
    table.putcell('DIRECTION', row, np.array([direction.longitude, direction.latitude]))
    table.putcell('PROPER_MOTION', row, np.zeros(2))
    logger.debug('Added source %d at %s', row, direction)
    return row


def update_source_table(table, start, finish):
    """Rewrite the time and interval of the source, leaving everything else alone."""
    time_range = TimeRange(start, finish)
    table.putcell('TIME', 0, time_range.midpoint)
    table.putcell('INTERVAL', 0, time_range.duration)
    logger.info('Source time range is now %.3f to %.3f', start, finish)
