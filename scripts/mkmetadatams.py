#!/usr/bin/env python3

"""Create a Measurement Set and fill its metadata sub-tables for a
zenith-pointed array, ready for visibilities to be written into it.
"""

import logging

import numpy as np
import katpoint
import katsdpservices

from dada2ms.config import ArchiveConfig
from dada2ms.caltable import read_cal_table
from dada2ms.direction import zenith_direction
from dada2ms.epoch import parse_epoch, mjd_seconds
from dada2ms.geodetic import read_antenna_offsets, itrf_positions
from dada2ms import metadata


logger = logging.getLogger('mkmetadatams')


def parse_spw(value):
    n_channels, center_frequency, bandwidth = value.split(',')
    return metadata.FrequencyPlan(int(n_channels), float(center_frequency), float(bandwidth))


def reference_position(description):
    """Longitude and latitude (degrees) and altitude (metres) of the
    reference position of a katpoint antenna description."""
    lat, lon, alt = katpoint.Antenna(description).ref_position_wgs84
    return np.degrees(lon), np.degrees(lat), alt


def fill_tables(filename, config, positions, start, finish, plans, pointing):
    """Fill all the metadata sub-tables of a freshly created Measurement Set."""
    n_antennas = len(positions)
    with metadata.open_subtable(filename, 'ANTENNA') as table:
        metadata.fill_antenna_table(table, positions, config)
    with metadata.open_subtable(filename, 'FEED') as table:
        metadata.fill_feed_table(table, n_antennas)
    with metadata.open_subtable(filename, 'FIELD') as table:
        metadata.fill_field_table(table, config, pointing)
    with metadata.open_subtable(filename, 'OBSERVATION') as table:
        metadata.fill_observation_table(table, start, finish, config)
    with metadata.open_subtable(filename, 'POINTING') as table:
        metadata.fill_pointing_table(table, n_antennas, start, pointing)
    with metadata.open_subtable(filename, 'POLARIZATION') as table:
        metadata.fill_polarization_table(table)
    with metadata.open_subtable(filename, 'PROCESSOR') as table:
        metadata.fill_processor_table(table, config)
    with metadata.open_subtable(filename, 'SPECTRAL_WINDOW') as table:
        for plan in plans:
            metadata.fill_spectral_window_table(table, *plan)
    metadata.add_source_table(filename)
    with metadata.open_subtable(filename, 'SOURCE') as table:
        metadata.fill_source_table(table, start, finish, config, pointing)


def configure_logging(level):
    katsdpservices.setup_logging()
    if level is not None:
        logging.root.setLevel(level.upper())


def main():
    parser = katsdpservices.ArgumentParser()
    parser.add_argument('output', metavar='MS', help='Measurement Set to create')
    parser.add_argument('antenna_file', metavar='FILE', help='Antenna offsets (east north height in m), one antenna per line')
    parser.add_argument('--antennas', type=int, required=True, metavar='N', help='Number of antennas to read from the antenna file')
    parser.add_argument('--array-reference', required=True, metavar='DESCRIPTION', help='katpoint antenna description whose position is the array reference')
    parser.add_argument('--start-time', required=True, metavar='TIME', help='UTC start time as YYYY-MM-DD-HH:MM:SS[.frac]')
    parser.add_argument('--time-offset', type=float, default=0.0, metavar='SECONDS', help='Seconds to add to the start time [%(default)s]')
    parser.add_argument('--duration', type=float, default=0.0, metavar='SECONDS', help='Length of the observation [%(default)s]')
    parser.add_argument('--spw', dest='spws', type=parse_spw, action='append', default=[], metavar='NCHAN,CENTER,BW', help='Add a spectral window (can be used multiple times)')
    parser.add_argument('--azel', action='store_true', help='Record the zenith in the horizon frame instead of J2000')
    parser.add_argument('--config', metavar='FILE', help='JSON file with names to write into the tables')
    parser.add_argument('--cal-table', metavar='TABLE', help='Check that a calibration table can be applied to the array')
    parser.add_argument('--overwrite', action='store_true', help='Replace the Measurement Set if it exists')
    parser.add_argument('--log-level', '-l', default='INFO', help='logging level [%(default)s]')
    args = parser.parse_args()
    if not args.spws:
        parser.error('at least one --spw is required')
    if args.antennas < 1:
        parser.error('--antennas must be positive')
    configure_logging(args.log_level)

    config = ArchiveConfig.load(args.config) if args.config is not None else ArchiveConfig()
    lon, lat, alt = reference_position(args.array_reference)
    offsets = read_antenna_offsets(args.antenna_file, args.antennas)
    positions = itrf_positions(offsets, lon, lat, alt)
    start = parse_epoch(args.start_time, args.time_offset)
    finish = start + args.duration
    if args.azel:
        pointing = None
    else:
        array_center = itrf_positions(np.zeros((1, 3)), lon, lat, alt)[0]
        pointing = zenith_direction(array_center, start)

    metadata.create_archive(args.output, overwrite=args.overwrite)
    fill_tables(args.output, config, positions, mjd_seconds(start), mjd_seconds(finish),
                args.spws, pointing)
    logger.info('Wrote metadata for %d antennas and %d spectral windows to %s',
                len(positions), len(args.spws), args.output)

    if args.cal_table is not None:
        gain, flag = read_cal_table(args.cal_table)
        if gain.size % len(positions):
            parser.error('calibration table does not match {} antennas'.format(len(positions)))
        logger.info('Calibration table has %d gains per antenna, %d flagged in total',
                    gain.size // len(positions), np.count_nonzero(flag))


if __name__ == '__main__':
    main()
