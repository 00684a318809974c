"""Site and observation constants written into the metadata tables."""

import json

import jsonschema


ARCHIVE_CONFIG_SCHEMA = {
    'type': 'object',
    'properties': {
        'antenna_prefix': {'type': 'string'},
        'station': {'type': 'string'},
        'antenna_type': {'type': 'string'},
        'antenna_mount': {'type': 'string'},
        'dish_diameter': {'type': 'number', 'minimum': 0},
        'field_name': {'type': 'string'},
        'observer': {'type': 'string'},
        'project': {'type': 'string'},
        'telescope_name': {'type': 'string'},
        'correlator_name': {'type': 'string'}
    },
    'additionalProperties': False
}


class ArchiveConfig(object):
    """Values that the metadata builders copy into the tables verbatim.

    Any attribute not given to the constructor takes the value used for the
    LEDA correlator at OVRO.

    Parameters
    ----------
    antenna_prefix : str
        Prefix for antenna names, which are numbered from 1 (``LWA001``)
    station : str
        Station name for every antenna
    antenna_type : str
        Antenna type, e.g. ``GROUND-BASED``
    antenna_mount : str
        Mount type, e.g. ``ALT-AZ``
    dish_diameter : float
        Dish diameter in metres
    field_name : str
        Name of the field and source
    observer : str
        Name of the observer
    project : str
        Project identification string
    telescope_name : str
        Telescope name
    correlator_name : str
        Correlator sub-type in the PROCESSOR table
    """
    def __init__(self, antenna_prefix='LWA', station='OVRO_MMA',
                 antenna_type='GROUND-BASED', antenna_mount='ALT-AZ',
                 dish_diameter=2.0, field_name='zenith', observer='LWA Observer',
                 project='all-sky', telescope_name='OVRO_MMA', correlator_name='LEDA512'):
        self.antenna_prefix = antenna_prefix
        self.station = station
        self.antenna_type = antenna_type
        self.antenna_mount = antenna_mount
        self.dish_diameter = dish_diameter
        self.field_name = field_name
        self.observer = observer
        self.project = project
        self.telescope_name = telescope_name
        self.correlator_name = correlator_name

    def antenna_name(self, index):
        """Name of the antenna in (0-based) row `index`."""
        return '{}{:03d}'.format(self.antenna_prefix, index + 1)

    @classmethod
    def from_dict(cls, value):
        """Create from a dictionary of constructor arguments.

        Raises
        ------
        ValueError
            if `value` does not match :const:`ARCHIVE_CONFIG_SCHEMA`
        """
        try:
            jsonschema.validate(value, ARCHIVE_CONFIG_SCHEMA)
        except jsonschema.ValidationError as error:
            raise ValueError(str(error)) from error
        return cls(**value)

    @classmethod
    def from_json(cls, text):
        return cls.from_dict(json.loads(text))

    @classmethod
    def load(cls, filename):
        """Load from a JSON file. See :meth:`from_dict`."""
        with open(filename) as f:
            return cls.from_dict(json.load(f))

    def __repr__(self):
        return 'ArchiveConfig({})'.format(', '.join(
            '{}={!r}'.format(key, getattr(self, key))
            for key in ARCHIVE_CONFIG_SCHEMA['properties']))
