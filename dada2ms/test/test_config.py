"""Tests for :mod:`dada2ms.config`."""

import json
import os
import tempfile

import pytest

from dada2ms.config import ArchiveConfig


class TestArchiveConfig(object):
    def test_defaults(self):
        config = ArchiveConfig()
        assert config.antenna_prefix == 'LWA'
        assert config.antenna_type == 'GROUND-BASED'
        assert config.dish_diameter == 2.0

    def test_antenna_name(self):
        """Antennas are numbered from 1 and zero-padded to three digits"""
        config = ArchiveConfig(antenna_prefix='ANT')
        assert config.antenna_name(0) == 'ANT001'
        assert config.antenna_name(41) == 'ANT042'
        assert config.antenna_name(255) == 'ANT256'

    def test_from_json(self):
        config = ArchiveConfig.from_json('{"station": "MEERKAT", "dish_diameter": 13.5}')
        assert config.station == 'MEERKAT'
        assert config.dish_diameter == 13.5
        assert config.telescope_name == 'OVRO_MMA'

    def test_load(self):
        fd, filename = tempfile.mkstemp(suffix='.json')
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump({'observer': 'Somebody', 'project': 'test'}, f)
            config = ArchiveConfig.load(filename)
        finally:
            os.remove(filename)
        assert config.observer == 'Somebody'
        assert config.project == 'test'

    def test_unknown_key(self):
        """Must raise :exc:`ValueError` if the JSON has an unknown key"""
        with pytest.raises(ValueError):
            ArchiveConfig.from_dict({'telescope': 'LWA'})

    def test_bad_type(self):
        """Must raise :exc:`ValueError` if the JSON does not match the schema"""
        with pytest.raises(ValueError):
            ArchiveConfig.from_dict({'dish_diameter': 'big'})
