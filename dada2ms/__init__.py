"""Metadata sub-tables for Measurement Sets produced from raw correlator dumps."""

import katversion as _katversion

__version__ = _katversion.get_version(__path__[0])
