#!/usr/bin/env python3

from setuptools import setup, find_packages

tests_require = ['pytest']

setup(
    author='MeerKAT SDP Team',
    author_email='sdpdev+dada2ms@ska.ac.za',
    name='dada2ms',
    description='Measurement Set metadata for raw correlator dumps',
    scripts=['scripts/mkmetadatams.py'],
    setup_requires=['katversion'],
    install_requires=[
        'jsonschema',
        'katpoint',
        'katsdpservices[argparse]',
        'katversion',
        'numpy',
        'python-casacore'
    ],
    tests_require=tests_require,
    extras_require={'test': tests_require, 'doc': ['sphinx>=1.3']},
    packages=find_packages(),
    use_katversion=True
)
