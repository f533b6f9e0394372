#!/usr/bin/env python3
"""
setup.py compatibility wrapper for tools that still expect one.

This project uses pyproject.toml with hatchling as the build backend.
For normal installation, use:
    pip install .
"""

from setuptools import setup

# Let setuptools read configuration from pyproject.toml
setup()
