# site_harvest/__init__.py
"""
SiteHarvest package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

from .cli import cli  # экспорт для pytest
