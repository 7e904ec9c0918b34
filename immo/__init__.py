"""Immo listings backend: property search, agency listings and geocoding."""

__version__ = "0.1.0"
