"""Humidity logger: samples an I2C humidity sensor into a local SQLite store."""

__version__ = '1.0.0'
