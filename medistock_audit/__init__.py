"""MediStock audit — stock movement reconstruction, statistics and export."""

__version__ = "0.1.0"
