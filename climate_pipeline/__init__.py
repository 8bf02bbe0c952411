"""
climate_pipeline package marker.

Ingests climate observation feeds, normalizes them into daily point series,
derives anomaly and merged series, and writes one consolidated dataset file.
"""

__version__ = "1.0.0"
