"""CareSpace: doctor and space availability matching service."""

__version__ = "1.0.0"
