"""Clinic management core: booking, pharmacy cart and checkout over a local store."""

__version__ = "1.0.0"
