"""Gathering kiosk - next-occurrence resolver and kiosk mode for church gatherings."""

__version__ = "0.1.0"
