"""Appointment availability and conflict-free slot booking."""

__version__ = "0.1.0"
