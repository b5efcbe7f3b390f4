"""Hostel room allocation and payment lifecycle service."""

__version__ = "1.0.0"
