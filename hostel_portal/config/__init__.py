"""
Configuration package for the hostel allocation service.

Environment settings and logging setup.
"""

from hostel_portal.config.settings import Settings, get_settings, settings
from hostel_portal.config.logging import get_logger, setup_logging

__all__ = ['Settings', 'get_settings', 'settings', 'get_logger', 'setup_logging']
